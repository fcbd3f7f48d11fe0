"""
Tests for deterministic placeholder weeks.
"""

from datetime import date, timedelta

from adaptive_planner.fallback import TEMPLATES, FallbackWeekBuilder
from adaptive_planner.plan_schemas import WorkoutStatus, WorkoutType

WEEK_START = date(2026, 1, 5)


def _by_day(week):
    return {w.scheduled_date.weekday(): w for w in week.workouts}


def test_week_shape(onboarding):
    """Test dates, flags and theme of a placeholder week."""
    week = FallbackWeekBuilder().build_week(onboarding, 1, 12, WEEK_START)

    assert week.is_fallback is True
    assert week.theme == "Fallback plan: Base"
    assert week.phase == "Base"
    assert week.start_date == WEEK_START
    assert week.end_date == WEEK_START + timedelta(days=6)
    assert [w.scheduled_date for w in week.workouts] == [
        WEEK_START + timedelta(days=i) for i in range(7)
    ]
    assert all(w.status == WorkoutStatus.PLANNED for w in week.workouts)
    assert len({w.id for w in week.workouts}) == 7


def test_running_week_content(onboarding):
    week = FallbackWeekBuilder().build_week(onboarding, 1, 12, WEEK_START)
    days = _by_day(week)

    assert days[0].type == WorkoutType.RUN
    assert days[1].type == WorkoutType.STRENGTH
    # Friday is unavailable in the fixture
    assert days[4].type == WorkoutType.REST
    assert days[4].duration == 0
    # Saturday is flagged for the long session
    assert days[5].type == WorkoutType.RUN
    assert days[5].name == "Long Run - Aerobic Base"
    assert days[5].duration == 105
    assert week.total_planned_hours == 5.3


def test_durations_respect_daily_limit(onboarding):
    week = FallbackWeekBuilder().build_week(onboarding, 1, 12, WEEK_START)
    for workout in week.workouts:
        slot = getattr(onboarding.availability, workout.scheduled_date.strftime("%A").lower())
        if slot.available:
            assert workout.duration <= slot.max_duration.minutes


def test_long_day_defaults_to_last_available_day(onboarding):
    """Test long-day placement when no day is flagged."""
    data = onboarding.model_copy(deep=True)
    data.availability.saturday.long_session = False
    week = FallbackWeekBuilder().build_week(data, 1, 12, WEEK_START)
    sunday = _by_day(week)[6]

    assert sunday.name == "Long Run - Aerobic Base"
    # Sunday allows 60 minutes; distance scales with the cut
    assert sunday.duration == 60
    assert sunday.distance == round(18 * 60 / 105, 1)


def test_recovery_week_reduces_volume(onboarding):
    """Test that every fourth week is scaled down."""
    builder = FallbackWeekBuilder()
    recovery = builder.build_week(onboarding, 4, 12, WEEK_START + timedelta(weeks=3))
    saturday = _by_day(recovery)[5]

    assert recovery.is_recovery_week is True
    assert recovery.focus == "Reduced volume, maintain frequency"
    assert saturday.duration == round(105 * 0.7)
    assert saturday.distance == round(18 * saturday.duration / 105, 1)


def test_triathlon_week_mixes_disciplines(triathlon_onboarding):
    week = FallbackWeekBuilder().build_week(triathlon_onboarding, 1, 23, WEEK_START)
    days = _by_day(week)
    types = {w.type for w in week.workouts}

    assert {WorkoutType.SWIM, WorkoutType.BIKE, WorkoutType.RUN} <= types
    # Monday is unavailable in the fixture
    assert days[0].type == WorkoutType.REST
    # Saturday long session is a ride for triathletes
    assert days[5].type == WorkoutType.BIKE
    assert days[5].name == "Long Endurance Ride"
    assert days[5].duration == 180


def test_capped_session_scales_distance(triathlon_onboarding):
    """Test that a session longer than the day's limit is cut to fit."""
    week = FallbackWeekBuilder().build_week(triathlon_onboarding, 2, 23, WEEK_START)
    tuesday = _by_day(week)[1]

    assert tuesday.name == "Sweet Spot Intervals"
    assert tuesday.duration == 60
    assert tuesday.distance == 25.6


def test_templates_are_not_shared(onboarding):
    """Test that built workouts do not alias template lists."""
    week = FallbackWeekBuilder().build_week(onboarding, 1, 12, WEEK_START)
    week.workouts[0].coaching_tips.append("extra")
    template_tips = [t.coaching_tips for pool in TEMPLATES.values() for t in pool]
    assert all("extra" not in tips for tips in template_tips)
