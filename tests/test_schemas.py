"""
Tests for Pydantic schema validation.

Ensures that onboarding and plan schemas validate data and enforce the
plan's lifecycle constraints.
"""

import json
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from adaptive_planner.history import archive_week, create_week_summary
from adaptive_planner.plan_schemas import (
    ActualWorkoutData,
    TrainingPlan,
    WeekFeedback,
    WeekFeeling,
    WeekPlan,
    Workout,
    WorkoutType,
)
from adaptive_planner.schemas import (
    WEEKDAYS,
    DayAvailability,
    OnboardingData,
    RaceType,
    SessionLength,
    Weekday,
)

FIXTURES = Path(__file__).parent / "fixtures"


def _onboarding_data():
    with open(FIXTURES / "onboarding_half_marathon.json") as f:
        return json.load(f)


def _week(number, start=date(2026, 1, 5)):
    start = start + timedelta(weeks=number - 1)
    return WeekPlan(
        week_number=number,
        start_date=start,
        end_date=start + timedelta(days=6),
        workouts=[
            Workout(
                id=f"w{number}-monday",
                scheduled_date=start,
                type=WorkoutType.RUN,
                name="Easy Run",
                duration=45,
            )
        ],
    )


def _archived(number):
    week = _week(number)
    return archive_week(
        week, create_week_summary(week, WeekFeedback(overall_feeling=WeekFeeling.OKAY))
    )


def _plan(**overrides):
    data = dict(
        id="plan-1",
        created_at=datetime(2026, 1, 5, 9, 0),
        race_name="City Half Marathon",
        race_date=date(2026, 3, 30),
        race_type=RaceType.HALF_MARATHON,
        total_weeks=3,
        current_week_number=1,
        current_week=_week(1),
        completed_weeks=[],
    )
    data.update(overrides)
    return TrainingPlan(**data)


# Onboarding Schema Tests

def test_onboarding_loads_from_file():
    """Test that the onboarding fixture validates."""
    onboarding = OnboardingData(**_onboarding_data())

    assert onboarding.profile.first_name == "Alex"
    assert onboarding.fitness.lthr == 172
    assert onboarding.goal.race_type == RaceType.HALF_MARATHON
    assert onboarding.is_triathlon is False
    assert onboarding.availability.friday.available is False
    assert onboarding.availability.available_days() == [
        Weekday.MONDAY,
        Weekday.TUESDAY,
        Weekday.WEDNESDAY,
        Weekday.THURSDAY,
        Weekday.SATURDAY,
        Weekday.SUNDAY,
    ]


def test_triathlon_detection(triathlon_onboarding):
    assert triathlon_onboarding.is_triathlon is True
    assert RaceType.MARATHON.is_triathlon is False
    assert RaceType.SPRINT_TRIATHLON.is_triathlon is True


@pytest.mark.parametrize(
    "section, field, value",
    [
        ("fitness", "lthr", 0),
        ("fitness", "lthr", 231),
        ("fitness", "threshold_pace", "fast"),
        ("goal", "goal_time", "about two hours"),
        ("goal", "race_type", "ultra"),
        ("profile", "first_name", ""),
    ],
)
def test_onboarding_rejects_invalid_values(section, field, value):
    data = _onboarding_data()
    data[section][field] = value
    with pytest.raises(ValidationError):
        OnboardingData(**data)


def test_availability_defaults():
    """Test that days missing from the payload default to available."""
    data = _onboarding_data()
    del data["availability"]["monday"]
    onboarding = OnboardingData(**data)

    assert onboarding.availability.monday.available is True
    assert onboarding.availability.monday.max_duration == SessionLength.MIN_60


def test_time_slots_are_deduplicated():
    day = DayAvailability(time_slots=["evening", "morning", "evening"])
    assert [slot.value for slot in day.time_slots] == ["evening", "morning"]


@pytest.mark.parametrize(
    "length, minutes",
    [("30min", 30), ("90min", 90), ("2h", 120), ("2h30", 150), ("3h+", 180)],
)
def test_session_length_minutes(length, minutes):
    assert SessionLength(length).minutes == minutes


def test_weekday_offsets():
    assert [day.offset for day in WEEKDAYS] == list(range(7))


# Plan Schema Tests

def test_active_plan_is_valid():
    plan = _plan()
    assert not plan.is_completed
    assert not plan.awaiting_generation
    assert plan.anchor_date == date(2026, 1, 5)


def test_current_week_number_must_match():
    with pytest.raises(ValidationError):
        _plan(current_week_number=2)


def test_archive_must_precede_current_week():
    with pytest.raises(ValidationError):
        _plan(current_week_number=2, current_week=_week(2), completed_weeks=[])


def test_archived_weeks_are_sequential():
    with pytest.raises(ValidationError):
        _plan(
            current_week_number=3,
            current_week=_week(3),
            completed_weeks=[_archived(1), _archived(3)],
        )


def test_awaiting_generation_state():
    """Test the shape left behind by a failed generation."""
    plan = _plan(current_week_number=1, current_week=None, completed_weeks=[_archived(1)])
    assert plan.awaiting_generation
    assert not plan.is_completed


def test_completed_state():
    plan = _plan(
        current_week_number=4,
        current_week=None,
        completed_weeks=[_archived(1), _archived(2), _archived(3)],
    )
    assert plan.is_completed


def test_completed_plan_must_archive_every_week():
    with pytest.raises(ValidationError):
        _plan(current_week_number=4, current_week=None, completed_weeks=[_archived(1)])


def test_current_week_cannot_exceed_plan():
    with pytest.raises(ValidationError):
        _plan(
            total_weeks=1,
            current_week_number=2,
            current_week=_week(2),
            completed_weeks=[_archived(1)],
        )


def test_check_invariants_after_mutation():
    plan = _plan()
    plan.current_week_number = 2
    with pytest.raises(ValueError):
        plan.check_invariants()


def test_find_workout():
    week = _week(1)
    assert week.find_workout("w1-monday").name == "Easy Run"
    assert week.find_workout("missing") is None


def test_actual_data_feeling_range():
    with pytest.raises(ValidationError):
        ActualWorkoutData(duration=30, feeling=6)


def test_fatigued_feelings():
    assert WeekFeeling.STRUGGLING.is_fatigued
    assert WeekFeeling.TIRED.is_fatigued
    assert not WeekFeeling.OKAY.is_fatigued
