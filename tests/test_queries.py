"""
Tests for read-only plan lookups.
"""

from datetime import date, datetime

import pytest

from adaptive_planner import queries
from adaptive_planner.history import archive_week, create_week_summary
from adaptive_planner.plan_schemas import (
    TrainingPlan,
    WeekFeedback,
    WeekFeeling,
    WorkoutStatus,
)
from adaptive_planner.response_parser import ResponseParser
from adaptive_planner.schemas import RaceType


@pytest.fixture
def plan(week_text):
    """Week 1 archived with its Monday run completed; week 2 current."""
    parser = ResponseParser()
    first = parser.parse_week(week_text, 1, date(2026, 1, 5), phase="Base")
    first.workouts[0].status = WorkoutStatus.COMPLETED
    summary = create_week_summary(first, WeekFeedback(overall_feeling=WeekFeeling.GOOD))
    second = parser.parse_week(week_text, 2, date(2026, 1, 12), phase="Base")
    return TrainingPlan(
        id="plan-abc123",
        created_at=datetime(2026, 1, 5, 9, 0),
        race_name="City Half Marathon",
        race_date=date(2026, 3, 30),
        race_type=RaceType.HALF_MARATHON,
        total_weeks=12,
        current_week_number=2,
        current_week=second,
        completed_weeks=[archive_week(first, summary)],
    )


def test_iter_workouts_current_week_first(plan):
    workouts = list(queries.iter_workouts(plan))
    assert len(workouts) == 14
    assert workouts[0] is plan.current_week.workouts[0]
    assert workouts[7].scheduled_date == date(2026, 1, 5)


def test_iter_workouts_without_plan():
    assert list(queries.iter_workouts(None)) == []


def test_get_workout_by_id(plan):
    current = plan.current_week.workouts[3]
    archived = plan.completed_weeks[0].workouts[0]

    assert queries.get_workout_by_id(plan, current.id) is current
    assert queries.get_workout_by_id(plan, archived.id).status == WorkoutStatus.COMPLETED
    assert queries.get_workout_by_id(plan, "missing") is None
    assert queries.get_workout_by_id(None, current.id) is None


def test_get_workouts_for_date(plan):
    workouts = queries.get_workouts_for_date(plan, date(2026, 1, 6))
    assert [w.name for w in workouts] == ["Core & Hips"]
    assert queries.get_workouts_for_date(plan, date(2026, 2, 1)) == []


def test_get_today_workout(plan):
    assert queries.get_today_workout(plan, date(2026, 1, 12)).name == "Easy Aerobic Run"
    # Friday is a rest day
    assert queries.get_today_workout(plan, date(2026, 1, 16)) is None
    assert queries.get_today_workout(None, date(2026, 1, 12)) is None


def test_get_upcoming_workouts(plan):
    """Test ordering across the archive/current boundary."""
    upcoming = queries.get_upcoming_workouts(plan, date(2026, 1, 10))

    assert [w.scheduled_date for w in upcoming] == [
        date(2026, 1, 11),
        date(2026, 1, 12),
        date(2026, 1, 13),
        date(2026, 1, 14),
        date(2026, 1, 15),
    ]
    assert all(not w.is_rest for w in upcoming)
    assert len(queries.get_upcoming_workouts(plan, date(2026, 1, 10), limit=2)) == 2
    assert queries.get_upcoming_workouts(plan, date(2026, 1, 10), limit=0) == []
    assert queries.get_upcoming_workouts(plan, date(2026, 1, 18)) == []


def test_get_week_workouts(plan):
    workouts = queries.get_week_workouts(plan, date(2026, 1, 12))
    assert len(workouts) == 7
    assert workouts[0].scheduled_date == date(2026, 1, 12)
    assert workouts[-1].scheduled_date == date(2026, 1, 18)


def test_get_progress(plan):
    progress = queries.get_progress(plan)
    assert progress.total_workouts == 12
    assert progress.completed_workouts == 1
    assert progress.weeks_completed == 1
    assert progress.total_weeks == 12
    assert progress.completion_percent == 8


def test_empty_progress_percent():
    progress = queries.PlanProgress(
        completed_workouts=0, total_workouts=0, weeks_completed=0, total_weeks=4
    )
    assert progress.completion_percent == 0


def test_progress_percent_rounds_half_up():
    progress = queries.PlanProgress(
        completed_workouts=1, total_workouts=8, weeks_completed=0, total_weeks=4
    )
    assert progress.completion_percent == 13
