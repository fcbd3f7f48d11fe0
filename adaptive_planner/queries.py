"""
Read-only lookups over a training plan.

The current week is searched before archived weeks everywhere, so a lookup
by id returns the live (mutable) copy when one exists.
"""

from datetime import date, timedelta
from typing import Iterator, List, Optional

from pydantic import BaseModel, Field

from adaptive_planner.phases import round_half_up
from adaptive_planner.plan_schemas import TrainingPlan, Workout, WorkoutStatus

DEFAULT_UPCOMING_LIMIT = 5


class PlanProgress(BaseModel):
    """Completion counters across the whole plan."""

    completed_workouts: int = Field(..., ge=0, description="Completed non-rest workouts")
    total_workouts: int = Field(..., ge=0, description="Non-rest workouts planned so far")
    weeks_completed: int = Field(..., ge=0)
    total_weeks: int = Field(..., ge=1)

    @property
    def completion_percent(self) -> int:
        if not self.total_workouts:
            return 0
        return round_half_up(self.completed_workouts / self.total_workouts * 100)


def iter_workouts(plan: Optional[TrainingPlan]) -> Iterator[Workout]:
    """All workouts of the plan: current week first, then history oldest first."""
    if plan is None:
        return
    if plan.current_week is not None:
        yield from plan.current_week.workouts
    for week in plan.completed_weeks:
        yield from week.workouts


def get_workout_by_id(plan: Optional[TrainingPlan], workout_id: str) -> Optional[Workout]:
    for workout in iter_workouts(plan):
        if workout.id == workout_id:
            return workout
    return None


def get_workouts_for_date(plan: Optional[TrainingPlan], day: date) -> List[Workout]:
    return [w for w in iter_workouts(plan) if w.scheduled_date == day]


def get_today_workout(plan: Optional[TrainingPlan], today: date) -> Optional[Workout]:
    """First non-rest workout scheduled for `today`."""
    for workout in get_workouts_for_date(plan, today):
        if not workout.is_rest:
            return workout
    return None


def get_upcoming_workouts(
    plan: Optional[TrainingPlan],
    today: date,
    limit: int = DEFAULT_UPCOMING_LIMIT,
) -> List[Workout]:
    """Non-rest workouts dated after `today`, soonest first, at most `limit`."""
    upcoming = [w for w in iter_workouts(plan) if w.scheduled_date > today and not w.is_rest]
    upcoming.sort(key=lambda w: w.scheduled_date)
    return upcoming[: max(0, limit)]


def get_week_workouts(plan: Optional[TrainingPlan], week_start: date) -> List[Workout]:
    """Workouts in the seven days starting at `week_start`, date-sorted."""
    week_end = week_start + timedelta(days=7)
    workouts = [w for w in iter_workouts(plan) if week_start <= w.scheduled_date < week_end]
    workouts.sort(key=lambda w: w.scheduled_date)
    return workouts


def get_progress(plan: TrainingPlan) -> PlanProgress:
    trainable = [w for w in iter_workouts(plan) if not w.is_rest]
    completed = [w for w in trainable if w.status == WorkoutStatus.COMPLETED]
    return PlanProgress(
        completed_workouts=len(completed),
        total_workouts=len(trainable),
        weeks_completed=len(plan.completed_weeks),
        total_weeks=plan.total_weeks,
    )
