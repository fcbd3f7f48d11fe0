"""
Data schemas for the adaptive training plan.

This module contains Pydantic models for the plan aggregate: individual
workouts, the current week, end-of-week feedback and summaries, archived
weeks, and the TrainingPlan root that ties them together.
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from adaptive_planner.schemas import RaceType


class WorkoutType(str, Enum):
    """Discipline a workout belongs to."""

    RUN = "run"
    BIKE = "bike"
    SWIM = "swim"
    STRENGTH = "strength"
    REST = "rest"


class WorkoutStatus(str, Enum):
    """Completion state of a workout."""

    PLANNED = "planned"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    PARTIAL = "partial"


class WeekFeeling(str, Enum):
    """End-of-week overall feeling, ordered from worst to best."""

    STRUGGLING = "struggling"
    TIRED = "tired"
    OKAY = "okay"
    GOOD = "good"
    GREAT = "great"

    @property
    def is_fatigued(self) -> bool:
        return self in (WeekFeeling.STRUGGLING, WeekFeeling.TIRED)


class HeartRateRange(BaseModel):
    """Inclusive heart-rate or power band."""

    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)


class WorkoutSegment(BaseModel):
    """One block of a structured workout (warm-up, main set, ...)."""

    name: str = Field(..., description="Segment name")
    duration: str = Field(default="", description="Free-text duration, e.g. '15 min' or '400m'")
    description: str = Field(default="", description="What to do in this segment")
    target_hr: Optional[HeartRateRange] = Field(default=None)
    target_pace: Optional[str] = Field(default=None)
    target_power: Optional[HeartRateRange] = Field(default=None)


class ActualWorkoutData(BaseModel):
    """What the athlete actually did."""

    duration: int = Field(..., ge=0, description="Actual duration in minutes")
    distance: Optional[float] = Field(default=None, ge=0, description="Actual distance in km")
    avg_hr: Optional[int] = Field(default=None, gt=0, description="Average heart rate (bpm)")
    feeling: int = Field(..., ge=1, le=5, description="Subjective feeling, 1 (awful) to 5 (great)")
    notes: Optional[str] = Field(default=None)


class Workout(BaseModel):
    """
    A single training session.

    Created when a week is generated. Only `status` and `actual_data` change
    afterwards, and only through the workout-status update operation.
    """

    id: str = Field(..., min_length=1, description="Stable unique identifier")
    scheduled_date: date = Field(..., description="Calendar date of the session")
    type: WorkoutType = Field(..., description="Discipline")
    name: str = Field(..., description="Session name")
    duration: int = Field(..., ge=0, description="Planned duration in minutes")
    distance: Optional[float] = Field(default=None, ge=0, description="Planned distance in km")
    description: str = Field(default="")
    purpose: str = Field(default="")
    structure: List[WorkoutSegment] = Field(default_factory=list)
    heart_rate_guidance: str = Field(default="")
    pace_guidance: str = Field(default="")
    coaching_tips: List[str] = Field(default_factory=list)
    adaptation_notes: str = Field(default="")
    status: WorkoutStatus = Field(default=WorkoutStatus.PLANNED)
    actual_data: Optional[ActualWorkoutData] = Field(default=None)

    @property
    def is_rest(self) -> bool:
        return self.type == WorkoutType.REST


class WeekPlan(BaseModel):
    """
    One training week.

    Workouts keep generation order, which is not necessarily date order.
    """

    week_number: int = Field(..., ge=1, description="Week number in the plan (1-based)")
    start_date: date = Field(..., description="Monday of this week")
    end_date: date = Field(..., description="Sunday of this week")
    theme: str = Field(default="")
    focus: str = Field(default="")
    phase: str = Field(default="")
    total_planned_hours: float = Field(default=0.0, ge=0)
    is_recovery_week: bool = Field(default=False)
    workouts: List[Workout] = Field(default_factory=list)
    is_fallback: bool = Field(
        default=False,
        description="True when the week is locally generated placeholder content",
    )

    def find_workout(self, workout_id: str) -> Optional[Workout]:
        for workout in self.workouts:
            if workout.id == workout_id:
                return workout
        return None


class KeyWorkoutSummary(BaseModel):
    """Compact record of one key session for history context."""

    name: str
    type: WorkoutType
    completed: bool
    notes: Optional[str] = None


class WeekFeedback(BaseModel):
    """End-of-week input from the athlete."""

    overall_feeling: WeekFeeling = Field(..., description="How the week felt overall")
    physical_issues: List[str] = Field(
        default_factory=list, description="Issue tags, e.g. 'knee-pain'"
    )
    notes: str = Field(default="")
    next_week_constraints: Optional[str] = Field(
        default=None, description="Free-text constraints, e.g. 'traveling Thursday'"
    )


class WeekSummary(BaseModel):
    """Statistics of a finished week. Immutable once created."""

    week_number: int = Field(..., ge=1)
    phase: str = Field(default="")
    theme: str = Field(default="")
    planned_hours: float = Field(..., ge=0)
    completed_hours: float = Field(..., ge=0)
    completion_rate: int = Field(..., ge=0, le=100, description="Completed non-rest workouts (%)")
    key_workouts: List[KeyWorkoutSummary] = Field(default_factory=list, max_length=3)
    feedback: WeekFeedback
    is_fallback: bool = Field(default=False)


class CompletedWeek(BaseModel):
    """Archived week: identifying fields, frozen workouts and its summary."""

    week_number: int = Field(..., ge=1)
    start_date: date
    end_date: date
    phase: str = Field(default="")
    theme: str = Field(default="")
    focus: str = Field(default="")
    workouts: List[Workout] = Field(default_factory=list)
    summary: WeekSummary


class TrainingPlan(BaseModel):
    """
    Aggregate root of an athlete's training block.

    Legal shapes:
    - active: the current week's number equals `current_week_number` and
      every earlier week has been archived
    - awaiting generation: no current week, `current_week_number` already
      archived, more weeks to go
    - completed: no current week and `current_week_number > total_weeks`
    """

    id: str = Field(..., min_length=1, description="Plan identifier")
    created_at: datetime = Field(..., description="When the plan was created")
    race_name: str = Field(..., min_length=1)
    race_date: date
    race_type: RaceType
    total_weeks: int = Field(..., ge=1, le=52, description="Plan length in weeks")
    current_week_number: int = Field(..., ge=1)
    current_week: Optional[WeekPlan] = Field(default=None)
    completed_weeks: List[CompletedWeek] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_lifecycle_state(self) -> "TrainingPlan":
        """Reject aggregates whose week counters disagree."""
        self.check_invariants()
        return self

    def check_invariants(self) -> None:
        archived = len(self.completed_weeks)
        for expected, week in enumerate(self.completed_weeks, start=1):
            if week.week_number != expected:
                raise ValueError(
                    f"Completed weeks must be numbered sequentially. "
                    f"Expected week {expected}, got week {week.week_number}"
                )

        if self.current_week is not None:
            if self.current_week.week_number != self.current_week_number:
                raise ValueError(
                    f"Current week is week {self.current_week.week_number} "
                    f"but current_week_number is {self.current_week_number}"
                )
            if self.current_week_number > self.total_weeks:
                raise ValueError("Current week lies beyond the end of the plan")
            if archived != self.current_week_number - 1:
                raise ValueError(
                    f"Week {self.current_week_number} is current but "
                    f"{archived} weeks are archived"
                )
        elif self.current_week_number > self.total_weeks:
            if archived != self.total_weeks:
                raise ValueError(
                    f"Completed plan must archive all {self.total_weeks} weeks, found {archived}"
                )
        elif archived != self.current_week_number:
            raise ValueError(
                f"Plan without a current week must have archived week "
                f"{self.current_week_number}, found {archived} archived weeks"
            )

    @property
    def is_completed(self) -> bool:
        return self.current_week is None and self.current_week_number > self.total_weeks

    @property
    def awaiting_generation(self) -> bool:
        return self.current_week is None and self.current_week_number <= self.total_weeks

    @property
    def anchor_date(self) -> date:
        """Monday of the week the plan was created in."""
        created = self.created_at.date()
        return created - timedelta(days=created.weekday())
