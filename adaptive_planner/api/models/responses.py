"""
API Response Models

Pydantic models for API responses.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from adaptive_planner.phases import HeartRateZone
from adaptive_planner.plan_schemas import TrainingPlan, WeekPlan
from adaptive_planner.planner import GenerationOutcome


class PlanOutcomeResponse(BaseModel):
    """Response for POST /api/plan and POST /api/plan/next-week."""

    plan: TrainingPlan = Field(..., description="Plan after the operation")
    week: Optional[WeekPlan] = Field(default=None, description="Newly installed week")
    used_fallback: bool = Field(
        default=False, description="Whether the week is placeholder content"
    )
    error: Optional[str] = Field(
        default=None, description="Why generation failed when fallback content was used"
    )
    error_type: Optional[str] = Field(default=None, description="Error class name")
    truncated: bool = Field(
        default=False, description="Whether the generator stopped at its length limit"
    )
    plan_completed: bool = Field(default=False, description="Whether the plan just finished")

    @classmethod
    def from_outcome(cls, outcome: GenerationOutcome) -> "PlanOutcomeResponse":
        return cls(
            plan=outcome.plan,
            week=outcome.week,
            used_fallback=outcome.used_fallback,
            error=str(outcome.error) if outcome.error else None,
            error_type=type(outcome.error).__name__ if outcome.error else None,
            truncated=outcome.truncated,
            plan_completed=outcome.plan_completed,
        )


class ZonesResponse(BaseModel):
    """Response for GET /api/zones."""

    lthr: int = Field(..., description="Lactate threshold heart rate used")
    zones: List[HeartRateZone] = Field(..., description="Zones 1-5")


class PhaseResponse(BaseModel):
    """Response for GET /api/phase."""

    week: int
    total_weeks: int
    phase: str = Field(..., description="Training phase label")
    is_recovery_week: bool


class ProgressResponse(BaseModel):
    """Response for GET /api/plan/progress."""

    completed_workouts: int
    total_workouts: int
    completion_percent: int
    weeks_completed: int
    total_weeks: int
