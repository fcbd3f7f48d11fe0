"""
API Request Models

Pydantic models for API request validation.
"""

from typing import Optional

from pydantic import BaseModel, Field

from adaptive_planner.plan_schemas import ActualWorkoutData, WeekFeedback, WorkoutStatus


class NextWeekRequest(BaseModel):
    """Request model for advancing the plan by one week."""

    feedback: WeekFeedback = Field(..., description="End-of-week feedback for the current week")
    constraints: Optional[str] = Field(
        default=None,
        description="Constraints for the next week (defaults to feedback.next_week_constraints)",
    )


class WorkoutStatusRequest(BaseModel):
    """Request model for recording a workout's outcome."""

    status: WorkoutStatus = Field(..., description="New workout status")
    actual_data: Optional[ActualWorkoutData] = Field(
        default=None, description="What the athlete actually did"
    )
