"""
Training Plan API Routes

Endpoints for creating, advancing and resetting the athlete's plan.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from adaptive_planner.api.dependencies import get_engine, to_http_exception
from adaptive_planner.api.models.requests import NextWeekRequest
from adaptive_planner.api.models.responses import PlanOutcomeResponse, ProgressResponse
from adaptive_planner.errors import PlannerError
from adaptive_planner.plan_schemas import TrainingPlan
from adaptive_planner.planner import TrainingPlanEngine
from adaptive_planner.schemas import OnboardingData

router = APIRouter()


@router.post("/plan", response_model=PlanOutcomeResponse)
async def initialize_plan(
    onboarding: OnboardingData,
    engine: TrainingPlanEngine = Depends(get_engine),
) -> PlanOutcomeResponse:
    """
    Create a new plan from onboarding data and generate week 1.

    Replaces any existing plan. When generation fails and fallback is enabled
    the response is still 200, with `used_fallback` set and the error message.
    """
    try:
        outcome = await engine.initialize_plan(onboarding)
    except PlannerError as exc:
        raise to_http_exception(exc) from exc
    return PlanOutcomeResponse.from_outcome(outcome)


@router.get("/plan", response_model=TrainingPlan)
async def get_plan(engine: TrainingPlanEngine = Depends(get_engine)) -> TrainingPlan:
    """Return the current training plan."""
    plan = engine.plan
    if plan is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Not Found", "message": "No training plan exists"},
        )
    return plan


@router.get("/plan/progress", response_model=ProgressResponse)
async def get_progress(engine: TrainingPlanEngine = Depends(get_engine)) -> ProgressResponse:
    """Completed vs. planned non-rest workouts and weeks."""
    try:
        progress = engine.get_progress()
    except PlannerError as exc:
        raise to_http_exception(exc) from exc
    return ProgressResponse(
        completed_workouts=progress.completed_workouts,
        total_workouts=progress.total_workouts,
        completion_percent=progress.completion_percent,
        weeks_completed=progress.weeks_completed,
        total_weeks=progress.total_weeks,
    )


@router.post("/plan/next-week", response_model=PlanOutcomeResponse)
async def generate_next_week(
    request: NextWeekRequest,
    engine: TrainingPlanEngine = Depends(get_engine),
) -> PlanOutcomeResponse:
    """
    Archive the current week with its feedback and generate the next one.

    After the final week this completes the plan instead (`plan_completed`).
    """
    try:
        outcome = await engine.generate_next_week(request.feedback, request.constraints)
    except PlannerError as exc:
        raise to_http_exception(exc) from exc
    return PlanOutcomeResponse.from_outcome(outcome)


@router.delete("/plan", status_code=status.HTTP_204_NO_CONTENT)
async def reset_plan(engine: TrainingPlanEngine = Depends(get_engine)) -> None:
    """Delete the plan and the stored onboarding data."""
    try:
        engine.reset()
    except PlannerError as exc:
        raise to_http_exception(exc) from exc
