"""
Workout API Routes

Lookups over the plan's workouts and status updates within the current week.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from adaptive_planner.api.dependencies import get_engine, to_http_exception
from adaptive_planner.api.models.requests import WorkoutStatusRequest
from adaptive_planner.errors import PlannerError
from adaptive_planner.plan_schemas import Workout
from adaptive_planner.planner import TrainingPlanEngine
from adaptive_planner.queries import DEFAULT_UPCOMING_LIMIT

router = APIRouter()


def _not_found(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "Not Found", "message": message},
    )


@router.get("/workouts", response_model=List[Workout])
async def get_workouts_for_date(
    on: date = Query(..., description="Calendar date, YYYY-MM-DD"),
    engine: TrainingPlanEngine = Depends(get_engine),
) -> List[Workout]:
    """All workouts scheduled on a date (rest days included)."""
    return engine.get_workouts_for_date(on)


@router.get("/workouts/week", response_model=List[Workout])
async def get_week_workouts(
    start: date = Query(..., description="First day of the 7-day window"),
    engine: TrainingPlanEngine = Depends(get_engine),
) -> List[Workout]:
    """Workouts in the seven days from `start`, in date order."""
    return engine.get_week_workouts(start)


@router.get("/workouts/today", response_model=Optional[Workout])
async def get_today_workout(
    engine: TrainingPlanEngine = Depends(get_engine),
) -> Optional[Workout]:
    """Today's first non-rest workout, or null."""
    return engine.get_today_workout()


@router.get("/workouts/upcoming", response_model=List[Workout])
async def get_upcoming_workouts(
    limit: int = Query(DEFAULT_UPCOMING_LIMIT, ge=1, le=50),
    engine: TrainingPlanEngine = Depends(get_engine),
) -> List[Workout]:
    """Next non-rest workouts after today, soonest first."""
    return engine.get_upcoming_workouts(limit=limit)


@router.get("/workouts/{workout_id}", response_model=Workout)
async def get_workout(
    workout_id: str,
    engine: TrainingPlanEngine = Depends(get_engine),
) -> Workout:
    """Look up a workout in the current or any archived week."""
    workout = engine.get_workout_by_id(workout_id)
    if workout is None:
        raise _not_found(f"Workout '{workout_id}' not found")
    return workout


@router.patch("/workouts/{workout_id}", response_model=Workout)
async def update_workout_status(
    workout_id: str,
    request: WorkoutStatusRequest,
    engine: TrainingPlanEngine = Depends(get_engine),
) -> Workout:
    """
    Record a workout's status and actual data.

    Only workouts of the current week can be updated; archived weeks are
    read-only.
    """
    try:
        return engine.update_workout_status(workout_id, request.status, request.actual_data)
    except PlannerError as exc:
        raise to_http_exception(exc) from exc
