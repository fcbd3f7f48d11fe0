"""
Shared API dependencies.

One engine per process: the engine's lock is what serializes mutations of
the athlete's plan, so every request must see the same instance.
"""

from functools import lru_cache

from fastapi import HTTPException, status

from adaptive_planner.errors import (
    ConfigurationError,
    PlanBusyError,
    PlanStateError,
    PlannerError,
    ResponseParseError,
    TransportError,
    WorkoutNotFoundError,
)
from adaptive_planner.planner import TrainingPlanEngine


@lru_cache()
def get_engine() -> TrainingPlanEngine:
    """Dependency returning the process-wide plan engine."""
    return TrainingPlanEngine.from_settings()


def to_http_exception(exc: PlannerError) -> HTTPException:
    """
    Map a planner error to an HTTP error.

    Order matters: subclasses are checked before their bases.
    """
    if isinstance(exc, ConfigurationError):
        code, error = status.HTTP_503_SERVICE_UNAVAILABLE, "Configuration Error"
    elif isinstance(exc, TransportError):
        code, error = status.HTTP_502_BAD_GATEWAY, "Generation Unavailable"
    elif isinstance(exc, ResponseParseError):
        code, error = status.HTTP_502_BAD_GATEWAY, "Unusable Generation Response"
    elif isinstance(exc, WorkoutNotFoundError):
        code, error = status.HTTP_404_NOT_FOUND, "Workout Not Found"
    elif isinstance(exc, PlanBusyError):
        code, error = status.HTTP_409_CONFLICT, "Plan Busy"
    elif isinstance(exc, PlanStateError):
        code, error = status.HTTP_409_CONFLICT, "Invalid Plan State"
    else:
        code, error = status.HTTP_500_INTERNAL_SERVER_ERROR, "Planner Error"
    return HTTPException(
        status_code=code,
        detail={"error": error, "message": str(exc), "error_type": type(exc).__name__},
    )
