"""
Exception hierarchy for the plan engine.

- ConfigurationError: missing credential, fatal
- GenerationError: one generation step produced nothing usable
    - TransportError: network / HTTP failure talking to the generation API
    - ResponseParseError: repaired response is still not valid JSON
        - ResponseValidationError: valid JSON without the required lists
- PlanStateError: operation not allowed in the plan's current state
    - WorkoutNotFoundError
- PlanBusyError: a generation operation on the plan is still outstanding
"""

from typing import Optional


class PlannerError(Exception):
    """Base class for all plan engine errors."""


class ConfigurationError(PlannerError):
    """Required configuration (e.g. the API credential) is missing."""


class GenerationError(PlannerError):
    """A generation attempt did not yield a usable week."""


class TransportError(GenerationError):
    """The generation API could not be reached or returned an error status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = True,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class ResponseParseError(GenerationError):
    """The response could not be turned into structured data."""

    def __init__(self, message: str, excerpt: str = ""):
        super().__init__(message)
        self.excerpt = excerpt


class ResponseValidationError(ResponseParseError):
    """The response parsed but lacks required fields."""


class PlanStateError(PlannerError):
    """The plan is not in a state that allows the requested operation."""


class WorkoutNotFoundError(PlanStateError):
    """No workout with the given id exists in the current week."""

    def __init__(self, workout_id: str):
        super().__init__(f"Workout '{workout_id}' not found in the current week")
        self.workout_id = workout_id


class PlanBusyError(PlannerError):
    """Another mutating operation on the same plan is still running."""
