"""
Parsing of generation responses into typed week plans.

The generator's JSON is first validated into permissive "raw" models that
mirror the wire schema (camelCase keys, everything optional), then mapped
by a pure function into the canonical WeekPlan / Workout types. The mapping
is the single place that decides what a missing field becomes.
"""

import json
import logging
import math
import time
import uuid
from datetime import date, timedelta
from typing import Any, Callable, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from adaptive_planner.errors import ResponseParseError, ResponseValidationError
from adaptive_planner.phases import is_recovery_week
from adaptive_planner.plan_schemas import (
    HeartRateRange,
    WeekPlan,
    Workout,
    WorkoutSegment,
    WorkoutStatus,
    WorkoutType,
)
from adaptive_planner.repair import ResponseRepairer
from adaptive_planner.schemas import WEEKDAYS, Weekday

logger = logging.getLogger(__name__)

DEFAULT_WORKOUT_TYPE = WorkoutType.RUN
DEFAULT_WORKOUT_NAME = "Workout"
DEFAULT_DURATION_MINUTES = 45
DEFAULT_DAY = Weekday.MONDAY

ALLOWED_WORKOUT_TYPES: List[str] = [t.value for t in WorkoutType]
DAY_TOKENS: List[str] = [d.value for d in WEEKDAYS]

EXCERPT_CHARS = 500


# ============================================================================
# Raw wire schema
# ============================================================================

def _none_if_invalid_number(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return value
    return None


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class RawRange(BaseModel):
    model_config = ConfigDict(extra="ignore")

    min: Optional[float] = None
    max: Optional[float] = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        return _none_if_invalid_number(v)


class RawSegment(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None
    target_hr: Optional[RawRange] = Field(default=None, alias="targetHR")
    target_pace: Optional[str] = Field(default=None, alias="targetPace")
    target_power: Optional[RawRange] = Field(default=None, alias="targetPower")

    @field_validator("name", "duration", "description", "target_pace", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)

    @field_validator("target_hr", "target_power", mode="before")
    @classmethod
    def drop_malformed_range(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None


class RawWorkout(BaseModel):
    """One workout entry as the generator emits it."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    day_of_week: Optional[str] = Field(default=None, alias="dayOfWeek")
    type: Optional[str] = None
    name: Optional[str] = None
    duration: Optional[float] = None
    distance: Optional[float] = None
    purpose: Optional[str] = None
    description: Optional[str] = None
    structure: List[RawSegment] = Field(default_factory=list)
    heart_rate_guidance: Optional[str] = Field(default=None, alias="heartRateGuidance")
    pace_guidance: Optional[str] = Field(default=None, alias="paceGuidance")
    coaching_tips: List[str] = Field(default_factory=list, alias="coachingTips")
    adaptation_notes: Optional[str] = Field(default=None, alias="adaptationNotes")

    @field_validator("duration", "distance", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        return _none_if_invalid_number(v)

    @field_validator(
        "day_of_week",
        "type",
        "name",
        "purpose",
        "description",
        "heart_rate_guidance",
        "pace_guidance",
        "adaptation_notes",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)

    @field_validator("structure", mode="before")
    @classmethod
    def coerce_structure(cls, v: Any) -> List[Any]:
        if not isinstance(v, list):
            return []
        return [segment for segment in v if isinstance(segment, dict)]

    @field_validator("coaching_tips", mode="before")
    @classmethod
    def coerce_tips(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            return [v] if v.strip() else []
        if not isinstance(v, list):
            return []
        return [str(tip) for tip in v if isinstance(tip, (str, int, float)) and str(tip).strip()]


class RawWeek(BaseModel):
    """Top-level object of a week-level response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    week_number: Optional[int] = Field(default=None, alias="weekNumber")
    theme: Optional[str] = None
    focus: Optional[str] = None
    phase: Optional[str] = None
    workouts: List[RawWorkout]

    @field_validator("week_number", mode="before")
    @classmethod
    def coerce_week_number(cls, v: Any) -> Optional[int]:
        number = _none_if_invalid_number(v)
        return int(number) if number is not None else None

    @field_validator("theme", "focus", "phase", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)

    @field_validator("workouts", mode="before")
    @classmethod
    def keep_object_entries(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [entry for entry in v if isinstance(entry, dict)]
        return v


# ============================================================================
# Mapping
# ============================================================================

def resolve_workout_type(token: Optional[str]) -> WorkoutType:
    """Map a discipline token to WorkoutType, defaulting to run."""
    if token:
        try:
            return WorkoutType(token.strip().lower())
        except ValueError:
            pass
    return DEFAULT_WORKOUT_TYPE


def resolve_day(token: Optional[str]) -> Weekday:
    """Map a day-of-week token (case-insensitive) to Weekday, defaulting to Monday."""
    if token:
        try:
            return Weekday(token.strip().lower())
        except ValueError:
            pass
    return DEFAULT_DAY


def _to_range(raw: Optional[RawRange]) -> Optional[HeartRateRange]:
    if raw is None or raw.min is None or raw.max is None:
        return None
    if raw.min < 0 or raw.max < 0:
        return None
    return HeartRateRange(min=round(raw.min), max=round(raw.max))


def map_segment(raw: RawSegment) -> WorkoutSegment:
    return WorkoutSegment(
        name=raw.name or "Segment",
        duration=raw.duration or "",
        description=(raw.description or "").replace("\\n", "\n"),
        target_hr=_to_range(raw.target_hr),
        target_pace=raw.target_pace,
        target_power=_to_range(raw.target_power),
    )


def map_workout(raw: RawWorkout, week_start: date, workout_id: str) -> Workout:
    """
    Map one raw workout to the canonical type.

    Defaults: type run, name "Workout", duration 45 min, no distance, empty
    text fields and tips. Status is always planned.
    """
    day = resolve_day(raw.day_of_week)
    duration = raw.duration
    if duration is None or duration < 0:
        duration = DEFAULT_DURATION_MINUTES
    distance = raw.distance if raw.distance is not None and raw.distance > 0 else None

    return Workout(
        id=workout_id,
        scheduled_date=week_start + timedelta(days=day.offset),
        type=resolve_workout_type(raw.type),
        name=(raw.name or "").strip() or DEFAULT_WORKOUT_NAME,
        duration=round(duration),
        distance=distance,
        description=(raw.description or "").replace("\\n", "\n"),
        purpose=raw.purpose or "",
        structure=[map_segment(segment) for segment in raw.structure],
        heart_rate_guidance=raw.heart_rate_guidance or "",
        pace_guidance=raw.pace_guidance or "",
        coaching_tips=list(raw.coaching_tips),
        adaptation_notes=raw.adaptation_notes or "",
        status=WorkoutStatus.PLANNED,
    )


def total_hours(workouts: List[Workout]) -> float:
    """Sum of workout durations in hours, one decimal place."""
    return round(sum(w.duration for w in workouts) / 60, 1)


class WorkoutIdFactory:
    """
    Synthesises workout ids: w{week}-{day}-{timestamp ms}-{random suffix}.

    Ids handed out by one factory never repeat.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._issued: Set[str] = set()

    def __call__(self, week_number: int, day_token: str) -> str:
        while True:
            stamp = int(self._clock() * 1000)
            candidate = f"w{week_number}-{day_token}-{stamp}-{uuid.uuid4().hex[:6]}"
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate


# ============================================================================
# Parser
# ============================================================================

class ResponseParser:
    """
    Turns raw generator text into WeekPlans.

    Pipeline: cut to the first `{`, repair, strict `json.loads`, validate
    the top-level shape, map entries with defaults.
    """

    def __init__(
        self,
        repairer: Optional[ResponseRepairer] = None,
        id_factory: Optional[WorkoutIdFactory] = None,
    ):
        self.repairer = repairer or ResponseRepairer()
        self.id_factory = id_factory or WorkoutIdFactory()

    def load(self, text: str) -> Any:
        """
        Repair and strictly parse a response.

        Raises:
            ResponseParseError: If the repaired text is not valid JSON
        """
        start = text.find("{")
        if start > 0:
            text = text[start:]
        repaired = self.repairer.repair(text)
        try:
            return json.loads(repaired)
        except json.JSONDecodeError as exc:
            head = repaired[:EXCERPT_CHARS]
            tail = repaired[-EXCERPT_CHARS:]
            logger.error(f"JSON parse error after repair: {exc}")
            logger.debug(f"First {EXCERPT_CHARS} chars: {head}")
            logger.debug(f"Last {EXCERPT_CHARS} chars: {tail}")
            raise ResponseParseError(
                f"Failed to parse training week from generation response: {exc}",
                excerpt=head,
            ) from exc

    def parse_week(
        self,
        text: str,
        week_number: int,
        week_start: date,
        phase: str = "",
    ) -> WeekPlan:
        """
        Parse a week-level response.

        Args:
            text: Raw response text
            week_number: Number of the week being generated; always wins over
                any weekNumber in the response
            week_start: Monday of the week
            phase: Phase already computed for the week; replaced only when the
                response names a different, non-empty phase

        Returns:
            WeekPlan with synthesised ids, resolved dates and planned status

        Raises:
            ResponseParseError: Invalid JSON after repair
            ResponseValidationError: No workouts list (or legacy weeks list)
        """
        data = self.load(text)
        if not isinstance(data, dict):
            raise ResponseValidationError("Response is not a JSON object")

        if "workouts" not in data and isinstance(data.get("weeks"), list):
            data = self._select_legacy_week(data["weeks"], week_number)

        raw = self._validate_week(data)
        if raw.week_number is not None and raw.week_number != week_number:
            logger.warning(
                f"Response labelled week {raw.week_number}, expected {week_number}; keeping {week_number}"
            )
        logger.info(f"Parsed week {week_number} with {len(raw.workouts)} workouts")
        return self._build_week(raw, week_number, week_start, phase)

    def parse_plan(self, text: str, start_date: date) -> List[WeekPlan]:
        """
        Parse a multi-week response (`{"weeks": [...]}`).

        Week n starts 7·(n−1) days after `start_date`.

        Raises:
            ResponseParseError: Invalid JSON after repair
            ResponseValidationError: No weeks list
        """
        data = self.load(text)
        if not isinstance(data, dict) or not isinstance(data.get("weeks"), list):
            raise ResponseValidationError("Response has no 'weeks' list")

        weeks = []
        for index, entry in enumerate(data["weeks"]):
            if not isinstance(entry, dict):
                continue
            raw = self._validate_week(entry)
            week_number = index + 1
            week_start = start_date + timedelta(weeks=index)
            weeks.append(self._build_week(raw, week_number, week_start, raw.phase or ""))
        if not weeks:
            raise ResponseValidationError("Response 'weeks' list holds no week objects")
        return weeks

    def _select_legacy_week(self, weeks: List[Any], week_number: int) -> Any:
        candidates = [w for w in weeks if isinstance(w, dict)]
        if not candidates:
            raise ResponseValidationError("Response 'weeks' list holds no week objects")
        for week in candidates:
            if week.get("weekNumber") == week_number:
                return week
        return candidates[0]

    def _validate_week(self, data: Any) -> RawWeek:
        if not isinstance(data, dict) or not isinstance(data.get("workouts"), list):
            raise ResponseValidationError("Response has no 'workouts' list")
        try:
            return RawWeek.model_validate(data)
        except ValidationError as exc:
            raise ResponseValidationError(f"Response week is malformed: {exc}") from exc

    def _build_week(
        self, raw: RawWeek, week_number: int, week_start: date, phase: str
    ) -> WeekPlan:
        workouts = [
            map_workout(
                entry,
                week_start,
                self.id_factory(week_number, resolve_day(entry.day_of_week).value),
            )
            for entry in raw.workouts
        ]
        if raw.phase and raw.phase.strip() and raw.phase.strip() != phase:
            phase = raw.phase.strip()

        return WeekPlan(
            week_number=week_number,
            start_date=week_start,
            end_date=week_start + timedelta(days=6),
            theme=(raw.theme or "").strip() or f"Week {week_number}",
            focus=(raw.focus or "").strip(),
            phase=phase,
            total_planned_hours=total_hours(workouts),
            is_recovery_week=is_recovery_week(week_number),
            workouts=workouts,
        )
