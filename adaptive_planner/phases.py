"""
Periodization helpers.

Pure functions that map a week's position in the plan to a training phase,
flag recovery weeks, derive heart-rate zones from LTHR, and size a plan from
the race date.
"""

import math
from datetime import date, timedelta
from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, Field

MIN_PLAN_WEEKS = 1
MAX_PLAN_WEEKS = 52
RECOVERY_WEEK_CADENCE = 4


class TrainingPhase(str, Enum):
    """Phases of the training block, earliest first."""

    BASE = "Base"
    BUILD_1 = "Build 1"
    BUILD_2 = "Build 2"
    PEAK = "Peak"
    TAPER = "Taper"
    RACE_WEEK = "Race Week"

    @property
    def order(self) -> int:
        return list(TrainingPhase).index(self)


# (max weeks remaining, phase); checked in order, first match wins.
# A week on a boundary gets the earlier phase of the two.
PHASE_THRESHOLDS: List[Tuple[int, TrainingPhase]] = [
    (1, TrainingPhase.RACE_WEEK),
    (3, TrainingPhase.TAPER),
    (5, TrainingPhase.PEAK),
    (7, TrainingPhase.BUILD_2),
    (9, TrainingPhase.BUILD_1),
]


def phase_for(week_number: int, total_weeks: int) -> TrainingPhase:
    """
    Determine the training phase for a week.

    Args:
        week_number: Week number (1-based)
        total_weeks: Total plan length in weeks

    Returns:
        TrainingPhase for the week; Base when the race is ten or more weeks away
    """
    weeks_remaining = total_weeks - week_number
    for max_remaining, phase in PHASE_THRESHOLDS:
        if weeks_remaining <= max_remaining:
            return phase
    return TrainingPhase.BASE


def is_recovery_week(week_number: int) -> bool:
    """Every fourth week is a recovery/deload week."""
    return week_number % RECOVERY_WEEK_CADENCE == 0


class HeartRateZone(BaseModel):
    """One heart-rate training zone."""

    name: str
    min: int = Field(..., ge=0)
    max: int = Field(..., ge=0)

    def label(self) -> str:
        return f"{self.min}-{self.max}bpm"


class HeartRateZones(BaseModel):
    """Five LTHR-based heart-rate zones."""

    zone1: HeartRateZone
    zone2: HeartRateZone
    zone3: HeartRateZone
    zone4: HeartRateZone
    zone5: HeartRateZone

    def as_list(self) -> List[HeartRateZone]:
        return [self.zone1, self.zone2, self.zone3, self.zone4, self.zone5]


# (name, lower fraction of LTHR, upper fraction of LTHR)
ZONE_BANDS: List[Tuple[str, float, float]] = [
    ("Recovery", 0.68, 0.73),
    ("Aerobic", 0.73, 0.80),
    ("Tempo", 0.80, 0.87),
    ("Threshold", 0.87, 0.93),
    ("VO2max", 0.93, 1.05),
]


def round_half_up(value: float) -> int:
    """Round half up to a whole number, as bpm and percentages are displayed."""
    return int(math.floor(value + 0.5))


def hr_zones(lthr: int) -> HeartRateZones:
    """
    Calculate heart-rate zones as fixed percentage bands of LTHR.

    Args:
        lthr: Lactate threshold heart rate in bpm (must be positive)

    Returns:
        HeartRateZones with boundaries rounded to the nearest bpm

    Raises:
        ValueError: If lthr is not positive
    """
    if lthr <= 0:
        raise ValueError(f"LTHR must be positive, got {lthr}")

    zones = [
        HeartRateZone(name=name, min=round_half_up(lthr * low), max=round_half_up(lthr * high))
        for name, low, high in ZONE_BANDS
    ]
    return HeartRateZones(
        zone1=zones[0], zone2=zones[1], zone3=zones[2], zone4=zones[3], zone5=zones[4]
    )


def total_weeks_until(race_date: date, today: date) -> int:
    """
    Number of plan weeks between today and race day.

    Whole weeks rounded up, clamped to [1, 52] so that a past, imminent or
    far-off race date still yields a usable plan length.
    """
    days = (race_date - today).days
    weeks = math.ceil(days / 7)
    return max(MIN_PLAN_WEEKS, min(MAX_PLAN_WEEKS, weeks))


def monday_of(day: date) -> date:
    """Monday of the calendar week containing `day`."""
    return day - timedelta(days=day.weekday())
