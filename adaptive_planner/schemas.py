"""
Pydantic models for athlete onboarding data.

This module defines the read-only inputs of the plan engine:
- Athlete Profile: identity and physical attributes
- Fitness Assessment: heart-rate anchors, threshold pace, swim proficiency
- Race Goal: target event, date and ambition
- Weekly Availability: per-day training windows and weekly hours target
- Integrations: calendar / activity-tracker connection state (no OAuth)
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================================
# Enumerations
# ============================================================================

class Gender(str, Enum):
    """Self-reported gender."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


class FitnessLevel(str, Enum):
    """Coarse fitness tier used to calibrate load."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ELITE = "elite"


class SwimLevel(str, Enum):
    """Swim proficiency tier."""
    CANT_SWIM = "cant-swim"
    LEARNING = "learning"
    COMFORTABLE = "comfortable"
    COMPETITIVE = "competitive"


class RaceType(str, Enum):
    """Supported race categories."""
    MARATHON = "marathon"
    HALF_MARATHON = "half-marathon"
    OLYMPIC_TRIATHLON = "olympic-triathlon"
    SPRINT_TRIATHLON = "sprint-triathlon"
    IRONMAN_70_3 = "70.3-ironman"
    FULL_IRONMAN = "full-ironman"
    CUSTOM = "custom"

    @property
    def is_triathlon(self) -> bool:
        return self in TRIATHLON_RACE_TYPES


TRIATHLON_RACE_TYPES = frozenset(
    {
        RaceType.OLYMPIC_TRIATHLON,
        RaceType.SPRINT_TRIATHLON,
        RaceType.IRONMAN_70_3,
        RaceType.FULL_IRONMAN,
    }
)


class GoalPriority(str, Enum):
    """What the athlete wants out of the race."""
    FINISH = "finish"
    PB = "pb"  # Personal best
    PODIUM = "podium"


class TimeSlot(str, Enum):
    """Time-of-day training windows."""
    MORNING = "morning"
    MIDDAY = "midday"
    EVENING = "evening"


class SessionLength(str, Enum):
    """Maximum session length the athlete can fit on a given day."""
    MIN_30 = "30min"
    MIN_45 = "45min"
    MIN_60 = "60min"
    MIN_90 = "90min"
    H_2 = "2h"
    H_2_30 = "2h30"
    H_3_PLUS = "3h+"

    @property
    def minutes(self) -> int:
        return _SESSION_LENGTH_MINUTES[self]


_SESSION_LENGTH_MINUTES = {
    SessionLength.MIN_30: 30,
    SessionLength.MIN_45: 45,
    SessionLength.MIN_60: 60,
    SessionLength.MIN_90: 90,
    SessionLength.H_2: 120,
    SessionLength.H_2_30: 150,
    SessionLength.H_3_PLUS: 180,
}


class Weekday(str, Enum):
    """Days of the week, in Monday-first order."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def offset(self) -> int:
        """Zero-based offset from Monday."""
        return WEEKDAYS.index(self)


WEEKDAYS: List[Weekday] = list(Weekday)


# ============================================================================
# Onboarding Models
# ============================================================================

class AthleteProfile(BaseModel):
    """Identity and physical attributes of the athlete."""

    first_name: str = Field(..., min_length=1, description="Athlete's first name")
    age: int = Field(..., ge=10, le=100, description="Age in years")
    gender: Gender = Field(default=Gender.PREFER_NOT_TO_SAY, description="Gender")
    weight: float = Field(..., gt=0, description="Body weight in kg")
    height: float = Field(..., gt=0, description="Height in cm")


class FitnessAssessment(BaseModel):
    """Physiological anchors used for zones and prompt calibration."""

    fitness_level: FitnessLevel = Field(..., description="Coarse fitness tier")
    lthr: int = Field(
        ..., gt=0, le=230, description="Lactate threshold heart rate (bpm)"
    )
    threshold_pace: str = Field(
        ...,
        pattern=r"^\d{1,2}:\d{2}$",
        description="Threshold running pace in MM:SS per km",
    )
    max_hr: int = Field(..., gt=0, le=240, description="Maximum heart rate (bpm)")
    ftp: Optional[int] = Field(
        default=None, gt=0, description="Cycling functional threshold power (W)"
    )
    swim_level: SwimLevel = Field(
        default=SwimLevel.COMFORTABLE, description="Swim proficiency tier"
    )


class CustomDistances(BaseModel):
    """Per-discipline distances (km) for a custom race."""

    swim: Optional[float] = Field(default=None, gt=0)
    bike: Optional[float] = Field(default=None, gt=0)
    run: float = Field(..., gt=0)


class RaceGoal(BaseModel):
    """
    Target event for the training block.

    The race date is expected to be in the future when a plan is
    initialized; that check belongs to the input layer.
    """

    race_type: RaceType = Field(..., description="Race category")
    race_name: str = Field(..., min_length=1, description="Event name")
    race_date: date = Field(..., description="Race day")
    goal_time: Optional[str] = Field(
        default=None,
        pattern=r"^\d{1,2}:\d{2}(:\d{2})?$",
        description="Target finishing time (H:MM or H:MM:SS)",
    )
    priority: GoalPriority = Field(
        default=GoalPriority.FINISH, description="Finish, personal best or podium"
    )
    custom_distances: Optional[CustomDistances] = Field(
        default=None, description="Distances for a custom race"
    )


class DayAvailability(BaseModel):
    """Training window for a single weekday."""

    available: bool = Field(default=True)
    time_slots: List[TimeSlot] = Field(default_factory=list)
    max_duration: SessionLength = Field(default=SessionLength.MIN_60)
    long_session: bool = Field(
        default=False, description="Preferred day for the long session"
    )

    @field_validator("time_slots")
    @classmethod
    def dedupe_time_slots(cls, v: List[TimeSlot]) -> List[TimeSlot]:
        """Keep first occurrence order, drop repeats."""
        return list(dict.fromkeys(v))


class WeeklyAvailability(BaseModel):
    """Per-day availability plus the weekly hours target."""

    monday: DayAvailability = Field(default_factory=DayAvailability)
    tuesday: DayAvailability = Field(default_factory=DayAvailability)
    wednesday: DayAvailability = Field(default_factory=DayAvailability)
    thursday: DayAvailability = Field(default_factory=DayAvailability)
    friday: DayAvailability = Field(default_factory=DayAvailability)
    saturday: DayAvailability = Field(default_factory=DayAvailability)
    sunday: DayAvailability = Field(default_factory=DayAvailability)
    weekly_hours_target: str = Field(
        default="6-8h", description="Free-text weekly volume target, e.g. '8-10h'"
    )

    def for_day(self, day: Weekday) -> DayAvailability:
        return getattr(self, day.value)

    def available_days(self) -> List[Weekday]:
        return [day for day in WEEKDAYS if self.for_day(day).available]


class CalendarIntegration(BaseModel):
    """Calendar connection state."""

    connected: bool = False
    read_calendar: Optional[str] = None
    write_calendar: Optional[str] = None
    avoid_conflicts: bool = True


class ActivityTrackerIntegration(BaseModel):
    """Activity-tracker connection state."""

    connected: bool = False
    auto_complete: bool = True


class Integrations(BaseModel):
    """Third-party connection state. Only flags are stored."""

    google_calendar: CalendarIntegration = Field(default_factory=CalendarIntegration)
    strava: ActivityTrackerIntegration = Field(default_factory=ActivityTrackerIntegration)


class OnboardingData(BaseModel):
    """
    Complete onboarding snapshot used to seed every generation prompt.

    Owned by the onboarding collaborator; read-only for the plan engine.
    """

    profile: AthleteProfile
    fitness: FitnessAssessment
    goal: RaceGoal
    availability: WeeklyAvailability = Field(default_factory=WeeklyAvailability)
    integrations: Integrations = Field(default_factory=Integrations)

    @property
    def is_triathlon(self) -> bool:
        return self.goal.race_type.is_triathlon
