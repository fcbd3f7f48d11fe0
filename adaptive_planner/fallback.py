"""
Deterministic placeholder weeks.

Used when a generation step fails and fallback is enabled, so the athlete
is never left without a week to train from. Every week built here is
flagged `is_fallback` and themed "Fallback plan: <phase>".
"""

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from adaptive_planner.phases import is_recovery_week, phase_for
from adaptive_planner.plan_schemas import (
    WeekPlan,
    Workout,
    WorkoutSegment,
    WorkoutStatus,
    WorkoutType,
)
from adaptive_planner.response_parser import WorkoutIdFactory, total_hours
from adaptive_planner.schemas import WEEKDAYS, OnboardingData, Weekday

logger = logging.getLogger(__name__)

FALLBACK_THEME_PREFIX = "Fallback plan"
RECOVERY_VOLUME_FACTOR = 0.7


class WorkoutTemplate(BaseModel):
    """Static content of a placeholder session."""

    name: str
    duration: int = Field(..., ge=0)
    distance: Optional[float] = None
    purpose: str = ""
    description: str = ""
    structure: List[WorkoutSegment] = Field(default_factory=list)
    heart_rate_guidance: str = ""
    pace_guidance: str = ""
    coaching_tips: List[str] = Field(default_factory=list)
    adaptation_notes: str = ""
    long_session: bool = False


def _segments(*items: Tuple[str, str, str]) -> List[WorkoutSegment]:
    return [WorkoutSegment(name=n, duration=d, description=desc) for n, d, desc in items]


TEMPLATES: Dict[WorkoutType, List[WorkoutTemplate]] = {
    WorkoutType.RUN: [
        WorkoutTemplate(
            name="Easy Recovery Run",
            duration=45,
            distance=7,
            purpose="Active recovery to promote blood flow while maintaining aerobic fitness.",
            description="Keep it genuinely easy. This is active rest.",
            structure=_segments(
                ("Warm-up", "5 min", "Very easy jog to loosen up"),
                ("Main run", "35 min", "Steady Zone 1-2 effort"),
                ("Cool-down", "5 min", "Easy jog to walk"),
            ),
            heart_rate_guidance="Zone 1-2. If breathing becomes laboured, slow down.",
            pace_guidance="Conversation pace throughout.",
            coaching_tips=[
                "Slower is better today",
                "Focus on relaxed form and quick turnover",
            ],
            adaptation_notes="If fatigued, reduce to 30 minutes or walk instead.",
        ),
        WorkoutTemplate(
            name="Tempo Run - Threshold Development",
            duration=55,
            distance=10,
            purpose="Raise threshold pace by training lactate clearance.",
            description="Comfortably hard: challenging but sustainable.",
            structure=_segments(
                ("Warm-up", "15 min", "Easy jog + 4 x 20sec strides"),
                ("Main set", "3 x 10 min", "Tempo pace with 2 min easy jog recovery"),
                ("Cool-down", "10 min", "Easy jog"),
            ),
            heart_rate_guidance="Warm-up Zone 1-2, tempo intervals Zone 4.",
            pace_guidance="Tempo intervals at threshold pace.",
            coaching_tips=[
                "Start each interval conservatively",
                "The last interval should feel hard but repeatable",
            ],
            adaptation_notes="If struggling, reduce to 2 x 10 min.",
        ),
        WorkoutTemplate(
            name="Interval Training - VO2max",
            duration=50,
            distance=9,
            purpose="Develop maximum oxygen uptake and running economy.",
            description="Hard intervals with full recoveries.",
            structure=_segments(
                ("Warm-up", "15 min", "Easy jog + dynamic stretches + 4 strides"),
                ("Main set", "5 x 3 min", "Hard effort with 2 min easy jog recovery"),
                ("Cool-down", "10 min", "Easy jog"),
            ),
            heart_rate_guidance="Intervals Zone 5, recover to Zone 1 between reps.",
            pace_guidance="Intervals faster than threshold pace.",
            coaching_tips=["The first interval should feel too easy"],
            adaptation_notes="Reduce to 4 intervals if heart rate stays high in recovery.",
        ),
        WorkoutTemplate(
            name="Long Run - Aerobic Base",
            duration=105,
            distance=18,
            purpose="Build aerobic endurance and fat-burning efficiency.",
            description="Keep it conversational from start to finish.",
            structure=_segments(
                ("Warm-up", "10 min", "Start very easy"),
                ("Main set", "85 min", "Steady Zone 2 effort"),
                ("Cool-down", "10 min", "Gradually slow to a walk"),
            ),
            heart_rate_guidance="Zone 2. Slow down or walk if you drift into Zone 3.",
            pace_guidance="Easy pace, slower than you think.",
            coaching_tips=[
                "Take water every 20 minutes",
                "Flat to rolling terrain preferred",
            ],
            adaptation_notes="Coming off a hard week, cut to 90 minutes.",
            long_session=True,
        ),
    ],
    WorkoutType.BIKE: [
        WorkoutTemplate(
            name="Easy Spin",
            duration=60,
            distance=25,
            purpose="Flush the legs and maintain cycling fitness.",
            description="High cadence, low resistance.",
            structure=_segments(
                ("Warm-up", "10 min", "Very easy spinning"),
                ("Main ride", "45 min", "Steady Zone 1-2 effort"),
                ("Cool-down", "5 min", "Very easy spinning"),
            ),
            heart_rate_guidance="Zone 1-2.",
            pace_guidance="Below 55% FTP, cadence 90-100 rpm.",
            coaching_tips=["Practise smooth pedalling", "Indoor trainer is fine"],
            adaptation_notes="Substitute an easy walk if particularly fatigued.",
        ),
        WorkoutTemplate(
            name="Sweet Spot Intervals",
            duration=75,
            distance=32,
            purpose="Raise sustainable power for the bike leg.",
            description="Sustained efforts just below threshold.",
            structure=_segments(
                ("Warm-up", "15 min", "Progressive spin"),
                ("Main set", "3 x 12 min", "88-93% FTP with 4 min easy"),
                ("Cool-down", "12 min", "Easy spin"),
            ),
            heart_rate_guidance="Zone 3-4 during efforts.",
            pace_guidance="88-93% FTP.",
            coaching_tips=["Stay seated and smooth"],
            adaptation_notes="Drop to 2 x 12 min if the legs are heavy.",
        ),
        WorkoutTemplate(
            name="Long Endurance Ride",
            duration=180,
            distance=75,
            purpose="Build endurance for the bike leg and rehearse nutrition.",
            description="Steady, patient aerobic riding.",
            structure=_segments(
                ("Warm-up", "15 min", "Easy spinning, gradually building"),
                ("Main set", "150 min", "Steady Zone 2 effort"),
                ("Cool-down", "15 min", "Easy spinning"),
            ),
            heart_rate_guidance="Zone 2. Avoid Zone 3 creep.",
            pace_guidance="65-75% FTP, cadence 85-95 rpm.",
            coaching_tips=["Eat every 30-45 minutes", "Practise race-day nutrition"],
            adaptation_notes="In bad weather split into two shorter rides.",
            long_session=True,
        ),
    ],
    WorkoutType.SWIM: [
        WorkoutTemplate(
            name="Technique & Endurance Swim",
            duration=50,
            distance=2,
            purpose="Build swim endurance while keeping good technique.",
            description="Efficiency over speed.",
            structure=_segments(
                ("Warm-up", "400m", "200m easy + 4 x 50m drill/swim"),
                ("Technique set", "600m", "6 x 100m as 25m drill + 75m swim"),
                ("Endurance set", "800m", "4 x 200m steady with 20sec rest"),
                ("Cool-down", "200m", "Easy choice stroke"),
            ),
            heart_rate_guidance="Moderate effort (6/10) in the main set.",
            pace_guidance="Finish feeling you could do more.",
            coaching_tips=["Long strokes, relaxed kick"],
            adaptation_notes="Reduce to 1,600m if short on time.",
        ),
        WorkoutTemplate(
            name="Aerobic Swim Intervals",
            duration=45,
            distance=1.8,
            purpose="Develop aerobic swim fitness with controlled intervals.",
            description="Even pacing across all repeats.",
            structure=_segments(
                ("Warm-up", "300m", "Easy mixed strokes"),
                ("Main set", "10 x 100m", "Steady with 15sec rest"),
                ("Cool-down", "200m", "Easy"),
            ),
            heart_rate_guidance="Moderate, controlled breathing.",
            pace_guidance="Hold the same pace on every repeat.",
            coaching_tips=["Bilateral breathing where possible"],
            adaptation_notes="Shorten the main set to 8 x 100m if needed.",
        ),
    ],
    WorkoutType.STRENGTH: [
        WorkoutTemplate(
            name="Core & Stability",
            duration=30,
            purpose="Core strength and stability for better form and injury prevention.",
            description="Quality movements over quantity.",
            structure=_segments(
                ("Warm-up", "5 min", "Dynamic stretches and activation"),
                ("Circuit 1", "10 min", "Plank variations, dead bugs, bird dogs"),
                ("Circuit 2", "10 min", "Single-leg work, glute bridges, clamshells"),
                ("Cool-down", "5 min", "Static stretching"),
            ),
            heart_rate_guidance="Not heart-rate driven.",
            pace_guidance="8-12 reps per exercise, 2-3 rounds.",
            coaching_tips=["Control the lowering phase"],
            adaptation_notes="Skip if a hard run follows the next day.",
        ),
    ],
    WorkoutType.REST: [
        WorkoutTemplate(
            name="Rest Day",
            duration=0,
            purpose="Complete rest so the body can adapt to training.",
            description="Sleep well, eat well, stay hydrated. Light stretching if desired.",
            coaching_tips=["Rest is part of training"],
        ),
    ],
}

RUNNING_PATTERN: List[WorkoutType] = [
    WorkoutType.RUN,
    WorkoutType.STRENGTH,
    WorkoutType.RUN,
    WorkoutType.RUN,
    WorkoutType.REST,
    WorkoutType.RUN,
    WorkoutType.STRENGTH,
]

TRIATHLON_PATTERN: List[WorkoutType] = [
    WorkoutType.SWIM,
    WorkoutType.BIKE,
    WorkoutType.RUN,
    WorkoutType.SWIM,
    WorkoutType.REST,
    WorkoutType.BIKE,
    WorkoutType.RUN,
]

WEEK_FOCUS: List[str] = [
    "Aerobic foundation and easy volume",
    "Longer sessions, steady effort",
    "Quality threshold work",
    "Reduced volume, maintain frequency",
]


def _long_day(onboarding: OnboardingData) -> Optional[Weekday]:
    available = onboarding.availability.available_days()
    for day in available:
        if onboarding.availability.for_day(day).long_session:
            return day
    return available[-1] if available else None


def _pick_template(discipline: WorkoutType, week_number: int, day: Weekday, long_session: bool) -> WorkoutTemplate:
    pool = [t for t in TEMPLATES[discipline] if t.long_session == long_session]
    if not pool:
        pool = TEMPLATES[discipline]
    return pool[(week_number + day.offset) % len(pool)]


def _scaled(template: WorkoutTemplate, cap_minutes: Optional[int], recovery: bool) -> Tuple[int, Optional[float]]:
    duration = template.duration
    if cap_minutes is not None and duration > cap_minutes:
        duration = cap_minutes
    if recovery:
        duration = round(duration * RECOVERY_VOLUME_FACTOR)
    distance = template.distance
    if distance is not None and template.duration:
        distance = round(distance * duration / template.duration, 1)
    return duration, distance


class FallbackWeekBuilder:
    """Builds a placeholder week from the template library."""

    def __init__(self, id_factory: Optional[WorkoutIdFactory] = None):
        self.id_factory = id_factory or WorkoutIdFactory()

    def build_week(
        self,
        onboarding: OnboardingData,
        week_number: int,
        total_weeks: int,
        week_start: date,
    ) -> WeekPlan:
        """
        Build week `week_number` without calling the generation API.

        Unavailable days become rest days. The long session goes on the
        first day flagged for it (the last available day otherwise).
        """
        phase = phase_for(week_number, total_weeks).value
        recovery = is_recovery_week(week_number)
        pattern = TRIATHLON_PATTERN if onboarding.is_triathlon else RUNNING_PATTERN
        long_day = _long_day(onboarding)
        long_discipline = WorkoutType.BIKE if onboarding.is_triathlon else WorkoutType.RUN

        workouts = []
        for day, planned in zip(WEEKDAYS, pattern):
            slot = onboarding.availability.for_day(day)
            discipline = planned if slot.available else WorkoutType.REST
            is_long = slot.available and day == long_day
            if is_long:
                discipline = long_discipline

            template = _pick_template(discipline, week_number, day, is_long)
            cap = slot.max_duration.minutes if slot.available else None
            duration, distance = _scaled(template, cap, recovery)
            workouts.append(
                Workout(
                    id=self.id_factory(week_number, day.value),
                    scheduled_date=week_start + timedelta(days=day.offset),
                    type=discipline,
                    name=template.name,
                    duration=duration,
                    distance=distance,
                    description=template.description,
                    purpose=template.purpose,
                    structure=[s.model_copy() for s in template.structure],
                    heart_rate_guidance=template.heart_rate_guidance,
                    pace_guidance=template.pace_guidance,
                    coaching_tips=list(template.coaching_tips),
                    adaptation_notes=template.adaptation_notes,
                    status=WorkoutStatus.PLANNED,
                )
            )

        logger.warning(f"Built fallback content for week {week_number} ({phase})")
        return WeekPlan(
            week_number=week_number,
            start_date=week_start,
            end_date=week_start + timedelta(days=6),
            theme=f"{FALLBACK_THEME_PREFIX}: {phase}",
            focus=WEEK_FOCUS[3] if recovery else WEEK_FOCUS[(week_number - 1) % 3],
            phase=phase,
            total_planned_hours=total_hours(workouts),
            is_recovery_week=recovery,
            workouts=workouts,
            is_fallback=True,
        )
