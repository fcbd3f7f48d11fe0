"""
Generation prompt construction.

A week prompt encodes athlete state (profile, zones, goal, availability),
the week's phase, any fatigue or constraints reported last week, the
compressed training history and the output schema the parser accepts.
"""

from typing import List, Optional

from adaptive_planner.history import HistoryCompressor
from adaptive_planner.phases import hr_zones, is_recovery_week, phase_for
from adaptive_planner.plan_schemas import CompletedWeek
from adaptive_planner.response_parser import ALLOWED_WORKOUT_TYPES
from adaptive_planner.schemas import WEEKDAYS, OnboardingData, Weekday

TRIATHLON_SESSIONS_PER_DISCIPLINE = 2


def _bullet(text: Optional[str]) -> List[str]:
    return [text] if text else []


class PromptBuilder:
    """Builds the single text instruction sent for each generated week."""

    def __init__(self, compressor: Optional[HistoryCompressor] = None):
        self.compressor = compressor or HistoryCompressor()

    def build_week_prompt(
        self,
        onboarding: OnboardingData,
        week_number: int,
        total_weeks: int,
        completed_weeks: List[CompletedWeek],
        constraints: Optional[str] = None,
    ) -> str:
        """
        Build the prompt for one week.

        Args:
            onboarding: Athlete snapshot
            week_number: Week being generated (1-based)
            total_weeks: Plan length
            completed_weeks: Archived weeks, oldest first
            constraints: Free-text constraints for this week, if any

        Returns:
            Prompt text
        """
        phase = phase_for(week_number, total_weeks).value
        recovery = is_recovery_week(week_number)
        sport = "triathlon" if onboarding.is_triathlon else "running"

        sections = [
            f"You are an expert {sport} coach creating a detailed weekly training plan.",
            self._profile_section(onboarding),
            self._zones_section(onboarding),
            self._goal_section(onboarding, week_number, total_weeks),
        ]
        if onboarding.is_triathlon:
            sections.append(self._triathlon_section(onboarding))
        sections.extend(
            [
                self._context_section(
                    week_number, total_weeks, phase, recovery, completed_weeks, constraints
                ),
                "## TRAINING HISTORY\n" + self.compressor.compress(completed_weeks),
                self._availability_section(onboarding),
                self._instructions_section(onboarding, week_number, phase, recovery),
            ]
        )
        return "\n\n".join(sections)

    def _profile_section(self, onboarding: OnboardingData) -> str:
        profile = onboarding.profile
        fitness = onboarding.fitness
        lines = [
            "## ATHLETE PROFILE",
            f"- Name: {profile.first_name}",
            f"- Age: {profile.age}, Weight: {profile.weight:g}kg, Height: {profile.height:g}cm",
            f"- Level: {fitness.fitness_level.value}",
            f"- Max HR: {fitness.max_hr}bpm",
            f"- LTHR: {fitness.lthr}bpm",
            f"- Threshold Pace: {fitness.threshold_pace}/km",
        ]
        lines.extend(_bullet(f"- FTP: {fitness.ftp}W" if fitness.ftp else None))
        lines.append(f"- Swim Level: {fitness.swim_level.value}")
        return "\n".join(lines)

    def _zones_section(self, onboarding: OnboardingData) -> str:
        lthr = onboarding.fitness.lthr
        zones = hr_zones(lthr)
        lines = [f"## HEART RATE ZONES (based on LTHR {lthr})"]
        for index, zone in enumerate(zones.as_list(), start=1):
            lines.append(f"- Zone {index} {zone.name}: {zone.label()}")
        return "\n".join(lines)

    def _goal_section(
        self, onboarding: OnboardingData, week_number: int, total_weeks: int
    ) -> str:
        goal = onboarding.goal
        lines = [
            "## RACE GOAL",
            f"- Race: {goal.race_name} ({goal.race_type.value})",
            f"- Date: {goal.race_date.isoformat()}",
            f"- Weeks until race: {total_weeks - week_number}",
            f"- Goal: {goal.priority.value}",
        ]
        lines.extend(_bullet(f"- Target time: {goal.goal_time}" if goal.goal_time else None))
        if goal.custom_distances is not None:
            distances = goal.custom_distances
            parts = [f"run {distances.run:g}km"]
            if distances.bike:
                parts.insert(0, f"bike {distances.bike:g}km")
            if distances.swim:
                parts.insert(0, f"swim {distances.swim:g}km")
            lines.append(f"- Distances: {', '.join(parts)}")
        return "\n".join(lines)

    def _triathlon_section(self, onboarding: OnboardingData) -> str:
        swim_level = onboarding.fitness.swim_level.value
        n = TRIATHLON_SESSIONS_PER_DISCIPLINE
        return "\n".join(
            [
                "## CRITICAL: WORKOUT DISTRIBUTION FOR TRIATHLON",
                "You MUST include ALL THREE disciplines (swim, bike, run) each week with EQUAL frequency:",
                f"- SWIM: {n} sessions per week (skill level affects intensity, NOT frequency)",
                f"- BIKE: {n} sessions per week",
                f"- RUN: {n} sessions per week",
                "- Optional: 1 strength/mobility session",
                "",
                f'The athlete\'s swim level is "{swim_level}". This means:',
                "- If learning: focus swim sessions on technique drills, shorter intervals, more rest",
                "- If comfortable: mix technique with aerobic development",
                "- If competitive: include threshold and race-pace work",
                "",
                "DO NOT reduce swim frequency because the athlete is a weaker swimmer.",
                "Adjust INTENSITY and COMPLEXITY, not frequency.",
            ]
        )

    def _context_section(
        self,
        week_number: int,
        total_weeks: int,
        phase: str,
        recovery: bool,
        completed_weeks: List[CompletedWeek],
        constraints: Optional[str],
    ) -> str:
        lines = [
            "## TRAINING CONTEXT",
            f"- Currently generating: WEEK {week_number} of {total_weeks}",
            f"- Training phase: {phase}",
        ]
        if recovery:
            lines.append(
                "- THIS IS A RECOVERY/DELOAD WEEK: reduce volume by 30-40% and keep intensity low"
            )

        last_feedback = completed_weeks[-1].summary.feedback if completed_weeks else None
        if last_feedback is not None:
            if last_feedback.overall_feeling.is_fatigued:
                lines.append("- Athlete reported fatigue last week: consider reducing load")
            issues = [
                issue for issue in last_feedback.physical_issues
                if issue.strip() and issue.strip().lower() != "none"
            ]
            if issues:
                lines.append(
                    f"- Physical issues reported: {', '.join(issues)}. Adapt accordingly"
                )
        if constraints:
            lines.append(f'- Athlete constraint: "{constraints}". Adapt the schedule accordingly')
        return "\n".join(lines)

    def _availability_section(self, onboarding: OnboardingData) -> str:
        availability = onboarding.availability
        lines = ["## WEEKLY AVAILABILITY"]
        for day in WEEKDAYS:
            slot = availability.for_day(day)
            label = day.value.capitalize()
            if not slot.available:
                lines.append(f"- {label}: REST DAY")
                continue
            windows = ", ".join(s.value for s in slot.time_slots) or "any time"
            entry = f"- {label}: Available ({windows}, max {slot.max_duration.value})"
            if slot.long_session:
                entry += " - LONG SESSION DAY"
            lines.append(entry)
        lines.append(f"- Weekly hours target: {availability.weekly_hours_target}")
        return "\n".join(lines)

    def _instructions_section(
        self, onboarding: OnboardingData, week_number: int, phase: str, recovery: bool
    ) -> str:
        zone1 = hr_zones(onboarding.fitness.lthr).zone1
        types = ", ".join(f'"{t}"' for t in ALLOWED_WORKOUT_TYPES)
        days = ", ".join(f'"{d.value}"' for d in WEEKDAYS)

        schema = (
            "{\n"
            f'  "weekNumber": {week_number},\n'
            '  "theme": "Week theme (e.g. \'Aerobic Base Building\')",\n'
            '  "focus": "Primary focus for the week",\n'
            f'  "phase": "{phase}",\n'
            '  "workouts": [\n'
            "    {\n"
            f'      "dayOfWeek": "{Weekday.TUESDAY.value}",\n'
            '      "type": "run",\n'
            '      "name": "Workout Name",\n'
            '      "duration": 60,\n'
            '      "distance": 10,\n'
            '      "purpose": "Why this workout matters for the race goal",\n'
            f'      "description": "WARM-UP: 15min easy at Zone 1 ({zone1.label()})...\\n\\nMAIN SET: ...\\n\\nCOOL-DOWN: ...",\n'
            '      "structure": [{"name": "Warm-up", "duration": "15 min", "description": "Easy"}],\n'
            '      "heartRateGuidance": "Zone guidance",\n'
            '      "paceGuidance": "Pace guidance",\n'
            '      "coachingTips": ["tip1", "tip2"],\n'
            '      "adaptationNotes": "How to adjust if tired"\n'
            "    }\n"
            "  ]\n"
            "}"
        )

        rules = [
            "RULES:",
            "- Generate 5-7 workouts based on availability (rest days where not available)",
        ]
        if onboarding.is_triathlon:
            rules.append(
                f"- MANDATORY: include exactly {TRIATHLON_SESSIONS_PER_DISCIPLINE} swim, "
                f"{TRIATHLON_SESSIONS_PER_DISCIPLINE} bike and "
                f"{TRIATHLON_SESSIONS_PER_DISCIPLINE} run sessions"
            )
        else:
            rules.append("- Focus on running with supporting strength work")
        rules.extend(
            [
                f"- type must be one of: {types}",
                f"- dayOfWeek must be one of: {days}",
                "- distance in km (null for strength/rest)",
                "- duration in minutes",
                "- Use \\n for line breaks in description",
                "- Include SPECIFIC HR zones and paces in every description",
                "- NO trailing commas",
            ]
        )
        if recovery:
            rules.append("- Recovery week: shorter sessions, lower intensity")

        return "\n".join(
            [
                "## INSTRUCTIONS",
                "Generate a DETAILED training week. For each workout describe the warm-up, "
                "the main set with specific intervals, paces, HR zones and recoveries, "
                "the cool-down, and why the workout matters for the goal.",
                "",
                "Return ONLY valid JSON (no markdown, no explanation):",
                schema,
                "",
                "\n".join(rules),
            ]
        )
