"""
Training history summarisation.

Turns finished weeks into WeekSummary records and compresses an arbitrarily
long list of archived weeks into a bounded text block for the generation
prompt: the two most recent weeks in full detail, everything older folded
into one aggregate.
"""

from typing import Dict, List

from adaptive_planner.phases import round_half_up
from adaptive_planner.plan_schemas import (
    CompletedWeek,
    KeyWorkoutSummary,
    WeekFeedback,
    WeekPlan,
    WeekSummary,
    WorkoutStatus,
    WorkoutType,
)

FIRST_WEEK_CONTEXT = "This is the athlete's first week of training. No prior history."

DETAILED_WEEKS = 2
MAX_KEY_WORKOUTS = 3
RECURRING_ISSUE_MIN_WEEKS = 2

# Feedback form sentinel meaning "nothing to report"
NO_ISSUE_TAGS = frozenset({"none", ""})


def create_week_summary(week: WeekPlan, feedback: WeekFeedback) -> WeekSummary:
    """
    Build the compact statistics of a finished week.

    Args:
        week: The week being archived
        feedback: Athlete's end-of-week feedback

    Returns:
        WeekSummary with planned vs. completed hours, completion rate and up to
        three key workouts (longest non-rest, non-strength sessions)
    """
    completed = [w for w in week.workouts if w.status == WorkoutStatus.COMPLETED]
    trainable = [w for w in week.workouts if not w.is_rest]

    completed_minutes = sum(
        w.actual_data.duration if w.actual_data else w.duration for w in completed
    )
    completion_rate = (
        round_half_up(len(completed) / len(trainable) * 100) if trainable else 0
    )

    key_candidates = [
        w
        for w in week.workouts
        if w.type not in (WorkoutType.REST, WorkoutType.STRENGTH)
    ]
    key_candidates.sort(key=lambda w: w.duration, reverse=True)
    key_workouts = [
        KeyWorkoutSummary(
            name=w.name,
            type=w.type,
            completed=w.status == WorkoutStatus.COMPLETED,
            notes=w.actual_data.notes if w.actual_data else None,
        )
        for w in key_candidates[:MAX_KEY_WORKOUTS]
    ]

    return WeekSummary(
        week_number=week.week_number,
        phase=week.phase,
        theme=week.theme,
        planned_hours=week.total_planned_hours,
        completed_hours=round(completed_minutes / 60, 1),
        completion_rate=min(completion_rate, 100),
        key_workouts=key_workouts,
        feedback=feedback,
        is_fallback=week.is_fallback,
    )


def archive_week(week: WeekPlan, summary: WeekSummary) -> CompletedWeek:
    """Freeze a week and its summary into a history record."""
    return CompletedWeek(
        week_number=week.week_number,
        start_date=week.start_date,
        end_date=week.end_date,
        phase=week.phase,
        theme=week.theme,
        focus=week.focus,
        workouts=[w.model_copy(deep=True) for w in week.workouts],
        summary=summary,
    )


class HistoryCompressor:
    """
    Renders training history as prompt context.

    Output size is bounded: at most `detailed_weeks` per-week lines plus a
    fixed-size aggregate block, however long the history grows.
    """

    def __init__(self, detailed_weeks: int = DETAILED_WEEKS):
        self.detailed_weeks = detailed_weeks

    def compress(self, completed_weeks: List[CompletedWeek]) -> str:
        """
        Build the history block.

        Args:
            completed_weeks: Archived weeks, oldest first

        Returns:
            Multi-line text, or the first-week sentinel when history is empty
        """
        if not completed_weeks:
            return FIRST_WEEK_CONTEXT

        recent = completed_weeks[-self.detailed_weeks:]
        older = completed_weeks[: -self.detailed_weeks] if len(completed_weeks) > self.detailed_weeks else []

        parts = ["RECENT WEEKS (detailed):"]
        parts.extend(self._describe_week(week) for week in recent)

        if older:
            parts.append("")
            parts.extend(self._aggregate(older))

        return "\n".join(parts)

    def _describe_week(self, week: CompletedWeek) -> str:
        summary = week.summary
        feedback = summary.feedback

        key_sessions = ", ".join(
            f"{k.name} {'✓' if k.completed else '✗'}" + (f" ({k.notes})" if k.notes else "")
            for k in summary.key_workouts
        ) or "none"

        line = (
            f"- Week {week.week_number} ({week.phase or 'unspecified phase'}): "
            f"{summary.completed_hours:.1f}h of {summary.planned_hours:.1f}h "
            f"({summary.completion_rate}% completion). "
            f"Key sessions: {key_sessions}. "
            f"Feeling: {feedback.overall_feeling.value}. "
        )
        issues = _issue_tags(feedback)
        if issues:
            line += f"Issues: {', '.join(issues)}. "
        if feedback.notes:
            line += f'Notes: "{feedback.notes}"'
        if summary.is_fallback:
            line += " [placeholder week, not personalised]"
        return line.rstrip()

    def _aggregate(self, older: List[CompletedWeek]) -> List[str]:
        count = len(older)
        total_hours = sum(w.summary.completed_hours for w in older)
        avg_hours = total_hours / count
        avg_completion = sum(w.summary.completion_rate for w in older) / count

        # consecutive duplicates collapse, a phase revisited later shows again
        phases: List[str] = []
        for week in older:
            phase = week.phase or "unspecified"
            if not phases or phases[-1] != phase:
                phases.append(phase)

        issue_weeks: Dict[str, int] = {}
        for week in older:
            for issue in set(_issue_tags(week.summary.feedback)):
                issue_weeks[issue] = issue_weeks.get(issue, 0) + 1
        first_seen = [
            issue for week in older for issue in _issue_tags(week.summary.feedback)
        ]
        recurring = [
            issue
            for issue in dict.fromkeys(first_seen)
            if issue_weeks[issue] >= RECURRING_ISSUE_MIN_WEEKS
        ]

        lines = [
            f"TRAINING HISTORY (weeks {older[0].week_number}-{older[-1].week_number}):",
            f"- Total: {total_hours:.1f}h over {count} weeks (avg {avg_hours:.1f}h/week)",
            f"- Average completion: {avg_completion:.0f}%",
            f"- Phases completed: {' → '.join(phases)}",
        ]
        if recurring:
            lines.append(f"- Recurring issues to monitor: {', '.join(recurring)}")
        return lines


def _issue_tags(feedback: WeekFeedback) -> List[str]:
    return [
        issue.strip()
        for issue in feedback.physical_issues
        if issue.strip().lower() not in NO_ISSUE_TAGS
    ]
