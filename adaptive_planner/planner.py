"""
Training plan lifecycle engine.

Sequences week generation across the life of a training block:
- initialize: size the plan from the race date and generate week 1
- advance: summarise and archive the current week, then generate the next
  one (or mark the plan complete after the last week)
- update workout status within the current week

All mutations for one athlete go through a single engine instance and are
serialized by an asyncio lock; a mutation attempted while a generation is
outstanding is rejected with PlanBusyError. Work is done on a copy of the
plan and committed to the repository only at defined points, so a cancelled
generation leaves the persisted plan untouched.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple

import httpx

from adaptive_planner import queries
from adaptive_planner.config import Settings, get_settings
from adaptive_planner.errors import GenerationError, PlanBusyError, PlanStateError, WorkoutNotFoundError
from adaptive_planner.fallback import FallbackWeekBuilder
from adaptive_planner.generation_client import GenerationClient
from adaptive_planner.history import archive_week, create_week_summary
from adaptive_planner.phases import monday_of, total_weeks_until
from adaptive_planner.plan_schemas import (
    ActualWorkoutData,
    CompletedWeek,
    TrainingPlan,
    WeekFeedback,
    WeekPlan,
    Workout,
    WorkoutStatus,
)
from adaptive_planner.prompts import PromptBuilder
from adaptive_planner.response_parser import ResponseParser, WorkoutIdFactory
from adaptive_planner.schemas import OnboardingData
from adaptive_planner.store import PlanRepository
from adaptive_planner.week_generator import WeekGenerator

logger = logging.getLogger(__name__)


@dataclass
class GenerationOutcome:
    """
    Result of a generation operation.

    `error` is set whenever the week is fallback content, so callers can
    disclose that it is not personalised.
    """

    plan: TrainingPlan
    week: Optional[WeekPlan] = None
    used_fallback: bool = False
    error: Optional[GenerationError] = None
    truncated: bool = False
    plan_completed: bool = False


def week_start_for(plan: TrainingPlan, week_number: int, today: date) -> date:
    """
    Monday on which week `week_number` starts.

    Weeks follow on from the plan's creation week, but never start before
    the current calendar week.
    """
    scheduled = plan.anchor_date + timedelta(weeks=week_number - 1)
    return max(scheduled, monday_of(today))


class TrainingPlanEngine:
    """
    Owns one athlete's training plan.

    Args:
        repository: Where the plan and onboarding snapshot are persisted
        generator: Produces weeks from the generation API
        fallback: Builds placeholder weeks when generation fails
        fallback_enabled: Substitute placeholder weeks instead of failing
        clock: Returns the current local time
    """

    def __init__(
        self,
        repository: PlanRepository,
        generator: WeekGenerator,
        fallback: Optional[FallbackWeekBuilder] = None,
        fallback_enabled: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.repository = repository
        self.generator = generator
        self.fallback = fallback or FallbackWeekBuilder()
        self.fallback_enabled = fallback_enabled
        self.clock = clock
        self._lock = asyncio.Lock()
        self._plan: Optional[TrainingPlan] = None
        self._loaded = False

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        repository: Optional[PlanRepository] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "TrainingPlanEngine":
        """Wire an engine from configuration."""
        settings = settings or get_settings()
        repository = repository or PlanRepository.from_database_url(settings.DATABASE_URL)
        id_factory = WorkoutIdFactory()
        generator = WeekGenerator(
            GenerationClient.from_settings(settings, transport=transport),
            prompt_builder=PromptBuilder(),
            parser=ResponseParser(id_factory=id_factory),
            parse_attempts=settings.PARSE_MAX_ATTEMPTS,
        )
        return cls(
            repository,
            generator,
            fallback=FallbackWeekBuilder(id_factory=id_factory),
            fallback_enabled=settings.FALLBACK_ENABLED,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def plan(self) -> Optional[TrainingPlan]:
        """The persisted plan, or None when none exists (or it is unreadable)."""
        if not self._loaded:
            self._plan = self.repository.load_plan()
            self._loaded = True
        return self._plan

    def _today(self) -> date:
        return self.clock().date()

    def _ensure_idle(self) -> None:
        if self._lock.locked():
            raise PlanBusyError("A plan generation is in progress; try again when it finishes")

    def _require_plan(self) -> TrainingPlan:
        plan = self.plan
        if plan is None:
            raise PlanStateError("No training plan exists; initialize one first")
        return plan

    def _commit(self, plan: TrainingPlan) -> None:
        plan.check_invariants()
        self.repository.save_plan(plan)
        self._plan = plan
        self._loaded = True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def initialize_plan(self, onboarding: OnboardingData) -> GenerationOutcome:
        """
        Create a plan and generate its first week.

        Any existing plan is replaced only once week 1 is available.

        Raises:
            PlanBusyError: Another generation is outstanding
            ConfigurationError: No API credential
            GenerationError: Generation failed and fallback is disabled
        """
        self._ensure_idle()
        async with self._lock:
            now = self.clock()
            total_weeks = total_weeks_until(onboarding.goal.race_date, now.date())
            week_start = monday_of(now.date())
            logger.info(
                f"Initializing {total_weeks}-week plan for {onboarding.goal.race_name}"
            )

            week, truncated, error = await self._produce_week(
                onboarding, 1, total_weeks, week_start, [], None
            )

            plan = TrainingPlan(
                id=f"plan-{uuid.uuid4().hex[:12]}",
                created_at=now,
                race_name=onboarding.goal.race_name,
                race_date=onboarding.goal.race_date,
                race_type=onboarding.goal.race_type,
                total_weeks=total_weeks,
                current_week_number=1,
                current_week=week,
                completed_weeks=[],
            )
            self.repository.save_onboarding(onboarding)
            self._commit(plan)
            return GenerationOutcome(
                plan=plan,
                week=week,
                used_fallback=error is not None,
                error=error,
                truncated=truncated,
            )

    async def generate_next_week(
        self,
        feedback: WeekFeedback,
        constraints: Optional[str] = None,
    ) -> GenerationOutcome:
        """
        Archive the current week with its feedback and generate the next one.

        On a plan left without a current week by an earlier failed attempt,
        only the generation step is retried and `feedback` is not used.

        Args:
            feedback: End-of-week athlete feedback
            constraints: Free-text constraints for the next week; defaults to
                `feedback.next_week_constraints`

        Raises:
            PlanBusyError: Another generation is outstanding
            PlanStateError: No plan, no athlete data, or the plan is complete
            ConfigurationError: No API credential
            GenerationError: Generation failed and fallback is disabled (the
                archived week is kept)
        """
        self._ensure_idle()
        async with self._lock:
            plan = self._require_plan()
            if plan.is_completed:
                raise PlanStateError("Training plan is already complete")
            onboarding = self.repository.load_onboarding()
            if onboarding is None:
                raise PlanStateError("No athlete data found; re-run onboarding")
            if constraints is None:
                constraints = feedback.next_week_constraints

            working = plan.model_copy(deep=True)
            if working.current_week is not None:
                summary = create_week_summary(working.current_week, feedback)
                working.completed_weeks.append(archive_week(working.current_week, summary))
                working.current_week = None
                logger.info(
                    f"Archived week {working.current_week_number} "
                    f"({summary.completion_rate}% completion)"
                )
                if working.current_week_number >= working.total_weeks:
                    working.current_week_number += 1
                    self._commit(working)
                    logger.info(f"Training plan {working.id} completed")
                    return GenerationOutcome(plan=working, plan_completed=True)
            else:
                logger.info(
                    f"Retrying generation of week {working.current_week_number + 1}; "
                    f"feedback already recorded"
                )

            next_number = working.current_week_number + 1
            week_start = week_start_for(working, next_number, self._today())
            try:
                week, truncated, error = await self._produce_week(
                    onboarding,
                    next_number,
                    working.total_weeks,
                    week_start,
                    working.completed_weeks,
                    constraints,
                )
            except GenerationError:
                self._commit(working)
                raise

            working.current_week = week
            working.current_week_number = next_number
            self._commit(working)
            return GenerationOutcome(
                plan=working,
                week=week,
                used_fallback=error is not None,
                error=error,
                truncated=truncated,
            )

    def update_workout_status(
        self,
        workout_id: str,
        status: WorkoutStatus,
        actual_data: Optional[ActualWorkoutData] = None,
    ) -> Workout:
        """
        Record what happened to a workout in the current week.

        Raises:
            PlanBusyError: A generation on this plan is outstanding
            PlanStateError: No plan or no current week
            WorkoutNotFoundError: The id is not in the current week
        """
        self._ensure_idle()
        plan = self._require_plan()
        if plan.current_week is None:
            raise PlanStateError("The plan has no current week to update")

        working = plan.model_copy(deep=True)
        workout = working.current_week.find_workout(workout_id)
        if workout is None:
            raise WorkoutNotFoundError(workout_id)
        workout.status = status
        workout.actual_data = actual_data
        self._commit(working)
        return workout

    def reset(self) -> None:
        """Delete the persisted plan and onboarding snapshot."""
        self._ensure_idle()
        self.repository.clear()
        self._plan = None
        self._loaded = True

    async def _produce_week(
        self,
        onboarding: OnboardingData,
        week_number: int,
        total_weeks: int,
        week_start: date,
        history: List[CompletedWeek],
        constraints: Optional[str],
    ) -> Tuple[WeekPlan, bool, Optional[GenerationError]]:
        try:
            generated = await self.generator.generate(
                onboarding, week_number, total_weeks, week_start, history, constraints
            )
        except GenerationError as exc:
            if not self.fallback_enabled:
                logger.error(f"Generation of week {week_number} failed: {exc}")
                raise
            logger.warning(
                f"Generation of week {week_number} failed ({exc}); using fallback content"
            )
            week = self.fallback.build_week(onboarding, week_number, total_weeks, week_start)
            return week, False, exc
        return generated.week, generated.truncated, None

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_workout_by_id(self, workout_id: str) -> Optional[Workout]:
        return queries.get_workout_by_id(self.plan, workout_id)

    def get_today_workout(self, today: Optional[date] = None) -> Optional[Workout]:
        return queries.get_today_workout(self.plan, today or self._today())

    def get_upcoming_workouts(
        self, limit: int = queries.DEFAULT_UPCOMING_LIMIT, today: Optional[date] = None
    ) -> List[Workout]:
        return queries.get_upcoming_workouts(self.plan, today or self._today(), limit)

    def get_workouts_for_date(self, day: date) -> List[Workout]:
        return queries.get_workouts_for_date(self.plan, day)

    def get_week_workouts(self, week_start: date) -> List[Workout]:
        return queries.get_week_workouts(self.plan, week_start)

    def get_progress(self) -> queries.PlanProgress:
        return queries.get_progress(self._require_plan())
