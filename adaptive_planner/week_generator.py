"""
One generation step: prompt, request, repair and parse.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from adaptive_planner.errors import ResponseParseError
from adaptive_planner.generation_client import GenerationClient
from adaptive_planner.phases import phase_for
from adaptive_planner.plan_schemas import CompletedWeek, WeekPlan
from adaptive_planner.prompts import PromptBuilder
from adaptive_planner.response_parser import ResponseParser
from adaptive_planner.schemas import OnboardingData

logger = logging.getLogger(__name__)


@dataclass
class GeneratedWeek:
    """A freshly generated week plus how it was obtained."""

    week: WeekPlan
    truncated: bool = False
    attempts: int = 1


class WeekGenerator:
    """
    Produces the next week from the generation API.

    Unusable content (ResponseParseError) triggers a fresh request, up to
    `parse_attempts` requests in total. Transport and configuration errors
    are not retried here; the client has its own retry policy.
    """

    def __init__(
        self,
        client: GenerationClient,
        prompt_builder: Optional[PromptBuilder] = None,
        parser: Optional[ResponseParser] = None,
        parse_attempts: int = 2,
    ):
        self.client = client
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.parser = parser or ResponseParser()
        self.parse_attempts = max(1, parse_attempts)

    async def generate(
        self,
        onboarding: OnboardingData,
        week_number: int,
        total_weeks: int,
        week_start: date,
        completed_weeks: List[CompletedWeek],
        constraints: Optional[str] = None,
    ) -> GeneratedWeek:
        """
        Generate week `week_number`.

        Raises:
            ConfigurationError: No API credential
            TransportError: The API could not be reached
            ResponseParseError: Every attempt returned unusable content
        """
        prompt = self.prompt_builder.build_week_prompt(
            onboarding, week_number, total_weeks, completed_weeks, constraints
        )
        phase = phase_for(week_number, total_weeks).value
        logger.info(
            f"Generating week {week_number} of {total_weeks} "
            f"(phase {phase}, prompt {len(prompt)} chars)"
        )

        truncated = False
        last_error: Optional[ResponseParseError] = None
        for attempt in range(1, self.parse_attempts + 1):
            response = await self.client.complete(prompt)
            truncated = truncated or response.truncated
            try:
                week = self.parser.parse_week(
                    response.text, week_number, week_start, phase=phase
                )
            except ResponseParseError as exc:
                last_error = exc
                logger.warning(
                    f"Attempt {attempt}/{self.parse_attempts} for week {week_number} "
                    f"returned unusable content: {exc}"
                )
                continue
            return GeneratedWeek(week=week, truncated=truncated, attempts=attempt)

        if last_error is None:
            raise ResponseParseError(f"No response requested for week {week_number}")
        raise last_error
