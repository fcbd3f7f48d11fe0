"""
Shared fixtures: onboarding data, canned generation responses, and an
engine wired to a scripted generation client.
"""

import json
from datetime import datetime
from pathlib import Path

import pytest

from adaptive_planner.fallback import FallbackWeekBuilder
from adaptive_planner.generation_client import GenerationResponse
from adaptive_planner.planner import TrainingPlanEngine
from adaptive_planner.response_parser import ResponseParser, WorkoutIdFactory
from adaptive_planner.schemas import OnboardingData
from adaptive_planner.store import PlanRepository
from adaptive_planner.week_generator import WeekGenerator

FIXTURES = Path(__file__).parent / "fixtures"

# Monday; the half-marathon fixture races exactly 12 weeks later
NOW = datetime(2026, 1, 5, 9, 0)


def _load(name):
    with open(FIXTURES / name) as f:
        return json.load(f)


class ScriptedClient:
    """
    Stand-in for GenerationClient.

    Each call consumes the next scripted item; the last item repeats once
    the script runs out. Items may be text, a GenerationResponse, an
    exception to raise, or a callable taking the prompt.
    """

    def __init__(self, *items):
        self.items = list(items)
        self.prompts = []

    async def complete(self, prompt):
        self.prompts.append(prompt)
        item = self.items.pop(0) if len(self.items) > 1 else self.items[0]
        if callable(item) and not isinstance(item, type):
            item = item(prompt)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return GenerationResponse(text=item, stop_reason="end_turn")
        return item

    @property
    def calls(self):
        return len(self.prompts)


@pytest.fixture
def onboarding():
    """Half-marathon athlete, LTHR 172, race 12 weeks after NOW."""
    return OnboardingData(**_load("onboarding_half_marathon.json"))


@pytest.fixture
def triathlon_onboarding():
    """70.3 athlete who is still learning to swim."""
    return OnboardingData(**_load("onboarding_triathlon.json"))


@pytest.fixture
def week_payload():
    """Parsed JSON of a realistic generated week."""
    return _load("generated_week.json")


@pytest.fixture
def week_text(week_payload):
    """Raw text of a realistic generated week."""
    return json.dumps(week_payload)


@pytest.fixture
def scripted_client():
    """Factory for scripted generation clients."""
    return ScriptedClient


@pytest.fixture
def make_engine():
    """Factory for engines backed by an in-memory repository and fixed clock."""

    def _make(client, fallback_enabled=True, repository=None, clock=lambda: NOW):
        ids = WorkoutIdFactory()
        generator = WeekGenerator(
            client, parser=ResponseParser(id_factory=ids), parse_attempts=2
        )
        return TrainingPlanEngine(
            repository or PlanRepository.in_memory(),
            generator,
            fallback=FallbackWeekBuilder(id_factory=ids),
            fallback_enabled=fallback_enabled,
            clock=clock,
        )

    return _make


@pytest.fixture
def now():
    """The fixed clock time used by engines built with make_engine."""
    return NOW
