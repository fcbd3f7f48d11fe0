"""
Tests for the single-week generation step.
"""

from datetime import date

import pytest

from adaptive_planner.errors import ConfigurationError, ResponseParseError, TransportError
from adaptive_planner.generation_client import GenerationResponse
from adaptive_planner.week_generator import WeekGenerator

WEEK_START = date(2026, 1, 5)
NO_WORKOUTS = '{"theme": "Missing workouts"}'


def _generate(generator, onboarding, week_number=1, total_weeks=12, **kwargs):
    return generator.generate(onboarding, week_number, total_weeks, WEEK_START, [], **kwargs)


async def test_generates_week(scripted_client, onboarding, week_text):
    """Test a successful first-attempt generation."""
    client = scripted_client(week_text)
    result = await _generate(WeekGenerator(client), onboarding)

    assert client.calls == 1
    assert result.attempts == 1
    assert result.truncated is False
    assert result.week.week_number == 1
    assert result.week.phase == "Base"
    assert len(result.week.workouts) == 7
    assert "WEEK 1 of 12" in client.prompts[0]


async def test_unusable_content_is_requested_again(scripted_client, onboarding, week_text):
    """Test that a parse failure triggers one more request."""
    client = scripted_client(NO_WORKOUTS, week_text)
    result = await _generate(WeekGenerator(client, parse_attempts=2), onboarding)

    assert client.calls == 2
    assert result.attempts == 2
    assert client.prompts[0] == client.prompts[1]


async def test_parse_attempts_are_bounded(scripted_client, onboarding):
    """Test that the last parse error surfaces after all attempts."""
    client = scripted_client(NO_WORKOUTS)
    with pytest.raises(ResponseParseError):
        await _generate(WeekGenerator(client, parse_attempts=3), onboarding)
    assert client.calls == 3


async def test_transport_errors_are_not_retried_here(scripted_client, onboarding):
    """Test that transport failures propagate immediately."""
    client = scripted_client(TransportError("down", status_code=503))
    with pytest.raises(TransportError):
        await _generate(WeekGenerator(client), onboarding)
    assert client.calls == 1


async def test_configuration_error_propagates(scripted_client, onboarding):
    client = scripted_client(ConfigurationError("no key"))
    with pytest.raises(ConfigurationError):
        await _generate(WeekGenerator(client), onboarding)


async def test_truncated_response_is_repaired(scripted_client, onboarding, week_text):
    """Test that a cut-off response still yields a week and is flagged."""
    cut = week_text[: week_text.index('{"dayOfWeek": "Tuesday"')]
    client = scripted_client(GenerationResponse(text=cut, stop_reason="max_tokens"))
    result = await _generate(WeekGenerator(client), onboarding)

    assert result.truncated is True
    assert len(result.week.workouts) >= 1
    assert result.week.workouts[0].name == "Easy Aerobic Run"


async def test_constraints_reach_the_prompt(scripted_client, onboarding, week_text):
    client = scripted_client(week_text)
    await _generate(WeekGenerator(client), onboarding, constraints="traveling Thursday")
    assert 'Athlete constraint: "traveling Thursday"' in client.prompts[0]


async def test_minimum_one_attempt(scripted_client, onboarding, week_text):
    client = scripted_client(week_text)
    generator = WeekGenerator(client, parse_attempts=0)
    assert generator.parse_attempts == 1
    await _generate(generator, onboarding)
    assert client.calls == 1


async def test_zero_attempts_raise_parse_error(scripted_client, onboarding, week_text):
    client = scripted_client(week_text)
    generator = WeekGenerator(client)
    generator.parse_attempts = 0
    with pytest.raises(ResponseParseError, match="week 1"):
        await _generate(generator, onboarding)
    assert client.calls == 0
