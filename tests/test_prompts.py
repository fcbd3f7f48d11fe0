"""
Tests for generation prompt construction.

Covers:
- Athlete, zone, goal and availability sections
- Phase and recovery context
- Fatigue, issue and constraint carry-over from last week
- Triathlon discipline block
- Output schema contract shared with the parser
"""

from datetime import date

import pytest

from adaptive_planner.history import FIRST_WEEK_CONTEXT, archive_week, create_week_summary
from adaptive_planner.plan_schemas import WeekFeedback, WeekFeeling
from adaptive_planner.prompts import PromptBuilder
from adaptive_planner.response_parser import ALLOWED_WORKOUT_TYPES, ResponseParser
from adaptive_planner.schemas import WEEKDAYS


@pytest.fixture
def builder():
    return PromptBuilder()


def _history(week_payload_text, feeling, issues=None):
    week = ResponseParser().parse_week(week_payload_text, 1, date(2026, 1, 5), phase="Base")
    feedback = WeekFeedback(overall_feeling=feeling, physical_issues=issues or [])
    return [archive_week(week, create_week_summary(week, feedback))]


def test_first_week_prompt(builder, onboarding):
    """Test the main sections of a week-1 running prompt."""
    prompt = builder.build_week_prompt(onboarding, 1, 12, [])

    assert "expert running coach" in prompt
    assert "- Name: Alex" in prompt
    assert "- LTHR: 172bpm" in prompt
    assert "- Threshold Pace: 4:45/km" in prompt
    assert "- Zone 4 Threshold: 150-160bpm" in prompt
    assert "- Race: City Half Marathon (half-marathon)" in prompt
    assert "- Target time: 1:39:00" in prompt
    assert "- Weeks until race: 11" in prompt
    assert "- Currently generating: WEEK 1 of 12" in prompt
    assert "- Training phase: Base" in prompt
    assert FIRST_WEEK_CONTEXT in prompt
    assert "RECOVERY/DELOAD" not in prompt
    assert "WORKOUT DISTRIBUTION FOR TRIATHLON" not in prompt
    assert "Focus on running with supporting strength work" in prompt


def test_availability_section(builder, onboarding):
    """Test per-day availability rendering."""
    prompt = builder.build_week_prompt(onboarding, 1, 12, [])
    assert "- Friday: REST DAY" in prompt
    assert "- Saturday: Available (morning, max 2h) - LONG SESSION DAY" in prompt
    assert "- Sunday: Available (morning, midday, max 60min)" in prompt
    assert "- Weekly hours target: 6-8h" in prompt


def test_recovery_week_prompt(builder, onboarding):
    """Test that week 4 is announced as a deload week."""
    prompt = builder.build_week_prompt(onboarding, 4, 12, [])
    assert "RECOVERY/DELOAD WEEK" in prompt
    assert "- Recovery week: shorter sessions, lower intensity" in prompt


def test_fatigue_and_issues_carry_over(builder, onboarding, week_text):
    """Test that last week's fatigue and issues reach the prompt."""
    history = _history(week_text, WeekFeeling.STRUGGLING, ["knee-pain", "none"])
    prompt = builder.build_week_prompt(onboarding, 2, 12, history)

    assert "Athlete reported fatigue last week" in prompt
    assert "- Physical issues reported: knee-pain." in prompt
    assert "RECENT WEEKS (detailed):" in prompt


def test_no_fatigue_instruction_when_feeling_good(builder, onboarding, week_text):
    """Test that a good week adds no load-reduction instruction."""
    history = _history(week_text, WeekFeeling.GOOD)
    prompt = builder.build_week_prompt(onboarding, 2, 12, history)
    assert "fatigue last week" not in prompt
    assert "Physical issues reported" not in prompt


def test_constraints_are_included(builder, onboarding):
    """Test that free-text constraints are passed through."""
    prompt = builder.build_week_prompt(onboarding, 2, 12, [], constraints="traveling Thursday")
    assert 'Athlete constraint: "traveling Thursday"' in prompt


def test_triathlon_prompt(builder, triathlon_onboarding):
    """Test the triathlon discipline-balancing block."""
    prompt = builder.build_week_prompt(triathlon_onboarding, 1, 23, [])
    assert "expert triathlon coach" in prompt
    assert "WORKOUT DISTRIBUTION FOR TRIATHLON" in prompt
    assert 'swim level is "learning"' in prompt
    assert "- FTP: 230W" in prompt
    assert "MANDATORY: include exactly 2 swim, 2 bike and 2 run sessions" in prompt
    assert "- Monday: REST DAY" in prompt


def test_schema_contract_matches_parser(builder, onboarding):
    """Test that the prompt names every type and day the parser accepts."""
    prompt = builder.build_week_prompt(onboarding, 3, 12, [])
    for workout_type in ALLOWED_WORKOUT_TYPES:
        assert f'"{workout_type}"' in prompt
    for day in WEEKDAYS:
        assert f'"{day.value}"' in prompt
    for key in ("weekNumber", "dayOfWeek", "duration", "distance", "coachingTips", "workouts"):
        assert f'"{key}"' in prompt
    assert '"weekNumber": 3' in prompt
    assert "NO trailing commas" in prompt
    assert "duration in minutes" in prompt
    assert "distance in km" in prompt
