"""
Tests for the command-line interface.
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from adaptive_planner import cli
from adaptive_planner.config import get_settings

FIXTURES = Path(__file__).parent / "fixtures"

runner = CliRunner()


@pytest.fixture
def engine(make_engine, scripted_client, week_text, monkeypatch):
    """Engine shared by every command of one test."""
    engine = make_engine(scripted_client(week_text))
    monkeypatch.setattr(cli, "_engine", lambda: engine)
    return engine


def test_zones():
    result = runner.invoke(cli.app, ["zones", "172"])
    assert result.exit_code == 0
    assert "Heart-rate zones (LTHR 172)" in result.output
    assert "117-126bpm" in result.output


def test_zones_rejects_invalid_lthr():
    result = runner.invoke(cli.app, ["zones", "0"])
    assert result.exit_code == 1
    assert "LTHR must be positive" in result.output


def test_phase():
    result = runner.invoke(cli.app, ["phase", "4", "12"])
    assert result.exit_code == 0
    assert "Week 4 of 12: Build 1 (recovery week)" in result.output


def test_phase_beyond_plan():
    result = runner.invoke(cli.app, ["phase", "13", "12"])
    assert result.exit_code == 1


def test_show_without_plan(tmp_path, monkeypatch):
    """Test the real wiring against an empty database."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    get_settings.cache_clear()
    try:
        result = runner.invoke(cli.app, ["show"])
    finally:
        get_settings.cache_clear()
    assert result.exit_code == 1
    assert "No training plan exists" in result.output


def test_init_rejects_bad_onboarding(tmp_path, engine):
    bad = tmp_path / "onboarding.json"
    bad.write_text('{"profile": {"first_name": "Alex"}}')
    result = runner.invoke(cli.app, ["init", str(bad)])
    assert result.exit_code == 1
    assert "Failed to load onboarding data" in result.output
    assert engine.plan is None


def test_plan_lifecycle(engine):
    """Test init, show, update, next-week and reset against one engine."""
    result = runner.invoke(cli.app, ["init", str(FIXTURES / "onboarding_half_marathon.json")])
    assert result.exit_code == 0, result.output
    assert "Created 12-week plan" in result.output
    assert "Week 1: Aerobic Base Building" in result.output

    result = runner.invoke(cli.app, ["show"])
    assert result.exit_code == 0
    assert "City Half Marathon" in result.output

    result = runner.invoke(cli.app, ["today"])
    assert "Easy Aerobic Run" in result.output

    workout_id = engine.plan.current_week.workouts[0].id
    result = runner.invoke(cli.app, ["update", workout_id, "completed", "--duration", "42"])
    assert result.exit_code == 0
    assert "completed" in result.output
    assert engine.plan.current_week.workouts[0].actual_data.duration == 42

    result = runner.invoke(cli.app, ["next-week", "--feeling", "good", "--notes", "solid"])
    assert result.exit_code == 0, result.output
    assert "Week 2" in result.output
    assert engine.plan.current_week_number == 2

    result = runner.invoke(cli.app, ["reset", "--yes"])
    assert result.exit_code == 0
    assert engine.plan is None


def test_update_unknown_workout(engine):
    runner.invoke(cli.app, ["init", str(FIXTURES / "onboarding_half_marathon.json")])
    result = runner.invoke(cli.app, ["update", "nope", "skipped"])
    assert result.exit_code == 1
    assert "not found" in result.output
