#!/usr/bin/env python3
"""
Quick start script to demonstrate the Adaptive Training Planner.

This script shows the complete workflow:
1. Load athlete onboarding data
2. Derive heart-rate zones and the phase map of the plan
3. Build the generation prompt for week 1
4. Generate week 1 (live when ANTHROPIC_API_KEY is set, placeholder otherwise)
5. Archive the week with feedback and show the history fed to week 2
"""

import asyncio
import json
from datetime import date
from pathlib import Path

# Rich console for pretty output
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adaptive_planner.config import get_settings
from adaptive_planner.fallback import FallbackWeekBuilder
from adaptive_planner.history import HistoryCompressor, archive_week, create_week_summary
from adaptive_planner.phases import hr_zones, is_recovery_week, monday_of, phase_for, total_weeks_until
from adaptive_planner.plan_schemas import WeekFeedback, WeekFeeling, WorkoutStatus
from adaptive_planner.planner import TrainingPlanEngine
from adaptive_planner.prompts import PromptBuilder
from adaptive_planner.schemas import OnboardingData
from adaptive_planner.store import PlanRepository

console = Console()


def print_header(title: str):
    """Print a formatted header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))


def main():
    """Run the complete demonstration workflow."""
    console.print("\n[bold magenta]🏊 🚴 🏃 Adaptive Training Planner[/bold magenta]")
    console.print("[dim]Demonstration of complete workflow[/dim]\n")

    # ===== STEP 1: Load Onboarding Data =====
    print_header("Step 1: Load Onboarding Data")

    onboarding_path = Path("tests/fixtures/onboarding_half_marathon.json")
    with open(onboarding_path) as f:
        onboarding = OnboardingData(**json.load(f))

    today = date.today()
    total_weeks = total_weeks_until(onboarding.goal.race_date, today)

    console.print(f"✓ Loaded: [green]{onboarding.profile.first_name}[/green]")
    console.print(f"  LTHR: {onboarding.fitness.lthr} bpm, threshold pace {onboarding.fitness.threshold_pace}/km")
    console.print(f"  Race: {onboarding.goal.race_name} ({onboarding.goal.race_type.value}) on {onboarding.goal.race_date}")
    console.print(f"  Plan length: {total_weeks} weeks")

    # ===== STEP 2: Zones and Phases =====
    print_header("Step 2: Zones and Phases")

    table = Table(title="Heart-Rate Zones", box=box.ROUNDED)
    table.add_column("Zone", style="cyan")
    table.add_column("Name")
    table.add_column("Range", justify="right", style="yellow")
    for index, zone in enumerate(hr_zones(onboarding.fitness.lthr).as_list(), start=1):
        table.add_row(f"Z{index}", zone.name, zone.label())
    console.print(table)

    console.print("\n[bold]Phase Map:[/bold]")
    for week in range(1, total_weeks + 1):
        marker = " (recovery)" if is_recovery_week(week) else ""
        console.print(f"  Week {week}: {phase_for(week, total_weeks).value}{marker}")

    # ===== STEP 3: Build Prompt =====
    print_header("Step 3: Build Week 1 Prompt")

    prompt = PromptBuilder().build_week_prompt(onboarding, 1, total_weeks, [])
    console.print(f"✓ Prompt built: {len(prompt)} characters")
    for line in prompt.splitlines()[:8]:
        console.print(f"  [dim]{line}[/dim]")

    # ===== STEP 4: Generate Week 1 =====
    print_header("Step 4: Generate Week 1")

    if get_settings().ANTHROPIC_API_KEY:
        engine = TrainingPlanEngine.from_settings(repository=PlanRepository.in_memory())
        outcome = asyncio.run(engine.initialize_plan(onboarding))
        week = outcome.week
        if outcome.used_fallback:
            console.print(f"[yellow]⚠ Generation failed ({outcome.error}); using fallback week[/yellow]")
    else:
        console.print("[yellow]ANTHROPIC_API_KEY not set: building a placeholder week instead[/yellow]")
        week = FallbackWeekBuilder().build_week(onboarding, 1, total_weeks, monday_of(today))

    console.print(f"✓ Week {week.week_number}: [green]{week.theme}[/green] ({week.total_planned_hours:.1f}h)")
    for workout in week.workouts:
        console.print(
            f"  {workout.scheduled_date.strftime('%a')}: {workout.name} "
            f"({workout.type.value}, {workout.duration}min)"
        )

    # ===== STEP 5: Archive With Feedback =====
    print_header("Step 5: Archive With Feedback")

    for workout in week.workouts[:3]:
        if not workout.is_rest:
            workout.status = WorkoutStatus.COMPLETED
    feedback = WeekFeedback(
        overall_feeling=WeekFeeling.TIRED,
        physical_issues=["tight calves"],
        notes="Long run felt heavy",
    )
    summary = create_week_summary(week, feedback)
    history = HistoryCompressor().compress([archive_week(week, summary)])

    console.print(f"  Completion: {summary.completion_rate}%")
    console.print(f"  Hours: {summary.completed_hours:.1f} of {summary.planned_hours:.1f}")
    console.print("\n[bold]History passed to week 2:[/bold]")
    console.print(f"  [dim]{history}[/dim]")

    # ===== COMPLETION =====
    console.print("\n")
    panel = Panel(
        "[green]✓[/green] Demonstration complete!\n\n"
        "The system successfully:\n"
        "  1. Sized the plan from the race date\n"
        "  2. Derived zones and the phase of every week\n"
        "  3. Built the week 1 generation prompt\n"
        "  4. Produced week 1\n"
        "  5. Summarised the week for the next prompt",
        title="[bold green]Success[/bold green]",
        border_style="green"
    )
    console.print(panel)

    console.print("\n[bold cyan]Next Steps:[/bold cyan]")
    console.print("  • Run CLI: adaptive-planner init tests/fixtures/onboarding_half_marathon.json")
    console.print("  • Serve the API: uvicorn adaptive_planner.api.main:app")
    console.print("  • Run tests: python3 -m pytest\n")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        console.print("\n[dim]Make sure you're in the repository root[/dim]")
        console.print("[dim]and have installed dependencies: pip install -e .[/dim]")
        raise
