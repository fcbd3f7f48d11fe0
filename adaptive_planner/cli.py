"""
Command-line interface for the adaptive planner.

Provides commands for:
- Creating a plan from onboarding JSON and advancing it week by week
- Viewing the current week, today's and upcoming workouts
- Recording workout outcomes
- Heart-rate zone and phase lookups
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adaptive_planner.config import configure_logging
from adaptive_planner.errors import PlannerError
from adaptive_planner.phases import hr_zones, is_recovery_week, phase_for
from adaptive_planner.plan_schemas import (
    ActualWorkoutData,
    TrainingPlan,
    WeekFeedback,
    WeekFeeling,
    WeekPlan,
    Workout,
    WorkoutStatus,
)
from adaptive_planner.planner import GenerationOutcome, TrainingPlanEngine
from adaptive_planner.schemas import OnboardingData

# Initialize Typer app and Rich console
app = typer.Typer(
    help="Adaptive Training Planner - week-by-week endurance plans that adapt to feedback"
)
console = Console()

STATUS_STYLES = {
    WorkoutStatus.PLANNED: "white",
    WorkoutStatus.COMPLETED: "green",
    WorkoutStatus.PARTIAL: "yellow",
    WorkoutStatus.SKIPPED: "red",
}


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    configure_logging(log_level)


def _engine() -> TrainingPlanEngine:
    return TrainingPlanEngine.from_settings()


def _fail(message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(1)


# ===== DISPLAY HELPER FUNCTIONS =====


def _workout_table(workouts: List[Workout], title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Date", style="cyan")
    table.add_column("Type")
    table.add_column("Workout")
    table.add_column("Duration", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Status")
    table.add_column("ID", style="dim")

    for workout in workouts:
        style = STATUS_STYLES[workout.status]
        table.add_row(
            workout.scheduled_date.strftime("%a %d %b"),
            workout.type.value,
            workout.name,
            f"{workout.duration}min" if workout.duration else "-",
            f"{workout.distance:g}km" if workout.distance else "-",
            f"[{style}]{workout.status.value}[/{style}]",
            workout.id,
        )
    return table


def _display_week(week: WeekPlan):
    """
    Display a week header and its workouts in date order.

    Args:
        week: WeekPlan to render
    """
    header = f"[bold]Week {week.week_number}: {week.theme}[/bold]\n"
    header += f"Phase: {week.phase or '-'} | Planned: {week.total_planned_hours:.1f}h"
    if week.is_recovery_week:
        header += " | [yellow]Recovery week[/yellow]"
    if week.focus:
        header += f"\nFocus: {week.focus}"
    border = "yellow" if week.is_fallback else "cyan"
    console.print(Panel(header, border_style=border, padding=(0, 2)))
    if week.is_fallback:
        console.print(
            "[yellow]This week is placeholder content; it was not personalised.[/yellow]"
        )
    ordered = sorted(week.workouts, key=lambda w: w.scheduled_date)
    console.print(_workout_table(ordered, f"{week.start_date} to {week.end_date}"))


def _display_outcome(outcome: GenerationOutcome):
    if outcome.plan_completed:
        console.print(
            f"\n[bold green]✓ Plan complete![/bold green] "
            f"All {outcome.plan.total_weeks} weeks archived. Good luck at "
            f"{outcome.plan.race_name}!"
        )
        return
    if outcome.used_fallback:
        console.print(
            f"[yellow]⚠ Generation failed ({outcome.error}); showing a fallback week.[/yellow]"
        )
    if outcome.truncated:
        console.print("[yellow]⚠ The generated response was truncated and repaired.[/yellow]")
    if outcome.week is not None:
        _display_week(outcome.week)


def _display_plan(engine: TrainingPlanEngine, plan: TrainingPlan):
    progress = engine.get_progress()
    console.print(
        f"\n[bold]{plan.race_name}[/bold] ({plan.race_type.value}) on {plan.race_date} | "
        f"{plan.total_weeks}-week plan"
    )
    console.print(
        f"Weeks completed: {progress.weeks_completed}/{progress.total_weeks} | "
        f"Workouts completed: {progress.completed_workouts}/{progress.total_workouts} "
        f"({progress.completion_percent}%)\n"
    )
    if plan.current_week is not None:
        _display_week(plan.current_week)
    elif plan.is_completed:
        console.print("[green]The plan is complete.[/green]")
    else:
        console.print(
            f"[yellow]Week {plan.current_week_number + 1} has not been generated yet. "
            f"Run 'next-week' to retry.[/yellow]"
        )


# ===== COMMANDS =====


@app.command()
def init(
    onboarding: Path = typer.Argument(..., help="Path to onboarding JSON file", exists=True),
):
    """
    Create a new training plan and generate week 1.

    Replaces any existing plan.
    """
    console.print("\n[bold cyan]🏊 🚴 🏃 Adaptive Training Planner[/bold cyan]\n")
    try:
        with open(onboarding, "r") as f:
            data = OnboardingData(**json.load(f))
    except (ValueError, ValidationError) as e:
        _fail(f"Failed to load onboarding data: {e}")

    console.print(f"✓ Loaded athlete: [green]{data.profile.first_name}[/green]")
    console.print(f"  Goal: {data.goal.race_name} ({data.goal.race_type.value}) on {data.goal.race_date}\n")

    engine = _engine()
    try:
        with console.status("Generating week 1..."):
            outcome = asyncio.run(engine.initialize_plan(data))
    except PlannerError as e:
        _fail(str(e))

    console.print(f"✓ Created [green]{outcome.plan.total_weeks}-week plan[/green]\n")
    _display_outcome(outcome)


@app.command("next-week")
def next_week(
    feeling: WeekFeeling = typer.Option(..., "--feeling", "-f", help="How the week felt overall"),
    issue: List[str] = typer.Option([], "--issue", "-i", help="Physical issue tag (repeatable)"),
    notes: str = typer.Option("", "--notes", "-n", help="Free-text notes on the week"),
    constraints: Optional[str] = typer.Option(
        None, "--constraints", "-c", help="Constraints for next week, e.g. 'traveling Thursday'"
    ),
):
    """
    Archive the current week with feedback and generate the next one.
    """
    feedback = WeekFeedback(
        overall_feeling=feeling,
        physical_issues=issue,
        notes=notes,
        next_week_constraints=constraints,
    )
    engine = _engine()
    try:
        with console.status("Generating next week..."):
            outcome = asyncio.run(engine.generate_next_week(feedback))
    except PlannerError as e:
        _fail(str(e))
    _display_outcome(outcome)


@app.command()
def show():
    """Show the plan summary and the current week."""
    engine = _engine()
    plan = engine.plan
    if plan is None:
        _fail("No training plan exists. Run 'init' first.")
    _display_plan(engine, plan)


@app.command()
def update(
    workout_id: str = typer.Argument(..., help="Workout ID (see 'show')"),
    status: WorkoutStatus = typer.Argument(..., help="New status"),
    duration: Optional[int] = typer.Option(None, "--duration", help="Actual duration (min)"),
    distance: Optional[float] = typer.Option(None, "--distance", help="Actual distance (km)"),
    avg_hr: Optional[int] = typer.Option(None, "--avg-hr", help="Average heart rate (bpm)"),
    feeling: int = typer.Option(3, "--feeling", min=1, max=5, help="Feeling 1 (awful) to 5 (great)"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Notes on the session"),
):
    """Record the outcome of a workout in the current week."""
    actual = None
    if duration is not None:
        actual = ActualWorkoutData(
            duration=duration, distance=distance, avg_hr=avg_hr, feeling=feeling, notes=notes
        )
    engine = _engine()
    try:
        workout = engine.update_workout_status(workout_id, status, actual)
    except PlannerError as e:
        _fail(str(e))
    style = STATUS_STYLES[workout.status]
    console.print(f"✓ {workout.name}: [{style}]{workout.status.value}[/{style}]")


@app.command()
def upcoming(
    limit: int = typer.Option(5, "--limit", "-l", min=1, help="Number of workouts"),
):
    """List the next non-rest workouts."""
    workouts = _engine().get_upcoming_workouts(limit=limit)
    if not workouts:
        console.print("[yellow]No upcoming workouts.[/yellow]")
        return
    console.print(_workout_table(workouts, "Upcoming workouts"))


@app.command()
def today():
    """Show today's workout in full."""
    workout = _engine().get_today_workout()
    if workout is None:
        console.print("[green]No workout today. Rest up![/green]")
        return
    body = f"[bold]{workout.name}[/bold] ({workout.type.value}, {workout.duration}min)\n"
    if workout.purpose:
        body += f"\n[italic]{workout.purpose}[/italic]\n"
    if workout.description:
        body += f"\n{workout.description}\n"
    for segment in workout.structure:
        body += f"\n• {segment.name} ({segment.duration}): {segment.description}"
    if workout.heart_rate_guidance:
        body += f"\n\n[bold]Heart rate:[/bold] {workout.heart_rate_guidance}"
    if workout.pace_guidance:
        body += f"\n[bold]Pace:[/bold] {workout.pace_guidance}"
    for tip in workout.coaching_tips:
        body += f"\n💡 {tip}"
    console.print(Panel(body, title="Today", border_style="green", padding=(1, 2)))


@app.command()
def zones(lthr: int = typer.Argument(..., help="Lactate threshold heart rate (bpm)")):
    """Show heart-rate zones for an LTHR."""
    try:
        result = hr_zones(lthr)
    except ValueError as e:
        _fail(str(e))
    table = Table(title=f"Heart-rate zones (LTHR {lthr})", box=box.ROUNDED)
    table.add_column("Zone", style="cyan")
    table.add_column("Name")
    table.add_column("Range", justify="right", style="yellow")
    for index, zone in enumerate(result.as_list(), start=1):
        table.add_row(f"Z{index}", zone.name, zone.label())
    console.print(table)


@app.command()
def phase(
    week: int = typer.Argument(..., min=1, help="Week number"),
    total: int = typer.Argument(..., min=1, max=52, help="Total plan weeks"),
):
    """Show the training phase of a week."""
    if week > total:
        _fail(f"Week {week} lies beyond a {total}-week plan")
    label = phase_for(week, total).value
    suffix = " (recovery week)" if is_recovery_week(week) else ""
    console.print(f"Week {week} of {total}: [bold]{label}[/bold]{suffix}")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete the plan and stored onboarding data."""
    if not yes and not typer.confirm("Delete the current plan and athlete data?"):
        raise typer.Exit(0)
    engine = _engine()
    try:
        engine.reset()
    except PlannerError as e:
        _fail(str(e))
    console.print("✓ Plan deleted")


if __name__ == "__main__":
    app()
