"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of exercises, history and stats.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.ascii_plot import create_daily_load_chart, create_progress_bar
from ..core.catalog import CatalogEntry
from ..core.config import SCORE_FAIR, SCORE_GOOD
from ..core.listing import ExerciseGroup
from ..core.models import (
    EnduranceEntry,
    Exercise,
    HistoryEntry,
    MobilityEntry,
    StrengthEntry,
    sorted_entries,
)
from ..core.stats import STAT_CATEGORIES, IntervalStats
from ..core.suggestion import SuggestedWorkout
from ..core.templates import TemplateRecommendation

console = Console()
err_console = Console(stderr=True)


def _fmt_amount(value: float) -> str:
    return f"{value:g}"


def _unit(exercise: Exercise) -> str:
    return "km" if exercise.category == "endurance" else "sets"


def _remaining_style(remaining: float) -> str:
    return "green" if remaining <= 0 else "yellow"


def format_exercise_table(group: ExerciseGroup, title: str | None = None) -> Table:
    """
    Create a Rich table for one group of the exercise list.

    Args:
        group: Rows to display
        title: Table title (default: the group key)

    Returns:
        Rich Table object
    """
    table = Table(title=title if title is not None else (group.key or None))

    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Muscle group")
    table.add_column("Target", justify="right")
    table.add_column("Remaining", justify="right", style="bold")
    table.add_column("Priority", justify="right")

    for row in group.rows:
        e = row.exercise
        remaining = "done" if row.completed else _fmt_amount(row.remaining)
        table.add_row(
            e.id[:8],
            e.name,
            e.category,
            e.muscle_group,
            f"{_fmt_amount(e.target_volume)} {_unit(e)}",
            f"[{_remaining_style(row.remaining)}]{remaining}[/]",
            str(e.priority),
        )

    return table


def print_exercise_list(groups: list[ExerciseGroup], training_interval: int) -> None:
    if not groups:
        console.print("[yellow]No exercises to show.[/yellow]")
        return
    console.print(f"[dim]Remaining volume over the last {training_interval} day(s)[/dim]")
    for group in groups:
        console.print(format_exercise_table(group))


def _fmt_entry(entry: HistoryEntry) -> str:
    if isinstance(entry, StrengthEntry):
        weight = f" @ {entry.weight:g} kg" if entry.weight else ""
        return f"{_fmt_amount(entry.sets)} x {_fmt_amount(entry.reps)}{weight}"
    if isinstance(entry, EnduranceEntry):
        parts = [f"{entry.distance:g} km"]
        if entry.time:
            parts.append(f"{entry.time:g} min")
        if entry.avg_heart_rate:
            parts.append(f"{entry.avg_heart_rate} bpm")
        return ", ".join(parts)
    if isinstance(entry, MobilityEntry):
        return f"{_fmt_amount(entry.sets)} sets"
    return "-"


def print_history(exercise: Exercise, entries: list[HistoryEntry]) -> None:
    """
    Print an exercise's entries, newest first.

    Args:
        exercise: Owning exercise
        entries: Its history entries
    """
    if not entries:
        console.print(f"[yellow]No entries recorded for {exercise.name} yet.[/yellow]")
        return

    table = Table(title=f"{exercise.name} history")
    table.add_column("Entry", style="dim", no_wrap=True)
    table.add_column("Date", style="cyan")
    table.add_column("Performed")
    table.add_column("Volume", justify="right", style="bold")
    table.add_column("Notes")

    for entry in reversed(sorted_entries(entries)):
        table.add_row(
            entry.id[:8],
            entry.date.strftime("%Y-%m-%d %H:%M"),
            _fmt_entry(entry),
            _fmt_amount(entry.volume),
            entry.notes,
        )
    console.print(table)


def print_suggestion(workout: SuggestedWorkout) -> None:
    if workout.is_empty:
        console.print("[green]All caught up: nothing is owed this interval.[/green]")
        return

    console.print()
    console.print("[bold]Suggested workout[/bold]")
    for section in workout.sections:
        table = Table(title=section.title, title_justify="left")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Exercise", style="cyan")
        table.add_column("Muscle group")
        table.add_column("Do", justify="right", style="bold")
        table.add_column("Remaining", justify="right")
        for item in section.items:
            table.add_row(
                item.exercise.id[:8],
                item.exercise.name,
                item.exercise.muscle_group,
                f"{_fmt_amount(item.suggested_amount)} {item.unit}",
                _fmt_amount(item.remaining),
            )
        console.print(table)


def _score_style(score: int) -> str:
    if score >= SCORE_GOOD:
        return "green"
    if score >= SCORE_FAIR:
        return "yellow"
    return "red"


def print_stats(stats: IntervalStats, charts: bool = True) -> None:
    """
    Print the interval summary: completion per category and combined score.

    Args:
        stats: Result of compute_interval_stats
        charts: Also draw the daily load chart for categories with data
    """
    table = Table(title=f"Last {stats.training_interval} day(s)")
    table.add_column("Category", style="cyan")
    table.add_column("Target", justify="right")
    table.add_column("Actual", justify="right")
    table.add_column("Done", justify="right", style="bold")

    for category in STAT_CATEGORIES:
        c = stats.categories[category]
        table.add_row(
            category,
            f"{c.target_load:g}",
            f"{c.actual_load:g}",
            f"{c.percentage:.0f}%",
        )
    if stats.steps_percentage is not None:
        table.add_row("steps", "-", "-", f"{stats.steps_percentage:.0f}%")
    console.print(table)

    for category in STAT_CATEGORIES:
        console.print(create_progress_bar(f"{category:>9}", stats.categories[category].percentage))

    score = stats.combined_score
    console.print(f"\nCombined score: [bold {_score_style(score)}]{score}[/]/100")

    if charts:
        for category in STAT_CATEGORIES:
            c = stats.categories[category]
            if c.has_data:
                console.print()
                console.print(create_daily_load_chart(c))


def print_templates(recommendations: list[TemplateRecommendation]) -> None:
    table = Table(title="Workout templates")
    table.add_column("Template", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Muscle groups")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("")

    for rec in recommendations:
        t = rec.template
        table.add_row(t.name, t.category, ", ".join(t.muscle_groups), f"{rec.score:.1f}", rec.label)
    console.print(table)


def print_catalog(catalog: list[CatalogEntry]) -> None:
    table = Table(title="Exercise catalog")
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Muscle group")
    table.add_column("Description", style="dim")
    for entry in catalog:
        table.add_row(entry.name, entry.category, entry.muscle_group, entry.description)
    console.print(table)


def print_plan(exercises: list[Exercise]) -> None:
    table = Table(title="Plan by muscle group")
    table.add_column("Name", style="cyan")
    table.add_column("Muscle group")
    table.add_column("Priority", justify="right")
    table.add_column("Target", justify="right", style="bold")
    for e in exercises:
        table.add_row(e.name, e.muscle_group, str(e.priority), f"{_fmt_amount(e.target_volume)} {_unit(e)}")
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {escape(message)}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{escape(message)} \\[y/N]: ")
    return response.lower() in ("y", "yes")
