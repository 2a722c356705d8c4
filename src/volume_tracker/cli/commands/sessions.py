"""Session commands: log, log-nsuns, history, delete-entry, steps."""

from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.errors import TrackerError
from ...core.models import EnduranceEntry, HistoryEntry, MobilityEntry, StrengthEntry
from ...core.strength import best_one_rep_max, nsuns_session_entries, progress_one_rep_max
from ...io.serializers import parse_amrap, parse_datetime, validate_date
from .. import views
from ..app import StorePathOption, app, get_store, load_state_or_exit


def _parse_when(value: str | None) -> datetime:
    return parse_datetime(value) if value else datetime.now()


@app.command()
def log(
    exercise_id: Annotated[str, typer.Argument(help="Exercise id (or unique prefix)")],
    sets: Annotated[
        Optional[float],
        typer.Option("--sets", "-s", help="Sets performed (strength, nsuns, mobility)"),
    ] = None,
    reps: Annotated[Optional[float], typer.Option("--reps", "-r", help="Reps per set")] = None,
    weight: Annotated[Optional[float], typer.Option("--weight", "-w", help="Load in kg")] = None,
    distance: Annotated[
        Optional[float],
        typer.Option("--distance", "-d", help="Distance in km (endurance)"),
    ] = None,
    time: Annotated[Optional[float], typer.Option("--time", "-t", help="Duration in minutes")] = None,
    heart_rate: Annotated[
        Optional[int],
        typer.Option("--hr", help="Average heart rate (endurance)"),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="When it was done: YYYY-MM-DD or ISO timestamp (default: now)"),
    ] = None,
    notes: Annotated[str, typer.Option("--notes", help="Free text")] = "",
    store_path: StorePathOption = None,
) -> None:
    """
    Log a completed session for an exercise.
    """
    store = get_store(store_path)
    state = load_state_or_exit(store)

    try:
        exercise = state.find_exercise(exercise_id)
        when = _parse_when(date)
    except TrackerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if exercise.entry_category == "endurance" and distance is None:
        views.print_error(f"{exercise.name} is an endurance exercise: pass --distance")
        raise typer.Exit(1)
    if exercise.entry_category != "endurance" and sets is None:
        views.print_error(f"{exercise.name} is a {exercise.category} exercise: pass --sets")
        raise typer.Exit(1)

    entry: HistoryEntry
    try:
        if exercise.entry_category == "endurance":
            entry = EnduranceEntry(
                date=when, distance=distance, time=time or 0.0,
                avg_heart_rate=heart_rate, notes=notes,
            )
        elif exercise.entry_category == "mobility":
            entry = MobilityEntry(date=when, sets=sets, notes=notes)
        else:
            entry = StrengthEntry(
                date=when, sets=sets, reps=reps or 0, weight=weight or 0.0, notes=notes,
            )
        store.add_entry(exercise.id, entry)
    except (TrackerError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    unit = "km" if exercise.category == "endurance" else "sets"
    views.print_success(f"Logged {entry.volume:g} {unit} of {exercise.name}")


@app.command("log-nsuns")
def log_nsuns(
    exercise_id: Annotated[str, typer.Argument(help="nSuns exercise id (or unique prefix)")],
    amrap: Annotated[
        Optional[list[str]],
        typer.Option("--amrap", "-a", help="AMRAP result as SET=REPS, 1-based (repeatable)"),
    ] = None,
    progress: Annotated[
        bool,
        typer.Option("--progress", help="Raise the 1RM by 2 kg after this session"),
    ] = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Log a full nSuns workout, one entry per prescribed set.
    """
    store = get_store(store_path)
    state = load_state_or_exit(store)

    try:
        exercise = state.find_exercise(exercise_id)
        amrap_reps = dict(parse_amrap(a) for a in amrap or [])
        entries = nsuns_session_entries(exercise, amrap_reps)
    except (TrackerError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not entries:
        views.print_error(f"{exercise.name} has no nSuns sets defined")
        raise typer.Exit(1)

    store.add_entries(exercise.id, entries)
    for entry in entries:
        views.console.print(f"  {entry.reps:g} x {entry.weight:g} kg  [dim]{entry.notes}[/dim]")
    views.print_success(f"Logged {len(entries)} sets of {exercise.name}")

    if progress:
        updated = store.update_exercise(progress_one_rep_max(exercise))
        views.print_info(f"1RM raised to {updated.one_rep_max:g} kg")


@app.command()
def history(
    exercise_id: Annotated[str, typer.Argument(help="Exercise id (or unique prefix)")],
    store_path: StorePathOption = None,
) -> None:
    """
    Show an exercise's logged entries.
    """
    store = get_store(store_path)
    state = load_state_or_exit(store)

    try:
        exercise = state.find_exercise(exercise_id)
    except TrackerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    entries = state.history.get(exercise.id, [])
    views.print_history(exercise, entries)

    if exercise.entry_category == "strength" and entries:
        estimate = best_one_rep_max(entries, state.settings.one_rep_max_formula)  # type: ignore[arg-type]
        if estimate > 0:
            views.print_info(
                f"Best estimated 1RM ({state.settings.one_rep_max_formula}): {estimate} kg"
            )


@app.command("delete-entry")
def delete_entry(
    exercise_id: Annotated[str, typer.Argument(help="Exercise id (or unique prefix)")],
    entry_id: Annotated[str, typer.Argument(help="Entry id (or unique prefix)")],
    store_path: StorePathOption = None,
) -> None:
    """
    Remove one history entry.
    """
    store = get_store(store_path)

    try:
        removed = store.delete_entry(exercise_id, entry_id)
    except (FileNotFoundError, TrackerError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted entry {removed.id[:8]} from {removed.date:%Y-%m-%d}")


@app.command()
def steps(
    count: Annotated[int, typer.Option("--count", "-n", help="Steps walked that day")],
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Day as YYYY-MM-DD (default: today)"),
    ] = None,
    store_path: StorePathOption = None,
) -> None:
    """
    Record a daily step count from a health app or pedometer.
    """
    store = get_store(store_path)

    try:
        day = validate_date(date) if date else datetime.now().date()
        store.record_steps(day, count)
    except (FileNotFoundError, TrackerError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Recorded {count} steps on {day.isoformat()}")
