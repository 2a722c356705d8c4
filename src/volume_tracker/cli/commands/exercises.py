"""Exercise commands: init, add-exercise, delete-exercise, list, set-priority."""

import json
from typing import Annotated, Optional

import typer

from ...core.config import DEFAULT_PRIORITY, DEFAULT_TRAINING_INTERVAL
from ...core.engine.config_loader import load_tracker_config
from ...core.errors import TrackerError
from ...core.ledger import remaining_by_exercise
from ...core.listing import list_exercises
from ...core.models import CATEGORIES, Exercise, TrackerSettings
from ...io.serializers import exercise_to_dict, parse_nsuns_set
from .. import views
from ..app import JsonOption, StorePathOption, app, get_store, load_state_or_exit


@app.command()
def init(
    store_path: StorePathOption = None,
    interval: Annotated[
        int,
        typer.Option("--interval", "-i", help="Training interval in days (1-30)"),
    ] = DEFAULT_TRAINING_INTERVAL,
) -> None:
    """
    Create the tracker file.
    """
    store = get_store(store_path)

    if store.exists():
        views.print_info(f"Tracker already exists at {store.path}")
        return

    try:
        config = load_tracker_config()
        settings = TrackerSettings(training_interval=interval, volume_policy=config.volume_policy)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.init(settings, config.default_budgets)
    views.print_success(f"Created tracker at {store.path} ({interval}-day interval)")


@app.command("add-exercise")
def add_exercise(
    name: Annotated[str, typer.Option("--name", "-n", help="Exercise name")],
    category: Annotated[
        str,
        typer.Option("--category", "-c", help="strength, endurance, mobility or nsuns"),
    ],
    muscle_group: Annotated[
        str,
        typer.Option("--muscle-group", "-m", help="Muscle group, e.g. Legs"),
    ],
    weekly_sets: Annotated[
        float,
        typer.Option("--weekly-sets", "-s", help="Target volume per interval (sets; km for endurance)"),
    ] = 0,
    distance: Annotated[
        Optional[float],
        typer.Option("--distance", "-d", help="Endurance target distance per interval (km)"),
    ] = None,
    priority: Annotated[
        int,
        typer.Option("--priority", help="Priority 0-3 used when allocating group budgets"),
    ] = DEFAULT_PRIORITY,
    one_rep_max: Annotated[
        Optional[float],
        typer.Option("--one-rep-max", help="nSuns: current 1RM in kg"),
    ] = None,
    nsuns_sets: Annotated[
        Optional[list[str]],
        typer.Option("--set", help="nSuns: one set as REPSxPERCENT, '+' marks AMRAP (repeatable)"),
    ] = None,
    description: Annotated[str, typer.Option("--description", help="Free text")] = "",
    store_path: StorePathOption = None,
) -> None:
    """
    Add an exercise with its target volume.
    """
    store = get_store(store_path)

    if category not in CATEGORIES:
        views.print_error(f"Invalid category: {category}. Choose from {', '.join(CATEGORIES)}")
        raise typer.Exit(1)

    try:
        workout = [parse_nsuns_set(s) for s in nsuns_sets or []]
        exercise = Exercise(
            name=name,
            category=category,  # type: ignore[arg-type]
            muscle_group=muscle_group,
            weekly_sets=weekly_sets,
            description=description,
            priority=priority,
            distance=distance,
            one_rep_max=one_rep_max,
            workout=workout,
        )
        store.add_exercise(exercise)
    except (FileNotFoundError, TrackerError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Added {exercise.name} ({exercise.category}) with id {exercise.id[:8]}")


@app.command("delete-exercise")
def delete_exercise(
    exercise_id: Annotated[str, typer.Argument(help="Exercise id (or unique prefix)")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Delete an exercise together with its history.
    """
    store = get_store(store_path)
    state = load_state_or_exit(store)

    try:
        exercise = state.find_exercise(exercise_id)
    except TrackerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    count = len(state.history.get(exercise.id, []))
    views.console.print(f"Exercise to delete: [bold]{exercise.name}[/bold] ({count} entries)")

    if not force and not views.confirm_action("Delete this exercise and its history?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    store.delete_exercise(exercise.id)
    views.print_success(f"Deleted {exercise.name}")


@app.command("list")
def list_command(
    group_by: Annotated[
        str,
        typer.Option("--group-by", "-g", help="category, muscle_group or none"),
    ] = "category",
    sort_by: Annotated[
        str,
        typer.Option("--sort-by", help="remaining or name"),
    ] = "remaining",
    hide_completed: Annotated[
        bool,
        typer.Option("--hide-completed", help="Hide exercises with nothing left to do"),
    ] = False,
    json_out: JsonOption = False,
    store_path: StorePathOption = None,
) -> None:
    """
    List exercises with their remaining volume for the current interval.
    """
    store = get_store(store_path)
    state = load_state_or_exit(store)
    interval = state.settings.training_interval

    remaining = remaining_by_exercise(
        state.exercises, state.history, interval, policy=state.settings.volume_policy
    )
    try:
        groups = list_exercises(
            state.exercises, remaining,
            group_by=group_by,  # type: ignore[arg-type]
            sort_by=sort_by,  # type: ignore[arg-type]
            hide_completed=hide_completed,
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "training_interval": interval,
            "groups": [
                {
                    "key": g.key,
                    "exercises": [
                        {**exercise_to_dict(r.exercise), "remaining": r.remaining}
                        for r in g.rows
                    ],
                }
                for g in groups
            ],
        }, indent=2))
        return

    views.print_exercise_list(groups, interval)


@app.command("set-priority")
def set_priority(
    exercise_id: Annotated[str, typer.Argument(help="Exercise id (or unique prefix)")],
    priority: Annotated[int, typer.Argument(help="New priority 0-3 (0 = not selected)")],
    store_path: StorePathOption = None,
) -> None:
    """
    Change an exercise's priority and re-split its muscle group budget.
    """
    store = get_store(store_path)

    try:
        exercises = store.set_priority(exercise_id, priority)
    except (FileNotFoundError, TrackerError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    changed = next(e for e in exercises if e.id.startswith(exercise_id))
    views.print_success(f"{changed.name}: priority {changed.priority}")
    for e in exercises:
        if e.category == changed.category and e.muscle_group == changed.muscle_group:
            views.console.print(f"  {e.name}: {e.weekly_sets:g} per interval")
