"""Planning commands: budget, onboard."""

from typing import Annotated, Optional

import typer

from ...core.catalog import build_plan, load_catalog
from ...core.errors import TrackerError
from ...core.models import CATEGORIES
from .. import views
from ..app import StorePathOption, app, get_store, load_state_or_exit


def _parse_selection(text: str) -> tuple[str, int]:
    """``NAME=PRIORITY``, or a bare NAME for priority 1."""
    name, sep, priority = text.rpartition("=")
    if not sep:
        return text.strip(), 1
    if not priority.strip().isdigit():
        raise ValueError(f"Invalid selection {text!r}. Expected NAME=PRIORITY, e.g. Squat=2")
    return name.strip(), int(priority)


@app.command()
def budget(
    category: Annotated[str, typer.Argument(help="strength, endurance, mobility or nsuns")],
    muscle_group: Annotated[str, typer.Argument(help="Muscle group, e.g. Legs")],
    value: Annotated[int, typer.Argument(help="Volume per interval shared by the group")],
    store_path: StorePathOption = None,
) -> None:
    """
    Set a muscle group's volume budget and re-split it by priority.
    """
    store = get_store(store_path)

    if category not in CATEGORIES:
        views.print_error(f"Invalid category: {category}. Choose from {', '.join(CATEGORIES)}")
        raise typer.Exit(1)

    try:
        exercises = store.set_budget(category, muscle_group, value)
    except (FileNotFoundError, TrackerError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"{category}/{muscle_group} budget set to {value}")
    if not exercises:
        views.print_info("No exercises in this group yet.")
    for e in exercises:
        views.console.print(f"  {e.name} (priority {e.priority}): {e.weekly_sets:g}")


@app.command()
def onboard(
    select: Annotated[
        Optional[list[str]],
        typer.Option("--select", "-s", help="Catalog exercise as NAME=PRIORITY (repeatable)"),
    ] = None,
    show_catalog: Annotated[
        bool,
        typer.Option("--catalog", help="Show the exercise catalog and exit"),
    ] = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Build a plan from the suggested exercise catalog.

    Each muscle group's budget is split over the selected exercises by priority.
    """
    catalog = load_catalog()
    if show_catalog or not select:
        views.print_catalog(catalog)
        if not select:
            views.print_info("Pick exercises with --select NAME=PRIORITY, e.g. --select Squat=2")
        return

    store = get_store(store_path)
    state = load_state_or_exit(store)

    try:
        selections = dict(_parse_selection(s) for s in select)
        plan = build_plan(catalog, selections, state.budgets)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    existing = {(e.category, e.name.lower()) for e in state.exercises}
    duplicates = [e.name for e in plan if (e.category, e.name.lower()) in existing]
    if duplicates:
        views.print_error(f"Already in your plan: {', '.join(duplicates)}")
        raise typer.Exit(1)

    stored = store.add_plan(plan)
    views.print_plan(stored)
    views.print_success(f"Added {len(plan)} exercise(s)")
