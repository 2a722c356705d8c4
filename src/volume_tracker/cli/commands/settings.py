"""Settings commands: settings, export, import."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.errors import TrackerError
from .. import views
from ..app import StorePathOption, app, get_store, load_state_or_exit


@app.command()
def settings(
    interval: Annotated[
        Optional[int],
        typer.Option("--interval", "-i", help="Training interval in days (1-30)"),
    ] = None,
    formula: Annotated[
        Optional[str],
        typer.Option("--formula", help="1RM formula: brzycki, epley or lander"),
    ] = None,
    policy: Annotated[
        Optional[str],
        typer.Option("--policy", help="Volume accounting: decayed or hard"),
    ] = None,
    step_goal: Annotated[
        Optional[int],
        typer.Option("--step-goal", help="Daily step goal"),
    ] = None,
    store_path: StorePathOption = None,
) -> None:
    """
    Show or change settings.
    """
    store = get_store(store_path)
    changes = {
        k: v
        for k, v in {
            "training_interval": interval,
            "one_rep_max_formula": formula,
            "volume_policy": policy,
            "daily_step_goal": step_goal,
        }.items()
        if v is not None
    }

    if changes:
        try:
            current = store.update_settings(**changes)
        except (FileNotFoundError, TrackerError) as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        views.print_success("Settings updated")
    else:
        current = load_state_or_exit(store).settings

    views.console.print(f"Training interval: [bold]{current.training_interval}[/bold] day(s)")
    views.console.print(f"1RM formula:       [bold]{current.one_rep_max_formula}[/bold]")
    views.console.print(f"Volume policy:     [bold]{current.volume_policy}[/bold]")
    views.console.print(f"Daily step goal:   [bold]{current.daily_step_goal}[/bold]")


@app.command("export")
def export_data(
    path: Annotated[Path, typer.Argument(help="Destination JSON file")],
    store_path: StorePathOption = None,
) -> None:
    """
    Write a copy of all tracker data to a JSON file.
    """
    store = get_store(store_path)

    try:
        target = store.export_to(path)
    except (FileNotFoundError, TrackerError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Exported to {target}")


@app.command("import")
def import_data(
    path: Annotated[Path, typer.Argument(help="Tracker JSON file to import")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Replace all tracker data with the contents of a JSON file.
    """
    store = get_store(store_path)

    if store.exists() and not force:
        if not views.confirm_action(f"Replace the data in {store.path}?"):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    try:
        state = store.import_from(path)
    except (FileNotFoundError, TrackerError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    orphans = store.remove_orphans()
    if orphans:
        views.print_warning(f"Dropped {orphans} entries for unknown exercises")
    views.print_success(f"Imported {len(state.exercises)} exercise(s) from {path}")
