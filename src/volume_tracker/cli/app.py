"""Shared Typer app object, shared option types, and store utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..core.errors import TrackerError
from ..io.store import TrackerState, TrackerStore, get_default_store_path
from . import views

# Shared --store-path option type used across all commands
StorePathOption = Annotated[
    Optional[Path],
    typer.Option("--store-path", "-p", help="Path to the tracker JSON file"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="volume-tracker",
    help="Rolling-interval training volume tracker with workout suggestions.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Track training volume over a rolling interval and get suggested workouts.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=views.err_console, rich_tracebacks=True)],
            force=True,
        )


def get_store(store_path: Path | None) -> TrackerStore:
    """Get tracker store from path or the default location."""
    return TrackerStore(store_path if store_path is not None else get_default_store_path())


def load_state_or_exit(store: TrackerStore) -> TrackerState:
    """Load the tracker state, printing the error and exiting 1 on failure."""
    try:
        return store.load()
    except (FileNotFoundError, TrackerError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
