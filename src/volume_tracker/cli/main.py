"""
CLI entry point using Typer.

Provides commands for volume tracking:
- init, add-exercise, delete-exercise, list, set-priority: manage exercises
- log, log-nsuns, history, delete-entry, steps: record training
- suggest, stats, templates: see what is owed and how the interval went
- budget, onboard: plan volume per muscle group
- settings, export, import: configuration and data
"""

from .app import app

# Importing the command modules registers their commands on ``app``.
from .commands import analysis, exercises, planning, sessions, settings  # noqa: F401


if __name__ == "__main__":
    app()
