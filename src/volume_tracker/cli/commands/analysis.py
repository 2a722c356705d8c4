"""Analysis commands: suggest, stats, templates."""

import json
from typing import Annotated, Optional

import typer

from ...core.engine.config_loader import load_tracker_config
from ...core.errors import TrackerError
from ...core.ledger import remaining_by_exercise
from ...core.stats import STAT_CATEGORIES, compute_interval_stats
from ...core.suggestion import suggest_workout
from ...core.templates import recommend_templates
from .. import views
from ..app import JsonOption, StorePathOption, app, get_store, load_state_or_exit


@app.command()
def suggest(
    skip: Annotated[
        Optional[list[str]],
        typer.Option("--skip", "-x", help="Exercise id to swap for the next-ranked one (repeatable)"),
    ] = None,
    json_out: JsonOption = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Suggest a workout from the volume still owed this interval.
    """
    store = get_store(store_path)
    state = load_state_or_exit(store)
    try:
        config = load_tracker_config()
    except ValueError as e:
        views.print_error(f"Invalid tracker.yaml: {e}")
        raise typer.Exit(1)

    workout = suggest_workout(
        state.exercises,
        state.history,
        state.settings.training_interval,
        caps=config.suggestion_caps,
        policy=state.settings.volume_policy,  # type: ignore[arg-type]
    )
    for exercise_id in skip or []:
        try:
            exercise = state.find_exercise(exercise_id)
        except TrackerError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        workout = workout.remove(exercise.id)

    if json_out:
        print(json.dumps({
            "training_interval": state.settings.training_interval,
            "sections": [
                {
                    "category": s.category,
                    "title": s.title,
                    "exercises": [
                        {
                            "id": i.exercise.id,
                            "name": i.exercise.name,
                            "muscle_group": i.exercise.muscle_group,
                            "suggested_amount": i.suggested_amount,
                            "unit": i.unit,
                            "remaining": i.remaining,
                        }
                        for i in s.items
                    ],
                }
                for s in workout.sections
            ],
        }, indent=2))
        return

    views.print_suggestion(workout)


@app.command()
def stats(
    charts: Annotated[
        bool,
        typer.Option("--charts/--no-charts", help="Draw daily load charts"),
    ] = True,
    json_out: JsonOption = False,
    store_path: StorePathOption = None,
) -> None:
    """
    Show target vs. actual load per category and the combined score.
    """
    store = get_store(store_path)
    state = load_state_or_exit(store)
    steps = state.steps if state.daily_steps else None

    result = compute_interval_stats(
        state.exercises, state.history, state.settings.training_interval, steps=steps,
    )

    if json_out:
        print(json.dumps({
            "training_interval": result.training_interval,
            "combined_score": result.combined_score,
            "steps_percentage": result.steps_percentage,
            "categories": {
                c: {
                    "target_load": result.categories[c].target_load,
                    "actual_load": result.categories[c].actual_load,
                    "percentage": round(result.categories[c].percentage, 1),
                    "daily_load": result.categories[c].daily_load,
                    "moving_average": result.categories[c].moving_average,
                }
                for c in STAT_CATEGORIES
            },
        }, indent=2))
        return

    views.print_stats(result, charts=charts)


@app.command()
def templates(
    store_path: StorePathOption = None,
) -> None:
    """
    Rank workout templates by how much owed volume they cover.
    """
    store = get_store(store_path)
    state = load_state_or_exit(store)

    remaining = remaining_by_exercise(
        state.exercises,
        state.history,
        state.settings.training_interval,
        policy=state.settings.volume_policy,  # type: ignore[arg-type]
    )
    views.print_templates(recommend_templates(state.exercises, remaining))
