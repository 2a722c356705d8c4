"""
JSON document storage for exercises, history and settings.

The whole tracker lives in one file:

    {
      "version": 1,
      "settings":  {...},
      "budgets":   {category: {muscle_group: volume}},
      "exercises": [...],
      "history":   {exercise_id: [entry, ...]},
      "steps":     {"YYYY-MM-DD": count}
    }

Every mutation loads the document, applies a pure core operation and
writes the result back.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Any

from ..core.allocator import VolumeBudgets, allocate_group, muscle_groups
from ..core.errors import NotFoundError, ValidationError
from ..core.models import (
    Exercise,
    History,
    HistoryEntry,
    TrackerSettings,
    entry_matches_exercise,
    remove_exercise,
)
from ..core.stats import StepSeries
from .serializers import (
    budgets_to_dict,
    dict_to_budgets,
    dict_to_exercise,
    dict_to_history,
    dict_to_settings,
    dict_to_steps,
    exercise_to_dict,
    history_to_dict,
    settings_to_dict,
    steps_to_dict,
)

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


@dataclass
class TrackerState:
    """Everything held in one tracker document."""

    settings: TrackerSettings = field(default_factory=TrackerSettings)
    exercises: list[Exercise] = field(default_factory=list)
    history: History = field(default_factory=dict)
    budgets: VolumeBudgets = field(default_factory=VolumeBudgets.defaults)
    daily_steps: dict[date, int] = field(default_factory=dict)

    @property
    def steps(self) -> StepSeries:
        return StepSeries(daily_steps=self.daily_steps, daily_goal=self.settings.daily_step_goal)

    def find_exercise(self, exercise_id: str) -> Exercise:
        """
        Return the exercise with the given id.

        A unique id prefix is accepted as well, since full ids are long.

        Raises:
            NotFoundError: If no exercise, or more than one, matches
        """
        if not exercise_id:
            raise NotFoundError("Exercise id must be non-empty")
        for e in self.exercises:
            if e.id == exercise_id:
                return e
        matches = [e for e in self.exercises if e.id.startswith(exercise_id)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise NotFoundError(f"Exercise id prefix {exercise_id!r} is ambiguous")
        raise NotFoundError(f"Exercise not found: {exercise_id}")


def state_to_dict(state: TrackerState) -> dict[str, Any]:
    return {
        "version": DOCUMENT_VERSION,
        "settings": settings_to_dict(state.settings),
        "budgets": budgets_to_dict(state.budgets),
        "exercises": [exercise_to_dict(e) for e in state.exercises],
        "history": history_to_dict(state.history),
        "steps": steps_to_dict(state.steps),
    }


def dict_to_state(data: dict[str, Any]) -> TrackerState:
    """
    Convert a stored document to TrackerState.

    Raises:
        ValidationError: If the document or any record in it is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Tracker document must be a JSON object")
    settings = dict_to_settings(data.get("settings"))
    exercises = [dict_to_exercise(e) for e in data.get("exercises") or []]
    ids = [e.id for e in exercises]
    if len(ids) != len(set(ids)):
        raise ValidationError("Duplicate exercise ids in tracker document")
    return TrackerState(
        settings=settings,
        exercises=exercises,
        history=dict_to_history(data.get("history") or {}),
        budgets=dict_to_budgets(data.get("budgets")),
        daily_steps=dict_to_steps(data.get("steps")).daily_steps,
    )


def _check_entry_fits(entry: HistoryEntry, exercise: Exercise) -> None:
    if not entry_matches_exercise(entry, exercise):
        raise ValidationError(
            f"Cannot log a {entry.category} entry for {exercise.category} "
            f"exercise {exercise.name!r}"
        )


class TrackerStore:
    """
    Manages the tracker document stored as JSON.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the store.

        Args:
            path: Path to the JSON document
        """
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if the document exists."""
        return self.path.exists()

    def init(
        self,
        settings: TrackerSettings | None = None,
        budgets: VolumeBudgets | None = None,
    ) -> None:
        """
        Create an empty document if it doesn't exist.

        Creates parent directories if needed.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.save(
                TrackerState(
                    settings=settings or TrackerSettings(),
                    budgets=budgets or VolumeBudgets.defaults(),
                )
            )
            logger.info("Created tracker store at %s", self.path)

    def load(self) -> TrackerState:
        """
        Load the full tracker state.

        Raises:
            FileNotFoundError: If the document doesn't exist
            ValidationError: If the document is invalid
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Tracker file not found: {self.path}. Run 'init' first.")
        return self._read(self.path)

    @staticmethod
    def _read(path: Path) -> TrackerState:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {path}: {e}") from e
        return dict_to_state(data)

    def save(self, state: TrackerState) -> None:
        """Write the state, replacing the document atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(state_to_dict(state), f, indent=2)
        tmp.replace(self.path)

    # -- exercises -----------------------------------------------------------

    def add_exercise(self, exercise: Exercise) -> Exercise:
        state = self.load()
        if any(e.id == exercise.id for e in state.exercises):
            raise ValidationError(f"Exercise id already exists: {exercise.id}")
        state.exercises.append(exercise)
        self.save(state)
        logger.info("Added %s exercise %r (%s)", exercise.category, exercise.name, exercise.id)
        return exercise

    def add_plan(self, exercises: list[Exercise]) -> list[Exercise]:
        """
        Add a batch of exercises, e.g. a plan built from the catalog.

        Every muscle group the plan touches is reallocated over its old and
        new exercises together, so each group still sums to its budget.

        Returns:
            The stored exercises of the touched groups
        """
        state = self.load()
        state.exercises.extend(exercises)
        touched = muscle_groups(exercises)
        for category, group in touched:
            state.exercises = allocate_group(
                state.exercises, category, group, state.budgets.get(category, group)
            )
        self.save(state)
        logger.info("Added %d exercise(s) from plan", len(exercises))
        return [e for e in state.exercises if (e.category, e.muscle_group) in touched]

    def update_exercise(self, exercise: Exercise) -> Exercise:
        """Replace the stored exercise that has the same id."""
        state = self.load()
        for i, e in enumerate(state.exercises):
            if e.id == exercise.id:
                state.exercises[i] = exercise
                break
        else:
            raise NotFoundError(f"Exercise not found: {exercise.id}")
        self.save(state)
        logger.info("Updated exercise %r (%s)", exercise.name, exercise.id)
        return exercise

    def delete_exercise(self, exercise_id: str) -> Exercise:
        """Delete an exercise and all of its history entries."""
        state = self.load()
        exercise = state.find_exercise(exercise_id)
        removed = len(state.history.get(exercise.id, []))
        state.exercises, state.history = remove_exercise(
            state.exercises, state.history, exercise.id
        )
        self.save(state)
        logger.info(
            "Deleted exercise %r (%s) and %d history entr%s",
            exercise.name, exercise.id, removed, "y" if removed == 1 else "ies",
        )
        return exercise

    def set_priority(self, exercise_id: str, priority: int) -> list[Exercise]:
        """Change an exercise's priority and reallocate its muscle group."""
        state = self.load()
        exercise = state.find_exercise(exercise_id)
        try:
            updated = replace(exercise, priority=priority)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        state.exercises = [updated if e.id == exercise.id else e for e in state.exercises]
        state.exercises = allocate_group(
            state.exercises,
            exercise.category,
            exercise.muscle_group,
            state.budgets.get(exercise.category, exercise.muscle_group),
        )
        self.save(state)
        logger.info("Set priority of %r to %d", exercise.name, priority)
        return state.exercises

    # -- history -------------------------------------------------------------

    def add_entry(self, exercise_id: str, entry: HistoryEntry) -> HistoryEntry:
        """
        Append an entry to an exercise's history.

        Raises:
            NotFoundError: If the exercise doesn't exist
            ValidationError: If the entry shape doesn't fit the exercise
        """
        state = self.load()
        exercise = state.find_exercise(exercise_id)
        _check_entry_fits(entry, exercise)
        state.history.setdefault(exercise.id, []).append(entry)
        self.save(state)
        logger.info("Logged %s entry for %r (volume %.1f)", entry.category, exercise.name, entry.volume)
        return entry

    def add_entries(self, exercise_id: str, entries: list[HistoryEntry]) -> None:
        """Append several entries in one write; nothing is stored if any is rejected."""
        state = self.load()
        exercise = state.find_exercise(exercise_id)
        for entry in entries:
            _check_entry_fits(entry, exercise)
        state.history.setdefault(exercise.id, []).extend(entries)
        self.save(state)
        logger.info("Logged %d entries for %r", len(entries), exercise.name)

    def _locate_entry(self, state: TrackerState, exercise_id: str, entry_id: str) -> tuple[Exercise, int]:
        exercise = state.find_exercise(exercise_id)
        if not entry_id:
            raise NotFoundError("Entry id must be non-empty")
        entries = state.history.get(exercise.id, [])
        for i, e in enumerate(entries):
            if e.id == entry_id:
                return exercise, i
        matches = [i for i, e in enumerate(entries) if e.id.startswith(entry_id)]
        if len(matches) == 1:
            return exercise, matches[0]
        if len(matches) > 1:
            raise NotFoundError(f"Entry id prefix {entry_id!r} is ambiguous")
        raise NotFoundError(f"Entry {entry_id} not found for exercise {exercise.name!r}")

    def update_entry(self, exercise_id: str, entry: HistoryEntry) -> HistoryEntry:
        state = self.load()
        exercise, index = self._locate_entry(state, exercise_id, entry.id)
        if not entry_matches_exercise(entry, exercise):
            raise ValidationError(f"Entry category {entry.category} does not match {exercise.category}")
        state.history[exercise.id][index] = entry
        self.save(state)
        logger.info("Updated entry %s of %r", entry.id, exercise.name)
        return entry

    def delete_entry(self, exercise_id: str, entry_id: str) -> HistoryEntry:
        state = self.load()
        exercise, index = self._locate_entry(state, exercise_id, entry_id)
        removed = state.history[exercise.id].pop(index)
        self.save(state)
        logger.info("Deleted entry %s of %r", removed.id, exercise.name)
        return removed

    def remove_orphans(self) -> int:
        """Drop history keyed by unknown exercise ids; return the entry count."""
        state = self.load()
        known = {e.id for e in state.exercises}
        orphans = [k for k in state.history if k not in known]
        count = sum(len(state.history.pop(k)) for k in orphans)
        if orphans:
            self.save(state)
            logger.info("Removed %d orphaned entr%s", count, "y" if count == 1 else "ies")
        return count

    # -- settings ------------------------------------------------------------

    def update_settings(self, **changes: Any) -> TrackerSettings:
        """
        Apply setting changes (training_interval, one_rep_max_formula,
        volume_policy, daily_step_goal).

        Raises:
            ValidationError: If a value is out of range
        """
        state = self.load()
        try:
            state.settings = replace(state.settings, **changes)
        except (TypeError, ValueError) as e:
            raise ValidationError(str(e)) from e
        self.save(state)
        logger.info("Updated settings: %s", ", ".join(f"{k}={v}" for k, v in changes.items()))
        return state.settings

    def set_training_interval(self, days: int) -> TrackerSettings:
        return self.update_settings(training_interval=days)

    def set_budget(self, category: str, muscle_group: str, value: int) -> list[Exercise]:
        """Store a muscle group budget and reallocate that group's exercises."""
        state = self.load()
        try:
            state.budgets = state.budgets.with_budget(category, muscle_group, value)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        state.exercises = allocate_group(state.exercises, category, muscle_group, value)
        self.save(state)
        logger.info("Set %s/%s budget to %d", category, muscle_group, value)
        return [e for e in state.exercises if e.category == category and e.muscle_group == muscle_group]

    def record_steps(self, day: date, count: int) -> None:
        if count < 0:
            raise ValidationError(f"step count must be non-negative, got {count}")
        state = self.load()
        state.daily_steps[day] = count
        self.save(state)
        logger.info("Recorded %d steps on %s", count, day.isoformat())

    # -- import / export -----------------------------------------------------

    def export_to(self, path: str | Path) -> Path:
        """Write a copy of the current document to ``path``."""
        target = Path(path)
        TrackerStore(target).save(self.load())
        logger.info("Exported tracker data to %s", target)
        return target

    def import_from(self, path: str | Path) -> TrackerState:
        """
        Replace the current document with the one at ``path``.

        The file is fully validated before anything is overwritten.
        """
        source = Path(path)
        if not source.exists():
            raise FileNotFoundError(f"Import file not found: {source}")
        state = self._read(source)
        self.save(state)
        logger.info(
            "Imported %d exercise(s) from %s", len(state.exercises), source,
        )
        return state


def get_default_store_path() -> Path:
    """Default tracker document: ~/.volume-tracker/tracker.json."""
    return Path.home() / ".volume-tracker" / "tracker.json"
