"""
Data models for volume-tracker.

Exercises carry a target volume for the rolling training interval; history
entries are a tagged union whose variant fixes which volume unit applies.
Strength and nSuns exercises both log StrengthEntry records.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import ClassVar, Literal

from .config import (
    DEFAULT_DAILY_STEP_GOAL,
    DEFAULT_ONE_REP_MAX_FORMULA,
    DEFAULT_PRIORITY,
    DEFAULT_TRAINING_INTERVAL,
    DEFAULT_VOLUME_POLICY,
    MAX_PRIORITY,
    MAX_TRAINING_INTERVAL,
    MIN_PRIORITY,
    MIN_TRAINING_INTERVAL,
    ONE_REP_MAX_FORMULAS,
)

Category = Literal["strength", "endurance", "mobility", "nsuns"]
EntryCategory = Literal["strength", "endurance", "mobility"]

CATEGORIES: tuple[str, ...] = ("strength", "endurance", "mobility", "nsuns")
ENTRY_CATEGORIES: tuple[str, ...] = ("strength", "endurance", "mobility")


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def as_number(value: object) -> float:
    """
    Coerce a possibly missing numeric field to a float.

    None, NaN, infinities and non-numeric values all count as zero so that
    one malformed record cannot poison an aggregate.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def as_naive(moment: datetime | date) -> datetime:
    """Normalise a date or aware datetime to a naive local datetime."""
    if not isinstance(moment, datetime):
        return datetime(moment.year, moment.month, moment.day)
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def entry_category_for(category: str) -> str:
    """History-entry category used by exercises of the given category."""
    return "strength" if category == "nsuns" else category


def _check_non_negative(**values: float | None) -> None:
    for name, value in values.items():
        if value is not None and value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass
class NsunsSet:
    """One prescribed set of an nSuns workout, as a percentage of 1RM."""

    reps: int
    relative_weight: float  # percent of one_rep_max
    is_amrap: bool = False

    def __post_init__(self) -> None:
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.relative_weight < 0:
            raise ValueError("relative_weight must be non-negative")


@dataclass
class Exercise:
    """
    An exercise with a target volume for the training interval.

    ``weekly_sets`` is scaled to the configured interval, not to seven days.
    For endurance exercises ``distance`` (km per interval) is the target when
    set; otherwise ``weekly_sets`` is read as kilometres.
    """

    name: str
    category: Category
    muscle_group: str
    weekly_sets: float = 0
    description: str = ""
    priority: int = DEFAULT_PRIORITY
    distance: float | None = None  # endurance only
    one_rep_max: float | None = None  # nsuns only
    workout: list[NsunsSet] = field(default_factory=list)  # nsuns only
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.name or not self.name.strip():
            raise ValueError("Exercise name must be non-empty")
        if self.category not in CATEGORIES:
            raise ValueError(
                f"Invalid category: {self.category!r}. Must be one of {CATEGORIES}"
            )
        if self.weekly_sets < 0:
            raise ValueError("weekly_sets must be non-negative")
        if not MIN_PRIORITY <= self.priority <= MAX_PRIORITY:
            raise ValueError(
                f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}, got {self.priority}"
            )
        if self.distance is not None and self.distance < 0:
            raise ValueError("distance must be non-negative")
        if self.one_rep_max is not None and self.one_rep_max < 0:
            raise ValueError("one_rep_max must be non-negative")

    @property
    def entry_category(self) -> str:
        return entry_category_for(self.category)

    @property
    def target_volume(self) -> float:
        """Target volume for one interval in this exercise's unit (sets or km)."""
        if self.category == "endurance" and self.distance is not None:
            return as_number(self.distance)
        return as_number(self.weekly_sets)


@dataclass
class StrengthEntry:
    """A logged strength (or nSuns) session: sets x reps at a weight."""

    category: ClassVar[str] = "strength"

    date: datetime
    sets: float = 0
    reps: float = 0
    weight: float = 0.0
    notes: str = ""
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.date = as_naive(self.date)
        _check_non_negative(sets=self.sets, reps=self.reps, weight=self.weight)

    @property
    def volume(self) -> float:
        return as_number(self.sets)


@dataclass
class EnduranceEntry:
    """A logged endurance session; volume is the distance covered in km."""

    category: ClassVar[str] = "endurance"

    date: datetime
    distance: float = 0.0
    time: float = 0.0  # minutes
    avg_heart_rate: int | None = None
    notes: str = ""
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.date = as_naive(self.date)
        _check_non_negative(
            distance=self.distance, time=self.time, avg_heart_rate=self.avg_heart_rate
        )

    @property
    def volume(self) -> float:
        return as_number(self.distance)


@dataclass
class MobilityEntry:
    """A logged mobility session counted in sets."""

    category: ClassVar[str] = "mobility"

    date: datetime
    sets: float = 0
    notes: str = ""
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.date = as_naive(self.date)
        _check_non_negative(sets=self.sets)

    @property
    def volume(self) -> float:
        return as_number(self.sets)


HistoryEntry = StrengthEntry | EnduranceEntry | MobilityEntry
History = dict[str, list[HistoryEntry]]

ENTRY_TYPES: dict[str, type] = {
    "strength": StrengthEntry,
    "endurance": EnduranceEntry,
    "mobility": MobilityEntry,
}


def entry_matches_exercise(entry: HistoryEntry, exercise: Exercise) -> bool:
    """True if the entry's shape is valid for the owning exercise."""
    return entry.category == exercise.entry_category


def sorted_entries(entries: list[HistoryEntry]) -> list[HistoryEntry]:
    """Entries in chronological order (storage order is insertion order)."""
    return sorted(entries, key=lambda e: e.date)


def remove_exercise(
    exercises: list[Exercise], history: History, exercise_id: str
) -> tuple[list[Exercise], History]:
    """
    Delete an exercise together with its history entries.

    Returns:
        (remaining exercises, history without the deleted exercise's entries)
    """
    kept = [e for e in exercises if e.id != exercise_id]
    new_history = {k: list(v) for k, v in history.items() if k != exercise_id}
    return kept, new_history


@dataclass
class TrackerSettings:
    """User settings stored alongside the exercises."""

    training_interval: int = DEFAULT_TRAINING_INTERVAL
    one_rep_max_formula: str = DEFAULT_ONE_REP_MAX_FORMULA
    volume_policy: str = DEFAULT_VOLUME_POLICY
    daily_step_goal: int = DEFAULT_DAILY_STEP_GOAL

    def __post_init__(self) -> None:
        """Validate settings."""
        if not MIN_TRAINING_INTERVAL <= self.training_interval <= MAX_TRAINING_INTERVAL:
            raise ValueError(
                f"training_interval must be between {MIN_TRAINING_INTERVAL} and "
                f"{MAX_TRAINING_INTERVAL}, got {self.training_interval}"
            )
        if self.one_rep_max_formula not in ONE_REP_MAX_FORMULAS:
            raise ValueError(
                f"Invalid 1RM formula: {self.one_rep_max_formula!r}. "
                f"Must be one of {ONE_REP_MAX_FORMULAS}"
            )
        if self.volume_policy not in ("hard", "decayed"):
            raise ValueError(f"Invalid volume policy: {self.volume_policy!r}")
        if self.daily_step_goal < 0:
            raise ValueError("daily_step_goal must be non-negative")
