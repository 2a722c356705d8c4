"""
Exercise list view: grouping, ordering and completion filtering.
"""

from dataclasses import dataclass, field
from typing import Literal, Sequence

from .ledger import is_satisfied
from .models import Exercise

GroupBy = Literal["category", "muscle_group", "none"]
SortBy = Literal["remaining", "name"]

GROUP_BY_OPTIONS: tuple[str, ...] = ("category", "muscle_group", "none")
SORT_BY_OPTIONS: tuple[str, ...] = ("remaining", "name")


@dataclass
class ExerciseRow:
    exercise: Exercise
    remaining: float

    @property
    def completed(self) -> bool:
        return is_satisfied(self.remaining)


@dataclass
class ExerciseGroup:
    """A titled run of rows; the key is "" when ungrouped."""

    key: str
    rows: list[ExerciseRow] = field(default_factory=list)


def _group_key(exercise: Exercise, group_by: str) -> str:
    if group_by == "category":
        return exercise.category
    if group_by == "muscle_group":
        return exercise.muscle_group
    return ""


def list_exercises(
    exercises: Sequence[Exercise],
    remaining: dict[str, float],
    group_by: GroupBy = "category",
    sort_by: SortBy = "remaining",
    hide_completed: bool = False,
) -> list[ExerciseGroup]:
    """
    Arrange exercises for display.

    Exercises with no target volume are not part of the plan and
    are left out.

    Args:
        exercises: All exercises
        remaining: Remaining volume by exercise id
        group_by: "category", "muscle_group" or "none"
        sort_by: "remaining" (largest first) or "name"
        hide_completed: Drop exercises whose remaining volume is <= 0

    Returns:
        Groups sorted by key, each with its rows in display order
    """
    if group_by not in GROUP_BY_OPTIONS:
        raise ValueError(f"group_by must be one of {GROUP_BY_OPTIONS}, got {group_by!r}")
    if sort_by not in SORT_BY_OPTIONS:
        raise ValueError(f"sort_by must be one of {SORT_BY_OPTIONS}, got {sort_by!r}")

    groups: dict[str, list[ExerciseRow]] = {}
    for exercise in exercises:
        if exercise.target_volume <= 0:
            continue
        row = ExerciseRow(exercise, remaining.get(exercise.id, exercise.target_volume))
        if hide_completed and row.completed:
            continue
        groups.setdefault(_group_key(exercise, group_by), []).append(row)

    if sort_by == "remaining":
        key = lambda r: (-r.remaining, r.exercise.name.lower())  # noqa: E731
    else:
        key = lambda r: r.exercise.name.lower()  # noqa: E731

    return [ExerciseGroup(k, sorted(rows, key=key)) for k, rows in sorted(groups.items())]
