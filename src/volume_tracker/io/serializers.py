"""
JSON serialization for tracker data models.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import re
from datetime import date, datetime
from typing import Any

from ..core.allocator import VolumeBudgets
from ..core.errors import ValidationError
from ..core.models import (
    CATEGORIES,
    ENTRY_TYPES,
    EnduranceEntry,
    Exercise,
    History,
    HistoryEntry,
    MobilityEntry,
    NsunsSet,
    StrengthEntry,
    TrackerSettings,
    as_number,
    new_id,
)
from ..core.stats import StepSeries

__all__ = [
    "ValidationError",
    "budgets_to_dict",
    "dict_to_budgets",
    "dict_to_entry",
    "dict_to_exercise",
    "dict_to_history",
    "dict_to_settings",
    "dict_to_steps",
    "entry_to_dict",
    "exercise_to_dict",
    "history_to_dict",
    "parse_amrap",
    "parse_datetime",
    "parse_nsuns_set",
    "settings_to_dict",
    "steps_to_dict",
    "validate_date",
]

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_date(date_str: str) -> date:
    """
    Parse a plain YYYY-MM-DD date.

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not _DATE_RE.match(date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp or a plain YYYY-MM-DD date.

    Timezone-aware values are accepted; models convert them to local time.

    Raises:
        ValidationError: If the value is not a recognisable date
    """
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date: {value!r}")
    if _DATE_RE.match(value):
        d = validate_date(value)
        return datetime(d.year, d.month, d.day)
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value}") from e


def validate_non_negative(value: Any, name: str) -> float:
    """
    Validate that a value is a non-negative number.

    Raises:
        ValidationError: If value is negative or not a number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def _optional_number(data: dict[str, Any], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    return float(validate_non_negative(value, key))


def _entry_number(data: dict[str, Any], key: str) -> float:
    """Numeric entry field; missing, null or unparseable values read as zero."""
    value = data.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return validate_non_negative(value, key)
    return validate_non_negative(as_number(value), key)


def _require(data: dict[str, Any], *keys: str) -> None:
    missing = [k for k in keys if k not in data]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


# ---------------------------------------------------------------------------
# Exercises
# ---------------------------------------------------------------------------


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """
    Convert Exercise to JSON-compatible dict.

    Category-specific fields are only written for the category that uses them.
    """
    data: dict[str, Any] = {
        "id": exercise.id,
        "name": exercise.name,
        "category": exercise.category,
        "muscle_group": exercise.muscle_group,
        "weekly_sets": exercise.weekly_sets,
        "priority": exercise.priority,
    }
    if exercise.description:
        data["description"] = exercise.description
    if exercise.distance is not None:
        data["distance"] = exercise.distance
    if exercise.category == "nsuns":
        data["one_rep_max"] = exercise.one_rep_max
        data["workout"] = [
            {"reps": s.reps, "relative_weight": s.relative_weight, "is_amrap": s.is_amrap}
            for s in exercise.workout
        ]
    return data


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert dict to Exercise.

    Raises:
        ValidationError: If data is invalid
    """
    _require(data, "name", "category", "muscle_group")
    if data["category"] not in CATEGORIES:
        raise ValidationError(f"Invalid category: {data['category']!r}")

    workout = []
    for raw in data.get("workout") or []:
        try:
            workout.append(
                NsunsSet(
                    reps=int(raw["reps"]),
                    relative_weight=float(raw["relative_weight"]),
                    is_amrap=bool(raw.get("is_amrap", False)),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid nSuns set {raw!r}: {e}") from e

    try:
        return Exercise(
            id=str(data.get("id") or new_id()),
            name=str(data["name"]),
            category=data["category"],
            muscle_group=str(data["muscle_group"]),
            weekly_sets=validate_non_negative(data.get("weekly_sets", 0), "weekly_sets"),
            description=str(data.get("description", "")),
            priority=int(data.get("priority", 1)),
            distance=_optional_number(data, "distance"),
            one_rep_max=_optional_number(data, "one_rep_max"),
            workout=workout,
        )
    except (TypeError, ValueError) as e:
        if isinstance(e, ValidationError):
            raise
        raise ValidationError(f"Invalid exercise {data.get('name')!r}: {e}") from e


# ---------------------------------------------------------------------------
# History entries
# ---------------------------------------------------------------------------


def entry_to_dict(entry: HistoryEntry) -> dict[str, Any]:
    """Convert a history entry to a dict tagged with its category."""
    data: dict[str, Any] = {
        "id": entry.id,
        "category": entry.category,
        "date": entry.date.isoformat(timespec="seconds"),
    }
    if isinstance(entry, StrengthEntry):
        data.update(sets=entry.sets, reps=entry.reps, weight=entry.weight)
    elif isinstance(entry, EnduranceEntry):
        data.update(distance=entry.distance, time=entry.time)
        if entry.avg_heart_rate is not None:
            data["avg_heart_rate"] = entry.avg_heart_rate
    elif isinstance(entry, MobilityEntry):
        data["sets"] = entry.sets
    if entry.notes:
        data["notes"] = entry.notes
    return data


def dict_to_entry(data: dict[str, Any]) -> HistoryEntry:
    """
    Convert dict to the history entry variant named by its ``category``.

    Endurance entries written by older versions stored the distance in
    ``sets``; that shape is read as km.

    Raises:
        ValidationError: If data is invalid
    """
    _require(data, "category", "date")
    category = data["category"]
    if category == "nsuns":
        category = "strength"
    if category not in ENTRY_TYPES:
        raise ValidationError(f"Invalid entry category: {category!r}")

    when = parse_datetime(data["date"])
    common: dict[str, Any] = {"date": when, "notes": str(data.get("notes", ""))}
    if data.get("id"):
        common["id"] = str(data["id"])

    if category == "strength":
        return StrengthEntry(
            sets=_entry_number(data, "sets"),
            reps=_entry_number(data, "reps"),
            weight=_entry_number(data, "weight"),
            **common,
        )
    if category == "endurance":
        distance_key = "distance" if data.get("distance") is not None else "sets"
        hr = data.get("avg_heart_rate")
        return EnduranceEntry(
            distance=float(_entry_number(data, distance_key)),
            time=_entry_number(data, "time"),
            avg_heart_rate=int(_entry_number(data, "avg_heart_rate")) if hr is not None else None,
            **common,
        )
    return MobilityEntry(
        sets=_entry_number(data, "sets"),
        **common,
    )


def history_to_dict(history: History) -> dict[str, list[dict[str, Any]]]:
    return {
        exercise_id: [entry_to_dict(e) for e in entries]
        for exercise_id, entries in history.items()
    }


def dict_to_history(data: dict[str, Any]) -> History:
    """
    Convert the ``history`` mapping of a stored document.

    Raises:
        ValidationError: With the exercise id and position of the bad entry
    """
    if not isinstance(data, dict):
        raise ValidationError("history must be a mapping of exercise id to entries")
    history: History = {}
    for exercise_id, entries in data.items():
        parsed = []
        for index, raw in enumerate(entries or []):
            try:
                parsed.append(dict_to_entry(raw))
            except ValidationError as e:
                raise ValidationError(
                    f"Error parsing entry {index} of exercise {exercise_id}: {e}"
                ) from e
        history[str(exercise_id)] = parsed
    return history


# ---------------------------------------------------------------------------
# Settings, budgets, steps
# ---------------------------------------------------------------------------


def settings_to_dict(settings: TrackerSettings) -> dict[str, Any]:
    return {
        "training_interval": settings.training_interval,
        "one_rep_max_formula": settings.one_rep_max_formula,
        "volume_policy": settings.volume_policy,
        "daily_step_goal": settings.daily_step_goal,
    }


def dict_to_settings(data: dict[str, Any] | None) -> TrackerSettings:
    """Missing keys take their defaults."""
    data = data or {}
    known = {k: data[k] for k in settings_to_dict(TrackerSettings()) if k in data}
    try:
        return TrackerSettings(**known)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid settings: {e}") from e


def budgets_to_dict(budgets: VolumeBudgets) -> dict[str, dict[str, int]]:
    return budgets.as_dict()


def dict_to_budgets(data: dict[str, Any] | None) -> VolumeBudgets:
    """
    Convert stored budgets; an absent mapping gives the default budgets.

    Raises:
        ValidationError: If a budget is not a non-negative integer
    """
    if data is None:
        return VolumeBudgets.defaults()
    budgets: dict[str, dict[str, int]] = {}
    for category, groups in data.items():
        for group, value in (groups or {}).items():
            budgets.setdefault(str(category), {})[str(group)] = int(
                validate_non_negative(value, f"budget {category}/{group}")
            )
    return VolumeBudgets(budgets)


def steps_to_dict(steps: StepSeries) -> dict[str, int]:
    return {d.isoformat(): n for d, n in sorted(steps.daily_steps.items())}


def dict_to_steps(data: dict[str, Any] | None, daily_goal: int = 0) -> StepSeries:
    """Convert the stored ``{"YYYY-MM-DD": count}`` mapping."""
    daily = {
        validate_date(day): int(validate_non_negative(count, f"steps on {day}"))
        for day, count in (data or {}).items()
    }
    return StepSeries(daily_steps=daily, daily_goal=daily_goal)


_NSUNS_SET_RE = re.compile(r"^\s*(\d+)\s*[xX@]\s*(\d+(?:\.\d+)?)\s*%?\s*(\+)?\s*$")


def parse_nsuns_set(text: str) -> NsunsSet:
    """
    Parse one nSuns set written as ``REPSxPERCENT``, with a trailing ``+``
    for an AMRAP set.

    Examples:
        "5x75"    5 reps at 75% of 1RM
        "1x95+"   AMRAP set at 95%, at least 1 rep

    Raises:
        ValidationError: If the format is invalid
    """
    m = _NSUNS_SET_RE.match(text)
    if not m:
        raise ValidationError(
            f"Invalid nSuns set: {text!r}. Expected REPSxPERCENT, e.g. 5x75 or 1x95+"
        )
    return NsunsSet(
        reps=int(m.group(1)),
        relative_weight=float(m.group(2)),
        is_amrap=m.group(3) is not None,
    )


def parse_amrap(text: str) -> tuple[int, int]:
    """
    Parse an AMRAP result ``SET=REPS`` with a 1-based set number.

    Returns:
        (0-based set index, reps)
    """
    set_no, sep, reps = text.partition("=")
    if not sep or not set_no.strip().isdigit() or not reps.strip().isdigit():
        raise ValidationError(f"Invalid AMRAP result: {text!r}. Expected SET=REPS, e.g. 9=8")
    index = int(set_no) - 1
    if index < 0:
        raise ValidationError("AMRAP set numbers start at 1")
    return index, int(reps)
