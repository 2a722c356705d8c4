"""
YAML → CatalogEntry loader and onboarding plan builder.

The bundled ``src/volume_tracker/catalog.yaml`` lists suggested exercises
per category. Entries in ``~/.volume-tracker/catalog.yaml`` replace bundled
entries with the same name and category; new names are appended.

Usage:
    from volume_tracker.core.catalog import load_catalog, build_plan
    catalog = load_catalog()
    plan = build_plan(catalog, {"Squat": 2, "Bench Press": 1}, budgets)
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

import yaml

from .allocator import VolumeBudgets, reallocate
from .config import MAX_PRIORITY, MIN_PRIORITY
from .models import CATEGORIES, Exercise

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS: frozenset[str] = frozenset({"name", "muscle_group"})


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    category: str
    muscle_group: str
    description: str = ""


def entry_from_dict(category: str, d: dict) -> CatalogEntry:
    """Convert a raw dict (from YAML) to a CatalogEntry.

    Raises ValueError if a required field is absent or the category is unknown.
    """
    if category not in CATEGORIES:
        raise ValueError(f"Unknown catalog category: {category!r}")
    if not isinstance(d, dict):
        raise ValueError(f"Catalog entry must be a mapping, got {type(d).__name__}")
    missing = _REQUIRED_FIELDS - set(d)
    if missing:
        raise ValueError(f"Catalog entry missing fields: {sorted(missing)}")
    return CatalogEntry(
        name=str(d["name"]),
        category=category,
        muscle_group=str(d["muscle_group"]),
        description=str(d.get("description") or ""),
    )


def _load_yaml_file(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _entries_from_raw(raw: dict, source: str) -> list[CatalogEntry]:
    entries: list[CatalogEntry] = []
    for category, items in raw.items():
        for item in items or []:
            try:
                entries.append(entry_from_dict(str(category), item))
            except ValueError as exc:
                warnings.warn(
                    f"volume-tracker: skipping catalog entry in {source}: {exc}",
                    stacklevel=3,
                )
    return entries


def get_bundled_catalog_path() -> Path:
    # catalog.py lives at src/volume_tracker/core/
    return Path(__file__).parent.parent / "catalog.yaml"


def get_user_catalog_path() -> Path | None:
    """Return ~/.volume-tracker/catalog.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".volume-tracker" / "catalog.yaml"
    return p if p.exists() else None


def load_catalog(user_path: Path | None = None) -> list[CatalogEntry]:
    """
    Return the suggested exercise catalog, bundled entries first.

    A user file that cannot be parsed is ignored with a warning.
    """
    bundled = get_bundled_catalog_path()
    entries = _entries_from_raw(_load_yaml_file(bundled), bundled.name)

    user = user_path if user_path is not None else get_user_catalog_path()
    if user is None or not user.exists():
        return entries

    try:
        user_raw = _load_yaml_file(user)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"volume-tracker: ignoring {user}: {exc}", stacklevel=2)
        return entries

    merged = {(e.category, e.name): e for e in entries}
    for e in _entries_from_raw(user_raw, str(user)):
        merged[(e.category, e.name)] = e
    return list(merged.values())


def build_plan(
    catalog: Sequence[CatalogEntry],
    selections: Mapping[str, int],
    budgets: VolumeBudgets,
) -> list[Exercise]:
    """
    Create exercises for the selected catalog entries and size their targets.

    Args:
        catalog: Available entries
        selections: Priority by exercise name; names not listed are skipped
        budgets: Volume budgets used to allocate each muscle group

    Returns:
        New exercises (fresh ids) with ``weekly_sets`` allocated

    Raises:
        ValueError: If a selected name is not in the catalog or a priority is
            out of range
    """
    by_name = {e.name.lower(): e for e in catalog}
    unknown = [n for n in selections if n.lower() not in by_name]
    if unknown:
        raise ValueError(f"Not in catalog: {', '.join(sorted(unknown))}")

    exercises = []
    for name, priority in selections.items():
        if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
            raise ValueError(
                f"priority for {name!r} must be between {MIN_PRIORITY} and {MAX_PRIORITY}"
            )
        entry = by_name[name.lower()]
        exercises.append(
            Exercise(
                name=entry.name,
                category=entry.category,  # type: ignore[arg-type]
                muscle_group=entry.muscle_group,
                description=entry.description,
                priority=priority,
            )
        )

    logger.debug("Building plan from %d selected catalog exercise(s)", len(exercises))
    return reallocate(exercises, budgets)
