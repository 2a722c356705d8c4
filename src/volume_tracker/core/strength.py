"""
One-rep-max estimates and the nSuns percentage-of-1RM scheme.

Formulas (w = weight, r = reps), each floored to whole kg:

    brzycki:  w / (1.0278 - 0.0278 r)
    epley:    w x (1 + 0.0333 r)
    lander:   100 w / (101.3 - 2.67123 r)

nSuns set weight = floor(relative% x 1RM / 100 / 2.5) x 2.5
"""

import math
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Literal

from .config import (
    BRZYCKI_A,
    BRZYCKI_B,
    EPLEY_K,
    LANDER_A,
    LANDER_B,
    NSUNS_PROGRESSION_KG,
    NSUNS_WEIGHT_INCREMENT_KG,
    ONE_REP_MAX_FORMULAS,
)
from .models import Exercise, HistoryEntry, NsunsSet, StrengthEntry, as_number

OneRepMaxFormula = Literal["brzycki", "epley", "lander"]


def one_rep_max(weight: float, reps: float, formula: OneRepMaxFormula = "brzycki") -> int:
    """
    Estimate 1RM from a set of ``reps`` at ``weight``.

    Args:
        weight: Load lifted in kg
        reps: Reps performed
        formula: "brzycki" | "epley" | "lander"

    Returns:
        Estimated 1RM in whole kg; 0 when the formula's denominator is not
        positive (rep counts far beyond its valid range)
    """
    if formula not in ONE_REP_MAX_FORMULAS:
        raise ValueError(f"Unknown 1RM formula: {formula!r}. Must be one of {ONE_REP_MAX_FORMULAS}")
    w = as_number(weight)
    r = as_number(reps)

    if formula == "brzycki":
        denom = BRZYCKI_A - BRZYCKI_B * r
        return math.floor(w / denom) if denom > 0 else 0
    if formula == "epley":
        return math.floor(w * (1 + EPLEY_K * r))
    denom = LANDER_A - LANDER_B * r
    return math.floor(100 * w / denom) if denom > 0 else 0


def best_one_rep_max(
    entries: Iterable[HistoryEntry], formula: OneRepMaxFormula = "brzycki"
) -> int:
    """Highest estimated 1RM over strength entries; 0 if there are none."""
    estimates = [
        one_rep_max(e.weight, e.reps, formula)
        for e in entries
        if isinstance(e, StrengthEntry)
    ]
    return max(estimates, default=0)


def nsuns_set_weight(nsuns_set: NsunsSet, one_rep_max_kg: float | None) -> float:
    """Working weight for one nSuns set, rounded down to the plate increment."""
    base = as_number(one_rep_max_kg) or 1.0
    weight = nsuns_set.relative_weight * base / 100
    return math.floor(weight / NSUNS_WEIGHT_INCREMENT_KG) * NSUNS_WEIGHT_INCREMENT_KG


def nsuns_session_entries(
    exercise: Exercise,
    amrap_reps: dict[int, int] | None = None,
    now: datetime | None = None,
) -> list[StrengthEntry]:
    """
    Strength entries for one completed nSuns workout, one per set.

    Args:
        exercise: An nSuns exercise with ``workout`` and ``one_rep_max``
        amrap_reps: Reported reps for AMRAP sets, keyed by 0-based set index
        now: Timestamp for the entries (default: datetime.now())

    Returns:
        One StrengthEntry per prescribed set, each counting as a single set
    """
    if exercise.category != "nsuns":
        raise ValueError(f"Exercise {exercise.name!r} is not an nSuns exercise")
    amrap_reps = amrap_reps or {}
    now = now or datetime.now()

    entries = []
    for index, s in enumerate(exercise.workout):
        reps = s.reps
        if s.is_amrap and amrap_reps.get(index, 0) > 0:
            reps = amrap_reps[index]
        entries.append(
            StrengthEntry(
                date=now,
                sets=1,
                reps=reps,
                weight=nsuns_set_weight(s, exercise.one_rep_max),
                notes=f"Set {index + 1} of nSuns workout{' (AMRAP)' if s.is_amrap else ''}",
            )
        )
    return entries


def progress_one_rep_max(exercise: Exercise) -> Exercise:
    """Copy of the exercise with its 1RM raised after a completed session."""
    current = as_number(exercise.one_rep_max)
    return replace(exercise, one_rep_max=float(math.floor(current + NSUNS_PROGRESSION_KG)))
