"""
Volume Ledger: outstanding volume per exercise over the rolling interval.

Two accounting policies are available:

- "hard":    every entry dated strictly after now - interval counts in full.
             remaining = target - volume (unrounded, may be negative)
- "decayed": entries fade linearly from full weight at 0.75 x interval to
             zero at 1.25 x interval, so the remaining-volume signal has no
             cliff-edge reset at the interval boundary.
             remaining = round(target - sum(volume x weight))

A remaining volume <= 0 means the exercise is satisfied for now.
All functions are pure; ``now`` defaults to the current local time.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Iterable, Literal

from .config import (
    DECAY_LENGTH_FRACTION,
    DECAY_START_FRACTION,
    validate_training_interval,
)
from .models import Exercise, History, HistoryEntry, as_naive, entry_matches_exercise

logger = logging.getLogger(__name__)

VolumePolicy = Literal["hard", "decayed"]
VOLUME_POLICIES: tuple[str, ...] = ("hard", "decayed")


def days_ago(entry_date: datetime, now: datetime) -> int:
    """
    Whole days elapsed between an entry and ``now``.

    Truncates toward zero, so anything logged within the last 24 hours is
    0 days ago and future-dated entries give a negative count.
    """
    seconds = (as_naive(now) - as_naive(entry_date)).total_seconds()
    return int(seconds / 86400)


def decay_window(training_interval: int) -> tuple[float, float]:
    """
    Return (decay_start, decay_end) in days ago for the given interval.

    With the default fractions a 7-day interval decays between 5.25 and
    8.75 days ago.
    """
    start = DECAY_START_FRACTION * training_interval
    return start, start + DECAY_LENGTH_FRACTION * training_interval


def decay_weight(age_days: float, training_interval: int) -> float:
    """
    Weight of an entry logged ``age_days`` ago.

    w(t) = 1                              if t <= decay_start
         = 0                              if t >= decay_end
         = 1 - (t - decay_start) / decay_length   otherwise

    Args:
        age_days: Age of the entry in days
        training_interval: Interval length in days

    Returns:
        Weight in [0, 1]
    """
    start, end = decay_window(training_interval)
    if age_days <= start:
        return 1.0
    if age_days >= end:
        return 0.0
    return 1.0 - (age_days - start) / (end - start)


def _matching(entries: Iterable[HistoryEntry], exercise: Exercise) -> Iterable[HistoryEntry]:
    for entry in entries:
        if entry_matches_exercise(entry, exercise):
            yield entry
        else:
            logger.debug(
                "Skipping %s entry %s logged under %s exercise %s",
                entry.category, entry.id, exercise.category, exercise.id,
            )


def effective_volume(
    exercise: Exercise,
    entries: Iterable[HistoryEntry],
    training_interval: int,
    *,
    policy: VolumePolicy = "decayed",
    now: datetime | None = None,
) -> float:
    """
    Volume credited toward the exercise's target within the interval.

    Args:
        exercise: Owning exercise (selects the valid entry shape)
        entries: History entries for this exercise, in any order
        training_interval: Interval length in days (>= 1)
        policy: "hard" or "decayed"
        now: Reference time (default: datetime.now())

    Returns:
        Summed (and, for "decayed", weighted) volume
    """
    validate_training_interval(training_interval)
    if policy not in VOLUME_POLICIES:
        raise ValueError(f"Unknown volume policy: {policy!r}. Must be one of {VOLUME_POLICIES}")
    now = as_naive(now or datetime.now())

    total = 0.0
    if policy == "hard":
        window_start = now - timedelta(days=training_interval)
        for entry in _matching(entries, exercise):
            if entry.date > window_start:
                total += entry.volume
        return total

    _, decay_end = decay_window(training_interval)
    for entry in _matching(entries, exercise):
        age = days_ago(entry.date, now)
        if age >= decay_end:
            continue
        total += entry.volume * decay_weight(age, training_interval)
    return total


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def remaining_volume(
    exercise: Exercise,
    entries: Iterable[HistoryEntry] | None,
    training_interval: int,
    *,
    policy: VolumePolicy = "decayed",
    now: datetime | None = None,
) -> float:
    """
    Outstanding volume for one exercise.

    Example (hard policy, interval 7, target 12, three 4-set entries logged
    1, 5 and 10 days ago): 8 sets fall inside the window, remaining = 4.

    Args:
        exercise: Exercise to evaluate
        entries: Its history entries (None is treated as no history)
        training_interval: Interval length in days (>= 1)
        policy: "hard" or "decayed"
        now: Reference time (default: datetime.now())

    Returns:
        Target minus credited volume; <= 0 means satisfied
    """
    done = effective_volume(
        exercise, entries or [], training_interval, policy=policy, now=now
    )
    remaining = exercise.target_volume - done
    if policy == "decayed":
        return float(_round_half_up(remaining))
    return remaining


def remaining_by_exercise(
    exercises: Iterable[Exercise],
    history: History,
    training_interval: int,
    *,
    policy: VolumePolicy = "decayed",
    now: datetime | None = None,
) -> dict[str, float]:
    """Remaining volume keyed by exercise id; orphaned history is ignored."""
    now = now or datetime.now()
    return {
        ex.id: remaining_volume(
            ex, history.get(ex.id, []), training_interval, policy=policy, now=now
        )
        for ex in exercises
    }


def is_satisfied(remaining: float) -> bool:
    """True when no volume is owed for the current interval."""
    return remaining <= 0
