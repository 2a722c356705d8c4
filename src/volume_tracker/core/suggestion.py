"""
Workout Suggestion Engine.

Ranks exercises by outstanding volume (largest debt first), keeps a bounded
number per category section and sizes each pick:

    endurance       min(max(4, floor(distance / interval x 3)), remaining)
    strength/nsuns  min(4, remaining)
    mobility        min(3, remaining)

Exercises ranked below a section's cap are kept in an ``unused`` pool so a
removed pick can be replaced by the next-ranked exercise of that category.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Sequence

from .config import (
    ENDURANCE_MIN_SUGGESTED_DISTANCE,
    ENDURANCE_SESSION_FACTOR,
    MOBILITY_SUGGESTED_SETS,
    STRENGTH_SUGGESTED_SETS,
    SUGGESTION_CAPS,
    validate_training_interval,
)
from .ledger import VolumePolicy, remaining_by_exercise
from .models import Exercise, History

logger = logging.getLogger(__name__)

# Display order of the suggested workout sections
SECTION_ORDER: tuple[str, ...] = ("endurance", "nsuns", "strength", "mobility")
SECTION_TITLES: dict[str, str] = {
    "endurance": "Endurance",
    "nsuns": "nSuns",
    "strength": "Strength",
    "mobility": "Mobility",
}


@dataclass(frozen=True)
class SuggestionCaps:
    """
    Section sizes and the nSuns/strength muscle-group rule.

    ``exclusive_muscle_group``: when the nSuns pick trains this group, the
    strength picks are restricted to it; otherwise strength picks skip it.
    Set to None to disable the rule.
    """

    endurance: int = SUGGESTION_CAPS["endurance"]
    nsuns: int = SUGGESTION_CAPS["nsuns"]
    strength: int = SUGGESTION_CAPS["strength"]
    mobility: int = SUGGESTION_CAPS["mobility"]
    exclusive_muscle_group: str | None = "Legs"

    def __post_init__(self) -> None:
        for name in SECTION_ORDER:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cap must be non-negative")

    def cap_for(self, category: str) -> int:
        return getattr(self, category)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SuggestionCaps":
        """Build caps from a config mapping, ignoring unknown keys."""
        known = {k: data[k] for k in (*SECTION_ORDER, "exclusive_muscle_group") if k in data}
        for k in SECTION_ORDER:
            if k in known:
                known[k] = int(known[k])
        return cls(**known)


@dataclass(frozen=True)
class SuggestedExercise:
    """One pick in the suggested workout."""

    exercise: Exercise
    remaining: float
    suggested_amount: float

    @property
    def unit(self) -> str:
        return "km" if self.exercise.category == "endurance" else "sets"


@dataclass(frozen=True)
class WorkoutSection:
    """A titled group of picks for one category."""

    category: str
    items: tuple[SuggestedExercise, ...]

    @property
    def title(self) -> str:
        return SECTION_TITLES[self.category]


@dataclass(frozen=True)
class SuggestedWorkout:
    """Grouped suggestion plus the ranked replacements for each category."""

    sections: tuple[WorkoutSection, ...] = ()
    unused: dict[str, tuple[SuggestedExercise, ...]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(s.items for s in self.sections)

    def exercise_ids(self) -> list[str]:
        return [item.exercise.id for s in self.sections for item in s.items]

    def section(self, category: str) -> WorkoutSection | None:
        for s in self.sections:
            if s.category == category:
                return s
        return None

    def remove(self, exercise_id: str) -> "SuggestedWorkout":
        """
        Drop a pick and pull the next-ranked unused exercise into its place.

        Returns a new SuggestedWorkout; the receiver is not modified.
        Unknown ids return the workout unchanged.
        """
        target = None
        for s in self.sections:
            if any(i.exercise.id == exercise_id for i in s.items):
                target = s
                break
        if target is None:
            logger.warning("Exercise %s is not part of the suggested workout", exercise_id)
            return self

        items = [i for i in target.items if i.exercise.id != exercise_id]
        pool = self.unused.get(target.category, ())
        if pool:
            items.append(pool[0])
            pool = pool[1:]
        else:
            logger.debug("No replacement left for %s", target.category)

        sections = []
        for s in self.sections:
            if s is target:
                if items:
                    sections.append(WorkoutSection(s.category, tuple(items)))
            else:
                sections.append(s)

        unused = dict(self.unused)
        unused[target.category] = pool
        return replace(self, sections=tuple(sections), unused=unused)


def suggested_amount(exercise: Exercise, remaining: float, training_interval: int) -> float:
    """
    Amount to do in one session: sets, or km for endurance.

    Args:
        exercise: Exercise being suggested
        remaining: Its outstanding volume
        training_interval: Interval length in days

    Returns:
        Suggested amount, never more than ``remaining`` nor below 0
    """
    if exercise.category == "endurance":
        per_session = math.floor(
            exercise.target_volume / training_interval * ENDURANCE_SESSION_FACTOR
        )
        amount = min(max(ENDURANCE_MIN_SUGGESTED_DISTANCE, per_session), remaining)
    elif exercise.category in ("strength", "nsuns"):
        amount = min(STRENGTH_SUGGESTED_SETS, remaining)
    elif exercise.category == "mobility":
        amount = min(MOBILITY_SUGGESTED_SETS, remaining)
    else:
        amount = 0
    return max(0.0, float(amount))


def rank_exercises(
    exercises: Sequence[Exercise],
    remaining: dict[str, float],
    category: str,
) -> list[Exercise]:
    """Exercises of one category that still owe volume, largest debt first."""
    owing = [
        e for e in exercises
        if e.category == category and remaining.get(e.id, 0) > 0
    ]
    return sorted(owing, key=lambda e: (-remaining[e.id], e.name))


def suggest_workout(
    exercises: Sequence[Exercise],
    history: History,
    training_interval: int,
    *,
    caps: SuggestionCaps | None = None,
    policy: VolumePolicy = "decayed",
    now: datetime | None = None,
    remaining: dict[str, float] | None = None,
) -> SuggestedWorkout:
    """
    Build the suggested workout from outstanding volume.

    Args:
        exercises: All exercises
        history: Entries keyed by exercise id
        training_interval: Interval length in days (>= 1)
        caps: Section sizes (default: SuggestionCaps())
        policy: Volume ledger policy
        now: Reference time (default: datetime.now())
        remaining: Precomputed remaining volume by id (skips the ledger)

    Returns:
        SuggestedWorkout; empty when nothing is owed
    """
    validate_training_interval(training_interval)
    caps = caps or SuggestionCaps()
    exercises = [e for e in exercises if e.target_volume > 0]
    if remaining is None:
        remaining = remaining_by_exercise(
            exercises, history, training_interval, policy=policy, now=now
        )

    ranked = {c: rank_exercises(exercises, remaining, c) for c in SECTION_ORDER}

    nsuns_picks = ranked["nsuns"][: caps.nsuns]
    group = caps.exclusive_muscle_group
    if group is not None:
        if any(e.muscle_group == group for e in nsuns_picks):
            ranked["strength"] = [e for e in ranked["strength"] if e.muscle_group == group]
        else:
            ranked["strength"] = [e for e in ranked["strength"] if e.muscle_group != group]

    def _pick(e: Exercise) -> SuggestedExercise:
        return SuggestedExercise(
            exercise=e,
            remaining=remaining[e.id],
            suggested_amount=suggested_amount(e, remaining[e.id], training_interval),
        )

    sections: list[WorkoutSection] = []
    unused: dict[str, tuple[SuggestedExercise, ...]] = {}
    for category in SECTION_ORDER:
        cap = caps.cap_for(category)
        picks = tuple(_pick(e) for e in ranked[category][:cap])
        unused[category] = tuple(_pick(e) for e in ranked[category][cap:])
        if picks:
            sections.append(WorkoutSection(category, picks))

    logger.debug(
        "Suggested %d exercise(s) in %d section(s)",
        sum(len(s.items) for s in sections), len(sections),
    )
    return SuggestedWorkout(sections=tuple(sections), unused=unused)
