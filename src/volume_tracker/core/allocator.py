"""
Priority Volume Allocator.

Distributes a muscle group's volume budget B over its exercises in
proportion to priority, keeping the distributed total exactly equal to B:

    share_i   = p_i / sum(p) x B
    base_i    = max(1, floor(share_i))          (floor of 1 only when B >= n)
    remainder = B - sum(base)

Leftover units go one at a time to the largest fractional parts
(share_i - floor(share_i)), ties by input order. Priority-0 exercises are
excluded and get zero volume.

Budgets live in an explicit VolumeBudgets value owned by the caller.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Sequence

from .config import DEFAULT_MUSCLE_GROUP_BUDGETS, default_budget_for
from .models import Exercise

logger = logging.getLogger(__name__)


def _even_split(count: int, budget: int) -> list[int]:
    base, extra = divmod(budget, count)
    return [base + (1 if i < extra else 0) for i in range(count)]


def distribute(priorities: Sequence[int], budget: int) -> list[int]:
    """
    Split ``budget`` units over weights using the largest-remainder method.

    Args:
        priorities: Positive weights, in a stable order
        budget: Units to distribute (>= 0)

    Returns:
        Allocation per weight; sums to ``budget`` whenever priorities is
        non-empty. Each entry is >= 1 when budget >= len(priorities).
    """
    if budget < 0:
        raise ValueError(f"budget must be non-negative, got {budget}")
    budget = int(budget)
    count = len(priorities)
    if count == 0:
        return []

    total = sum(priorities)
    if total <= 0:
        return _even_split(count, budget)

    # Exact integer shares: floor(p / total x B) and its remainder numerator
    floors = [p * budget // total for p in priorities]
    fractions = [p * budget % total for p in priorities]
    floor_one = budget >= count
    alloc = [max(1, f) if floor_one else f for f in floors]

    remainder = budget - sum(alloc)
    if remainder > 0:
        order = sorted(range(count), key=lambda i: (-fractions[i], i))
        for i in order[:remainder]:
            alloc[i] += 1
    elif remainder < 0:
        # Only reachable through the floor of 1: hand units back from the
        # exercises that were closest to rounding down.
        order = sorted(range(count), key=lambda i: (fractions[i], -i))
        while remainder < 0:
            taken = False
            for i in order:
                if remainder == 0:
                    break
                if alloc[i] > 1:
                    alloc[i] -= 1
                    remainder += 1
                    taken = True
            if not taken:
                break

    return alloc


def allocate(exercises: Sequence[Exercise], budget: int) -> list[Exercise]:
    """
    Rewrite ``weekly_sets`` for one muscle group's exercises.

    Example: priorities [3, 2, 1] with budget 12 give [6, 4, 2];
    priorities [1, 1, 1] with budget 10 give [4, 3, 3].

    Args:
        exercises: Exercises sharing a category and muscle group
        budget: Total volume for the group (>= 0)

    Returns:
        New Exercise objects in the same order; inputs are not modified
    """
    if budget < 0:
        raise ValueError(f"budget must be non-negative, got {budget}")
    selected = [i for i, e in enumerate(exercises) if e.priority > 0]
    shares = distribute([exercises[i].priority for i in selected], budget)
    by_index = dict(zip(selected, shares))

    logger.debug(
        "Allocated budget %d over %d selected exercise(s): %s",
        budget, len(selected), shares,
    )
    return [replace(e, weekly_sets=by_index.get(i, 0)) for i, e in enumerate(exercises)]


def allocate_group(
    exercises: Sequence[Exercise],
    category: str,
    muscle_group: str,
    budget: int,
) -> list[Exercise]:
    """Reallocate one (category, muscle group) and return the whole list."""
    indices = [
        i for i, e in enumerate(exercises)
        if e.category == category and e.muscle_group == muscle_group
    ]
    updated = allocate([exercises[i] for i in indices], budget)
    result = list(exercises)
    for i, new in zip(indices, updated):
        result[i] = new
    return result


@dataclass(frozen=True)
class VolumeBudgets:
    """
    Per-category, per-muscle-group volume budgets.

    Immutable: ``with_budget`` returns a new instance. Groups without an
    explicit budget fall back to the category default (20 for endurance,
    12 otherwise).
    """

    budgets: Mapping[str, Mapping[str, int]] = field(default_factory=dict)

    @classmethod
    def defaults(cls) -> "VolumeBudgets":
        return cls({c: dict(g) for c, g in DEFAULT_MUSCLE_GROUP_BUDGETS.items()})

    def get(self, category: str, muscle_group: str) -> int:
        group_budgets = self.budgets.get(category, {})
        if muscle_group in group_budgets:
            return int(group_budgets[muscle_group])
        return default_budget_for(category)

    def with_budget(self, category: str, muscle_group: str, value: int) -> "VolumeBudgets":
        if value < 0:
            raise ValueError(f"budget must be non-negative, got {value}")
        new = {c: dict(g) for c, g in self.budgets.items()}
        new.setdefault(category, {})[muscle_group] = int(value)
        return VolumeBudgets(new)

    def as_dict(self) -> dict[str, dict[str, int]]:
        return {c: dict(g) for c, g in self.budgets.items()}


def muscle_groups(exercises: Iterable[Exercise]) -> list[tuple[str, str]]:
    """Distinct (category, muscle_group) pairs in first-seen order."""
    seen: dict[tuple[str, str], None] = {}
    for e in exercises:
        seen.setdefault((e.category, e.muscle_group), None)
    return list(seen)


def reallocate(exercises: Sequence[Exercise], budgets: VolumeBudgets) -> list[Exercise]:
    """Recompute every muscle group's allocation from scratch."""
    result = list(exercises)
    for category, group in muscle_groups(exercises):
        result = allocate_group(result, category, group, budgets.get(category, group))
    return result
