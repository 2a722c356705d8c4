"""
Aggregate statistics: target vs. actual load per category.

Per category (strength, endurance, mobility; nSuns counts as strength):

    day_index   = interval - days_ago - 1        (today is interval - 1)
    daily_load  = volume bucketed by day_index over the last interval days
    MA          = trailing mean (window = interval) over a 2 x interval
                  series, keeping the last interval points
    percentage  = actual / target x 100          (0 when target is 0)

Chart series use hard-window semantics; no decay weighting is applied here.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence

from .config import SCORE_MAX, validate_training_interval
from .ledger import days_ago
from .models import Exercise, History, as_naive, as_number, entry_category_for, entry_matches_exercise

logger = logging.getLogger(__name__)

STAT_CATEGORIES: tuple[str, ...] = ("strength", "endurance", "mobility")


@dataclass
class StepSeries:
    """Daily step counts from an external health platform."""

    daily_steps: dict[date, int] = field(default_factory=dict)
    daily_goal: int = 0


@dataclass
class CategoryStats:
    """Interval load summary and chart series for one category."""

    category: str
    training_interval: int
    target_load: float = 0.0
    actual_load: float = 0.0
    daily_load: list[float] = field(default_factory=list)
    moving_average: list[float] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        return percentage_of(self.actual_load, self.target_load)

    @property
    def daily_target(self) -> float:
        """Target load per day if spread evenly over the interval."""
        return self.target_load / self.training_interval

    def daily_percentages(self) -> list[float]:
        """Daily load as a percentage of the per-day target."""
        return [percentage_of(v, self.daily_target) for v in self.daily_load]

    def moving_average_percentages(self) -> list[float]:
        """Moving average as a percentage of the per-day target."""
        return [percentage_of(v, self.daily_target) for v in self.moving_average]

    @property
    def has_data(self) -> bool:
        return any(v > 0 for v in self.daily_load)


@dataclass
class IntervalStats:
    """Everything the statistics view needs for one interval."""

    training_interval: int
    categories: dict[str, CategoryStats]
    steps_percentage: float | None = None

    def percentages(self) -> list[float]:
        values = [self.categories[c].percentage for c in STAT_CATEGORIES]
        if self.steps_percentage is not None:
            values.append(self.steps_percentage)
        return values

    @property
    def combined_score(self) -> int:
        return combined_score(self.percentages())


def percentage_of(actual: float, target: float) -> float:
    """actual / target x 100, or 0.0 when the target is zero or invalid."""
    actual = as_number(actual)
    target = as_number(target)
    if target <= 0:
        return 0.0
    return actual / target * 100.0


def moving_average(series: Sequence[float], window: int) -> list[float]:
    """
    Trailing simple moving average truncated to the last ``window`` points.

    MA[i] = mean(series[max(0, i - window + 1) .. i])

    Args:
        series: Input values
        window: Window size (>= 1)

    Returns:
        List of length min(window, len(series)); all zeros if any value is NaN
    """
    if window < 1:
        raise ValueError("window must be >= 1")
    if any(isinstance(v, float) and math.isnan(v) for v in series):
        return [0.0] * window

    result: list[float] = []
    running = 0.0
    for i, value in enumerate(series):
        running += value
        if i >= window:
            running -= series[i - window]
        result.append(running / min(i + 1, window))
    return result[-window:]


def combined_score(percentages: Iterable[float]) -> int:
    """
    Average completion across categories, rounded and clamped to [0, 100].

    Args:
        percentages: Per-category completion percentages

    Returns:
        Integer score; 0 when no percentages are given
    """
    values = [as_number(p) for p in percentages]
    if not values:
        return 0
    score = int(math.floor(sum(values) / len(values) + 0.5))
    return max(0, min(SCORE_MAX, score))


def _bucket(
    exercises: Sequence[Exercise],
    history: History,
    length: int,
    now: datetime,
) -> dict[str, list[float]]:
    buckets = {c: [0.0] * length for c in STAT_CATEGORIES}
    for exercise in exercises:
        series = buckets[entry_category_for(exercise.category)]
        for entry in history.get(exercise.id, []):
            if not entry_matches_exercise(entry, exercise):
                continue
            day_index = length - days_ago(entry.date, now) - 1
            if 0 <= day_index < length:
                series[day_index] += entry.volume
    return buckets


def steps_percentage(steps: StepSeries, training_interval: int, now: datetime) -> float:
    """Steps walked in the interval as a percentage of goal x interval."""
    today = as_naive(now).date()
    walked = 0.0
    for day, count in steps.daily_steps.items():
        age = (today - day).days
        if 0 <= age < training_interval:
            walked += as_number(count)
    return percentage_of(walked, as_number(steps.daily_goal) * training_interval)


def compute_interval_stats(
    exercises: Sequence[Exercise],
    history: History,
    training_interval: int,
    *,
    now: datetime | None = None,
    steps: StepSeries | None = None,
) -> IntervalStats:
    """
    Roll up per-category target and actual load for the current interval.

    History keyed by ids that are not in ``exercises`` is ignored.

    Args:
        exercises: All exercises
        history: Entries keyed by exercise id
        training_interval: Interval length in days (>= 1)
        now: Reference time (default: datetime.now())
        steps: Optional external step counts, reported as an extra percentage

    Returns:
        IntervalStats with one CategoryStats per category
    """
    validate_training_interval(training_interval)
    now = as_naive(now or datetime.now())

    orphans = set(history) - {e.id for e in exercises}
    if orphans:
        logger.debug("Ignoring history for %d unknown exercise(s)", len(orphans))

    daily = _bucket(exercises, history, training_interval, now)
    extended = _bucket(exercises, history, training_interval * 2, now)

    categories: dict[str, CategoryStats] = {}
    for category in STAT_CATEGORIES:
        target = sum(
            e.target_volume for e in exercises if entry_category_for(e.category) == category
        )
        categories[category] = CategoryStats(
            category=category,
            training_interval=training_interval,
            target_load=max(target, 0.0),
            actual_load=sum(daily[category]),
            daily_load=[max(v, 0.0) for v in daily[category]],
            moving_average=moving_average(extended[category], training_interval),
        )

    step_pct = None
    if steps is not None:
        step_pct = steps_percentage(steps, training_interval, now)

    return IntervalStats(
        training_interval=training_interval,
        categories=categories,
        steps_percentage=step_pct,
    )
