"""
Configuration constants for the volume accounting model.

All adjustable parameters are centralized here for easy tuning.
Values can be overridden per user through ~/.volume-tracker/tracker.yaml
(see core/engine/config_loader.py).
"""

from typing import Final

# =============================================================================
# TRAINING INTERVAL
# =============================================================================

DEFAULT_TRAINING_INTERVAL: Final[int] = 7  # days
MIN_TRAINING_INTERVAL: Final[int] = 1
MAX_TRAINING_INTERVAL: Final[int] = 30

# =============================================================================
# DECAY WEIGHTING (Volume Ledger, policy "decayed")
# =============================================================================

DECAY_START_FRACTION: Final[float] = 0.75  # full weight up to 0.75 x interval
DECAY_LENGTH_FRACTION: Final[float] = 0.50  # linear fade over 0.5 x interval

DEFAULT_VOLUME_POLICY: Final[str] = "decayed"  # "decayed" | "hard"

# =============================================================================
# SUGGESTED WORKOUT
# =============================================================================

# Maximum picks per category section
SUGGESTION_CAPS: Final[dict[str, int]] = {
    "endurance": 1,
    "nsuns": 1,
    "strength": 4,
    "mobility": 4,
}

STRENGTH_SUGGESTED_SETS: Final[int] = 4
MOBILITY_SUGGESTED_SETS: Final[int] = 3
ENDURANCE_MIN_SUGGESTED_DISTANCE: Final[float] = 4.0
ENDURANCE_SESSION_FACTOR: Final[float] = 3.0  # sessions' worth of daily distance

# =============================================================================
# VOLUME BUDGETS (Priority Volume Allocator)
# =============================================================================

DEFAULT_CATEGORY_BUDGET: Final[dict[str, int]] = {
    "strength": 12,
    "mobility": 12,
    "endurance": 20,
}
FALLBACK_BUDGET: Final[int] = 12

DEFAULT_MUSCLE_GROUP_BUDGETS: Final[dict[str, dict[str, int]]] = {
    "strength": {
        "Arms": 8,
        "Back": 20,
        "Chest": 15,
        "Core": 8,
        "Legs": 20,
        "Shoulders": 8,
        "Lower Legs": 4,
    },
    "mobility": {
        "Upper Body": 20,
        "Lower Body": 30,
    },
    "endurance": {
        "Full Body": 30,
    },
}

MIN_PRIORITY: Final[int] = 0
MAX_PRIORITY: Final[int] = 3
DEFAULT_PRIORITY: Final[int] = 1

# =============================================================================
# ONE-REP MAX / NSUNS
# =============================================================================

ONE_REP_MAX_FORMULAS: Final[tuple[str, ...]] = ("brzycki", "epley", "lander")
DEFAULT_ONE_REP_MAX_FORMULA: Final[str] = "brzycki"

BRZYCKI_A: Final[float] = 1.0278
BRZYCKI_B: Final[float] = 0.0278
EPLEY_K: Final[float] = 0.0333
LANDER_A: Final[float] = 101.3
LANDER_B: Final[float] = 2.67123

NSUNS_WEIGHT_INCREMENT_KG: Final[float] = 2.5  # plates round down to this step
NSUNS_PROGRESSION_KG: Final[float] = 2.0  # 1RM bump after a completed session

# =============================================================================
# STATISTICS
# =============================================================================

DEFAULT_DAILY_STEP_GOAL: Final[int] = 10_000
SCORE_MAX: Final[int] = 100

# Traffic-light thresholds for the combined score display
SCORE_GOOD: Final[int] = 85
SCORE_FAIR: Final[int] = 70

# =============================================================================
# TEMPLATE RECOMMENDATION LABELS
# =============================================================================

TEMPLATE_LOW_PRIORITY_BELOW: Final[float] = 5.0
TEMPLATE_RECOMMENDED_BELOW: Final[float] = 15.0
TEMPLATE_GROUP_BONUS: Final[float] = 0.10  # +10% per muscle group covered


def default_budget_for(category: str) -> int:
    """Per-category volume used when a muscle group has no explicit budget."""
    return DEFAULT_CATEGORY_BUDGET.get(category, FALLBACK_BUDGET)


def validate_training_interval(training_interval: int) -> int:
    """
    Check the rolling interval is a usable number of days.

    Args:
        training_interval: Interval length in days

    Returns:
        The interval unchanged

    Raises:
        ValueError: If the interval is below MIN_TRAINING_INTERVAL
    """
    if training_interval < MIN_TRAINING_INTERVAL:
        raise ValueError(
            f"training_interval must be >= {MIN_TRAINING_INTERVAL}, got {training_interval}"
        )
    return training_interval
