"""
Workout template recommendations.

Each template names the muscle groups it trains in one category. Its score
is the outstanding volume it would address, with a bonus for breadth:

    score = sum(group_score) x (1 + 0.1 x number_of_groups)

where group_score is the positive remaining volume of that muscle group.
"""

from dataclasses import dataclass
from typing import Sequence

from .config import (
    TEMPLATE_GROUP_BONUS,
    TEMPLATE_LOW_PRIORITY_BELOW,
    TEMPLATE_RECOMMENDED_BELOW,
)
from .models import Exercise, entry_category_for


@dataclass(frozen=True)
class WorkoutTemplate:
    name: str
    category: str
    muscle_groups: tuple[str, ...]
    description: str = ""


DEFAULT_TEMPLATES: tuple[WorkoutTemplate, ...] = (
    WorkoutTemplate(
        "Upper Body", "strength", ("Arms", "Back", "Chest", "Shoulders"),
        "Push and pull work for the upper body",
    ),
    WorkoutTemplate(
        "Lower Body", "strength", ("Legs", "Lower Legs"),
        "Squats, hinges and calves",
    ),
    WorkoutTemplate(
        "Full Body Strength", "strength",
        ("Arms", "Back", "Chest", "Shoulders", "Legs", "Lower Legs", "Core"),
        "One session covering every strength group",
    ),
    WorkoutTemplate("Running", "endurance", ("Legs",), "Steady or interval run"),
    WorkoutTemplate(
        "Mobility & Stretching", "mobility", ("Shoulders", "Hips", "Legs"),
        "Joint mobility and stretching",
    ),
    WorkoutTemplate("Core Workout", "strength", ("Core",), "Trunk stability and abs"),
)


@dataclass(frozen=True)
class TemplateRecommendation:
    template: WorkoutTemplate
    score: float

    @property
    def label(self) -> str:
        return recommendation_label(self.score)


def recommendation_label(score: float) -> str:
    if score <= 0:
        return "All done!"
    if score < TEMPLATE_LOW_PRIORITY_BELOW:
        return "Low priority"
    if score < TEMPLATE_RECOMMENDED_BELOW:
        return "Recommended"
    return "Highly recommended"


def muscle_group_scores(
    exercises: Sequence[Exercise], remaining: dict[str, float]
) -> dict[str, dict[str, float]]:
    """
    Positive remaining volume summed per category and muscle group.

    nSuns exercises are scored under "strength".
    """
    scores: dict[str, dict[str, float]] = {}
    for exercise in exercises:
        owed = remaining.get(exercise.id, 0.0)
        if owed <= 0:
            continue
        by_group = scores.setdefault(entry_category_for(exercise.category), {})
        by_group[exercise.muscle_group] = by_group.get(exercise.muscle_group, 0.0) + owed
    return scores


def template_score(template: WorkoutTemplate, scores: dict[str, dict[str, float]]) -> float:
    by_group = scores.get(template.category, {})
    base = sum(by_group.get(g, 0.0) for g in template.muscle_groups)
    return base * (1 + len(template.muscle_groups) * TEMPLATE_GROUP_BONUS)


def recommend_templates(
    exercises: Sequence[Exercise],
    remaining: dict[str, float],
    templates: Sequence[WorkoutTemplate] = DEFAULT_TEMPLATES,
) -> list[TemplateRecommendation]:
    """
    Score templates against outstanding volume, best first.

    Args:
        exercises: All exercises
        remaining: Remaining volume by exercise id
        templates: Templates to rank

    Returns:
        Recommendations sorted by score descending (stable for ties)
    """
    scores = muscle_group_scores(exercises, remaining)
    recs = [TemplateRecommendation(t, template_score(t, scores)) for t in templates]
    return sorted(recs, key=lambda r: -r.score)
