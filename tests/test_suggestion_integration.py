"""
Integration tests for the suggested workout, template ranking, list view
and catalog onboarding.

Each test builds a small plan in memory and checks the end-to-end result.
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from volume_tracker.core.allocator import VolumeBudgets
from volume_tracker.core.catalog import build_plan, entry_from_dict, load_catalog
from volume_tracker.core.engine.config_loader import (
    config_from_dict,
    load_tracker_config,
)
from volume_tracker.core.listing import list_exercises
from volume_tracker.core.models import EnduranceEntry, Exercise, StrengthEntry
from volume_tracker.core.suggestion import (
    SuggestionCaps,
    suggest_workout,
    suggested_amount,
)
from volume_tracker.core.templates import (
    recommend_templates,
    recommendation_label,
)

NOW = datetime(2024, 6, 15, 12, 0)


def _ex(name, muscle_group="Chest", weekly_sets=10, category="strength", **kwargs) -> Exercise:
    return Exercise(
        name=name,
        category=category,
        muscle_group=muscle_group,
        weekly_sets=weekly_sets,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Suggested workout
# ---------------------------------------------------------------------------


class TestSuggestWorkout:
    def test_ranked_by_remaining_and_capped(self):
        exercises = [_ex(f"Ex{i}", weekly_sets=i + 1) for i in range(6)]
        workout = suggest_workout(exercises, {}, 7, now=NOW)
        strength = workout.section("strength")
        assert strength is not None
        assert [i.exercise.name for i in strength.items] == ["Ex5", "Ex4", "Ex3", "Ex2"]
        assert [i.exercise.name for i in workout.unused["strength"]] == ["Ex1", "Ex0"]

    def test_history_reduces_debt(self):
        bench = _ex("Bench", weekly_sets=10)
        row = _ex("Row", "Back", weekly_sets=6)
        history = {bench.id: [StrengthEntry(date=NOW - timedelta(days=1), sets=8)]}
        workout = suggest_workout([bench, row], history, 7, now=NOW)
        items = workout.section("strength").items
        # Row owes 6, Bench owes 2
        assert [i.exercise.name for i in items] == ["Row", "Bench"]
        assert [i.suggested_amount for i in items] == [4.0, 2.0]

    def test_satisfied_and_untargeted_are_left_out(self):
        done = _ex("Done", weekly_sets=4)
        idle = _ex("Idle", weekly_sets=0)
        history = {done.id: [StrengthEntry(date=NOW, sets=4)]}
        workout = suggest_workout([done, idle], history, 7, now=NOW)
        assert workout.is_empty
        assert workout.sections == ()

    def test_section_order(self):
        exercises = [
            _ex("Stretch", "Upper Body", 6, "mobility"),
            _ex("Bench", "Chest", 10),
            _ex("Run", "Full Body", 0, "endurance", distance=20.0),
            _ex("Bench nSuns", "Chest", 9, "nsuns", one_rep_max=100.0),
        ]
        workout = suggest_workout(exercises, {}, 7, now=NOW)
        assert [s.category for s in workout.sections] == ["endurance", "nsuns", "strength", "mobility"]
        assert [s.title for s in workout.sections] == ["Endurance", "nSuns", "Strength", "Mobility"]

    def test_precomputed_remaining_skips_ledger(self):
        a, b = _ex("A"), _ex("B")
        workout = suggest_workout([a, b], {}, 7, remaining={a.id: 1, b.id: 0})
        assert workout.exercise_ids() == [a.id]

    def test_custom_caps(self):
        exercises = [_ex(f"Ex{i}") for i in range(5)]
        workout = suggest_workout(exercises, {}, 7, caps=SuggestionCaps(strength=2), now=NOW)
        assert len(workout.section("strength").items) == 2

    def test_negative_cap_raises(self):
        with pytest.raises(ValueError):
            SuggestionCaps(mobility=-1)


class TestExclusiveMuscleGroup:
    @pytest.fixture
    def strength(self):
        return [
            _ex("Squat", "Legs", 12),
            _ex("Leg Press", "Legs", 8),
            _ex("Bench", "Chest", 10),
            _ex("Row", "Back", 6),
        ]

    def _names(self, workout):
        return [i.exercise.name for i in workout.section("strength").items]

    def test_legs_nsuns_restricts_strength_to_legs(self, strength):
        nsuns = _ex("Squat nSuns", "Legs", 9, "nsuns", one_rep_max=140.0)
        workout = suggest_workout([nsuns, *strength], {}, 7, now=NOW)
        assert self._names(workout) == ["Squat", "Leg Press"]

    def test_other_nsuns_excludes_legs(self, strength):
        nsuns = _ex("Bench nSuns", "Chest", 9, "nsuns", one_rep_max=100.0)
        workout = suggest_workout([nsuns, *strength], {}, 7, now=NOW)
        assert self._names(workout) == ["Bench", "Row"]

    def test_no_nsuns_pick_excludes_legs(self, strength):
        workout = suggest_workout(strength, {}, 7, now=NOW)
        assert self._names(workout) == ["Bench", "Row"]

    def test_rule_disabled(self, strength):
        caps = SuggestionCaps(exclusive_muscle_group=None)
        workout = suggest_workout(strength, {}, 7, caps=caps, now=NOW)
        assert self._names(workout) == ["Squat", "Bench", "Leg Press", "Row"]


class TestRemoveAndReplace:
    def test_replacement_comes_from_same_category(self):
        exercises = [_ex(f"Ex{i}", weekly_sets=10 - i) for i in range(6)]
        workout = suggest_workout(exercises, {}, 7, now=NOW)
        first = workout.section("strength").items[0].exercise

        updated = workout.remove(first.id)
        names = [i.exercise.name for i in updated.section("strength").items]
        assert names == ["Ex1", "Ex2", "Ex3", "Ex4"]
        assert [i.exercise.name for i in updated.unused["strength"]] == ["Ex5"]
        # original untouched
        assert workout.section("strength").items[0].exercise is first

    def test_section_dropped_when_pool_empty(self):
        stretch = _ex("Stretch", "Upper Body", 6, "mobility")
        bench = _ex("Bench")
        workout = suggest_workout([stretch, bench], {}, 7, now=NOW)
        updated = workout.remove(stretch.id)
        assert updated.section("mobility") is None
        assert updated.exercise_ids() == [bench.id]

    def test_unknown_id_is_noop(self):
        workout = suggest_workout([_ex("Bench")], {}, 7, now=NOW)
        assert workout.remove("nope") is workout


class TestSuggestedAmount:
    def test_endurance_session_distance(self):
        # floor(20 / 7 x 3) = 8
        run = _ex("Run", "Full Body", 0, "endurance", distance=20.0)
        assert suggested_amount(run, 20, 7) == 8.0

    def test_endurance_minimum(self):
        # floor(5 / 7 x 3) = 2 -> raised to 4
        run = _ex("Run", "Full Body", 0, "endurance", distance=5.0)
        assert suggested_amount(run, 5, 7) == 4.0

    def test_never_more_than_remaining(self):
        run = _ex("Run", "Full Body", 0, "endurance", distance=20.0)
        assert suggested_amount(run, 3, 7) == 3.0
        assert suggested_amount(_ex("Bench"), 2.5, 7) == 2.5
        assert suggested_amount(_ex("Hips", "Lower Body", 9, "mobility"), 9, 7) == 3.0

    def test_endurance_history_counts_distance(self):
        run = _ex("Run", "Full Body", 0, "endurance", distance=20.0)
        history = {run.id: [EnduranceEntry(date=NOW, distance=14.0)]}
        item = suggest_workout([run], history, 7, now=NOW).section("endurance").items[0]
        assert item.remaining == 6
        assert item.suggested_amount == 6.0
        assert item.unit == "km"


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class TestTemplates:
    def test_ranking(self):
        exercises = [
            _ex("Bench", "Chest"),
            _ex("Row", "Back"),
            _ex("Squat", "Legs"),
            _ex("Shoulder Circles", "Shoulders", 3, "mobility"),
        ]
        remaining = {exercises[0].id: 10, exercises[1].id: 5, exercises[2].id: 8, exercises[3].id: 3}
        recs = recommend_templates(exercises, remaining)
        assert [r.template.name for r in recs] == [
            "Full Body Strength",
            "Upper Body",
            "Lower Body",
            "Mobility & Stretching",
            "Running",
            "Core Workout",
        ]
        # (10 + 5 + 8) x 1.7, (10 + 5) x 1.4, 8 x 1.2, 3 x 1.3
        assert [r.score for r in recs[:4]] == pytest.approx([39.1, 21.0, 9.6, 3.9])
        assert recs[0].label == "Highly recommended"
        assert recs[-1].label == "All done!"

    def test_negative_remaining_not_scored(self):
        ex = _ex("Bench", "Chest")
        recs = recommend_templates([ex], {ex.id: -4})
        assert all(r.score == 0 for r in recs)

    def test_labels(self):
        assert recommendation_label(0) == "All done!"
        assert recommendation_label(4.9) == "Low priority"
        assert recommendation_label(5) == "Recommended"
        assert recommendation_label(15) == "Highly recommended"


# ---------------------------------------------------------------------------
# List view
# ---------------------------------------------------------------------------


class TestListExercises:
    @pytest.fixture
    def plan(self):
        exercises = [
            _ex("bench", "Chest", 10),
            _ex("Row", "Back", 6),
            _ex("Stretch", "Upper Body", 4, "mobility"),
            _ex("Idle", "Chest", 0),
            _ex("Run", "Full Body", 0, "endurance", distance=15.0),
        ]
        remaining = {exercises[0].id: 2, exercises[1].id: 6, exercises[2].id: 0}
        return exercises, remaining

    def test_group_by_category(self, plan):
        exercises, remaining = plan
        groups = list_exercises(exercises, remaining)
        assert [g.key for g in groups] == ["endurance", "mobility", "strength"]
        assert [r.exercise.name for r in groups[2].rows] == ["Row", "bench"]
        # no remaining entry falls back to the full target
        assert groups[0].rows[0].remaining == 15.0

    def test_sort_by_name_ungrouped(self, plan):
        exercises, remaining = plan
        groups = list_exercises(exercises, remaining, group_by="none", sort_by="name")
        assert len(groups) == 1 and groups[0].key == ""
        assert [r.exercise.name for r in groups[0].rows] == ["bench", "Row", "Run", "Stretch"]

    def test_hide_completed(self, plan):
        exercises, remaining = plan
        groups = list_exercises(exercises, remaining, group_by="muscle_group", hide_completed=True)
        assert [g.key for g in groups] == ["Back", "Chest", "Full Body"]

    def test_invalid_option(self, plan):
        exercises, remaining = plan
        with pytest.raises(ValueError):
            list_exercises(exercises, remaining, group_by="colour")  # type: ignore[arg-type]
        with pytest.raises(ValueError):
            list_exercises(exercises, remaining, sort_by="age")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Catalog and configuration
# ---------------------------------------------------------------------------


class TestCatalog:
    def test_bundled_catalog(self, tmp_path: Path):
        catalog = load_catalog(user_path=tmp_path / "missing.yaml")
        counts = {}
        for e in catalog:
            counts[e.category] = counts.get(e.category, 0) + 1
        assert counts == {"strength": 33, "mobility": 15, "endurance": 5}
        squat = next(e for e in catalog if e.name == "Squat")
        assert squat.muscle_group == "Legs"
        assert squat.description == "Back squat to depth"

    def test_user_catalog_overrides(self, tmp_path: Path):
        user = tmp_path / "catalog.yaml"
        user.write_text(
            "strength:\n"
            "  - {name: Squat, muscle_group: Quads}\n"
            "  - {name: Nordic Curl, muscle_group: Legs}\n"
            "  - {name: Broken}\n",
            encoding="utf-8",
        )
        with pytest.warns(UserWarning):
            catalog = load_catalog(user_path=user)
        squat = next(e for e in catalog if e.name == "Squat")
        assert squat.muscle_group == "Quads"
        assert any(e.name == "Nordic Curl" for e in catalog)
        assert not any(e.name == "Broken" for e in catalog)

    def test_bad_user_yaml_is_ignored(self, tmp_path: Path):
        user = tmp_path / "catalog.yaml"
        user.write_text("strength: [unclosed\n", encoding="utf-8")
        with pytest.warns(UserWarning):
            catalog = load_catalog(user_path=user)
        assert len(catalog) == 53

    def test_entry_from_dict_validation(self):
        with pytest.raises(ValueError):
            entry_from_dict("cardio", {"name": "X", "muscle_group": "Legs"})
        with pytest.raises(ValueError):
            entry_from_dict("strength", {"name": "X"})

    def test_build_plan_allocates_budgets(self, tmp_path: Path):
        catalog = load_catalog(user_path=tmp_path / "missing.yaml")
        plan = build_plan(
            catalog,
            {"squat": 2, "Deadlift": 1, "Bench Press": 1},
            VolumeBudgets.defaults(),
        )
        sets = {e.name: e.weekly_sets for e in plan}
        # Legs budget 20 split 2:1 -> 13.33 / 6.67 -> 13, 7
        assert sets == {"Squat": 13, "Deadlift": 7, "Bench Press": 15}
        assert len({e.id for e in plan}) == 3

    def test_build_plan_rejects_unknown_and_bad_priority(self, tmp_path: Path):
        catalog = load_catalog(user_path=tmp_path / "missing.yaml")
        with pytest.raises(ValueError, match="Not in catalog"):
            build_plan(catalog, {"Moon Walk": 1}, VolumeBudgets.defaults())
        with pytest.raises(ValueError):
            build_plan(catalog, {"Squat": 5}, VolumeBudgets.defaults())


class TestTrackerConfig:
    def test_bundled_defaults(self, tmp_path: Path):
        cfg = load_tracker_config(user_path=tmp_path / "missing.yaml")
        assert cfg.volume_policy == "decayed"
        assert cfg.suggestion_caps == SuggestionCaps()
        assert cfg.default_budgets.get("strength", "Back") == 20

    def test_user_override_merges(self, tmp_path: Path):
        user = tmp_path / "tracker.yaml"
        user.write_text(
            "volume_policy: hard\n"
            "suggestion:\n  strength: 2\n"
            "budgets:\n  strength:\n    Legs: 24\n",
            encoding="utf-8",
        )
        cfg = load_tracker_config(user_path=user)
        assert cfg.volume_policy == "hard"
        assert cfg.suggestion_caps.strength == 2
        assert cfg.suggestion_caps.mobility == 4
        assert cfg.default_budgets.get("strength", "Legs") == 24
        assert cfg.default_budgets.get("strength", "Chest") == 15

    def test_bad_user_yaml_warns(self, tmp_path: Path):
        user = tmp_path / "tracker.yaml"
        user.write_text("volume_policy: [hard\n", encoding="utf-8")
        with pytest.warns(UserWarning):
            cfg = load_tracker_config(user_path=user)
        assert cfg.volume_policy == "decayed"

    def test_invalid_policy_raises(self):
        with pytest.raises(ValueError):
            config_from_dict({"volume_policy": "soft"})
