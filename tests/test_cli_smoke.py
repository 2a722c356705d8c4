"""
Smoke tests for the volume-tracker CLI.

Tests basic functionality:
- App runs without errors
- Tracker file is created
- Exercises can be added, logged and deleted
- Suggestions, stats and templates render
- Onboarding, budgets, settings and import/export work end to end
"""

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from volume_tracker.cli.main import app


runner = CliRunner()


@pytest.fixture
def store_path(tmp_path, monkeypatch) -> Path:
    """Initialised tracker file; HOME points at tmp_path so no user config is read."""
    monkeypatch.setenv("HOME", str(tmp_path))
    path = tmp_path / "tracker.json"
    result = runner.invoke(app, ["init", "--store-path", str(path)])
    assert result.exit_code == 0, result.output
    return path


def _invoke(store_path: Path, *args: str, **kwargs):
    return runner.invoke(app, [*args, "--store-path", str(store_path)], **kwargs)


def _add(store_path: Path, name: str, category: str, group: str, *extra: str) -> str:
    result = _invoke(store_path, "add-exercise", "-n", name, "-c", category, "-m", group, *extra)
    assert result.exit_code == 0, result.output
    return _listed(store_path)[name]["id"]


def _listed(store_path: Path) -> dict:
    result = _invoke(store_path, "list", "--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    return {e["name"]: e for g in data["groups"] for e in g["exercises"]}


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "volume" in result.output.lower()

    def test_init_creates_tracker(self, store_path):
        assert store_path.exists()
        data = json.loads(store_path.read_text(encoding="utf-8"))
        assert data["settings"]["training_interval"] == 7
        assert data["settings"]["volume_policy"] == "decayed"

    def test_init_twice_keeps_file(self, store_path):
        _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "init")
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert "Bench" in _listed(store_path)

    def test_init_invalid_interval(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        result = runner.invoke(app, ["init", "--store-path", str(tmp_path / "t.json"), "--interval", "40"])
        assert result.exit_code == 1
        assert not (tmp_path / "t.json").exists()

    def test_commands_before_init_fail(self, tmp_path):
        result = runner.invoke(app, ["list", "--store-path", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_verbose_flag(self, store_path):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        try:
            result = runner.invoke(app, ["-v", "list", "--store-path", str(store_path)])
            assert result.exit_code == 0
        finally:
            root.handlers[:] = handlers
            root.setLevel(level)


class TestExerciseCommands:
    def test_add_and_list(self, store_path):
        _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        _add(store_path, "Run", "endurance", "Full Body", "-d", "20")
        listed = _listed(store_path)
        assert listed["Bench"]["remaining"] == 10
        assert listed["Run"]["remaining"] == 20
        assert listed["Run"]["distance"] == 20

    def test_list_table(self, store_path):
        _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "list", "--group-by", "muscle_group")
        assert result.exit_code == 0
        assert "Chest" in result.output

    def test_list_invalid_option(self, store_path):
        result = _invoke(store_path, "list", "--sort-by", "age")
        assert result.exit_code == 1

    def test_add_invalid_category(self, store_path):
        result = _invoke(store_path, "add-exercise", "-n", "X", "-c", "cardio", "-m", "Legs")
        assert result.exit_code == 1
        assert "Invalid category" in result.output

    def test_add_invalid_priority(self, store_path):
        result = _invoke(store_path, "add-exercise", "-n", "X", "-c", "strength", "-m", "Legs", "--priority", "5")
        assert result.exit_code == 1

    def test_delete_with_force(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        _invoke(store_path, "log", bench[:8], "-s", "3")
        result = _invoke(store_path, "delete-exercise", bench[:8], "--force")
        assert result.exit_code == 0
        assert _listed(store_path) == {}
        data = json.loads(store_path.read_text(encoding="utf-8"))
        assert data["history"] == {}

    def test_delete_cancelled(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "delete-exercise", bench, input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert "Bench" in _listed(store_path)

    def test_delete_unknown(self, store_path):
        result = _invoke(store_path, "delete-exercise", "zzzz", "--force")
        assert result.exit_code == 1

    def test_set_priority(self, store_path):
        result = _invoke(store_path, "budget", "strength", "Legs", "12")
        assert result.exit_code == 0
        squat = _add(store_path, "Squat", "strength", "Legs", "-s", "1")
        _add(store_path, "Lunge", "strength", "Legs", "-s", "1")

        result = _invoke(store_path, "set-priority", squat[:8], "3")
        assert result.exit_code == 0
        listed = _listed(store_path)
        assert listed["Squat"]["weekly_sets"] == 9
        assert listed["Lunge"]["weekly_sets"] == 3


class TestSessionCommands:
    def test_log_and_history(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "log", bench[:8], "-s", "4", "-r", "5", "-w", "100")
        assert result.exit_code == 0
        assert "Logged 4 sets" in result.output
        assert _listed(store_path)["Bench"]["remaining"] == 6

        result = _invoke(store_path, "history", bench[:8])
        assert result.exit_code == 0
        assert "112 kg" in result.output

    def test_log_endurance_needs_distance(self, store_path):
        run = _add(store_path, "Run", "endurance", "Full Body", "-d", "20")
        result = _invoke(store_path, "log", run, "-s", "3")
        assert result.exit_code == 1
        assert "--distance" in result.output

        result = _invoke(store_path, "log", run, "-d", "5.5", "-t", "30", "--hr", "150")
        assert result.exit_code == 0
        assert _listed(store_path)["Run"]["remaining"] == 15

    def test_log_negative_amount_rejected(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        run = _add(store_path, "Run", "endurance", "Full Body", "-d", "20")

        result = _invoke(store_path, "log", bench, "--sets=-3")
        assert result.exit_code == 1
        assert "non-negative" in result.output
        result = _invoke(store_path, "log", run, "--distance=-2")
        assert result.exit_code == 1

        listed = _listed(store_path)
        assert listed["Bench"]["remaining"] == 10
        assert listed["Run"]["remaining"] == 20

    def test_log_bad_date(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "log", bench, "-s", "2", "--date", "last tuesday")
        assert result.exit_code == 1
        assert "Invalid date" in result.output

    def test_log_old_entry_does_not_count(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "log", bench, "-s", "5", "--date", "2000-01-01")
        assert result.exit_code == 0
        assert _listed(store_path)["Bench"]["remaining"] == 10

    def test_delete_entry(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        _invoke(store_path, "log", bench, "-s", "4")
        data = json.loads(store_path.read_text(encoding="utf-8"))
        entry_id = data["history"][bench][0]["id"]

        result = _invoke(store_path, "delete-entry", bench, entry_id[:8])
        assert result.exit_code == 0
        assert _listed(store_path)["Bench"]["remaining"] == 10

        result = _invoke(store_path, "delete-entry", bench, entry_id)
        assert result.exit_code == 1

    def test_log_nsuns_with_progression(self, store_path):
        bench = _add(
            store_path, "Bench nSuns", "nsuns", "Chest",
            "-s", "9", "--one-rep-max", "100",
            "--set", "5x75", "--set", "3x85", "--set", "1x95+",
        )
        result = _invoke(store_path, "log-nsuns", bench[:8], "--amrap", "3=6", "--progress")
        assert result.exit_code == 0, result.output
        assert "Logged 3 sets" in result.output

        listed = _listed(store_path)
        assert listed["Bench nSuns"]["one_rep_max"] == 102
        # three single-set entries against a target of 9
        assert listed["Bench nSuns"]["remaining"] == 6

        data = json.loads(store_path.read_text(encoding="utf-8"))
        entries = data["history"][bench]
        assert [e["reps"] for e in entries] == [5, 3, 6]
        assert [e["weight"] for e in entries] == [75, 85, 95]

    def test_log_nsuns_rejects_plain_strength(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "log-nsuns", bench)
        assert result.exit_code == 1

    def test_add_nsuns_bad_set(self, store_path):
        result = _invoke(
            store_path, "add-exercise", "-n", "X", "-c", "nsuns", "-m", "Chest", "--set", "five",
        )
        assert result.exit_code == 1

    def test_steps(self, store_path):
        result = _invoke(store_path, "steps", "-n", "8000", "--date", "2024-06-14")
        assert result.exit_code == 0
        data = json.loads(store_path.read_text(encoding="utf-8"))
        assert data["steps"] == {"2024-06-14": 8000}

        result = _invoke(store_path, "steps", "-n", "8000", "--date", "14/06/2024")
        assert result.exit_code == 1


class TestAnalysisCommands:
    def test_suggest_json(self, store_path):
        _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        _add(store_path, "Row", "strength", "Back", "-s", "3")
        _add(store_path, "Run", "endurance", "Full Body", "-d", "20")
        result = _invoke(store_path, "suggest", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        sections = {s["category"]: s for s in data["sections"]}
        assert [s["category"] for s in data["sections"]] == ["endurance", "strength"]
        assert [e["name"] for e in sections["strength"]["exercises"]] == ["Bench", "Row"]
        assert [e["suggested_amount"] for e in sections["strength"]["exercises"]] == [4, 3]
        assert sections["endurance"]["exercises"][0]["suggested_amount"] == 8
        assert sections["endurance"]["exercises"][0]["unit"] == "km"

    def test_suggest_skip(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        _add(store_path, "Row", "strength", "Back", "-s", "3")
        result = _invoke(store_path, "suggest", "--json", "--skip", bench[:8])
        assert result.exit_code == 0
        names = [e["name"] for s in json.loads(result.stdout)["sections"] for e in s["exercises"]]
        assert names == ["Row"]

    def test_suggest_table_and_caught_up(self, store_path):
        result = _invoke(store_path, "suggest")
        assert result.exit_code == 0
        assert "All caught up" in result.output

        _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "suggest")
        assert result.exit_code == 0
        assert "Suggested workout" in result.output

    def test_stats_json(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        _invoke(store_path, "log", bench, "-s", "4")
        _invoke(store_path, "steps", "-n", "7000")
        result = _invoke(store_path, "stats", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["categories"]["strength"]["percentage"] == 40.0
        assert data["categories"]["strength"]["daily_load"][-1] == 4
        assert data["categories"]["endurance"]["percentage"] == 0.0
        # 7000 of 10000 x 7 steps
        assert data["steps_percentage"] == pytest.approx(10.0)
        # (40 + 0 + 0 + 10) / 4 = 12.5 -> 13
        assert data["combined_score"] == 13

    def test_stats_table(self, store_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        _invoke(store_path, "log", bench, "-s", "4")
        result = _invoke(store_path, "stats")
        assert result.exit_code == 0
        assert "Combined score" in result.output

    def test_templates(self, store_path):
        _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        result = _invoke(store_path, "templates")
        assert result.exit_code == 0
        assert "Workout templates" in result.output


class TestPlanningCommands:
    def test_onboard_shows_catalog(self, store_path):
        result = _invoke(store_path, "onboard")
        assert result.exit_code == 0
        assert "Exercise catalog" in result.output

    def test_onboard_builds_plan(self, store_path):
        result = _invoke(store_path, "onboard", "-s", "Squat=2", "-s", "deadlift=1", "-s", "Bench Press")
        assert result.exit_code == 0, result.output
        listed = _listed(store_path)
        assert listed["Squat"]["weekly_sets"] == 13
        assert listed["Deadlift"]["weekly_sets"] == 7
        assert listed["Bench Press"]["weekly_sets"] == 15

        result = _invoke(store_path, "onboard", "-s", "Squat=1")
        assert result.exit_code == 1
        assert "Already in your plan" in result.output

    def test_onboard_twice_keeps_group_on_budget(self, store_path):
        assert _invoke(store_path, "onboard", "-s", "Squat=1").exit_code == 0
        result = _invoke(store_path, "onboard", "-s", "Deadlift=1")
        assert result.exit_code == 0, result.output
        listed = _listed(store_path)
        assert listed["Squat"]["weekly_sets"] == 10
        assert listed["Deadlift"]["weekly_sets"] == 10

    def test_onboard_unknown_exercise(self, store_path):
        result = _invoke(store_path, "onboard", "-s", "Moon Walk=1")
        assert result.exit_code == 1
        assert "Not in catalog" in result.output

    def test_budget_reallocates(self, store_path):
        _invoke(store_path, "onboard", "-s", "Squat=2", "-s", "Deadlift=1")
        result = _invoke(store_path, "budget", "strength", "Legs", "12")
        assert result.exit_code == 0
        listed = _listed(store_path)
        assert listed["Squat"]["weekly_sets"] == 8
        assert listed["Deadlift"]["weekly_sets"] == 4

    def test_budget_invalid_category(self, store_path):
        result = _invoke(store_path, "budget", "cardio", "Legs", "12")
        assert result.exit_code == 1


class TestSettingsCommands:
    def test_show_and_change(self, store_path):
        result = _invoke(store_path, "settings")
        assert result.exit_code == 0
        assert "brzycki" in result.output

        result = _invoke(store_path, "settings", "--interval", "14", "--policy", "hard")
        assert result.exit_code == 0
        data = json.loads(store_path.read_text(encoding="utf-8"))
        assert data["settings"]["training_interval"] == 14
        assert data["settings"]["volume_policy"] == "hard"

    def test_invalid_values(self, store_path):
        assert _invoke(store_path, "settings", "--policy", "soft").exit_code == 1
        assert _invoke(store_path, "settings", "--interval", "0").exit_code == 1
        assert _invoke(store_path, "settings", "--formula", "guess").exit_code == 1

    def test_export_import(self, store_path, tmp_path):
        bench = _add(store_path, "Bench", "strength", "Chest", "-s", "10")
        _invoke(store_path, "log", bench, "-s", "4")
        backup = tmp_path / "backup.json"
        result = _invoke(store_path, "export", str(backup))
        assert result.exit_code == 0
        assert backup.exists()

        other = tmp_path / "other.json"
        runner.invoke(app, ["init", "--store-path", str(other)])
        result = runner.invoke(app, ["import", str(backup), "--force", "--store-path", str(other)])
        assert result.exit_code == 0, result.output
        assert _listed(other)["Bench"]["remaining"] == 6

    def test_import_drops_orphans(self, store_path, tmp_path):
        source = tmp_path / "source.json"
        source.write_text(json.dumps({
            "exercises": [],
            "history": {"ghost": [{"category": "strength", "date": "2024-06-01", "sets": 3}]},
        }), encoding="utf-8")
        result = _invoke(store_path, "import", str(source), "--force")
        assert result.exit_code == 0
        assert "Dropped 1" in result.output
        data = json.loads(store_path.read_text(encoding="utf-8"))
        assert data["history"] == {}

    def test_import_invalid_file(self, store_path, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{oops", encoding="utf-8")
        result = _invoke(store_path, "import", str(bad), "--force")
        assert result.exit_code == 1

    def test_import_cancelled(self, store_path, tmp_path):
        result = _invoke(store_path, "import", str(tmp_path / "x.json"), input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
