"""
YAML → typed config loader.

Loads model settings from tracker.yaml (bundled with the package) and
optionally merges user overrides from ~/.volume-tracker/tracker.yaml.

Usage:
    from volume_tracker.core.engine.config_loader import load_tracker_config
    cfg = load_tracker_config()
    caps = cfg.suggestion_caps

Keys missing from both files fall back to the Python defaults in config.py.
If the user override file has parse errors, a warning is issued and the
file is ignored.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..allocator import VolumeBudgets
from ..config import DEFAULT_VOLUME_POLICY
from ..ledger import VOLUME_POLICIES
from ..suggestion import SuggestionCaps

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; raises yaml.YAMLError on bad syntax."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrackerConfig:
    volume_policy: str = DEFAULT_VOLUME_POLICY
    suggestion_caps: SuggestionCaps = field(default_factory=SuggestionCaps)
    default_budgets: VolumeBudgets = field(default_factory=VolumeBudgets.defaults)


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled tracker.yaml, or None if not found."""
    # config_loader.py lives at src/volume_tracker/core/engine/
    candidate = Path(__file__).parent.parent.parent / "tracker.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.volume-tracker/tracker.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".volume-tracker" / "tracker.yaml"
    return p if p.exists() else None


def load_model_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge raw configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/volume_tracker/tracker.yaml
    2. User override at ~/.volume-tracker/tracker.yaml (or ``user_path``)

    Returns:
        Merged dict of config sections.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        try:
            user_cfg = _load_yaml_file(user)
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"volume-tracker: ignoring {user}: {exc}",
                stacklevel=2,
            )
        else:
            config = _deep_merge(config, user_cfg)

    return config


def config_from_dict(raw: dict[str, Any]) -> TrackerConfig:
    """Convert a merged config mapping to TrackerConfig, validating values."""
    policy = raw.get("volume_policy", DEFAULT_VOLUME_POLICY)
    if policy not in VOLUME_POLICIES:
        raise ValueError(f"volume_policy must be one of {VOLUME_POLICIES}, got {policy!r}")

    caps = SuggestionCaps.from_dict(raw.get("suggestion") or {})

    defaults = VolumeBudgets.defaults().as_dict()
    for category, groups in (raw.get("budgets") or {}).items():
        for group, value in (groups or {}).items():
            defaults.setdefault(str(category), {})[str(group)] = int(value)

    return TrackerConfig(
        volume_policy=policy,
        suggestion_caps=caps,
        default_budgets=VolumeBudgets(defaults),
    )


def load_tracker_config(user_path: Path | None = None) -> TrackerConfig:
    """Load tracker.yaml sources and return the typed configuration."""
    return config_from_dict(load_model_config(user_path))
