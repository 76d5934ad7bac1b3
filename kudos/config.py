"""
kudos.config — YAML Configuration Loader
=========================================

Reads ``config.yaml`` for gameplay tuning: points per action, milestone
thresholds and leaderboard sizing.  Secrets (``DATABASE_URL``,
``JWT_SECRET``) stay in the environment.

Usage::

    from kudos.config import load_config

    cfg = load_config()                 # reads ./config.yaml by default
    print(cfg.points.answer_created)    # 15
    print(cfg.milestones["question"])   # {50: "{threshold} Questions", ...}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from kudos.database.models import ActivityType


def _default_milestones() -> dict[str, dict[int, str]]:
    return {
        ActivityType.QUESTION.value: {
            50: "{threshold} Questions",
            100: "{threshold} Questions",
        },
        ActivityType.ANSWER.value: {
            50: "{threshold} Answers",
            100: "{threshold} Answers",
        },
    }


# ---------------------------------------------------------------------------
# Typed settings objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class PointsConfig:
    """Points credited per qualifying action."""

    question_created: int = 10
    answer_created: int = 15
    community_joined: int = 5


@dataclass(frozen=True, slots=True)
class KudosConfig:
    """Immutable configuration loaded from ``config.yaml``.

    ``milestones`` maps an activity type to an ordered
    ``{threshold: badge-name template}`` table.  Templates may reference
    ``{threshold}``.
    """

    community_name: str = "Kudos"
    points: PointsConfig = field(default_factory=PointsConfig)
    milestones: dict[str, dict[int, str]] = field(default_factory=_default_milestones)
    leaderboard_limit: int = 20
    leaderboard_max: int = 100


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------
def _positive_int(key: str, value) -> int:
    """Reject anything but a positive whole number (no bools, no 1.5)."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{key} must be a positive integer, got {value!r}")
    return value


def _parse_points(raw: dict | None) -> PointsConfig:
    raw = raw or {}
    defaults = PointsConfig()
    return PointsConfig(**{
        key: _positive_int(f"points.{key}", raw.get(key, getattr(defaults, key)))
        for key in ("question_created", "answer_created", "community_joined")
    })


def _parse_milestones(raw: dict | None) -> dict[str, dict[int, str]]:
    """Parse per-activity threshold tables.

    An activity listed in the file replaces that activity's default table;
    activities the file leaves out keep their defaults.
    """
    tables = _default_milestones()
    if not raw:
        return tables

    for activity, table in raw.items():
        if activity not in {a.value for a in ActivityType}:
            raise ValueError(f"Unknown milestone activity type: {activity!r}")
        parsed: dict[int, str] = {}
        for threshold, template in (table or {}).items():
            if isinstance(threshold, bool) or int(threshold) != threshold or threshold <= 0:
                raise ValueError(
                    f"milestones.{activity}: threshold must be a positive integer, "
                    f"got {threshold!r}"
                )
            parsed[int(threshold)] = str(template)
        tables[activity] = dict(sorted(parsed.items()))
    return tables


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> KudosConfig:
    """Read *path* and return a :class:`KudosConfig` instance.

    Keys that are absent fall back to the built-in defaults.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ValueError
        If a points value or milestone threshold is malformed.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    defaults = KudosConfig()
    leaderboard = raw.get("leaderboard") or {}
    return KudosConfig(
        community_name=raw.get("community_name", defaults.community_name),
        points=_parse_points(raw.get("points")),
        milestones=_parse_milestones(raw.get("milestones")),
        leaderboard_limit=_positive_int(
            "leaderboard.limit", leaderboard.get("limit", defaults.leaderboard_limit),
        ),
        leaderboard_max=_positive_int(
            "leaderboard.max", leaderboard.get("max", defaults.leaderboard_max),
        ),
    )
