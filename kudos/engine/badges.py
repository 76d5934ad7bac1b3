"""
kudos.engine.badges — Badge Naming & Milestone Detection
=========================================================

Pure calculation — no database I/O.  Decides *which* badge an event
earns; :mod:`kudos.services.badge_service` decides whether it is minted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from kudos.database.models import BadgeKind

__all__ = [
    "PLACEMENT_BADGES",
    "BadgeSpec",
    "community_badge_name",
    "duplicate_positions",
    "milestone_badge_name",
]

# Rank 0, 1, 2 of a points-sorted leaderboard snapshot.
PLACEMENT_BADGES: tuple[str, ...] = ("1st Place", "2nd Place", "3rd Place")

COMMUNITY_BADGE_PREFIX = "Community Member: "


# ---------------------------------------------------------------------------
# BadgeSpec — a badge about to be awarded
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class BadgeSpec:
    kind: BadgeKind
    name: str
    earned_at: datetime = field(default_factory=lambda: datetime.now(UTC))


# ---------------------------------------------------------------------------
# Naming rules
# ---------------------------------------------------------------------------
def milestone_badge_name(
    activity: str,
    count: int,
    milestones: Mapping[str, Mapping[int, str]],
) -> str | None:
    """Return the milestone badge earned by reaching *count*, or ``None``.

    Matching is by exact equality: the detector must be called once per
    qualifying action with the running total.  A count that jumps past a
    threshold without landing on it earns nothing.
    """
    table = milestones.get(activity)
    if not table:
        return None
    template = table.get(count)
    if template is None:
        return None
    return template.format(threshold=count)


def community_badge_name(community_name: str) -> str:
    return f"{COMMUNITY_BADGE_PREFIX}{community_name}"


def duplicate_positions(names: Iterable[str]) -> list[int]:
    """Positions of every name that already appeared earlier in *names*.

    >>> duplicate_positions(["1st Place", "1st Place", "50 Questions"])
    [1]
    """
    seen: set[str] = set()
    dupes: list[int] = []
    for pos, name in enumerate(names):
        if name in seen:
            dupes.append(pos)
        else:
            seen.add(name)
    return dupes
