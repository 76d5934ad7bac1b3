"""
kudos.services.badge_service — Badge Store & Awarders
======================================================

Every public function here is best-effort: failures are logged and turned
into ``False`` / ``0`` / ``[]`` so a badge can never fail the request that
earned it.

Awarding is compare-and-set.  :func:`award_badge` locks the user's row and
runs one ``INSERT … SELECT … WHERE NOT EXISTS`` for the badge name, so two
requests racing for the same milestone mint it exactly once.  Never replace
it with a read of the badge list followed by a separate insert.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, Integer, String, delete, insert, literal, select
from sqlalchemy.orm import Session

from kudos.config import KudosConfig
from kudos.database.models import Badge, BadgeKind, Community, User
from kudos.engine.badges import (
    PLACEMENT_BADGES,
    BadgeSpec,
    community_badge_name,
    duplicate_positions,
    milestone_badge_name,
)

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def _lock_user_id(session: Session, username: str) -> int | None:
    """Return the user's id, holding its row lock until the transaction ends.

    ``FOR UPDATE`` serialises badge writes per user on PostgreSQL; SQLite
    ignores it and serialises all writers anyway.
    """
    return session.scalar(
        select(User.id).where(User.username == username).with_for_update()
    )


# ---------------------------------------------------------------------------
# Badge store primitives
# ---------------------------------------------------------------------------
def has_badge(engine: Engine, username: str, badge_name: str) -> bool:
    """True iff *username* holds a badge named *badge_name*."""
    try:
        with Session(engine) as session:
            found = session.scalar(
                select(Badge.id)
                .join(User, User.id == Badge.user_id)
                .where(User.username == username, Badge.name == badge_name)
                .limit(1)
            )
    except Exception:
        logger.warning("Badge lookup failed for %s/%r", username, badge_name, exc_info=True)
        return False
    return found is not None


def award_badge(engine: Engine, username: str, badge: BadgeSpec) -> bool:
    """Add *badge* unless the user already holds one with the same name.

    Returns True iff a row was inserted.  A suppressed duplicate, an
    unknown user and a database failure all return False.
    """
    try:
        with Session(engine) as session:
            user_id = _lock_user_id(session, username)
            if user_id is None:
                return False

            already_held = (
                select(Badge.id)
                .where(Badge.user_id == user_id, Badge.name == badge.name)
                .exists()
            )
            result = session.execute(
                insert(Badge).from_select(
                    ["user_id", "kind", "name", "earned_at"],
                    select(
                        literal(user_id, Integer),
                        literal(badge.kind.value, String),
                        literal(badge.name, String),
                        literal(badge.earned_at, DateTime(timezone=True)),
                    ).where(~already_held),
                )
            )
            session.commit()
    except Exception:
        logger.warning("Failed to award badge %r to %s", badge.name, username, exc_info=True)
        return False

    awarded = result.rowcount == 1
    if awarded:
        logger.info("Badge awarded: %r (%s) → %s", badge.name, badge.kind, username)
    return awarded


def deduplicate_badges(engine: Engine, username: str) -> int:
    """Collapse same-named badges down to their first occurrence.

    Order is award order (row id), not ``earned_at``.  Returns the number
    of rows removed.
    """
    try:
        with Session(engine) as session:
            user_id = _lock_user_id(session, username)
            if user_id is None:
                return 0
            rows = session.execute(
                select(Badge.id, Badge.name)
                .where(Badge.user_id == user_id)
                .order_by(Badge.id)
            ).all()
            if len(rows) <= 1:
                return 0

            doomed = [rows[pos].id for pos in duplicate_positions(r.name for r in rows)]
            if doomed:
                session.execute(delete(Badge).where(Badge.id.in_(doomed)))
            session.commit()
    except Exception:
        logger.warning("Badge deduplication failed for %s", username, exc_info=True)
        return 0

    if doomed:
        logger.info("Removed %d duplicate badge(s) from %s", len(doomed), username)
    return len(doomed)


def get_user_badges(engine: Engine, username: str) -> list[Badge]:
    """All of *username*'s badges in award order; ``[]`` on any failure."""
    try:
        with Session(engine, expire_on_commit=False) as session:
            return list(session.scalars(
                select(Badge)
                .join(User, User.id == Badge.user_id)
                .where(User.username == username)
                .order_by(Badge.id)
            ).all())
    except Exception:
        logger.warning("Failed to load badges for %s", username, exc_info=True)
        return []


def _ensure_badge(engine: Engine, username: str, badge: BadgeSpec) -> bool:
    """Short-circuit on ``has_badge`` and fall through to the atomic award."""
    if has_badge(engine, username, badge.name):
        return False
    return award_badge(engine, username, badge)


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------
def check_and_award_milestone(
    engine: Engine,
    username: str,
    activity: str,
    count: int,
    cfg: KudosConfig | None = None,
) -> bool:
    """Mint the milestone badge for *count* ``activity``\\ s, if any.

    Returns True iff a badge was newly awarded.
    """
    cfg = cfg or KudosConfig()
    name = milestone_badge_name(activity, count, cfg.milestones)
    if name is None:
        return False
    return _ensure_badge(engine, username, BadgeSpec(BadgeKind.MILESTONE, name))


# ---------------------------------------------------------------------------
# Communities
# ---------------------------------------------------------------------------
def check_and_award_community_badge(engine: Engine, username: str, community_id: str) -> bool:
    """Mint ``Community Member: <name>`` for joining *community_id*."""
    try:
        with Session(engine) as session:
            community_name = session.scalar(
                select(Community.name).where(Community.id == community_id)
            )
    except Exception:
        logger.warning("Community lookup failed for %s", community_id, exc_info=True)
        return False
    if community_name is None:
        return False
    badge = BadgeSpec(BadgeKind.COMMUNITY, community_badge_name(community_name))
    return award_badge(engine, username, badge)


# ---------------------------------------------------------------------------
# Leaderboard
# ---------------------------------------------------------------------------
def _entry_username(entry: Any) -> str | None:
    if entry is None:
        return None
    if isinstance(entry, Mapping):
        return entry.get("username") or None
    return getattr(entry, "username", None) or None


def check_and_award_leaderboard_badges(engine: Engine, leaderboard: Sequence[Any]) -> list[str]:
    """Award ``1st``/``2nd``/``3rd Place`` to the top three entries.

    *leaderboard* is sorted by points, highest first; entries may be
    :class:`User` rows or mappings with a ``username`` key.  Placement
    badges are permanent: dropping out of the top three revokes nothing.
    Returns ``"<username>: <badge>"`` for every badge newly awarded.
    """
    leaderboard = leaderboard or []
    awarded: list[str] = []
    for rank, badge_name in enumerate(PLACEMENT_BADGES):
        if rank >= len(leaderboard):
            break
        username = _entry_username(leaderboard[rank])
        if not username:
            continue
        deduplicate_badges(engine, username)
        if _ensure_badge(engine, username, BadgeSpec(BadgeKind.LEADERBOARD, badge_name)):
            awarded.append(f"{username}: {badge_name}")
    return awarded
