"""
kudos.services.community_service — Communities, Membership & Visit Streaks
===========================================================================

Membership and CRUD raise built-in exceptions for caller errors
(``LookupError``, ``PermissionError``, ``ValueError``); the API maps them
to HTTP status codes.  Visit recording is best-effort and never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kudos.config import KudosConfig
from kudos.database.engine import get_session
from kudos.database.models import (
    Community,
    CommunityParticipant,
    Visibility,
    VisitStreak,
)
from kudos.engine.side_effects import SideEffects
from kudos.engine.streaks import StreakState, advance_streak
from kudos.services import badge_service, point_service

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_community(engine: Engine, community_id: str) -> Community | None:
    with Session(engine, expire_on_commit=False) as session:
        return session.get(Community, community_id)


def get_all_communities(engine: Engine) -> list[Community]:
    with Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(
            select(Community).order_by(Community.created_at, Community.name)
        ).all())


def get_communities_by_user(engine: Engine, username: str) -> list[Community]:
    """Communities *username* participates in."""
    with Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(
            select(Community)
            .join(CommunityParticipant)
            .where(CommunityParticipant.username == username)
            .order_by(Community.created_at, Community.name)
        ).all())


# ---------------------------------------------------------------------------
# Create / delete
# ---------------------------------------------------------------------------
def create_community(
    engine: Engine,
    *,
    name: str,
    admin: str,
    description: str | None = None,
    participants: Iterable[str] = (),
    visibility: str | None = None,
) -> Community:
    """Create a community.  The admin is always added as a participant."""
    name = (name or "").strip()
    if not name:
        raise ValueError("Community name must not be blank.")
    if not admin:
        raise ValueError("Community admin must be set.")
    visibility = visibility or Visibility.PUBLIC.value
    if visibility not in {v.value for v in Visibility}:
        raise ValueError(f"Invalid visibility {visibility!r}.")

    members = list(dict.fromkeys([*participants, admin]))
    with get_session(engine) as session:
        community = Community(
            name=name,
            description=description,
            visibility=visibility,
            admin=admin,
            participants=[CommunityParticipant(username=u) for u in members],
        )
        session.add(community)
        session.flush()
        session.refresh(community)

    logger.info("Community created: %s (%s) by %s", name, community.id, admin)
    return community


def delete_community(engine: Engine, community_id: str, username: str) -> Community:
    """Delete *community_id* on behalf of *username*, who must be its admin."""
    with get_session(engine) as session:
        community = session.get(Community, community_id)
        if community is None:
            raise LookupError("Community not found.")
        if community.admin != username:
            raise PermissionError("Only the community admin can delete this community.")
        session.delete(community)

    logger.info("Community deleted: %s by %s", community_id, username)
    return community


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------
def toggle_membership(
    engine: Engine,
    community_id: str,
    username: str,
    cfg: KudosConfig | None = None,
) -> tuple[Community, bool]:
    """Add *username* to the community, or remove them if already a member.

    Returns (community, added).  Joining credits points and mints the
    community badge after the membership change is committed.

    Raises
    ------
    LookupError
        If the community does not exist.
    PermissionError
        If the admin tries to leave their own community.
    """
    cfg = cfg or KudosConfig()
    with Session(engine, expire_on_commit=False) as session:
        community = session.get(Community, community_id)
        if community is None:
            raise LookupError("Community not found.")

        member = next((p for p in community.participants if p.username == username), None)
        if member is not None and community.admin == username:
            raise PermissionError(
                "Community admins cannot leave their communities. "
                "Transfer ownership or delete the community instead."
            )

        if member is not None:
            community.participants.remove(member)
            added = False
        else:
            community.participants.append(CommunityParticipant(username=username))
            added = True

        try:
            session.commit()
        except IntegrityError:
            # A concurrent request already added this user.
            session.rollback()
            community = session.get(Community, community_id)
            added = False

    if added:
        effects = SideEffects(f"{username} joining {community_id}")
        effects.add(
            "points", point_service.award_points,
            engine, username, cfg.points.community_joined,
        )
        effects.add(
            "badge", badge_service.check_and_award_community_badge,
            engine, username, community_id,
        )
        effects.run()

    return community, added


# ---------------------------------------------------------------------------
# Visit streaks
# ---------------------------------------------------------------------------
def _snapshot(row: VisitStreak) -> StreakState:
    return StreakState(
        last_visit_date=row.last_visit_date,
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
    )


def record_visit(
    engine: Engine,
    community_id: str,
    username: str,
    today: date | datetime | None = None,
) -> StreakState | None:
    """Count a visit by *username* to *community_id* on *today*.

    *today* defaults to the current UTC date.  Returns the resulting
    streak; a second visit on the same day returns the stored streak
    without writing.  Returns ``None`` if the community does not exist or
    the database fails.
    """
    if today is None:
        today = datetime.now(UTC).date()
    try:
        with Session(engine) as session:
            if session.get(Community, community_id) is None:
                return None

            row = session.get(VisitStreak, (community_id, username), with_for_update=True)
            previous = _snapshot(row) if row is not None else None
            state = advance_streak(previous, today)
            if state is None:
                return previous

            if row is None:
                session.add(VisitStreak(
                    community_id=community_id,
                    username=username,
                    last_visit_date=state.last_visit_date,
                    current_streak=state.current_streak,
                    longest_streak=state.longest_streak,
                ))
            else:
                row.last_visit_date = state.last_visit_date
                row.current_streak = state.current_streak
                row.longest_streak = state.longest_streak
            session.commit()
    except Exception:
        logger.warning(
            "Failed to record visit by %s to %s", username, community_id, exc_info=True,
        )
        return None

    logger.debug(
        "Visit recorded: %s in %s (current=%d, longest=%d)",
        username, community_id, state.current_streak, state.longest_streak,
    )
    return state


def get_visit_streak(engine: Engine, community_id: str, username: str) -> StreakState | None:
    with Session(engine) as session:
        row = session.get(VisitStreak, (community_id, username))
        return _snapshot(row) if row is not None else None


def community_dict(community: Community) -> dict[str, Any]:
    return {
        "id": community.id,
        "name": community.name,
        "description": community.description,
        "visibility": community.visibility,
        "admin": community.admin,
        "participants": community.participant_names,
        "created_at": community.created_at.isoformat() if community.created_at else None,
    }
