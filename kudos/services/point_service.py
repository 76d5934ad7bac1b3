"""
kudos.services.point_service — Points Ledger
=============================================

Best-effort: crediting points is a side effect of some other action, so
nothing here raises.  An unknown user or a database error reads as 0.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from kudos.database.models import User

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def award_points(engine: Engine, username: str, amount: int) -> int:
    """Add *amount* to *username*'s balance and return the new total.

    The increment is a single ``UPDATE … SET points = COALESCE(points, 0)
    + :amount`` so concurrent credits never overwrite each other.  Returns
    0 (and writes nothing) for an unknown user, a non-positive amount, or
    any database failure.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        logger.warning("Refusing to award non-positive points %r to %s", amount, username)
        return 0
    try:
        with Session(engine) as session:
            result = session.execute(
                update(User)
                .where(User.username == username)
                .values(points=func.coalesce(User.points, 0) + amount)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                session.rollback()
                return 0
            total = session.scalar(select(User.points).where(User.username == username))
            session.commit()
    except Exception:
        logger.warning("Failed to award %d points to %s", amount, username, exc_info=True)
        return 0

    logger.debug("Awarded %d points to %s (total %s)", amount, username, total)
    return total or 0


def get_points(engine: Engine, username: str) -> int:
    """Current balance for *username*, or 0 if absent or unreadable."""
    try:
        with Session(engine) as session:
            points = session.scalar(select(User.points).where(User.username == username))
    except Exception:
        logger.warning("Failed to read points for %s", username, exc_info=True)
        return 0
    return points or 0
