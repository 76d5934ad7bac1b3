"""
kudos.services.user_service — Users & Leaderboard
==================================================
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kudos.database.models import User

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def create_user(engine: Engine, username: str) -> User:
    """Insert a new user with 0 points.

    Raises ValueError for a blank or already-taken username.
    """
    username = (username or "").strip()
    if not username:
        raise ValueError("Username must not be blank.")

    with Session(engine, expire_on_commit=False) as session:
        user = User(username=username, points=0)
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ValueError(f"Username {username!r} is already taken.") from None
        session.refresh(user)

    logger.info("User created: %s", username)
    return user


def get_user(engine: Engine, username: str) -> User | None:
    with Session(engine, expire_on_commit=False) as session:
        return session.scalar(select(User).where(User.username == username))


def get_leaderboard(engine: Engine, limit: int = 20) -> list[User]:
    """Top *limit* users by points, highest first.

    A NULL balance ranks as 0; ties go to the earlier account.
    """
    with Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(
            select(User)
            .order_by(func.coalesce(User.points, 0).desc(), User.id)
            .limit(limit)
        ).all())
