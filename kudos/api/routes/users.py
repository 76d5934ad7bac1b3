"""
kudos.api.routes.users — Users, points & leaderboard
======================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from kudos.api.deps import get_config, get_engine
from kudos.config import KudosConfig
from kudos.database.models import User
from kudos.services import badge_service, point_service, user_service

router = APIRouter(prefix="/users", tags=["users"])


class UserCreate(BaseModel):
    username: str


def _user_dict(u: User) -> dict:
    return {
        "username": u.username,
        "points": u.points or 0,
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


@router.post("", status_code=201)
def create_user(body: UserCreate, engine=Depends(get_engine)):
    try:
        user = user_service.create_user(engine, body.username)
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    return _user_dict(user)


# Registered before /{username} so "leaderboard" is not read as a username.
@router.get("/leaderboard")
def get_leaderboard(
    limit: int | None = Query(None, ge=1),
    engine=Depends(get_engine),
    cfg: KudosConfig = Depends(get_config),
):
    """Points leaderboard.  Awards placement badges to the top three."""
    limit = min(limit or cfg.leaderboard_limit, cfg.leaderboard_max)
    users = user_service.get_leaderboard(engine, limit)
    badge_service.check_and_award_leaderboard_badges(engine, users)
    return {
        "users": [
            {**_user_dict(u), "rank": i + 1}
            for i, u in enumerate(users)
        ],
    }


@router.get("/{username}")
def get_user(username: str, engine=Depends(get_engine)):
    user = user_service.get_user(engine, username)
    if user is None:
        raise HTTPException(404, "User not found")
    return _user_dict(user)


@router.get("/{username}/points")
def get_points(username: str, engine=Depends(get_engine)):
    return {"username": username, "points": point_service.get_points(engine, username)}
