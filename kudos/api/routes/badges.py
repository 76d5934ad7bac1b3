"""
kudos.api.routes.badges — Read-only badge collection
======================================================

Always 200: an unknown user simply has no badges.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from kudos.api.deps import get_engine
from kudos.database.models import Badge
from kudos.services import badge_service

router = APIRouter(prefix="/badges", tags=["badges"])


def _badge_dict(b: Badge) -> dict:
    return {
        "kind": b.kind,
        "name": b.name,
        "earned_at": b.earned_at.isoformat() if b.earned_at else None,
    }


@router.get("/{username}")
def get_user_badges(username: str, engine=Depends(get_engine)):
    return [_badge_dict(b) for b in badge_service.get_user_badges(engine, username)]
