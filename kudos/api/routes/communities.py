"""
kudos.api.routes.communities — Community CRUD, membership & visits
====================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from kudos.api.deps import get_config, get_current_user, get_engine, require_same_user
from kudos.config import KudosConfig
from kudos.services import community_service
from kudos.services.community_service import community_dict

router = APIRouter(prefix="/communities", tags=["communities"])


class CommunityCreate(BaseModel):
    name: str
    admin: str
    description: str | None = None
    participants: list[str] = []
    visibility: str | None = None


class MembershipToggle(BaseModel):
    community_id: str
    username: str


class VisitBody(BaseModel):
    username: str


@router.get("")
def list_communities(engine=Depends(get_engine)):
    return {"communities": [
        community_dict(c) for c in community_service.get_all_communities(engine)
    ]}


@router.get("/user/{username}")
def list_user_communities(username: str, engine=Depends(get_engine)):
    return {"communities": [
        community_dict(c) for c in community_service.get_communities_by_user(engine, username)
    ]}


@router.post("", status_code=201)
def create_community(
    body: CommunityCreate,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    require_same_user(user, body.admin)
    try:
        community = community_service.create_community(
            engine,
            name=body.name,
            admin=body.admin,
            description=body.description,
            participants=body.participants,
            visibility=body.visibility,
        )
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    return community_dict(community)


@router.post("/toggle-membership")
def toggle_membership(
    body: MembershipToggle,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
    cfg: KudosConfig = Depends(get_config),
):
    require_same_user(user, body.username)
    try:
        community, added = community_service.toggle_membership(
            engine, body.community_id, body.username, cfg,
        )
    except LookupError as exc:
        raise HTTPException(404, str(exc))
    except PermissionError as exc:
        raise HTTPException(403, str(exc))
    return {"community": community_dict(community), "added": added}


@router.get("/{community_id}")
def get_community(community_id: str, engine=Depends(get_engine)):
    community = community_service.get_community(engine, community_id)
    if community is None:
        raise HTTPException(404, "Community not found")
    return community_dict(community)


@router.delete("/{community_id}")
def delete_community(
    community_id: str,
    username: str = Query(...),
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    require_same_user(user, username)
    try:
        community = community_service.delete_community(engine, community_id, username)
    except LookupError as exc:
        raise HTTPException(404, str(exc))
    except PermissionError as exc:
        raise HTTPException(403, str(exc))
    return {"community": community_dict(community), "message": "Community deleted"}


@router.post("/{community_id}/visit")
def record_visit(
    community_id: str,
    body: VisitBody,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    """Record that the authenticated user is viewing this community."""
    require_same_user(user, body.username)
    community_service.record_visit(engine, community_id, body.username)
    return {"message": "Visit recorded"}


@router.get("/{community_id}/streaks/{username}")
def get_visit_streak(community_id: str, username: str, engine=Depends(get_engine)):
    streak = community_service.get_visit_streak(engine, community_id, username)
    if streak is None:
        raise HTTPException(404, "No visits recorded")
    return {
        "community_id": community_id,
        "username": username,
        "current_streak": streak.current_streak,
        "longest_streak": streak.longest_streak,
        "last_visit_date": streak.last_visit_date.isoformat(),
    }
