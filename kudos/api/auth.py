"""
kudos.api.auth — JWT issuance & identity
==========================================

Credential checks happen upstream; this module only mints and inspects
the bearer tokens the API trusts.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
from fastapi import APIRouter, Depends

from kudos.api.deps import JWT_ALGORITHM, JWT_SECRET, get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])

TOKEN_TTL = timedelta(hours=12)


def create_access_token(username: str, ttl: timedelta = TOKEN_TTL) -> str:
    now = datetime.now(UTC)
    return jwt.encode(
        {"sub": username, "username": username, "iat": now, "exp": now + ttl},
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


@router.get("/me")
def me(user: dict = Depends(get_current_user)):
    return {"username": user["username"]}
