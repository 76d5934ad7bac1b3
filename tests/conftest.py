"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of kudos.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

from datetime import UTC, datetime  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from kudos.config import KudosConfig  # noqa: E402
from kudos.database.engine import init_db  # noqa: E402
from kudos.database.models import Badge, User  # noqa: E402


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all Kudos tables.

    Uses StaticPool so every thread (FastAPI runs sync routes in a
    threadpool) shares the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def cfg() -> KudosConfig:
    return KudosConfig()


@pytest.fixture
def make_user(db_engine):
    """Factory: insert a user row directly and return its username."""

    def _make(username: str, points: int | None = 0) -> str:
        with Session(db_engine) as session:
            session.add(User(username=username, points=points))
            session.commit()
        return username

    return _make


@pytest.fixture
def add_raw_badges(db_engine):
    """Factory: append badge rows without going through the award guard.

    Used to reproduce duplicates written by racing legacy code paths.
    """

    def _add(username: str, names: list[str], kind: str = "leaderboard") -> None:
        with Session(db_engine) as session:
            user = session.query(User).filter_by(username=username).one()
            for name in names:
                session.add(Badge(
                    user_id=user.id, kind=kind, name=name, earned_at=datetime.now(UTC),
                ))
            session.commit()

    return _add


def make_token(username: str = "alice") -> str:
    """Create a bearer JWT.  Usable as both a fixture helper and directly."""
    from kudos.api.auth import create_access_token

    return create_access_token(username)


@pytest.fixture
def client(db_engine, cfg):
    """FastAPI TestClient bound to the in-memory engine."""
    from fastapi.testclient import TestClient

    from kudos.api.deps import get_config, get_engine
    from kudos.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: cfg
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
