"""
tests/test_user_service.py — Users & Leaderboard
=================================================
"""

from __future__ import annotations

import pytest

from kudos.services import user_service


class TestCreateUser:
    def test_starts_at_zero(self, db_engine):
        user = user_service.create_user(db_engine, " alice ")
        assert user.username == "alice"
        assert user.points == 0
        assert user.created_at is not None

    def test_duplicate_username(self, db_engine):
        user_service.create_user(db_engine, "alice")
        with pytest.raises(ValueError, match="already taken"):
            user_service.create_user(db_engine, "alice")

    def test_blank_username(self, db_engine):
        with pytest.raises(ValueError):
            user_service.create_user(db_engine, "  ")


class TestLeaderboard:
    def test_ordering(self, db_engine, make_user):
        make_user("nobody", points=None)
        make_user("low", points=5)
        make_user("high", points=50)
        make_user("tied", points=5)

        board = user_service.get_leaderboard(db_engine, 10)

        assert [u.username for u in board] == ["high", "low", "tied", "nobody"]

    def test_limit(self, db_engine, make_user):
        for i in range(5):
            make_user(f"u{i}", points=i)
        assert [u.username for u in user_service.get_leaderboard(db_engine, 2)] == ["u4", "u3"]

    def test_get_user(self, db_engine, make_user):
        make_user("alice", points=3)
        assert user_service.get_user(db_engine, "alice").points == 3
        assert user_service.get_user(db_engine, "ghost") is None
