"""
tests/test_api_routes.py — HTTP Surface
========================================

Exercises the FastAPI routes against the in-memory database through the
shared ``client`` fixture.
"""

from __future__ import annotations

from conftest import make_token

from kudos.api.deps import get_config
from kudos.api.main import app
from kudos.config import KudosConfig


def _auth(username: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(username)}"}


class TestHealth:
    def test_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestUsers:
    def test_create_and_fetch(self, client):
        assert client.post("/api/users", json={"username": "alice"}).status_code == 201
        resp = client.get("/api/users/alice")
        assert resp.status_code == 200
        assert resp.json()["points"] == 0

    def test_duplicate_is_400(self, client):
        client.post("/api/users", json={"username": "alice"})
        assert client.post("/api/users", json={"username": "alice"}).status_code == 400

    def test_unknown_is_404(self, client):
        assert client.get("/api/users/ghost").status_code == 404

    def test_points_for_unknown_user_is_zero(self, client):
        assert client.get("/api/users/ghost/points").json() == {"username": "ghost", "points": 0}

    def test_leaderboard_awards_placements(self, client, make_user):
        for name, pts in [("alice", 900), ("bob", 800), ("carol", 700), ("dave", 600)]:
            make_user(name, points=pts)

        resp = client.get("/api/users/leaderboard")

        assert resp.status_code == 200
        users = resp.json()["users"]
        assert [(u["username"], u["rank"]) for u in users] == [
            ("alice", 1), ("bob", 2), ("carol", 3), ("dave", 4),
        ]
        assert [b["name"] for b in client.get("/api/badges/alice").json()] == ["1st Place"]
        assert [b["name"] for b in client.get("/api/badges/carol").json()] == ["3rd Place"]
        assert client.get("/api/badges/dave").json() == []

    def test_leaderboard_limit(self, client, make_user):
        for i in range(3):
            make_user(f"u{i}", points=i)
        assert len(client.get("/api/users/leaderboard?limit=2").json()["users"]) == 2
        assert client.get("/api/users/leaderboard?limit=0").status_code == 422

    def test_leaderboard_limit_is_capped(self, client, make_user):
        app.dependency_overrides[get_config] = lambda: KudosConfig(
            leaderboard_limit=2, leaderboard_max=3,
        )
        for i in range(6):
            make_user(f"u{i}", points=i)

        assert len(client.get("/api/users/leaderboard").json()["users"]) == 2
        capped = client.get("/api/users/leaderboard?limit=50").json()["users"]
        assert [u["username"] for u in capped] == ["u5", "u4", "u3"]


class TestBadges:
    def test_unknown_user_has_none(self, client):
        resp = client.get("/api/badges/nobody")
        assert resp.status_code == 200
        assert resp.json() == []


class TestPosts:
    def test_question_and_answer(self, client, make_user):
        make_user("alice")
        make_user("bob")

        resp = client.post(
            "/api/questions",
            json={"title": "How?", "text": "...", "asked_by": "alice"},
            headers=_auth("alice"),
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["points"] == 10
        assert body["milestone_awarded"] is False

        resp = client.post(
            f"/api/questions/{body['id']}/answers",
            json={"text": "So.", "ans_by": "bob"},
            headers=_auth("bob"),
        )
        assert resp.status_code == 201
        assert resp.json()["points"] == 15
        assert client.get("/api/answers/count/bob").json()["count"] == 1

    def test_question_requires_token(self, client, make_user):
        make_user("alice")
        resp = client.post(
            "/api/questions", json={"title": "How?", "text": "...", "asked_by": "alice"},
        )
        assert resp.status_code == 401
        assert client.get("/api/users/alice/points").json()["points"] == 0

    def test_cannot_ask_as_someone_else(self, client, make_user):
        make_user("alice")
        resp = client.post(
            "/api/questions",
            json={"title": "How?", "text": "...", "asked_by": "alice"},
            headers=_auth("mallory"),
        )
        assert resp.status_code == 401
        assert client.get("/api/questions/count/alice").json()["count"] == 0

    def test_cannot_answer_as_someone_else(self, client, make_user):
        make_user("alice")
        make_user("bob")
        qid = client.post(
            "/api/questions",
            json={"title": "How?", "text": "...", "asked_by": "alice"},
            headers=_auth("alice"),
        ).json()["id"]

        resp = client.post(
            f"/api/questions/{qid}/answers", json={"text": "So.", "ans_by": "bob"},
        )
        assert resp.status_code == 401
        resp = client.post(
            f"/api/questions/{qid}/answers",
            json={"text": "So.", "ans_by": "bob"},
            headers=_auth("alice"),
        )
        assert resp.status_code == 401
        assert client.get("/api/users/bob/points").json()["points"] == 0

    def test_unknown_author_is_404(self, client):
        resp = client.post(
            "/api/questions",
            json={"title": "How?", "text": "...", "asked_by": "ghost"},
            headers=_auth("ghost"),
        )
        assert resp.status_code == 404

    def test_blank_title_is_400(self, client, make_user):
        make_user("alice")
        resp = client.post(
            "/api/questions",
            json={"title": " ", "text": "...", "asked_by": "alice"},
            headers=_auth("alice"),
        )
        assert resp.status_code == 400


class TestCommunities:
    def _create(self, client, name="Pythonistas", admin="carol"):
        resp = client.post(
            "/api/communities", json={"name": name, "admin": admin}, headers=_auth(admin),
        )
        assert resp.status_code == 201
        return resp.json()["id"]

    def _toggle(self, client, cid, username, as_user=None):
        return client.post(
            "/api/communities/toggle-membership",
            json={"community_id": cid, "username": username},
            headers=_auth(as_user or username),
        )

    def test_toggle_join_and_leave(self, client, make_user):
        make_user("alice")
        cid = self._create(client)

        resp = self._toggle(client, cid, "alice")
        assert resp.status_code == 200
        assert resp.json()["added"] is True
        assert client.get("/api/users/alice/points").json()["points"] == 5

        resp = self._toggle(client, cid, "alice")
        assert resp.json()["added"] is False

    def test_toggle_requires_token(self, client, make_user):
        make_user("alice")
        cid = self._create(client)
        resp = client.post(
            "/api/communities/toggle-membership",
            json={"community_id": cid, "username": "alice"},
        )
        assert resp.status_code == 401
        assert client.get("/api/users/alice/points").json()["points"] == 0

    def test_cannot_toggle_someone_else(self, client, make_user):
        make_user("alice")
        cid = self._create(client)
        assert self._toggle(client, cid, "alice", as_user="mallory").status_code == 401
        assert client.get("/api/badges/alice").json() == []

    def test_create_requires_matching_admin(self, client):
        resp = client.post("/api/communities", json={"name": "Go", "admin": "carol"})
        assert resp.status_code == 401
        resp = client.post(
            "/api/communities", json={"name": "Go", "admin": "carol"}, headers=_auth("mallory"),
        )
        assert resp.status_code == 401
        assert client.get("/api/communities").json() == {"communities": []}

    def test_admin_cannot_leave(self, client):
        cid = self._create(client)
        assert self._toggle(client, cid, "carol").status_code == 403

    def test_toggle_unknown_community(self, client):
        assert self._toggle(client, "nope", "alice").status_code == 404

    def test_delete_requires_admin(self, client):
        cid = self._create(client)
        resp = client.delete(f"/api/communities/{cid}?username=mallory", headers=_auth("mallory"))
        assert resp.status_code == 403
        assert client.get(f"/api/communities/{cid}").status_code == 200

        resp = client.delete(f"/api/communities/{cid}?username=carol", headers=_auth("carol"))
        assert resp.status_code == 200
        assert client.get(f"/api/communities/{cid}").status_code == 404

    def test_delete_cannot_impersonate_admin(self, client):
        cid = self._create(client)
        assert client.delete(f"/api/communities/{cid}?username=carol").status_code == 401
        resp = client.delete(f"/api/communities/{cid}?username=carol", headers=_auth("mallory"))
        assert resp.status_code == 401
        assert client.get(f"/api/communities/{cid}").status_code == 200


class TestVisits:
    def test_requires_token(self, client):
        resp = client.post("/api/communities/abc/visit", json={"username": "alice"})
        assert resp.status_code == 401

    def test_rejects_bad_token(self, client):
        resp = client.post(
            "/api/communities/abc/visit",
            json={"username": "alice"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert resp.status_code == 401

    def test_rejects_username_mismatch(self, client):
        resp = client.post(
            "/api/communities/abc/visit", json={"username": "alice"}, headers=_auth("bob"),
        )
        assert resp.status_code == 401

    def test_records_streak(self, client):
        cid = client.post(
            "/api/communities", json={"name": "Rust", "admin": "carol"}, headers=_auth("carol"),
        ).json()["id"]

        resp = client.post(
            f"/api/communities/{cid}/visit", json={"username": "alice"}, headers=_auth("alice"),
        )
        assert resp.status_code == 200
        assert resp.json() == {"message": "Visit recorded"}

        streak = client.get(f"/api/communities/{cid}/streaks/alice").json()
        assert (streak["current_streak"], streak["longest_streak"]) == (1, 1)

    def test_unknown_community_still_acknowledged(self, client):
        resp = client.post(
            "/api/communities/nope/visit", json={"username": "alice"}, headers=_auth("alice"),
        )
        assert resp.status_code == 200
        assert client.get("/api/communities/nope/streaks/alice").status_code == 404


class TestAuth:
    def test_me(self, client):
        resp = client.get("/api/auth/me", headers=_auth("alice"))
        assert resp.json() == {"username": "alice"}
