"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================
Exercises the HTTP surface with the FastAPI TestClient against the
in-memory engine from conftest.

These tests verify:
- Status codes for create / conflict / validation / not-found / delete
- camelCase request and response bodies
- Query-window validation on the analytics routes
- Fixed analytics paths are not captured by ``/users/{user_id}``
"""

from __future__ import annotations

import pytest


def _register(client, username: str, **extra) -> dict:
    body = {
        "email": f"{username}@example.com",
        "username": username,
        "firstName": username.capitalize(),
        "lastName": "Api",
        **extra,
    }
    resp = client.post("/api/users", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ===========================================================================
# Health endpoint
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ===========================================================================
# Users CRUD
# ===========================================================================
class TestUserRoutes:
    def test_create_returns_profile(self, client):
        user = _register(client, "alice", bio="hello")
        assert user["username"] == "alice"
        assert user["firstName"] == "Alice"
        assert user["bio"] == "hello"
        assert user["referralPoints"] == 1
        assert user["networkStrength"] == 0

    def test_create_with_referrer(self, client):
        alice = _register(client, "alice")
        bob = _register(client, "bob", referredById=alice["id"])
        assert bob["networkStrength"] == 1
        resp = client.get(f"/api/users/{alice['id']}")
        assert resp.json()["referralPoints"] == 2

    def test_duplicate_is_409(self, client):
        _register(client, "alice")
        resp = client.post("/api/users", json={
            "email": "alice@example.com", "username": "alice2",
            "firstName": "A", "lastName": "B",
        })
        assert resp.status_code == 409
        assert resp.json() == {"detail": "User with this email or username already exists"}

    @pytest.mark.parametrize("override", [
        {"email": "not-an-email"},
        {"username": "ab"},
        {"username": "x" * 31},
        {"firstName": ""},
    ])
    def test_invalid_body_is_422(self, client, override):
        body = {"email": "ok@example.com", "username": "okname", "firstName": "Ok", "lastName": "Ok"}
        body.update(override)
        assert client.post("/api/users", json=body).status_code == 422

    def test_missing_field_is_422(self, client):
        resp = client.post("/api/users", json={"email": "a@b.co", "username": "abc"})
        assert resp.status_code == 422

    def test_get_unknown_is_404(self, client):
        resp = client.get("/api/users/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "User with ID does-not-exist not found"

    def test_list_with_search_and_pagination(self, client):
        for name in ("alice", "bob", "carol"):
            _register(client, name)
        resp = client.get("/api/users", params={"page": 1, "limit": 2})
        body = resp.json()
        assert resp.status_code == 200
        assert body["total"] == 3
        assert body["totalPages"] == 2
        assert len(body["data"]) == 2

        resp = client.get("/api/users", params={"search": "CAR"})
        assert [u["username"] for u in resp.json()["data"]] == ["carol"]

    def test_list_uses_configured_default_limit(self, client):
        _register(client, "alice")
        assert client.get("/api/users").json()["limit"] == 10

    def test_patch_updates(self, client):
        alice = _register(client, "alice", bio="old")
        resp = client.patch(f"/api/users/{alice['id']}", json={"lastName": "Smith", "bio": None})
        assert resp.status_code == 200
        assert resp.json()["lastName"] == "Smith"
        assert resp.json()["bio"] is None

    def test_patch_conflict_is_409(self, client):
        _register(client, "alice")
        bob = _register(client, "bob")
        resp = client.patch(f"/api/users/{bob['id']}", json={"username": "alice"})
        assert resp.status_code == 409

    def test_patch_unknown_is_404(self, client):
        assert client.patch("/api/users/ghost", json={"bio": "x"}).status_code == 404

    def test_delete_is_204(self, client):
        alice = _register(client, "alice")
        resp = client.delete(f"/api/users/{alice['id']}")
        assert resp.status_code == 204
        assert client.get(f"/api/users/{alice['id']}").status_code == 404

    def test_delete_unknown_is_404(self, client):
        assert client.delete("/api/users/ghost").status_code == 404


# ===========================================================================
# Friends
# ===========================================================================
class TestFriendRoutes:
    def test_add_list_remove(self, client):
        alice = _register(client, "alice")
        bob = _register(client, "bob")

        resp = client.post(f"/api/users/{alice['id']}/friends", json={"friendId": bob["id"]})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Friend added successfully"}

        listed = client.get(f"/api/users/{bob['id']}/friends").json()
        assert [f["id"] for f in listed["data"]] == [alice["id"]]
        assert listed["meta"] == {"total": 1, "currentPage": 1, "limit": 10, "totalPages": 1}

        resp = client.delete(f"/api/users/{alice['id']}/friends/{bob['id']}")
        assert resp.json() == {"message": "Friend removed successfully"}
        assert client.get(f"/api/users/{alice['id']}/friends").json()["data"] == []

    def test_self_friend_is_409(self, client):
        alice = _register(client, "alice")
        resp = client.post(f"/api/users/{alice['id']}/friends", json={"friendId": alice["id"]})
        assert resp.status_code == 409

    def test_unknown_friend_is_404(self, client):
        alice = _register(client, "alice")
        resp = client.post(f"/api/users/{alice['id']}/friends", json={"friendId": "ghost"})
        assert resp.status_code == 404

    def test_missing_friend_id_is_422(self, client):
        alice = _register(client, "alice")
        assert client.post(f"/api/users/{alice['id']}/friends", json={}).status_code == 422


# ===========================================================================
# Analytics
# ===========================================================================
class TestAnalyticsRoutes:
    def test_network_graph(self, client):
        alice = _register(client, "alice")
        bob = _register(client, "bob", referredById=alice["id"])
        resp = client.get("/api/users/network-graph", params={"name": "bob"})
        assert resp.status_code == 200
        graph = resp.json()
        assert graph["user"]["id"] == bob["id"]
        assert graph["referredBy"]["id"] == alice["id"]

    def test_network_graph_unknown_is_404(self, client):
        resp = client.get("/api/users/network-graph", params={"name": "nobody"})
        assert resp.status_code == 404

    def test_leaderboards(self, client):
        alice = _register(client, "alice")
        _register(client, "bob", referredById=alice["id"])

        strength = client.get("/api/users/leaderboard/network-strength").json()
        assert strength[0]["strength"] == 1
        assert {"user", "strength", "calculatedAt"} <= set(strength[0])

        points = client.get("/api/users/leaderboard/referral-points", params={"limit": 1}).json()
        assert len(points) == 1
        assert points[0]["user"]["id"] == alice["id"]
        assert points[0]["points"] == 2

    def test_leaderboard_bad_window_is_400(self, client):
        resp = client.get(
            "/api/users/leaderboard/network-strength",
            params={"from": "2025-08-01", "to": "2025-07-01"},
        )
        assert resp.status_code == 400

    def test_referral_count_and_series(self, client):
        alice = _register(client, "alice")
        _register(client, "bob", referredById=alice["id"])
        window = {"from": "2000-01-01", "to": "2100-01-01"}

        count = client.get(f"/api/users/{alice['id']}/referral-count", params=window)
        assert count.status_code == 200
        assert count.json() == {"count": 1}

        series = client.get(f"/api/users/{alice['id']}/referral-timeseries", params=window).json()
        assert sum(b["count"] for b in series["series"]) == 1

    def test_friends_count_and_series(self, client):
        alice = _register(client, "alice")
        bob = _register(client, "bob")
        client.post(f"/api/users/{alice['id']}/friends", json={"friendId": bob["id"]})
        window = {"from": "2000-01-01", "to": "2100-01-01"}

        assert client.get(f"/api/users/{alice['id']}/friends-count", params=window).json() == {"count": 1}
        assert client.get(f"/api/users/{bob['id']}/friends-count", params=window).json() == {"count": 0}
        series = client.get(f"/api/users/{alice['id']}/friends-timeseries", params=window).json()
        assert len(series["series"]) == 1

    @pytest.mark.parametrize("params", [
        {"to": "2025-07-01"},
        {"from": "2025-07-01"},
        {"from": "July", "to": "2025-07-01"},
    ])
    def test_window_errors_are_400(self, client, params):
        alice = _register(client, "alice")
        resp = client.get(f"/api/users/{alice['id']}/referral-count", params=params)
        assert resp.status_code == 400
        assert "detail" in resp.json()

    def test_top_influential_friends(self, client):
        alice = _register(client, "alice")
        bob = _register(client, "bob")
        carol = _register(client, "carol")
        client.post(f"/api/users/{alice['id']}/friends", json={"friendId": bob["id"]})
        client.post(f"/api/users/{alice['id']}/friends", json={"friendId": carol["id"]})
        client.post(f"/api/users/{bob['id']}/friends", json={"friendId": carol["id"]})

        top = client.get(f"/api/users/{alice['id']}/top-influential-friends").json()
        assert [t["id"] for t in top] == [bob["id"], carol["id"]]
        assert [t["networkStrength"] for t in top] == [2, 2]

    def test_top_influential_unknown_is_404(self, client):
        assert client.get("/api/users/ghost/top-influential-friends").status_code == 404
