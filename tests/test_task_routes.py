"""Integration tests for api/routes/tasks.py.

Covers:
- Create / read round-trip and the response envelopes
- GET /api/tasks lists only the caller's tasks, newest first
- Another user (admin included) gets 403 on get/update/delete; nothing changes
- Missing task is 404 before any ownership check
- Invalid bodies are 400; missing token is 401 even with an invalid body
"""

from __future__ import annotations

import pytest


@pytest.fixture(scope="module")
def alice(api_client) -> dict:
    return api_client.register("Alice", "alice@example.com")


@pytest.fixture(scope="module")
def bob(api_client) -> dict:
    return api_client.register("Bob", "bob@example.com")


def _create(api_client, user: dict, title: str, description: str = "details", **extra) -> dict:
    resp = api_client.client.post(
        "/api/tasks",
        json={"title": title, "description": description, **extra},
        headers=api_client.auth(user["token"]),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestCreateAndRead:
    def test_create_envelope(self, api_client, alice) -> None:
        resp = api_client.client.post(
            "/api/tasks",
            json={"title": "Buy milk", "description": "2%"},
            headers=api_client.auth(alice["token"]),
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        task = body["data"]
        assert task["title"] == "Buy milk"
        assert task["description"] == "2%"
        assert task["completed"] is False
        assert task["user_id"] == alice["id"]
        assert task["created_at"] and task["updated_at"]

    def test_create_ignores_client_supplied_owner(self, api_client, alice, bob) -> None:
        task = _create(api_client, alice, "Mine", user_id=bob["id"])
        assert task["user_id"] == alice["id"]

    def test_round_trip_is_stable(self, api_client, alice) -> None:
        task = _create(api_client, alice, "Stable", completed=True)
        first = api_client.client.get(f"/api/tasks/{task['id']}", headers=api_client.auth(alice["token"]))
        second = api_client.client.get(f"/api/tasks/{task['id']}", headers=api_client.auth(alice["token"]))
        assert first.status_code == 200
        assert first.json() == {"success": True, "data": task}
        assert first.content == second.content

    def test_list_is_owner_scoped_newest_first(self, api_client, bob) -> None:
        carol = api_client.register("Carol", "carol@example.com")
        ids = [_create(api_client, carol, f"c{i}")["id"] for i in range(3)]
        _create(api_client, bob, "not carol's")

        resp = api_client.client.get("/api/tasks", headers=api_client.auth(carol["token"]))
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["count"] == 3
        assert [t["id"] for t in body["data"]] == list(reversed(ids))
        assert all(t["user_id"] == carol["id"] for t in body["data"])

    def test_new_user_has_no_tasks(self, api_client) -> None:
        dave = api_client.register("Dave", "dave@example.com")
        resp = api_client.client.get("/api/tasks", headers=api_client.auth(dave["token"]))
        assert resp.json() == {"success": True, "count": 0, "data": []}


class TestUpdateAndDelete:
    def test_partial_update(self, api_client, alice) -> None:
        task = _create(api_client, alice, "Partial")
        resp = api_client.client.put(
            f"/api/tasks/{task['id']}", json={"completed": True}, headers=api_client.auth(alice["token"])
        )
        assert resp.status_code == 200
        updated = resp.json()["data"]
        assert updated["completed"] is True
        assert updated["title"] == "Partial"
        assert updated["created_at"] == task["created_at"]
        assert updated["updated_at"] >= task["updated_at"]

    def test_delete(self, api_client, alice) -> None:
        task = _create(api_client, alice, "Delete me")
        resp = api_client.client.delete(f"/api/tasks/{task['id']}", headers=api_client.auth(alice["token"]))
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Task deleted successfully", "data": {}}

        gone = api_client.client.get(f"/api/tasks/{task['id']}", headers=api_client.auth(alice["token"]))
        assert gone.status_code == 404


class TestOwnership:
    def test_other_user_is_forbidden_everywhere(self, api_client, alice, bob) -> None:
        task = _create(api_client, alice, "Private")
        headers = api_client.auth(bob["token"])
        url = f"/api/tasks/{task['id']}"

        assert api_client.client.get(url, headers=headers).status_code == 403
        assert api_client.client.put(url, json={"title": "pwned"}, headers=headers).status_code == 403
        assert api_client.client.delete(url, headers=headers).status_code == 403

        unchanged = api_client.client.get(url, headers=api_client.auth(alice["token"]))
        assert unchanged.json()["data"] == task

    def test_admin_gets_no_override(self, api_client, alice) -> None:
        task = _create(api_client, alice, "Not for admin")
        resp = api_client.client.get(f"/api/tasks/{task['id']}", headers=api_client.auth(api_client.admin_token))
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "forbidden"

    def test_missing_task_is_404_not_403(self, api_client, bob) -> None:
        resp = api_client.client.put("/api/tasks/999999", json={"title": "x"}, headers=api_client.auth(bob["token"]))
        assert resp.status_code == 404


class TestValidationAndAuth:
    @pytest.mark.parametrize(
        "payload",
        [
            {"description": "no title"},
            {"title": "", "description": "d"},
            {"title": "x" * 101, "description": "d"},
            {"title": "no description"},
            {"title": "t", "description": "d", "completed": "maybe"},
        ],
    )
    def test_invalid_create_body(self, api_client, alice, payload) -> None:
        resp = api_client.client.post("/api/tasks", json=payload, headers=api_client.auth(alice["token"]))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"

    def test_non_integer_id(self, api_client, alice) -> None:
        resp = api_client.client.get("/api/tasks/abc", headers=api_client.auth(alice["token"]))
        assert resp.status_code == 400

    @pytest.mark.parametrize("task_id", ["99999999999999999999", str(2**63), "0", "-1"])
    def test_out_of_range_id_is_rejected(self, api_client, alice, task_id) -> None:
        headers = api_client.auth(alice["token"])
        url = f"/api/tasks/{task_id}"
        for resp in (
            api_client.client.get(url, headers=headers),
            api_client.client.put(url, json={"title": "x"}, headers=headers),
            api_client.client.delete(url, headers=headers),
        ):
            assert resp.status_code == 400
            assert resp.json()["error"]["code"] == "validation_error"

    def test_largest_id_is_a_plain_404(self, api_client, alice) -> None:
        resp = api_client.client.get(f"/api/tasks/{2**63 - 1}", headers=api_client.auth(alice["token"]))
        assert resp.status_code == 404

    def test_missing_token_wins_over_invalid_body(self, api_client) -> None:
        resp = api_client.client.post("/api/tasks", json={"title": ""})
        assert resp.status_code == 401

    def test_every_route_requires_auth(self, api_client) -> None:
        client = api_client.client
        assert client.get("/api/tasks").status_code == 401
        assert client.get("/api/tasks/1").status_code == 401
        assert client.put("/api/tasks/1", json={"title": "x"}).status_code == 401
        assert client.delete("/api/tasks/1").status_code == 401
