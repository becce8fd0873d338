"""
tests/test_errors.py -- The JSON error envelope produced by api/main.py.

Covers:
  - Unknown routes -> 404 envelope with "Route not found"
  - Unhandled exceptions -> 500 envelope; traceback detail outside production only
  - Envelope shape: {"error": {code, message[, detail]}, "timestamp", "path"}
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import app
from core.config import get_settings


def _explode(*args, **kwargs):
    raise RuntimeError("boom")


@pytest.fixture
def lenient_client(api_client) -> TestClient:
    """A second client on the same app that returns 500s instead of raising.

    Reuses the app.state wired by api_client (no lifespan run here).
    """
    return TestClient(app, raise_server_exceptions=False)


def test_unknown_route(api_client):
    resp = api_client.client.get("/api/nothing-here")
    assert resp.status_code == 404
    body = resp.json()
    assert set(body) == {"error", "timestamp", "path"}
    assert body["error"]["message"] == "Route not found"
    assert body["path"] == "/api/nothing-here"


def test_wrong_method_keeps_envelope(api_client):
    resp = api_client.client.patch("/api/tasks")
    assert resp.status_code == 405
    assert "error" in resp.json()


def test_unhandled_exception_includes_detail_outside_production(api_client, lenient_client, monkeypatch):
    monkeypatch.setattr(app.state.task_service, "list_for", _explode)
    resp = lenient_client.get("/api/tasks", headers=api_client.auth(api_client.admin_token))
    assert resp.status_code == 500
    error = resp.json()["error"]
    assert error["code"] == "internal_error"
    assert "RuntimeError: boom" in error["detail"]


def test_unhandled_exception_hides_detail_in_production(api_client, lenient_client, monkeypatch):
    monkeypatch.setattr(app.state.task_service, "list_for", _explode)
    monkeypatch.setattr(get_settings(), "environment", "production")
    resp = lenient_client.get("/api/tasks", headers=api_client.auth(api_client.admin_token))
    assert resp.status_code == 500
    error = resp.json()["error"]
    assert "detail" not in error
    assert "boom" not in resp.text


def test_forbidden_has_no_auth_headers(api_client):
    user = api_client.register("Err", "err@example.com")
    resp = api_client.client.delete(f"/api/users/{api_client.admin_id}", headers=api_client.auth(user["token"]))
    assert resp.status_code == 403
    assert "www-authenticate" not in resp.headers
