"""
tests/conftest.py -- Shared test fixtures for Taskboard.

This module provides:
  - make_test_database(): isolated named shared-memory SQLite handle
  - _patch_lifespan(): wires a test Database into app.state, bypassing real startup
  - api_client: TestClient + helpers for route integration tests
  - db / user_store / task_store: store-level fixtures for unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG must be set before any auth/core import so get_settings() auto-generates
SECRET_KEY instead of raising ValueError. The rate limits are raised so the
many logins in this suite never trip the per-IP limiter.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: set before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("REGISTER_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app, init_state
from auth.models import ROLE_ADMIN, User
from auth.store import UserStore
from auth.tokens import hash_password, issue_token
from core.database import Database
from tasks.store import TaskStore

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpass123"


def make_test_database(name: str) -> Database:
    """Create an isolated named shared-memory SQLite handle.

    Args:
        name: Unique DB name so test modules don't share state.
    """
    return Database(f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(db: Database):
    """Return a lifespan that wires the given test Database into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        init_state(app, db)
        yield

    return test_lifespan


@dataclass
class ApiHarness:
    """A TestClient plus an admin account created before the client started."""

    client: TestClient
    admin_id: int
    admin_token: str
    admin_email: str = ADMIN_EMAIL
    admin_password: str = ADMIN_PASSWORD

    @staticmethod
    def auth(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    def register(self, name: str, email: str, password: str = "pw123456") -> dict:
        resp = self.client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        return resp.json()


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness backed by a fresh in-memory database.

    The admin user is created directly through UserStore -- registration
    always produces role "user", so there is no HTTP path to an admin.
    """
    db = make_test_database(f"test_api_{request.module.__name__.rsplit('.', 1)[-1]}")
    # Keep one store alive so the shared-memory DB outlives individual connections.
    user_store = UserStore(db)
    admin_id = user_store.create_user(
        User(name="Admin User", email=ADMIN_EMAIL, hashed_password=hash_password(ADMIN_PASSWORD), role=ROLE_ADMIN)
    )
    admin_token = issue_token(admin_id)

    app.router.lifespan_context = _patch_lifespan(db)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiHarness(client=client, admin_id=admin_id, admin_token=admin_token)

    db.close()


# ---------------------------------------------------------------------------
# Store-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db() -> Generator[Database, None, None]:
    handle = Database("sqlite:///:memory:")
    yield handle
    handle.close()


@pytest.fixture
def user_store(db: Database) -> UserStore:
    return UserStore(db)


@pytest.fixture
def task_store(db: Database) -> TaskStore:
    return TaskStore(db)
