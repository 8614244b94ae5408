"""
tests/conftest.py -- Shared test fixtures for DevConnector integration tests.

This module provides:
  - settings: a Settings instance pointing at a per-test SQLite file
  - client: TestClient over create_app(settings), lifespan included
  - register(): helper that creates an identity through the API and
    returns its token
  - auth(): builds the token header dict

Design: every test gets its own database file under pytest's tmp_path, so
no test sees another's identities or posts and tests can run in any order.
A file (not :memory:) is required because TestClient runs sync route
handlers in a worker thread pool and each thread opens its own connection.

bcrypt_rounds=4 is the bcrypt minimum; it keeps registration and login fast
without changing any code path.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from core.config import Settings

TEST_SECRET = "test-secret-key-for-devconnector-0123456789"


def _make_settings(db_path, **overrides) -> Settings:
    values = {
        "secret_key": TEST_SECRET,
        "database_url": f"sqlite:///{db_path}",
        "bcrypt_rounds": 4,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return _make_settings(tmp_path / "devconnector_test.db")


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient, None, None]:
    """TestClient over a fully wired app; the with-block runs the real lifespan."""
    app = create_app(settings)
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


def auth(token: str) -> dict[str, str]:
    return {"x-auth-token": token}


def register(client: TestClient, name: str, email: str, password: str = "secret123") -> str:
    """Register an identity through POST /api/v1/users and return its token."""
    resp = client.post("/api/v1/users", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 200, f"registration failed: {resp.status_code} {resp.text}"
    return resp.json()["token"]


def identity_id(client: TestClient, token: str) -> int:
    resp = client.get("/api/v1/auth", headers=auth(token))
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]
