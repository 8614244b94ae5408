"""
tests/test_health.py -- Integration tests for GET /api/v1/health and the
shared error envelope.

Covers:
  - 200 response with status, version, and components fields
  - No authentication required
  - degraded status when the database ping fails
  - unknown routes and storage failures use the {"msg"} envelope
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from api.main import __version__


def test_health_returns_200_with_components(client: TestClient) -> None:
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"] == __version__
    assert data["components"] == {"app": "ok", "database": "ok"}


def test_health_no_auth_required(client: TestClient) -> None:
    resp = client.get("/api/v1/health", headers={})
    assert resp.status_code == 200


def test_health_degraded_when_database_fails(client: TestClient, monkeypatch) -> None:
    def broken_ping() -> bool:
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    monkeypatch.setattr(client.app.state.social_store, "ping", broken_ping)
    data = client.get("/api/v1/health").json()
    assert data["status"] == "degraded"
    assert data["components"]["database"] == "error"


def test_unknown_route_uses_msg_envelope(client: TestClient) -> None:
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert set(resp.json()) == {"msg"}


def test_storage_failure_is_generic_500(client: TestClient, monkeypatch) -> None:
    def broken_list() -> list:
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(client.app.state.social_store, "list_profiles", broken_list)
    resp = client.get("/api/v1/profile")
    assert resp.status_code == 500
    assert resp.json() == {"msg": "Server error."}
    assert "locked" not in resp.text
