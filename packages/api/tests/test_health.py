"""Tests for health endpoints and the root route."""

from unittest.mock import AsyncMock, MagicMock

from fairlend_db import get_db_service
from fastapi.testclient import TestClient

from fairlend import __version__
from fairlend.main import app


def _client_with_db(healthy: bool) -> TestClient:
    db = MagicMock()
    db.health_check = AsyncMock(return_value=healthy)
    app.dependency_overrides[get_db_service] = lambda: db
    return TestClient(app)


def test_health():
    resp = TestClient(app).get("/health/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": __version__}


def test_ready_when_database_answers():
    resp = _client_with_db(True).get("/health/ready")
    assert resp.status_code == 200
    assert resp.json()["database"] == "ok"


def test_not_ready_when_database_is_down():
    resp = _client_with_db(False).get("/health/ready")
    assert resp.status_code == 503


def test_unknown_route_is_problem_details():
    resp = TestClient(app).get("/api/nope")
    assert resp.status_code == 404
    body = resp.json()
    assert body["title"] == "Not Found"
    assert body["type"] == "about:blank"
