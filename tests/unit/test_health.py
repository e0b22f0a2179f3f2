"""
Tests for health check endpoints.
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from app.main import app
from app.routes.health import get_row_store

client = TestClient(app)


def test_healthz_endpoint():
    """Test the basic health check endpoint."""
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


def test_readyz_sheet_readable(fake_store):
    """Readiness passes when the sheet header can be read."""
    app.dependency_overrides[get_row_store] = lambda: fake_store
    try:
        with (
            patch("app.routes.health.settings.ZEPTO_TOKEN", "token"),
            patch("app.routes.health.settings.SENDER_EMAIL", "quotes@shiftraa.com"),
            patch("app.routes.health.settings.OWNER_EMAIL", "owner@shiftraa.com"),
            patch("app.routes.health.settings.FRONTEND_URL", "https://shiftraa.com"),
        ):
            response = client.get("/readyz")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is True
    sheets = data["checks"]["sheets"]
    assert sheets["ok"] is True
    assert sheets["header_columns"] == sheets["expected_columns"] == 20
    assert isinstance(sheets["latency_ms"], (int, float))
    assert data["checks"]["configuration"]["ok"] is True


def test_readyz_sheet_unreadable(fake_store):
    """Readiness fails when the sheet cannot be read."""
    fake_store.fail_on.add("get_rows")
    app.dependency_overrides[get_row_store] = lambda: fake_store
    try:
        response = client.get("/readyz")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is False
    assert "get_rows unavailable" in data["checks"]["sheets"]["error"]


def test_readyz_sheet_not_configured():
    app.dependency_overrides[get_row_store] = lambda: None
    try:
        response = client.get("/readyz")
    finally:
        app.dependency_overrides.clear()

    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["sheets"]["error"] == "GOOGLE_SHEET_ID not set"


def test_readyz_missing_mail_settings_does_not_fail_readiness(fake_store):
    app.dependency_overrides[get_row_store] = lambda: fake_store
    try:
        with patch("app.routes.health.settings.ZEPTO_TOKEN", None):
            response = client.get("/readyz")
    finally:
        app.dependency_overrides.clear()

    data = response.json()
    assert data["overall_ok"] is True
    assert data["checks"]["configuration"]["ok"] is False
    assert "ZEPTO_TOKEN or SENDER_EMAIL not set" in data["checks"]["configuration"]["issues"]


def test_responses_carry_request_id_and_security_headers():
    response = client.get("/healthz", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
