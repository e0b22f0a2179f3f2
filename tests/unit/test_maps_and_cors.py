"""
Tests for the Google Maps script proxy and the CORS allow-list.
"""

from unittest.mock import patch

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.main import app
from app.middleware.cors import CORSMiddleware
from app.routes import maps

client = TestClient(app)

REAL_ASYNC_CLIENT = httpx.AsyncClient


def _patch_upstream(monkeypatch, handler):
    def factory(**kwargs):
        return REAL_ASYNC_CLIENT(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(maps.httpx, "AsyncClient", factory)


def test_maps_script_requires_api_key():
    with patch("app.routes.maps.settings.GOOGLE_MAPS_API_KEY", None):
        response = client.get("/google-maps-api")

    assert response.status_code == 500
    assert response.json() == {"error": "API key not configured on the server"}


def test_maps_script_is_proxied(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, text="window.google = {};")

    _patch_upstream(monkeypatch, handler)

    with patch("app.routes.maps.settings.GOOGLE_MAPS_API_KEY", "maps-key"):
        response = client.get("/google-maps-api")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/javascript")
    assert response.text == "window.google = {};"
    assert seen["params"]["key"] == "maps-key"
    assert seen["params"]["libraries"] == "places,core"
    assert seen["params"]["callback"] == maps.MAPS_CALLBACK


def test_maps_upstream_failure(monkeypatch):
    _patch_upstream(monkeypatch, lambda request: httpx.Response(502, text="bad gateway"))

    with patch("app.routes.maps.settings.GOOGLE_MAPS_API_KEY", "maps-key"):
        response = client.get("/google-maps-api")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to load Google Maps API script"}


@pytest.fixture
def cors_client():
    cors_app = FastAPI()
    cors_app.add_middleware(CORSMiddleware, allowed_origins=["https://shiftraa.com"])

    @cors_app.post("/submit-quote")
    async def submit():
        return {"ok": True}

    return TestClient(cors_app)


def test_allowed_origin_gets_credentials_headers(cors_client):
    response = cors_client.post("/submit-quote", headers={"Origin": "https://shiftraa.com"})

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "https://shiftraa.com"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"


def test_preflight_from_allowed_origin(cors_client):
    response = cors_client.options(
        "/submit-quote",
        headers={"Origin": "https://shiftraa.com", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 204
    assert "POST" in response.headers["Access-Control-Allow-Methods"]


def test_disallowed_origin_is_rejected(cors_client):
    response = cors_client.post("/submit-quote", headers={"Origin": "https://evil.example"})

    assert response.status_code == 403
    assert "Access-Control-Allow-Origin" not in response.headers


def test_requests_without_origin_pass(cors_client):
    assert cors_client.post("/submit-quote").status_code == 200
