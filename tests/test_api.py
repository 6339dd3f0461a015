"""
FastAPI endpoint tests for the State Probe API.

Uses httpx + FastAPI TestClient — no real server needed, no network calls.
"""

from __future__ import annotations

from unittest.mock import patch

import api
import pytest
from api import app
from fastapi.testclient import TestClient

from state_probe.engine import ClassificationEngine
from state_probe.exceptions import RequestConstructionError, TransportError
from state_probe.models import FetchedDocument

client = TestClient(app)


@pytest.fixture(autouse=True)
def _warm_engine():
    """Build the engine directly for every test (bypasses lifespan)."""
    api._engine = ClassificationEngine()
    yield
    api._engine = None


STATEFUL_BODY = "Set-Cookie: id=1\n<input type='hidden' name='x'>"


class TestHealthEndpoint:
    def test_health_returns_200(self) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200

    def test_health_response_shape(self) -> None:
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["stateful_threshold"] == 2
        assert data["stateless_threshold"] == 1

    def test_uninitialised_engine_returns_503(self) -> None:
        api._engine = None
        assert client.get("/health").status_code == 503


class TestClassifyEndpoint:
    def test_stateful_body(self) -> None:
        resp = client.post("/classify", json={"body": STATEFUL_BODY})
        assert resp.status_code == 200
        data = resp.json()
        assert data["classification"] == "Stateful"
        assert data["stateful"]["true_count"] == 2
        assert data["url"] is None

    def test_stateless_body(self) -> None:
        data = client.post(
            "/classify", json={"body": '<a href="/users/42">profile</a>?debug=1'}
        ).json()
        assert data["classification"] == "Stateless"

    def test_empty_body_is_undetermined(self) -> None:
        data = client.post("/classify", json={"body": ""}).json()
        assert data["classification"] == "Undetermined"
        assert data["body_length"] == 0

    def test_signals_listed_per_detector(self) -> None:
        data = client.post("/classify", json={"body": STATEFUL_BODY}).json()
        fired = {s["detector"]: s["fired"] for s in data["stateful"]["signals"]}
        assert len(fired) == 7
        assert fired["set_cookie"] is True
        assert fired["websocket"] is False

    def test_lowercase_set_cookie_header_counts(self) -> None:
        body = "set-cookie: id=1\n<input type='hidden' name='x'>"
        data = client.post("/classify", json={"body": body}).json()
        assert data["classification"] == "Stateful"

    def test_missing_body_returns_422(self) -> None:
        assert client.post("/classify", json={}).status_code == 422


class TestClassifyUrlEndpoint:
    def test_fetches_then_classifies(self) -> None:
        doc = FetchedDocument(url="https://example.com", status_code=200, text=STATEFUL_BODY)
        with patch("api.fetch_document", return_value=doc) as fetch:
            resp = client.post("/classify/url", json={"url": "https://example.com"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["classification"] == "Stateful"
        assert data["url"] == "https://example.com"
        assert data["status_code"] == 200
        fetch.assert_called_once_with(
            "https://example.com", timeout=10.0, include_headers=True
        )

    def test_bad_url_returns_400(self) -> None:
        with patch("api.fetch_document", side_effect=RequestConstructionError("no scheme")):
            resp = client.post("/classify/url", json={"url": "example.com"})
        assert resp.status_code == 400

    def test_upstream_failure_returns_502(self) -> None:
        with patch("api.fetch_document", side_effect=TransportError("refused")):
            resp = client.post("/classify/url", json={"url": "https://example.com"})
        assert resp.status_code == 502
        assert "refused" in resp.json()["detail"]

    def test_empty_url_returns_422(self) -> None:
        assert client.post("/classify/url", json={"url": ""}).status_code == 422
