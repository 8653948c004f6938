"""Integration test for /metrics and the health probes on the real app.

No database needed: the lifespan does not run without a context manager and
these endpoints never touch the session.
"""

from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from bragger.main import app


@pytest.fixture()
def client():
    return TestClient(app, raise_server_exceptions=False)


class TestMetricsEndpoint:
    def test_returns_200(self, client):
        resp = client.get("/metrics")
        assert resp.status_code == 200

    def test_content_type(self, client):
        resp = client.get("/metrics")
        assert "text/plain" in resp.headers["content-type"]

    def test_contains_app_info(self, client):
        resp = client.get("/metrics")
        assert "bragger_info" in resp.text

    def test_contains_domain_metrics(self, client):
        resp = client.get("/metrics")
        assert "achievements_written_total" in resp.text

    def test_contains_http_metrics(self, client):
        client.get("/api/no-such-route")
        body = client.get("/metrics").text
        assert "http_requests_total" in body
        assert "http_request_duration_seconds" in body


class TestHealth:
    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    def test_health_ok(self, client, path):
        resp = client.get(path)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "OK"
        assert body["environment"] == "development"
        assert "timestamp" in body


class TestUnknownRoute:
    def test_route_not_found_envelope(self, client):
        resp = client.get("/api/definitely-missing")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Route not found"}
