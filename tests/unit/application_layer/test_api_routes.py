"""
Unit Tests for API Routes

Tests the health and metrics endpoints with TestClient. The clients are
used without a ``with`` block, so the service lifespans do not run.
"""

import pytest
from fastapi.testclient import TestClient

from stream_relay.application.ingestion_app import create_ingestion_app
from stream_relay.application.writer_app import create_writer_app


@pytest.mark.unit
class TestHealthRoutes:
    """Test suite for health check routes."""

    @pytest.fixture(params=[create_ingestion_app, create_writer_app], ids=["ingestion", "writer"])
    def client(self, request):
        return TestClient(request.param())

    def test_health_returns_plain_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.text == "OK"
        assert response.headers["content-type"].startswith("text/plain")

    def test_metrics_exposed(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "wikipedia_deserialization_errors_total" in response.text

    def test_no_other_routes(self, client):
        assert client.get("/api/v1/stream").status_code == 404
