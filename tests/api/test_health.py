"""
Tests for health and readiness endpoints.
"""
from unittest.mock import AsyncMock


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_200(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "bevgenie-api", "version": "1.0.0"}


class TestReadinessEndpoint:
    """Tests for /ready endpoint."""

    def test_ready_with_memory_store(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "session_store": "InMemorySessionStore"}

    def test_not_ready_when_ping_fails(self, client, memory_store):
        memory_store.ping = AsyncMock(side_effect=ConnectionError("Connection refused"))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"
        assert "Connection refused" in response.json()["reason"]


class TestRootEndpoint:

    def test_lists_endpoints(self, client):
        data = client.get("/").json()

        assert data["service"] == "BevGenie API"
        assert "chat_stream" in data["endpoints"]
