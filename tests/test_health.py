"""
Health endpoint tests
"""

import datetime

import pytest
from fastapi.testclient import TestClient


class TestHealthEndpoints:
    """Test health check endpoints"""

    def test_health_check_success(self, test_client: TestClient):
        """Test basic health check endpoint returns success"""
        response = test_client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()

        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert "timestamp" in data
        assert "uptime" in data

    def test_health_check_response_format(self, test_client: TestClient):
        """Test health check response format compliance"""
        data = test_client.get("/api/v1/health").json()

        assert isinstance(data["status"], str)
        assert isinstance(data["uptime"], (int, float))
        try:
            datetime.datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
        except ValueError:
            pytest.fail("Timestamp is not in valid ISO format")

    def test_readiness_checks_database(self, test_client: TestClient):
        response = test_client.get("/api/v1/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_liveness(self, test_client: TestClient):
        response = test_client.get("/api/v1/health/live")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "alive"
        assert isinstance(data["pid"], int)

    def test_health_check_cors_headers(self, test_client: TestClient):
        """Test health check includes proper CORS headers"""
        response = test_client.get(
            "/api/v1/health", headers={"Origin": "http://localhost:3000"}
        )

        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_unknown_route_uses_error_envelope(self, test_client: TestClient):
        response = test_client.get("/api/v1/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["path"].endswith("/api/v1/does-not-exist")

    def test_root(self, test_client: TestClient):
        data = test_client.get("/").json()

        assert data["status"] == "running"
        assert data["health"] == "/api/v1/health"
