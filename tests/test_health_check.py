from unittest.mock import patch

from django.db import DatabaseError


class TestHealthCheck:
    def test_health_check_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data

    def test_reports_each_service(self, client):
        data = client.get("/health").json()
        for service in ("database", "cache"):
            assert data["services"][service]["status"] == "up"
            assert "response_time_ms" in data["services"][service]

    def test_database_outage_returns_503(self, client):
        with patch(
            "modules.core.views._check_database",
            side_effect=DatabaseError("connection refused"),
        ):
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["services"]["database"]["status"] == "down"
