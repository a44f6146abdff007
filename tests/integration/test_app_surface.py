from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.greenhouse.entities.service.plant import PlantRepository


class TestApplicationSurface:
    def test_root_greeting(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert response.text == "Hello from Server.."

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_readiness(self, client: TestClient):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "database": "ok"}

    def test_readiness_reports_database_outage(self, client: TestClient, database_service):
        with patch.object(database_service, "health_check", return_value=False):
            response = client.get("/health/ready")
        assert response.status_code == 503

    def test_request_id_echoed(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_security_headers(self, client: TestClient):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_cors_allows_client_domain(self, client: TestClient):
        response = client.options(
            "/plants",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"

    def test_database_errors_are_upstream_failures(self, client: TestClient):
        with patch.object(
            PlantRepository, "list_all", side_effect=OperationalError("SELECT", {}, Exception("down"))
        ):
            response = client.get("/plants", headers={"X-Request-ID": "req-db"})

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "upstream_failure"
        assert body["request_id"] == "req-db"

    def test_unknown_route(self, client: TestClient):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
