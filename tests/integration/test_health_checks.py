"""
Integration tests for health checks

Verifica que todos los endpoints de health check funcionan correctamente:
- /health - Health check básico
- /health/live - Liveness check para Kubernetes
- /health/db - Health check de base de datos
- /health/ready - Readiness check completo
"""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.api.deps import get_db_session
from app.main import app


class TestHealthChecks:
    def test_basic_health_endpoint(self, client: TestClient):
        """Debe retornar 200 OK sin dependencias externas."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "hotel-booking-api"}

    def test_liveness_endpoint(self, client: TestClient):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_database_health_check(self, client: TestClient):
        """Ejecuta SELECT 1 contra el engine configurado (SQLite in-memory sin DATABASE_URL)."""
        response = client.get("/health/db")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "component": "database"}

    def test_readiness_reports_stub_gateways(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        checks = response.json()["checks"]
        assert checks["database"] == "healthy"
        assert checks["storage"] == "in_memory"
        assert checks["etg"] == "stub"
        assert checks["floa"] == "stub"
        assert checks["systempay"] == "stub"

    def test_readiness_fails_when_database_is_down(self, client: TestClient):
        broken_session = AsyncMock()
        broken_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

        async def override_get_db_session():
            yield broken_session

        app.dependency_overrides[get_db_session] = override_get_db_session

        response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["checks"]["database"] == "unhealthy"
