"""Tests for health endpoints and app-wide response behavior."""

from unittest.mock import AsyncMock, patch

from httpx import AsyncClient


class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "draftmons-api"}

    async def test_ready_when_database_answers(self, client: AsyncClient):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_ready_returns_503_when_database_down(self, client: AsyncClient):
        with patch(
            "routes.health_routes.check_db_connection",
            AsyncMock(side_effect=ConnectionError("db down")),
        ):
            response = await client.get("/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "Database unavailable"
        assert body["statusCode"] == 503

    async def test_detailed_reports_database(self, client: AsyncClient):
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        body = response.json()
        assert body["database"] is True
        assert body["status"] == "healthy"


class TestAppWideBehavior:
    async def test_unknown_route_uses_error_shape(self, client: AsyncClient):
        response = await client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert set(response.json()) == {"error", "statusCode", "timestamp"}

    async def test_security_headers(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"

    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["x-request-id"] == "abc123"

    async def test_request_id_is_generated(self, client: AsyncClient):
        response = await client.get("/health")

        assert len(response.headers["x-request-id"]) == 32
