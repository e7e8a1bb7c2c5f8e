"""Integration tests for health endpoints and request tagging."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app

pytestmark = pytest.mark.integration


class TestHealthEndpoints:
    @pytest.mark.asyncio
    async def test_health_endpoint(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")
            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "healthy"
            assert "version" in data
            assert "uptime_seconds" in data

    @pytest.mark.asyncio
    async def test_ready_when_database_up(self):
        with patch("src.api.routes.health.check_db", new=AsyncMock(return_value=True)):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "database": True}

    @pytest.mark.asyncio
    async def test_ready_degraded(self):
        with patch("src.api.routes.health.check_db", new=AsyncMock(return_value=False)):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get("/ready")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_request_id_propagated(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["x-request-id"] == "req-123"

    @pytest.mark.asyncio
    async def test_request_id_generated(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")
        assert len(response.headers["x-request-id"]) == 36

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/v1/does-not-exist")
        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "not_found"
        assert data["request_id"]
