"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient

from core.exceptions import StoreTransportError


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_200(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_returns_correct_structure(self, client: AsyncClient) -> None:
        """Test that health endpoint returns expected structure."""
        data = (await client.get("/health")).json()

        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert "timestamp" in data
        assert "environment" in data
        assert data["database"] is None

    @pytest.mark.asyncio
    async def test_request_id_header(self, client: AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-ID": "health-check-1"})

        assert response.headers["X-Request-ID"] == "health-check-1"


class TestDetailedHealthEndpoint:
    """Tests for the detailed health check endpoint."""

    @pytest.mark.asyncio
    async def test_database_and_orchestrator(self, client: AsyncClient) -> None:
        data = (await client.get("/health/detailed")).json()

        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["orchestrator"]["running"] is False
        assert data["orchestrator"]["feed_state"] == "idle"
        assert data["orchestrator"]["interrupt_subscribers"] == 0

    @pytest.mark.asyncio
    async def test_feed_error_degrades(self, client: AsyncClient, orchestrator) -> None:
        async def unavailable(filters):
            raise StoreTransportError("list_notifications")

        orchestrator.notifications.list_notifications = unavailable
        await orchestrator.feed.refresh()

        data = (await client.get("/health/detailed")).json()

        assert data["status"] == "degraded"
        assert data["orchestrator"]["feed_state"] == "errored"
        assert data["orchestrator"]["feed_error"] == "Store operation failed: list_notifications"
