"""Unit tests for middleware."""

import pytest
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.middleware.request_context import RequestContextMiddleware


def _create_app_with_middleware() -> FastAPI:
    """Create a minimal FastAPI app with the request context middleware."""
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/test")
    async def _():
        return {"request_id": structlog.contextvars.get_contextvars().get("request_id")}

    return app


async def _get(path: str, **kwargs):
    transport = ASGITransport(app=_create_app_with_middleware())
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get(path, **kwargs)


class TestRequestContextMiddleware:
    """Tests for RequestContextMiddleware."""

    @pytest.mark.asyncio
    async def test_generates_request_id_when_not_provided(self):
        """Response includes a generated X-Request-ID header."""
        response = await _get("/test")

        assert "x-request-id" in response.headers
        assert len(response.headers["x-request-id"]) > 0

    @pytest.mark.asyncio
    async def test_propagates_existing_request_id(self):
        """Provided X-Request-ID is propagated to response."""
        response = await _get("/test", headers={"X-Request-ID": "custom-req-123"})

        assert response.headers["x-request-id"] == "custom-req-123"

    @pytest.mark.asyncio
    async def test_binds_request_id_to_log_context(self):
        """Handlers log with the request id already bound."""
        response = await _get("/test", headers={"X-Request-ID": "ctx-42"})

        assert response.json() == {"request_id": "ctx-42"}
