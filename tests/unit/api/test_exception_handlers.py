"""Unit tests for exception handlers."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import (
    NotificationNotFoundError,
    StoreTransportError,
    UnknownEventKindError,
)


def _create_test_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


async def _get(app: FastAPI, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get(path)


class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_not_found_envelope(self) -> None:
        app = _create_test_app()

        @app.get("/raise-app")
        async def _() -> None:
            raise NotificationNotFoundError("some-id")

        response = await _get(app, "/raise-app")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "NOTIFICATION_NOT_FOUND"
        assert "some-id" in body["message"]
        assert body["details"]["notification_id"] == "some-id"

    @pytest.mark.asyncio
    async def test_store_transport_error_is_503(self) -> None:
        app = _create_test_app()

        @app.get("/raise-store")
        async def _() -> None:
            raise StoreTransportError("list_notifications", "connection refused")

        response = await _get(app, "/raise-store")

        assert response.status_code == 503
        body = response.json()
        assert body["error_code"] == "STORE_UNAVAILABLE"
        assert body["details"] == {
            "operation": "list_notifications",
            "reason": "connection refused",
        }

    @pytest.mark.asyncio
    async def test_unknown_event_kind_is_422(self) -> None:
        app = _create_test_app()

        @app.get("/raise-kind")
        async def _() -> None:
            raise UnknownEventKindError("pizza_delivered")

        response = await _get(app, "/raise-kind")

        assert response.status_code == 422
        assert response.json()["details"]["event_kind"] == "pizza_delivered"

    @pytest.mark.asyncio
    async def test_http_exception_returns_standard_format(self) -> None:
        from starlette.exceptions import HTTPException

        app = _create_test_app()

        @app.get("/raise-http")
        async def _() -> None:
            raise HTTPException(status_code=405, detail="Method Not Allowed")

        response = await _get(app, "/raise-http")

        assert response.status_code == 405
        body = response.json()
        assert body["error_code"] == "HTTP_ERROR"
        assert body["message"] == "Method Not Allowed"

    @pytest.mark.asyncio
    async def test_validation_error_returns_field_details(self) -> None:
        from pydantic import BaseModel, Field

        app = _create_test_app()

        class Body(BaseModel):
            event_kind: str = Field(..., min_length=1)

        @app.post("/validate")
        async def _(body: Body) -> dict[str, bool]:
            return {"ok": True}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/validate", json={"event_kind": ""})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "body.event_kind"

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_500(self) -> None:
        app = _create_test_app()

        mock_request = MagicMock()
        mock_request.state.request_id = "test-req-id"

        handler = app.exception_handlers.get(Exception)
        assert handler is not None, "Global exception handler not registered"

        response = await handler(mock_request, RuntimeError("Something went wrong"))  # type: ignore[misc]

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["details"]["request_id"] == "test-req-id"
