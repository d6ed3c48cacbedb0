"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.request_context import RequestContextMiddleware
from api.routes.health import API_VERSION
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_orchestrator
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the notification orchestrator with the app and tear it down on shutdown."""
    orchestrator = get_orchestrator()
    if settings.orchestrator_enabled:
        await orchestrator.start()
    else:
        logger.info("notification_orchestrator_disabled")
    try:
        yield
    finally:
        orchestrator.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Restaurant Notification Orchestrator\n\n"
            "Turns reservation, customer and table activity into persisted, "
            "deduplicated notifications for the staff dashboard.\n\n"
            "### Producers\n"
            "- **Entity changes**: reservations, customers and tables are diffed "
            "against the last snapshot on every push signal and poll\n"
            "- **Temporal checks**: upcoming reservations and tables over their "
            "expected service time\n"
            "- **Manual events**: `POST /api/v1/events` for everything else\n\n"
            "### Delivery\n"
            "`GET /api/v1/notifications/feed` holds the last good list; "
            "high-priority notifications are also streamed on "
            "`GET /api/v1/notifications/interrupts` (server-sent events).\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30-60 requests/minute\n"
            "- POST/PATCH: 5-30 requests/minute"
        ),
        version=API_VERSION,
        debug=settings.debug,
        contact={
            "name": "Enigma Support",
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "notifications",
                "description": "Notification feed, read state and type catalog",
            },
            {
                "name": "events",
                "description": "Manual event emission and store change notices",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Request id + access log (LIFO order - last added = outermost)
    app.add_middleware(RequestContextMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
