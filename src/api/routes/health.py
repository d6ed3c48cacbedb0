"""Health check endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.dependencies import get_orchestrator
from core.config import settings
from domain.services.orchestrator import NotificationOrchestrator
from infrastructure.database.session import get_async_session

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


class OrchestratorHealth(BaseModel):
    """Background subsystem status."""

    running: bool
    feed_state: str
    feed_error: str | None = None
    last_refreshed_at: datetime | None = None
    interrupt_subscribers: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    orchestrator: OrchestratorHealth | None = None


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_async_session),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    """
    Database connectivity plus the orchestrator's state.

    ``degraded`` when the database is unreachable, when the orchestrator
    should be running and is not, or when the feed's last refresh failed.
    """
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except (SQLAlchemyError, OSError) as e:
        db_status = f"unhealthy: {e}"

    feed = orchestrator.feed
    orchestrator_health = OrchestratorHealth(
        running=orchestrator.running,
        feed_state=feed.state.value,
        feed_error=feed.error,
        last_refreshed_at=feed.last_refreshed_at,
        interrupt_subscribers=orchestrator.interrupts.subscriber_count,
    )

    degraded = (
        db_status != "healthy"
        or (settings.orchestrator_enabled and not orchestrator.running)
        or feed.error is not None
    )

    return HealthResponse(
        status="degraded" if degraded else "healthy",
        version=API_VERSION,
        timestamp=datetime.utcnow().isoformat(),
        environment=settings.app_env,
        database=db_status,
        orchestrator=orchestrator_health,
    )
