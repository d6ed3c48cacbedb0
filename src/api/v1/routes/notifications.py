"""Notification API routes."""

import asyncio
from collections.abc import AsyncIterator
from uuid import UUID

import orjson
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from api.v1.dependencies import get_orchestrator
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.notification import (
    CleanupResponse,
    FeedResponse,
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationTypeListResponse,
    NotificationTypeResponse,
    UnreadCountResponse,
)
from core.rate_limit import limiter
from domain.entities.notification import NotificationFilter, Priority
from domain.services.delivery import InterruptStream
from domain.services.orchestrator import NotificationOrchestrator

router = APIRouter(prefix="/notifications", tags=["notifications"])
types_router = APIRouter(prefix="/notification-types", tags=["notifications"])

INTERRUPT_KEEPALIVE_SECONDS = 15.0


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications",
    responses={
        200: {"description": "Notifications, newest first"},
        503: {"model": ErrorResponse, "description": "Store unavailable"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_notifications(
    request: Request,
    is_read: bool | None = Query(None, description="Filter by read status"),
    priority: Priority | None = Query(None, description="Filter by priority"),
    type_code: str | None = Query(None, max_length=50, description="Filter by type code"),
    limit: int = Query(100, ge=1, le=500, description="Maximum number of notifications"),
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> NotificationListResponse:
    """List stored notifications straight from the store."""
    service = orchestrator.notifications
    notifications = await service.list_notifications(
        NotificationFilter(is_read=is_read, priority=priority, type_code=type_code, limit=limit)
    )
    unread_count = await service.get_unread_count()
    return NotificationListResponse(
        data=[NotificationResponse.from_entity(n) for n in notifications],
        meta={"unread_count": unread_count},
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread notification count",
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_unread_count(
    request: Request,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> UnreadCountResponse:
    """Get the number of unread notifications."""
    count = await orchestrator.notifications.get_unread_count()
    return UnreadCountResponse(count=count)


@router.get(
    "/feed",
    response_model=FeedResponse,
    summary="Get the live notification feed",
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_feed(
    request: Request,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> FeedResponse:
    """Last good list held by the delivery channel, with its refresh state.

    An ``errored`` state means the latest refresh failed; ``data`` then still
    holds the previous list.
    """
    feed = orchestrator.feed
    return FeedResponse(
        state=feed.state.value,
        error=feed.error,
        unread_count=feed.unread_count,
        last_refreshed_at=feed.last_refreshed_at,
        data=[NotificationResponse.from_entity(n) for n in feed.notifications],
    )


async def interrupt_events(
    request: Request,
    interrupts: InterruptStream,
    keepalive_seconds: float = INTERRUPT_KEEPALIVE_SECONDS,
) -> AsyncIterator[bytes]:
    """Server-sent event frames, one per interrupt, until the client goes away.

    The subscription is taken when streaming starts and dropped as soon as a
    disconnect is noticed; idle streams check at every keep-alive.
    """
    subscription = interrupts.subscribe()
    try:
        while not await request.is_disconnected():
            try:
                notification = await asyncio.wait_for(subscription.get(), timeout=keepalive_seconds)
            except TimeoutError:
                yield b": keep-alive\n\n"
                continue
            if notification is None:
                return
            body = orjson.dumps(NotificationResponse.from_entity(notification).model_dump(mode="json"))
            yield b"event: notification\ndata: " + body + b"\n\n"
    finally:
        subscription.close()


@router.get(
    "/interrupts",
    summary="Stream high-priority notifications",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/event-stream": {}}}},
)
async def stream_interrupts(
    request: Request,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> StreamingResponse:
    """Server-sent events carrying each new high-priority notification."""
    return StreamingResponse(
        interrupt_events(request, orchestrator.interrupts),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark notification as read",
    responses={
        200: {"description": "Notification marked as read"},
        404: {"model": ErrorResponse, "description": "Notification not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def mark_notification_read(
    request: Request,
    notification_id: UUID,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> NotificationResponse:
    """Mark a notification as read. Already read notifications keep their read time."""
    notification = await orchestrator.feed.mark_as_read(notification_id)
    return NotificationResponse.from_entity(notification)


@router.post(
    "/mark-all-read",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications as read",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def mark_all_notifications_read(
    request: Request,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> MarkAllReadResponse:
    """Mark every unread notification as read."""
    count = await orchestrator.feed.mark_all_as_read()
    return MarkAllReadResponse(count=count)


@router.post(
    "/cleanup-duplicates",
    response_model=CleanupResponse,
    summary="Collapse duplicate notifications",
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def cleanup_duplicate_notifications(
    request: Request,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> CleanupResponse:
    """Run the duplicate cleanup pass now instead of waiting for maintenance."""
    removed = await orchestrator.notifications.cleanup_duplicates()
    if removed:
        orchestrator.feed.request_refresh()
    return CleanupResponse(removed=removed)


@types_router.get(
    "",
    response_model=NotificationTypeListResponse,
    summary="List notification types",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_notification_types(
    request: Request,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> NotificationTypeListResponse:
    """Get the active notification type catalog."""
    types = await orchestrator.notifications.get_notification_types()
    return NotificationTypeListResponse(
        data=[NotificationTypeResponse.from_entity(t) for t in types]
    )
