"""Event ingress routes: manual emission and store change notices."""

from datetime import timedelta

import structlog
from fastapi import APIRouter, Depends, Request, status

from api.v1.dependencies import get_change_bus, get_orchestrator
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.event import (
    EmitEventRequest,
    EmitEventResponse,
    StoreEventRequest,
    StoreEventResponse,
)
from core.exceptions import (
    StoreTransportError,
    StoreValidationError,
    UnknownEventKindError,
    UnmappedEventKindError,
)
from core.rate_limit import limiter
from domain.entities.events import EventKind
from domain.entities.notification import RelatedEntityIds
from domain.entities.snapshot import StoreChange
from domain.services.emitter import EmitError
from domain.services.orchestrator import NotificationOrchestrator
from domain.services.taxonomy import build_event
from infrastructure.change_bus import InProcessChangeBus

logger = structlog.get_logger()

router = APIRouter(tags=["events"])


@router.post(
    "/events",
    response_model=EmitEventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Emit a domain event",
    responses={
        201: {"description": "Notification stored (or an existing duplicate returned)"},
        422: {"model": ErrorResponse, "description": "Unknown event kind or invalid payload"},
        503: {"model": ErrorResponse, "description": "Store unavailable"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def emit_event(
    request: Request,
    body: EmitEventRequest,
    orchestrator: NotificationOrchestrator = Depends(get_orchestrator),
) -> EmitEventResponse:
    """Emit an event that has no automatic producer (configuration, staff, system)."""
    try:
        kind = EventKind(body.event_kind)
    except ValueError:
        raise UnknownEventKindError(body.event_kind) from None

    overrides = {}
    if body.expires_after_minutes is not None:
        overrides["expires_after"] = timedelta(minutes=body.expires_after_minutes)

    event = build_event(
        kind,
        body.payload,
        RelatedEntityIds(**body.related.model_dump()),
        priority=body.priority,
        actions=body.actions,
        **overrides,
    )
    result = await orchestrator.emit(event)

    if result.error == EmitError.UNMAPPED_KIND:
        raise UnmappedEventKindError(kind.value, orchestrator.registry.type_code_for(kind))
    if result.error == EmitError.VALIDATION_FAILURE:
        raise StoreValidationError(
            "Event payload cannot be rendered into a notification",
            details={"event_kind": kind.value},
        )
    if result.error == EmitError.STORE_FAILURE or result.notification_id is None:
        raise StoreTransportError("create_notification")

    return EmitEventResponse(notification_id=result.notification_id)


@router.post(
    "/store-events",
    response_model=StoreEventResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Receive a store change notice",
)
@limiter.limit("120/minute")  # type: ignore[untyped-decorator]
async def receive_store_event(
    request: Request,
    body: StoreEventRequest,
    change_bus: InProcessChangeBus = Depends(get_change_bus),
) -> StoreEventResponse:
    """Push signal from the database webhook; triggers an early refresh."""
    change = StoreChange(table=body.table, operation=body.operation, record=body.record)
    logger.debug(
        "store_change_received",
        table=change.table,
        operation=change.operation.value,
        record_id=str(change.record_id) if change.record_id else None,
    )
    change_bus.publish(change)
    return StoreEventResponse()
