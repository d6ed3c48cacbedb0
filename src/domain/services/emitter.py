"""Emission façade: the single path from a domain event to a persisted notification."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

import structlog
from pydantic_core import to_jsonable_python

from core.exceptions import (
    StoreTransportError,
    StoreValidationError,
    UnmappedEventKindError,
)
from domain.entities.events import DomainEvent
from domain.entities.notification import NotificationDraft
from domain.services.notification_service import NotificationService
from domain.services.taxonomy import TaxonomyRegistry, render_template

logger = structlog.get_logger()


class EmitError(StrEnum):
    UNMAPPED_KIND = "unmapped_kind"
    VALIDATION_FAILURE = "validation_failure"
    STORE_FAILURE = "store_failure"


@dataclass(frozen=True)
class EmitResult:
    """Either the id of the stored notification or the reason emission was skipped."""

    notification_id: UUID | None = None
    error: EmitError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class NotificationEmitter:
    """Resolves, renders and stores domain events as notifications.

    ``emit`` never raises for unmapped kinds, malformed drafts or store
    failures: each is logged and reported through the result.
    """

    def __init__(self, registry: TaxonomyRegistry, service: NotificationService) -> None:
        self.registry = registry
        self._service = service

    def render(self, event: DomainEvent) -> NotificationDraft:
        """Build the notification draft for ``event``.

        Raises:
            UnmappedEventKindError: No active catalog entry for the event kind.
            StoreValidationError: A template variable is missing from the payload.
        """
        definition = self.registry.resolve(event.kind)
        if definition is None:
            raise UnmappedEventKindError(
                event.kind.value, TaxonomyRegistry.type_code_for(event.kind)
            )

        template = self.registry.template_for(event.kind)
        data = to_jsonable_python(dict(event.payload), fallback=str)
        values = {
            **template.defaults,
            **{key: value for key, value in data.items() if value is not None},
        }
        return NotificationDraft(
            type_code=definition.code,
            title=render_template(template.title, values),
            message=render_template(template.message, values),
            priority=event.priority,
            data=data,
            actions=list(event.suggested_actions),
            related=event.related,
            expires_after=event.expires_after,
        )

    async def emit(self, event: DomainEvent) -> EmitResult:
        log = logger.bind(event_kind=event.kind.value)

        try:
            draft = self.render(event)
        except UnmappedEventKindError as e:
            log.warning("unmapped_event_kind", type_code=e.details["type_code"])
            return EmitResult(error=EmitError.UNMAPPED_KIND)
        except StoreValidationError as e:
            log.warning(
                "notification_validation_failed",
                error=e.message,
                details=e.details,
                payload=to_jsonable_python(dict(event.payload), fallback=str),
            )
            return EmitResult(error=EmitError.VALIDATION_FAILURE)

        try:
            notification = await self._service.create(draft)
        except StoreValidationError as e:
            log.warning("notification_validation_failed", error=e.message, details=e.details)
            return EmitResult(error=EmitError.VALIDATION_FAILURE)
        except StoreTransportError as e:
            log.warning("notification_store_failed", error=e.message, details=e.details)
            return EmitResult(error=EmitError.STORE_FAILURE)
        except Exception:
            log.exception("notification_emit_failed")
            return EmitResult(error=EmitError.STORE_FAILURE)

        return EmitResult(notification_id=notification.id)

    async def emit_many(self, events: Iterable[DomainEvent]) -> list[EmitResult]:
        """Emit events one after the other, in order."""
        return [await self.emit(event) for event in events]
