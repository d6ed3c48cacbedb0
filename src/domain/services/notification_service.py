"""Notification service layer: the store client for notification records."""

from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

import structlog

from core.exceptions import NotificationNotFoundError, StoreValidationError
from domain.entities.notification import (
    DedupWindow,
    Notification,
    NotificationDraft,
    NotificationFilter,
    NotificationTypeDefinition,
)
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

NOTIFICATION_EXPIRY_DAYS = 90


class NotificationService:
    """Service layer for notification creation and lifecycle."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        dedup_window: DedupWindow | None = None,
        expiry_days: int = NOTIFICATION_EXPIRY_DAYS,
    ) -> None:
        self._uow_factory = uow_factory
        self._dedup_window = dedup_window or DedupWindow()
        self._expiry_days = expiry_days

    @property
    def dedup_window(self) -> DedupWindow:
        return self._dedup_window

    # --- Creation ---

    async def create(self, draft: NotificationDraft) -> Notification:
        """Persist a notification for ``draft``.

        Deduplication is advisory: when a notification with the same type and
        related entities already exists in the current dedup window, that
        record is returned and nothing is written. Concurrent writers can
        still slip a duplicate through; ``cleanup_duplicates`` collapses those.

        Raises:
            StoreValidationError: The draft is missing required content.
            StoreTransportError: The store could not be reached.
        """
        self._validate(draft)
        now = datetime.utcnow()

        async with self._uow_factory() as uow:
            if not draft.related.is_empty():
                existing = await uow.notifications.find_duplicate(
                    type_code=draft.type_code,
                    related=draft.related,
                    since=self._dedup_window.start_for(now),
                )
                if existing:
                    logger.debug(
                        "notification_deduplicated",
                        type_code=draft.type_code,
                        notification_id=str(existing.id),
                    )
                    return existing

            notification = Notification.from_draft(draft, created_at=now)
            created = await uow.notifications.create(notification)
            await uow.commit()

        logger.info(
            "notification_created",
            notification_id=str(created.id),
            type_code=created.type_code,
            priority=created.priority.value,
        )
        return created

    @staticmethod
    def _validate(draft: NotificationDraft) -> None:
        missing = [
            name
            for name in ("type_code", "title", "message")
            if not str(getattr(draft, name) or "").strip()
        ]
        if missing:
            raise StoreValidationError(
                "Notification draft is missing required fields",
                details={"missing": missing, "type_code": draft.type_code},
            )

    # --- Read methods ---

    async def list_notifications(
        self, filters: NotificationFilter | None = None
    ) -> list[Notification]:
        """List notifications ordered by created_at, newest first."""
        async with self._uow_factory() as uow:
            return await uow.notifications.get_notifications(filters or NotificationFilter())

    async def get_unread_count(self) -> int:
        """Get the count of unread notifications."""
        async with self._uow_factory() as uow:
            return await uow.notifications.get_unread_count()

    async def get(self, notification_id: UUID) -> Notification:
        async with self._uow_factory() as uow:
            notification = await uow.notifications.get(notification_id)
        if notification is None:
            raise NotificationNotFoundError(str(notification_id))
        return notification

    async def get_notification_types(self) -> list[NotificationTypeDefinition]:
        """Get the active notification type catalog."""
        async with self._uow_factory() as uow:
            return await uow.notifications.get_active_types()

    # --- Read lifecycle ---

    async def mark_read(self, notification_id: UUID) -> Notification:
        """Mark a notification as read. Marking it again keeps the first read_at."""
        async with self._uow_factory() as uow:
            notification = await uow.notifications.mark_read(
                notification_id, read_at=datetime.utcnow()
            )
            if notification is None:
                raise NotificationNotFoundError(str(notification_id))
            await uow.commit()
            return notification

    async def mark_all_read(self) -> int:
        """Mark all notifications as read. Returns count of marked."""
        async with self._uow_factory() as uow:
            count = await uow.notifications.mark_all_read(read_at=datetime.utcnow())
            await uow.commit()
            return count

    # --- Cleanup ---

    async def cleanup_duplicates(self) -> int:
        """Collapse notifications sharing type and related entities within one dedup window.

        The earliest notification of each group survives. Returns the number
        of notifications removed.
        """
        async with self._uow_factory() as uow:
            candidates = await uow.notifications.list_with_related()

            kept: dict[tuple[object, ...], datetime] = {}
            duplicate_ids: list[UUID] = []
            for notification in candidates:
                key = (notification.type_code, *notification.related.as_key())
                anchor = kept.get(key)
                if anchor is not None and self._dedup_window.same_window(
                    anchor, notification.created_at
                ):
                    duplicate_ids.append(notification.id)
                else:
                    kept[key] = notification.created_at

            if not duplicate_ids:
                return 0

            removed = await uow.notifications.delete_many(duplicate_ids)
            await uow.commit()

        logger.info("notification_duplicates_removed", removed_count=removed)
        return removed

    async def cleanup_expired(self, now: datetime | None = None) -> int:
        """Delete expired notifications. Called by the maintenance interval."""
        now = now or datetime.utcnow()
        async with self._uow_factory() as uow:
            count = await uow.notifications.delete_expired(
                now=now,
                created_before=now - timedelta(days=self._expiry_days),
            )
            await uow.commit()
            return count
