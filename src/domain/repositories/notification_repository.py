"""Notification repository protocol."""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.notification import (
    Notification,
    NotificationFilter,
    NotificationTypeDefinition,
    RelatedEntityIds,
)


class INotificationRepository(Protocol):
    """Repository interface for notifications and their type catalog."""

    # --- Catalog ---

    async def get_active_types(self) -> list[NotificationTypeDefinition]:
        """Get every active notification type."""
        ...

    # --- Notifications ---

    async def create(self, notification: Notification) -> Notification:
        """Persist a new notification."""
        ...

    async def get(self, notification_id: UUID) -> Notification | None:
        """Get a notification by ID."""
        ...

    async def find_duplicate(
        self,
        type_code: str,
        related: RelatedEntityIds,
        since: datetime,
    ) -> Notification | None:
        """Earliest notification with the same type and related ids created at or after ``since``."""
        ...

    async def get_notifications(self, filters: NotificationFilter) -> list[Notification]:
        """List notifications, newest first."""
        ...

    async def get_unread_count(self) -> int:
        """Count unread notifications."""
        ...

    async def mark_read(self, notification_id: UUID, read_at: datetime) -> Notification | None:
        """Mark one notification read, keeping an existing read_at. None if absent."""
        ...

    async def mark_all_read(self, read_at: datetime) -> int:
        """Mark every unread notification read. Returns count updated."""
        ...

    # --- Cleanup ---

    async def list_with_related(self) -> list[Notification]:
        """Notifications that reference at least one entity, oldest first."""
        ...

    async def delete_many(self, notification_ids: Iterable[UUID]) -> int:
        """Delete the given notifications. Returns count deleted."""
        ...

    async def delete_expired(self, now: datetime, created_before: datetime) -> int:
        """Delete notifications past expires_at, or without one and created before the cutoff."""
        ...
