"""Pydantic schemas for Notification API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.notification import Notification, NotificationTypeDefinition, Priority


class RelatedEntityIdsSchema(BaseModel):
    """Entities a notification refers to."""

    model_config = ConfigDict(from_attributes=True)

    reservation_id: UUID | None = None
    customer_id: UUID | None = None
    table_id: UUID | None = None
    staff_id: UUID | None = None


class NotificationResponse(BaseModel):
    """Single notification."""

    id: UUID
    type_code: str
    title: str
    message: str
    priority: Priority
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime
    expires_at: datetime | None = None
    data: dict[str, Any]
    actions: list[str]
    related: RelatedEntityIdsSchema

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            type_code=notification.type_code,
            title=notification.title,
            message=notification.message,
            priority=notification.priority,
            is_read=notification.is_read,
            read_at=notification.read_at,
            created_at=notification.created_at,
            expires_at=notification.expires_at,
            data=notification.data,
            actions=notification.actions,
            related=RelatedEntityIdsSchema.model_validate(notification.related),
        )


class NotificationListResponse(BaseModel):
    """Notification list response."""

    data: list[NotificationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class FeedResponse(BaseModel):
    """Live feed view: the last good list plus the refresh state."""

    state: str
    error: str | None = None
    unread_count: int
    last_refreshed_at: datetime | None = None
    data: list[NotificationResponse]


class UnreadCountResponse(BaseModel):
    """Unread notification count response."""

    count: int


class MarkAllReadResponse(BaseModel):
    """Response for mark-all-read operation."""

    count: int  # Number of notifications marked


class CleanupResponse(BaseModel):
    """Response for the duplicate cleanup pass."""

    removed: int


class NotificationTypeResponse(BaseModel):
    """Notification type catalog entry."""

    code: str
    display_name: str
    icon: str
    color: str
    description: str | None = None

    @classmethod
    def from_entity(cls, definition: NotificationTypeDefinition) -> "NotificationTypeResponse":
        return cls(
            code=definition.code,
            display_name=definition.display_name,
            icon=definition.icon_token,
            color=definition.color_token,
            description=definition.description,
        )


class NotificationTypeListResponse(BaseModel):
    """List of notification types."""

    data: list[NotificationTypeResponse]
