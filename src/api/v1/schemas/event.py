"""Pydantic schemas for event emission and store change ingress."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from api.v1.schemas.notification import RelatedEntityIdsSchema
from domain.entities.notification import Priority
from domain.entities.snapshot import ChangeOperation


class EmitEventRequest(BaseModel):
    """Schema for emitting a domain event by hand."""

    event_kind: str = Field(..., min_length=1, max_length=100)
    payload: dict[str, Any] = Field(default_factory=dict)
    related: RelatedEntityIdsSchema = Field(default_factory=RelatedEntityIdsSchema)
    priority: Priority | None = None
    actions: list[str] | None = Field(None, max_length=10)
    expires_after_minutes: int | None = Field(None, ge=1, le=60 * 24 * 30)


class EmitEventResponse(BaseModel):
    """Result of an emission."""

    notification_id: UUID


class StoreEventRequest(BaseModel):
    """Change notice posted by the database webhook."""

    table: str = Field(..., min_length=1, max_length=63)
    operation: ChangeOperation
    record: dict[str, Any] = Field(default_factory=dict)


class StoreEventResponse(BaseModel):
    """Acknowledgement of a change notice."""

    accepted: bool = True
