"""Notification domain entities."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo


class Priority(StrEnum):
    """Notification priority; ``high`` interrupts the user."""

    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class NotificationTypeDefinition:
    """Catalog entry for a notification type (seeded, read-only at runtime)."""

    code: str
    display_name: str
    icon_token: str = "bell"
    color_token: str = "blue"
    active: bool = True
    description: str | None = None


@dataclass(frozen=True, slots=True)
class RelatedEntityIds:
    """Weak back-references from a notification to the entities it is about."""

    reservation_id: UUID | None = None
    customer_id: UUID | None = None
    table_id: UUID | None = None
    staff_id: UUID | None = None

    def is_empty(self) -> bool:
        return not any(
            (self.reservation_id, self.customer_id, self.table_id, self.staff_id)
        )

    def as_key(self) -> tuple[UUID | None, ...]:
        return (self.reservation_id, self.customer_id, self.table_id, self.staff_id)


@dataclass
class NotificationDraft:
    """A rendered notification that has not been persisted yet."""

    type_code: str
    title: str
    message: str
    priority: Priority = Priority.NORMAL
    data: dict[str, Any] = field(default_factory=dict)
    actions: list[str] = field(default_factory=list)
    related: RelatedEntityIds = field(default_factory=RelatedEntityIds)
    expires_after: timedelta | None = None


@dataclass
class Notification:
    """Domain entity for a persisted, user-facing notification."""

    type_code: str
    title: str
    message: str
    id: UUID = field(default_factory=uuid4)
    priority: Priority = Priority.NORMAL
    created_at: datetime = field(default_factory=datetime.utcnow)
    is_read: bool = False
    read_at: datetime | None = None
    expires_at: datetime | None = None
    data: dict[str, Any] = field(default_factory=dict)
    actions: list[str] = field(default_factory=list)
    related: RelatedEntityIds = field(default_factory=RelatedEntityIds)

    @classmethod
    def from_draft(cls, draft: NotificationDraft, created_at: datetime | None = None) -> "Notification":
        """Build the record for a draft; ``expires_at`` is fixed here, once."""
        created = created_at or datetime.utcnow()
        return cls(
            type_code=draft.type_code,
            title=draft.title,
            message=draft.message,
            priority=draft.priority,
            created_at=created,
            expires_at=created + draft.expires_after if draft.expires_after else None,
            data=dict(draft.data),
            actions=list(draft.actions),
            related=draft.related,
        )

    def mark_read(self, at: datetime | None = None) -> None:
        """Mark as read; a notification that is already read keeps its read_at."""
        if self.is_read:
            return
        self.is_read = True
        self.read_at = at or datetime.utcnow()

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at is not None and self.expires_at <= (now or datetime.utcnow())


@dataclass(frozen=True, slots=True)
class NotificationFilter:
    """Filters accepted by the notification list query."""

    is_read: bool | None = None
    priority: Priority | None = None
    type_code: str | None = None
    limit: int = 100


@dataclass(frozen=True)
class DedupWindow:
    """Time span within which same-type notifications for the same entities are duplicates.

    With ``seconds`` unset the window is the calendar day in ``timezone``;
    otherwise it is a rolling window of that many seconds. Timestamps are
    naive UTC, as stored.
    """

    seconds: int | None = None
    timezone: str = "UTC"

    def _local_date(self, moment: datetime) -> date:
        return moment.replace(tzinfo=ZoneInfo("UTC")).astimezone(ZoneInfo(self.timezone)).date()

    def start_for(self, moment: datetime) -> datetime:
        """Earliest creation time still considered a duplicate of ``moment``."""
        if self.seconds is not None:
            return moment - timedelta(seconds=self.seconds)
        local_midnight = datetime.combine(
            self._local_date(moment), datetime.min.time(), tzinfo=ZoneInfo(self.timezone)
        )
        return local_midnight.astimezone(ZoneInfo("UTC")).replace(tzinfo=None)

    def same_window(self, first: datetime, second: datetime) -> bool:
        if self.seconds is not None:
            return abs(second - first) < timedelta(seconds=self.seconds)
        return self._local_date(first) == self._local_date(second)
