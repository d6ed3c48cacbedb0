"""Unit tests for Notification service layer."""

from datetime import datetime, timedelta
from uuid import UUID, uuid4

import pytest

from core.exceptions import NotificationNotFoundError, StoreValidationError
from domain.entities.notification import (
    DedupWindow,
    Notification,
    NotificationDraft,
    NotificationFilter,
    Priority,
    RelatedEntityIds,
)
from domain.services.notification_service import (
    NOTIFICATION_EXPIRY_DAYS,
    NotificationService,
)


@pytest.fixture
def draft(reservation_id: UUID) -> NotificationDraft:
    return NotificationDraft(
        type_code="reservation_new",
        title="Nueva Reserva",
        message="Mesa para 4 personas el 2026-10-19 a las 21:00",
        related=RelatedEntityIds(reservation_id=reservation_id),
        expires_after=timedelta(hours=1),
    )


def _passthrough(notification: Notification) -> Notification:
    return notification


# --- Tests: create() ---


class TestCreate:
    """Test notification creation."""

    @pytest.mark.asyncio
    async def test_creates_notification(self, notification_service, uow, draft):
        """create() persists a record built from the draft and commits."""
        uow.notifications.find_duplicate.return_value = None
        uow.notifications.create.side_effect = _passthrough

        result = await notification_service.create(draft)

        assert result.type_code == "reservation_new"
        assert result.is_read is False
        assert result.read_at is None
        assert result.expires_at == result.created_at + timedelta(hours=1)
        uow.notifications.create.assert_called_once()
        assert uow.committed

    @pytest.mark.asyncio
    async def test_returns_existing_duplicate(
        self, notification_service, uow, draft, make_notification
    ):
        """create() returns the record already stored in the window and writes nothing."""
        existing = make_notification(related=draft.related)
        uow.notifications.find_duplicate.return_value = existing

        result = await notification_service.create(draft)

        assert result is existing
        uow.notifications.create.assert_not_called()
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_dedup_lookup_uses_window_start(self, uow, draft):
        """The duplicate lookup is bounded by the configured window."""
        service = NotificationService(lambda: uow, dedup_window=DedupWindow(seconds=600))
        uow.notifications.find_duplicate.return_value = None
        uow.notifications.create.side_effect = _passthrough

        before = datetime.utcnow()
        await service.create(draft)

        kwargs = uow.notifications.find_duplicate.call_args.kwargs
        assert kwargs["type_code"] == "reservation_new"
        assert kwargs["related"] == draft.related
        assert before - timedelta(seconds=601) < kwargs["since"] <= datetime.utcnow()

    @pytest.mark.asyncio
    async def test_skips_dedup_without_related_entities(self, notification_service, uow):
        """Notifications that reference no entity are never deduplicated."""
        uow.notifications.create.side_effect = _passthrough
        draft = NotificationDraft(
            type_code="config_hours_changed",
            title="Horarios Modificados",
            message="Los horarios de operación han sido actualizados",
        )

        await notification_service.create(draft)

        uow.notifications.find_duplicate.assert_not_called()
        uow.notifications.create.assert_called_once()

    @pytest.mark.asyncio
    async def test_rejects_blank_message(self, notification_service, uow, draft):
        """create() raises before touching the store when content is missing."""
        draft.message = "   "

        with pytest.raises(StoreValidationError) as exc_info:
            await notification_service.create(draft)

        assert exc_info.value.details["missing"] == ["message"]
        uow.notifications.create.assert_not_called()


# --- Tests: reads ---


class TestReads:
    """Test list, count and get."""

    @pytest.mark.asyncio
    async def test_list_uses_default_filter(self, notification_service, uow):
        uow.notifications.get_notifications.return_value = []

        await notification_service.list_notifications()

        uow.notifications.get_notifications.assert_called_once_with(NotificationFilter())

    @pytest.mark.asyncio
    async def test_list_passes_filters(self, notification_service, uow):
        filters = NotificationFilter(is_read=False, priority=Priority.HIGH, limit=10)
        uow.notifications.get_notifications.return_value = []

        await notification_service.list_notifications(filters)

        uow.notifications.get_notifications.assert_called_once_with(filters)

    @pytest.mark.asyncio
    async def test_get_unread_count(self, notification_service, uow):
        uow.notifications.get_unread_count.return_value = 7

        assert await notification_service.get_unread_count() == 7

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, notification_service, uow):
        uow.notifications.get.return_value = None

        with pytest.raises(NotificationNotFoundError):
            await notification_service.get(uuid4())


# --- Tests: read lifecycle ---


class TestMarkRead:
    """Test the unread -> read transition."""

    @pytest.mark.asyncio
    async def test_mark_read_commits(self, notification_service, uow, make_notification):
        notification = make_notification()
        notification.mark_read()
        uow.notifications.mark_read.return_value = notification

        result = await notification_service.mark_read(notification.id)

        assert result.is_read is True
        assert result.read_at is not None
        assert uow.committed

    @pytest.mark.asyncio
    async def test_mark_read_not_found(self, notification_service, uow):
        uow.notifications.mark_read.return_value = None

        with pytest.raises(NotificationNotFoundError):
            await notification_service.mark_read(uuid4())

        assert not uow.committed

    @pytest.mark.asyncio
    async def test_mark_all_read_returns_count(self, notification_service, uow):
        uow.notifications.mark_all_read.return_value = 3

        assert await notification_service.mark_all_read() == 3
        assert uow.committed


class TestNotificationEntityReadState:
    """The read flag and read_at always move together."""

    def test_mark_read_sets_timestamp(self, make_notification):
        notification = make_notification()
        at = datetime(2026, 10, 19, 20, 0)

        notification.mark_read(at)

        assert notification.is_read is True
        assert notification.read_at == at

    def test_mark_read_twice_keeps_first_timestamp(self, make_notification):
        notification = make_notification()
        first = datetime(2026, 10, 19, 20, 0)

        notification.mark_read(first)
        notification.mark_read(first + timedelta(minutes=5))

        assert notification.read_at == first

    def test_expiry_is_computed_once(self):
        created = datetime(2026, 10, 19, 20, 0)
        draft = NotificationDraft(
            type_code="table_time_exceeded",
            title="Mesa Excede Tiempo",
            message="Mesa 4 excede tiempo asignado",
            expires_after=timedelta(hours=2),
        )

        notification = Notification.from_draft(draft, created_at=created)

        assert notification.expires_at == datetime(2026, 10, 19, 22, 0)
        assert notification.is_expired(datetime(2026, 10, 19, 22, 0))
        assert not notification.is_expired(datetime(2026, 10, 19, 21, 59))


# --- Tests: cleanup ---


class TestCleanupDuplicates:
    """Test collapsing of duplicate notifications."""

    @pytest.mark.asyncio
    async def test_keeps_earliest_of_each_group(
        self, notification_service, uow, make_notification, reservation_id
    ):
        related = RelatedEntityIds(reservation_id=reservation_id)
        base = datetime(2026, 10, 19, 10, 0)
        first = make_notification(related=related, created_at=base)
        second = make_notification(related=related, created_at=base + timedelta(minutes=5))
        third = make_notification(related=related, created_at=base + timedelta(hours=1))
        uow.notifications.list_with_related.return_value = [first, second, third]
        uow.notifications.delete_many.return_value = 2

        removed = await notification_service.cleanup_duplicates()

        assert removed == 2
        uow.notifications.delete_many.assert_called_once_with([second.id, third.id])
        assert uow.committed

    @pytest.mark.asyncio
    async def test_groups_by_type_and_related(
        self, notification_service, uow, make_notification, reservation_id
    ):
        base = datetime(2026, 10, 19, 10, 0)
        related = RelatedEntityIds(reservation_id=reservation_id)
        uow.notifications.list_with_related.return_value = [
            make_notification(related=related, created_at=base),
            make_notification(
                type_code="reservation_confirmed", related=related, created_at=base
            ),
            make_notification(
                related=RelatedEntityIds(reservation_id=uuid4()), created_at=base
            ),
        ]

        removed = await notification_service.cleanup_duplicates()

        assert removed == 0
        uow.notifications.delete_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_different_days_are_not_duplicates(
        self, notification_service, uow, make_notification, reservation_id
    ):
        related = RelatedEntityIds(reservation_id=reservation_id)
        uow.notifications.list_with_related.return_value = [
            make_notification(related=related, created_at=datetime(2026, 10, 18, 23, 0)),
            make_notification(related=related, created_at=datetime(2026, 10, 19, 1, 0)),
        ]

        assert await notification_service.cleanup_duplicates() == 0

    @pytest.mark.asyncio
    async def test_rolling_window_anchors_on_kept_record(
        self, uow, make_notification, reservation_id
    ):
        """A chain of close notifications does not extend the window past the survivor."""
        service = NotificationService(lambda: uow, dedup_window=DedupWindow(seconds=600))
        related = RelatedEntityIds(reservation_id=reservation_id)
        base = datetime(2026, 10, 19, 10, 0)
        first = make_notification(related=related, created_at=base)
        second = make_notification(related=related, created_at=base + timedelta(minutes=8))
        third = make_notification(related=related, created_at=base + timedelta(minutes=16))
        uow.notifications.list_with_related.return_value = [first, second, third]
        uow.notifications.delete_many.return_value = 1

        await service.cleanup_duplicates()

        uow.notifications.delete_many.assert_called_once_with([second.id])


class TestCleanupExpired:
    """Test cleanup_expired()."""

    @pytest.mark.asyncio
    async def test_deletes_expired_and_stale(self, notification_service, uow):
        now = datetime(2026, 10, 19, 12, 0)
        uow.notifications.delete_expired.return_value = 4

        result = await notification_service.cleanup_expired(now=now)

        assert result == 4
        uow.notifications.delete_expired.assert_called_once_with(
            now=now,
            created_before=now - timedelta(days=NOTIFICATION_EXPIRY_DAYS),
        )
        assert uow.committed
