"""Delivery channel: the live notification feed and the high-priority interrupt stream."""

import asyncio
from datetime import datetime
from enum import StrEnum
from uuid import UUID

import structlog

from core.exceptions import AppException
from domain.entities.notification import Notification, NotificationFilter, Priority
from domain.entities.snapshot import StoreChange
from domain.services.notification_service import NotificationService
from domain.services.scheduling import CoalescingRunner, PeriodicTask

logger = structlog.get_logger()

NOTIFICATIONS_TABLE = "notifications"


class FeedState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERRORED = "errored"


class InterruptSubscription:
    """Async iterator over the interrupts published after it was created."""

    def __init__(self, stream: "InterruptStream", queue: "asyncio.Queue[Notification | None]") -> None:
        self._stream = stream
        self._queue = queue

    def __aiter__(self) -> "InterruptSubscription":
        return self

    async def __anext__(self) -> Notification:
        item = await self.get()
        if item is None:
            raise StopAsyncIteration
        return item

    async def get(self) -> Notification | None:
        """Next interrupt, or None once the stream is closed."""
        item = await self._queue.get()
        if item is None:
            self.close()
        return item

    def close(self) -> None:
        self._stream._detach(self._queue)


class InterruptStream:
    """Fans high-priority notifications out to every subscriber.

    Each subscriber has a bounded queue; a slow subscriber loses its oldest
    pending interrupts rather than blocking the publisher.
    """

    def __init__(self, max_pending: int = 50) -> None:
        self._max_pending = max_pending
        self._queues: set[asyncio.Queue[Notification | None]] = set()
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    def subscribe(self) -> InterruptSubscription:
        queue: asyncio.Queue[Notification | None] = asyncio.Queue(maxsize=self._max_pending)
        if self._closed:
            queue.put_nowait(None)
        else:
            self._queues.add(queue)
        return InterruptSubscription(self, queue)

    def publish(self, notification: Notification) -> None:
        if self._closed:
            return
        for queue in self._queues:
            self._put(queue, notification)
        logger.info(
            "notification_interrupt_published",
            notification_id=str(notification.id),
            subscribers=len(self._queues),
        )

    def close(self) -> None:
        self._closed = True
        for queue in self._queues:
            self._put(queue, None)
        self._queues.clear()

    def _detach(self, queue: "asyncio.Queue[Notification | None]") -> None:
        self._queues.discard(queue)

    @staticmethod
    def _put(queue: "asyncio.Queue[Notification | None]", item: Notification | None) -> None:
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(item)


class NotificationFeed:
    """Live view of the notification list, kept fresh by push signals and polling.

    Push and poll only ever call ``request_refresh``; the list itself is
    replaced only by a completed ``refresh``. A failed refresh keeps the last
    good list and records the error.
    """

    def __init__(
        self,
        service: NotificationService,
        interrupts: InterruptStream,
        poll_interval_seconds: float = 30,
        limit: int = 100,
    ) -> None:
        self._service = service
        self._interrupts = interrupts
        self._limit = limit

        self.state = FeedState.IDLE
        self.notifications: list[Notification] = []
        self.error: str | None = None
        self.last_refreshed_at: datetime | None = None

        self._loaded = False
        self._closed = False
        self._runner = CoalescingRunner("notification_feed_refresh", self.refresh)
        self._poller = PeriodicTask(
            "notification_feed_poll",
            self._poll,
            interval=poll_interval_seconds,
            initial_delay=poll_interval_seconds,
        )

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> "asyncio.Task[None] | None":
        """Trigger the initial load and start polling."""
        self._closed = False
        task = self.request_refresh()
        self._poller.start()
        return task

    def close(self) -> None:
        self._closed = True
        self._poller.stop()

    def request_refresh(self) -> "asyncio.Task[None] | None":
        if self._closed:
            return None
        return self._runner.request()

    def handle_change(self, change: StoreChange) -> None:
        if change.table == NOTIFICATIONS_TABLE:
            self.request_refresh()

    async def _poll(self) -> None:
        self.request_refresh()

    async def refresh(self) -> None:
        if self._closed:
            return
        self.state = FeedState.LOADING

        try:
            items = await self._service.list_notifications(NotificationFilter(limit=self._limit))
        except AppException as e:
            self._fail(e.message)
            return
        except Exception as e:
            logger.exception("notification_feed_refresh_crashed")
            self._fail(str(e))
            return

        if self._closed:
            logger.debug("notification_feed_result_discarded")
            return
        self._apply(items)

    def _fail(self, message: str) -> None:
        if self._closed:
            return
        logger.warning("notification_feed_refresh_failed", error=message)
        self.state = FeedState.ERRORED
        self.error = message

    def _apply(self, items: list[Notification]) -> None:
        fresh: list[Notification] = []
        if self._loaded:
            known = {n.id for n in self.notifications}
            fresh = [
                n
                for n in items
                if n.id not in known and n.priority == Priority.HIGH and not n.is_read
            ]

        self.notifications = items
        self.state = FeedState.READY
        self.error = None
        self.last_refreshed_at = datetime.utcnow()
        self._loaded = True

        # Oldest first, matching arrival order.
        for notification in reversed(fresh):
            self._interrupts.publish(notification)

    async def mark_as_read(self, notification_id: UUID) -> Notification:
        notification = await self._service.mark_read(notification_id)
        self.request_refresh()
        return notification

    async def mark_all_as_read(self) -> int:
        count = await self._service.mark_all_read()
        self.request_refresh()
        return count
