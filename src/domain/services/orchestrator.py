"""Notification orchestrator: wires detection, emission and delivery into one subsystem."""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

import structlog

from core.exceptions import AppException
from domain.entities.events import DomainEvent
from domain.entities.snapshot import StoreChange
from domain.repositories.change_feed import IChangeFeed, Unsubscribe
from domain.services.delivery import NOTIFICATIONS_TABLE, InterruptStream, NotificationFeed
from domain.services.emitter import EmitResult, NotificationEmitter
from domain.services.entity_service import EntityService
from domain.services.notification_service import NotificationService
from domain.services.scheduling import CoalescingRunner, PeriodicTask
from domain.services.snapshot_differ import (
    BUILTIN_COLLECTIONS,
    SnapshotTracker,
    TrackedCollection,
)
from domain.services.taxonomy import TaxonomyRegistry
from domain.services.temporal_scheduler import TemporalScheduler

if TYPE_CHECKING:
    from core.config import Settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class OrchestratorConfig:
    """Intervals and thresholds of the orchestrator's background activities."""

    poll_interval_seconds: float = 30
    feed_limit: int = 100
    temporal_interval_seconds: float = 60
    temporal_startup_delay_seconds: float = 5
    upcoming_window_minutes: int = 15
    early_window_minutes: int = 120
    max_results: int = 50
    table_service_minutes: int = 120
    table_warning_percent: int = 75
    maintenance_interval_seconds: float = 3600

    @classmethod
    def from_settings(cls, settings: "Settings") -> "OrchestratorConfig":
        return cls(
            poll_interval_seconds=settings.notification_poll_interval_seconds,
            feed_limit=settings.notification_feed_limit,
            temporal_interval_seconds=settings.temporal_check_interval_seconds,
            temporal_startup_delay_seconds=settings.temporal_check_startup_delay_seconds,
            upcoming_window_minutes=settings.upcoming_reservation_window_minutes,
            early_window_minutes=settings.upcoming_reservation_early_window_minutes,
            max_results=settings.upcoming_reservation_max_results,
            table_service_minutes=settings.table_service_minutes,
            table_warning_percent=settings.table_time_warning_percent,
            maintenance_interval_seconds=settings.notification_maintenance_interval_seconds,
        )


class NotificationOrchestrator:
    """Owns every background activity of the notification subsystem.

    Three producers share the event loop: entity refreshes (push and poll),
    the temporal scheduler and the feed. After ``stop()`` nothing new is
    started and results of calls still in flight are dropped.
    """

    def __init__(
        self,
        notifications: NotificationService,
        entities: EntityService,
        change_feed: IChangeFeed,
        config: OrchestratorConfig | None = None,
        collections: Iterable[TrackedCollection] = BUILTIN_COLLECTIONS,
    ) -> None:
        self.config = config or OrchestratorConfig()
        self.notifications = notifications
        self._entities = entities
        self._change_feed = change_feed

        self.registry = TaxonomyRegistry.builtin()
        self.emitter = NotificationEmitter(self.registry, notifications)
        self.tracker = SnapshotTracker()
        self.interrupts = InterruptStream()
        self.feed = NotificationFeed(
            notifications,
            self.interrupts,
            poll_interval_seconds=self.config.poll_interval_seconds,
            limit=self.config.feed_limit,
        )
        self.scheduler = TemporalScheduler(
            entities,
            self.emitter,
            interval_seconds=self.config.temporal_interval_seconds,
            startup_delay_seconds=self.config.temporal_startup_delay_seconds,
            upcoming_window_minutes=self.config.upcoming_window_minutes,
            early_window_minutes=self.config.early_window_minutes,
            max_results=self.config.max_results,
            table_service_minutes=self.config.table_service_minutes,
            table_warning_percent=self.config.table_warning_percent,
        )

        self.collections: dict[str, TrackedCollection] = {c.table: c for c in collections}
        self._refreshers = {
            c.name: CoalescingRunner(f"refresh_{c.name}", partial(self._refresh, c))
            for c in self.collections.values()
        }
        self._entity_poll = PeriodicTask(
            "entity_poll",
            self._poll_entities,
            interval=self.config.poll_interval_seconds,
            initial_delay=self.config.poll_interval_seconds,
        )
        self._maintenance = PeriodicTask(
            "notification_maintenance",
            self.run_maintenance,
            interval=self.config.maintenance_interval_seconds,
            initial_delay=self.config.maintenance_interval_seconds,
        )
        self._unsubscribe: Unsubscribe | None = None
        self._alive = False

    @property
    def running(self) -> bool:
        return self._alive

    async def start(self) -> None:
        """Load the catalog, prime the snapshots and start every background activity."""
        if self._alive:
            return
        self._alive = True

        self.registry = await TaxonomyRegistry.load(self.notifications)
        self.emitter.registry = self.registry

        for collection in self.collections.values():
            await self._refresh(collection)
        if not self._alive:
            return

        self._unsubscribe = self._change_feed.subscribe(self.handle_change)
        self.feed.start()
        self.scheduler.start()
        self._entity_poll.start()
        self._maintenance.start()
        logger.info(
            "notification_orchestrator_started",
            collections=[c.name for c in self.collections.values()],
        )

    def stop(self) -> None:
        """Tear down intervals and subscriptions without cancelling in-flight calls."""
        if not self._alive:
            return
        self._alive = False

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._entity_poll.stop()
        self._maintenance.stop()
        self.scheduler.stop()
        self.feed.close()
        self.interrupts.close()
        logger.info("notification_orchestrator_stopped")

    def handle_change(self, change: StoreChange) -> None:
        """Route a push signal to the feed or to the collection it concerns."""
        if not self._alive:
            return
        if change.table == NOTIFICATIONS_TABLE:
            self.feed.handle_change(change)
            return
        collection = self.collections.get(change.table)
        if collection is None:
            logger.debug("store_change_ignored", table=change.table)
            return
        self.refresh_collection(collection)

    def refresh_collection(self, collection: TrackedCollection) -> "asyncio.Task[None] | None":
        if not self._alive:
            return None
        return self._refreshers[collection.name].request()

    async def emit(self, event: DomainEvent) -> EmitResult:
        """Manual entry point for events without an automatic producer."""
        return await self.emitter.emit(event)

    async def run_maintenance(self) -> None:
        """Collapse duplicates and purge expired notifications."""
        try:
            duplicates = await self.notifications.cleanup_duplicates()
            expired = await self.notifications.cleanup_expired()
        except AppException as e:
            logger.warning("notification_maintenance_failed", error=e.message)
            return
        logger.info(
            "notification_maintenance_completed",
            duplicates_removed=duplicates,
            expired_removed=expired,
        )

    async def _poll_entities(self) -> None:
        for collection in self.collections.values():
            self.refresh_collection(collection)

    async def _refresh(self, collection: TrackedCollection) -> None:
        try:
            rows = await self._entities.fetch_rows(collection.table)
        except AppException as e:
            logger.warning(
                "collection_refresh_failed",
                collection=collection.name,
                error=e.message,
            )
            return

        if not self._alive:
            logger.debug("collection_refresh_discarded", collection=collection.name)
            return

        for event in self.tracker.advance(collection, rows):
            if not self._alive:
                return
            await self.emitter.emit(event)
