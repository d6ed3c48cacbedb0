"""Temporal scheduler: events that become true with wall-clock time, not with a state change."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog

from core.exceptions import TemporalCheckFailure
from domain.entities.events import DomainEvent, EventKind
from domain.services.emitter import EmitError, NotificationEmitter
from domain.services.entity_service import EntityService
from domain.services.scheduling import PeriodicTask
from domain.services.snapshot_differ import RESERVATIONS, TABLES, TrackedCollection
from domain.services.taxonomy import build_event

logger = structlog.get_logger()


@dataclass(frozen=True)
class TemporalCheck:
    """One server-side query whose rows each become an event of ``kind``."""

    name: str
    kind: EventKind
    collection: TrackedCollection
    fetch: Callable[[], Awaitable[list[dict[str, Any]]]]
    release: Callable[[dict[str, Any]], Awaitable[bool]]


class TemporalScheduler:
    """Runs the temporal checks on a fixed interval.

    The store only returns entities newly entering a window, so running a
    check twice never re-emits the same reminder. A row whose notification
    could not be stored has its claim released and comes back on the next tick.
    """

    def __init__(
        self,
        entities: EntityService,
        emitter: NotificationEmitter,
        *,
        interval_seconds: float = 60,
        startup_delay_seconds: float = 5,
        upcoming_window_minutes: int = 15,
        early_window_minutes: int = 120,
        max_results: int = 50,
        table_service_minutes: int = 120,
        table_warning_percent: int = 75,
    ) -> None:
        self._entities = entities
        self._emitter = emitter
        self._closed = False
        self._periodic = PeriodicTask(
            "temporal_scheduler",
            self.run_once,
            interval=interval_seconds,
            initial_delay=startup_delay_seconds,
        )

        self.checks: list[TemporalCheck] = [
            TemporalCheck(
                name="upcoming_reservations",
                kind=EventKind.RESERVATION_UPCOMING,
                collection=RESERVATIONS,
                fetch=lambda: entities.claim_upcoming_reservations(
                    window_minutes=upcoming_window_minutes,
                    max_results=max_results,
                ),
                release=lambda row: entities.release_reservation_claim(
                    row["id"], upcoming_window_minutes
                ),
            ),
        ]
        if early_window_minutes > upcoming_window_minutes:
            self.checks.append(
                TemporalCheck(
                    name="early_upcoming_reservations",
                    kind=EventKind.RESERVATION_UPCOMING_EARLY,
                    collection=RESERVATIONS,
                    fetch=lambda: entities.claim_upcoming_reservations(
                        window_minutes=early_window_minutes,
                        max_results=max_results,
                        after_minutes=upcoming_window_minutes,
                    ),
                    release=lambda row: entities.release_reservation_claim(
                        row["id"], early_window_minutes
                    ),
                )
            )
        self.checks += [
            TemporalCheck(
                name="table_time_warning",
                kind=EventKind.TABLE_TIME_WARNING,
                collection=TABLES,
                fetch=lambda: entities.claim_tables_over_duration(
                    threshold_percent=table_warning_percent,
                    service_minutes=table_service_minutes,
                    max_results=max_results,
                ),
                release=lambda row: entities.release_table_claim(
                    row["id"], table_warning_percent, row["ocupada_desde"]
                ),
            ),
            TemporalCheck(
                name="table_time_exceeded",
                kind=EventKind.TABLE_TIME_EXCEEDED,
                collection=TABLES,
                fetch=lambda: entities.claim_tables_over_duration(
                    threshold_percent=100,
                    service_minutes=table_service_minutes,
                    max_results=max_results,
                ),
                release=lambda row: entities.release_table_claim(
                    row["id"], 100, row["ocupada_desde"]
                ),
            ),
        ]

    @property
    def running(self) -> bool:
        return self._periodic.running

    def start(self) -> None:
        self._closed = False
        self._periodic.start()

    def stop(self) -> None:
        """Clear the interval; rows returned to a check still in flight are dropped."""
        self._closed = True
        self._periodic.stop()

    async def run_once(self) -> list[DomainEvent]:
        """Run every check once and return the events whose notification was stored.

        A failing check is logged and skipped.
        """
        delivered: list[DomainEvent] = []
        for check in self.checks:
            try:
                matched = await self._evaluate(check)
            except TemporalCheckFailure as e:
                logger.warning(
                    "temporal_check_failed",
                    check=check.name,
                    reason=e.details["reason"],
                )
                continue

            if self._closed:
                logger.debug("temporal_results_discarded", check=check.name)
                return delivered

            results = await self._emitter.emit_many([event for _, event in matched])
            failed: list[dict[str, Any]] = []
            for (row, event), result in zip(matched, results):
                if result.ok:
                    delivered.append(event)
                elif result.error == EmitError.STORE_FAILURE:
                    failed.append(row)

            if matched:
                logger.info(
                    "temporal_check_emitted",
                    check=check.name,
                    matched=len(matched),
                    stored=sum(1 for r in results if r.ok),
                    store_failures=len(failed),
                )
            await self._release_all(check, failed)
        return delivered

    async def _evaluate(self, check: TemporalCheck) -> list[tuple[dict[str, Any], DomainEvent]]:
        try:
            rows = await check.fetch()
        except Exception as e:
            raise TemporalCheckFailure(check.name, str(e)) from e
        return [(row, self._event_for(check, row)) for row in rows]

    async def _release_all(self, check: TemporalCheck, rows: list[dict[str, Any]]) -> None:
        for row in rows:
            try:
                await check.release(row)
            except Exception as e:
                logger.error(
                    "temporal_claim_release_failed",
                    check=check.name,
                    entity_id=str(row["id"]),
                    reason=str(e),
                )
            else:
                logger.info("temporal_claim_released", check=check.name, entity_id=str(row["id"]))

    @staticmethod
    def _event_for(check: TemporalCheck, row: dict[str, Any]) -> DomainEvent:
        payload = dict(row)
        if payload.get("numero_mesa") is not None:
            payload.setdefault("mesa", payload["numero_mesa"])
        return build_event(check.kind, payload, check.collection.related_ids(row))
