"""Unit tests for the temporal scheduler."""

from datetime import datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from core.exceptions import StoreTransportError
from domain.entities.events import EventKind
from domain.services.emitter import EmitError, EmitResult
from domain.services.temporal_scheduler import TemporalScheduler


@pytest.fixture
def entities() -> AsyncMock:
    entities = AsyncMock()
    entities.claim_upcoming_reservations.return_value = []
    entities.claim_tables_over_duration.return_value = []
    return entities


@pytest.fixture
def emitter() -> AsyncMock:
    emitter = AsyncMock()
    emitter.emit_many.side_effect = lambda events: [EmitResult(notification_id=uuid4()) for _ in events]
    return emitter


@pytest.fixture
def scheduler(entities: AsyncMock, emitter: AsyncMock) -> TemporalScheduler:
    return TemporalScheduler(entities, emitter)


def _upcoming(**overrides):
    row = {
        "id": uuid4(),
        "cliente_id": uuid4(),
        "mesa_id": uuid4(),
        "nombre": "Ana",
        "numero_mesa": "7",
        "minutes_until": 12,
    }
    row.update(overrides)
    return row


class TestChecks:
    """Test the configured checks."""

    def test_default_checks(self, scheduler):
        assert [c.name for c in scheduler.checks] == [
            "upcoming_reservations",
            "early_upcoming_reservations",
            "table_time_warning",
            "table_time_exceeded",
        ]

    def test_early_window_disabled(self, entities, emitter):
        scheduler = TemporalScheduler(entities, emitter, early_window_minutes=0)

        assert "early_upcoming_reservations" not in [c.name for c in scheduler.checks]


class TestRunOnce:
    """Test one scheduler tick."""

    @pytest.mark.asyncio
    async def test_emits_upcoming_reservations(self, scheduler, entities, emitter):
        row = _upcoming()
        entities.claim_upcoming_reservations.side_effect = [[row], []]

        events = await scheduler.run_once()

        assert [e.kind for e in events] == [EventKind.RESERVATION_UPCOMING]
        event = events[0]
        assert event.payload["mesa"] == "7"
        assert event.related.reservation_id == row["id"]
        assert event.related.table_id == row["mesa_id"]
        entities.claim_upcoming_reservations.assert_any_call(window_minutes=15, max_results=50)
        entities.claim_upcoming_reservations.assert_any_call(
            window_minutes=120, max_results=50, after_minutes=15
        )

    @pytest.mark.asyncio
    async def test_second_tick_emits_nothing_new(self, scheduler, entities, emitter):
        """Claims are one-shot: the store returns a reservation only once per window."""
        entities.claim_upcoming_reservations.side_effect = [[_upcoming()], [], [], []]

        first = await scheduler.run_once()
        second = await scheduler.run_once()

        assert len(first) == 1
        assert second == []

    @pytest.mark.asyncio
    async def test_table_thresholds(self, scheduler, entities):
        table = {"id": uuid4(), "numero_mesa": "3", "elapsed_minutes": 95, "service_minutes": 120}
        entities.claim_tables_over_duration.side_effect = [[table], []]

        events = await scheduler.run_once()

        assert [e.kind for e in events] == [EventKind.TABLE_TIME_WARNING]
        assert events[0].related.table_id == table["id"]
        entities.claim_tables_over_duration.assert_any_call(
            threshold_percent=75, service_minutes=120, max_results=50
        )
        entities.claim_tables_over_duration.assert_any_call(
            threshold_percent=100, service_minutes=120, max_results=50
        )

    @pytest.mark.asyncio
    async def test_failed_check_is_skipped(self, scheduler, entities, emitter):
        """A store failure in one check does not stop the others."""
        entities.claim_upcoming_reservations.side_effect = [
            StoreTransportError("claim_upcoming_reservations"),
            [],
        ]
        table = {"id": uuid4(), "numero_mesa": "3"}
        entities.claim_tables_over_duration.side_effect = [[], [table]]

        events = await scheduler.run_once()

        assert [e.kind for e in events] == [EventKind.TABLE_TIME_EXCEEDED]

    @pytest.mark.asyncio
    async def test_results_dropped_after_stop(self, scheduler, entities, emitter):
        async def claim(**kwargs):
            scheduler.stop()
            return [_upcoming()]

        entities.claim_upcoming_reservations.side_effect = claim

        events = await scheduler.run_once()

        assert events == []
        emitter.emit_many.assert_not_called()


class TestFailedEmission:
    """Claims whose notification could not be stored."""

    @pytest.mark.asyncio
    async def test_store_failure_releases_claim(self, scheduler, entities, emitter):
        row = _upcoming()
        entities.claim_upcoming_reservations.side_effect = [[row], []]
        emitter.emit_many.side_effect = lambda events: [
            EmitResult(error=EmitError.STORE_FAILURE) for _ in events
        ]

        events = await scheduler.run_once()

        assert events == []
        entities.release_reservation_claim.assert_called_once_with(row["id"], 15)

    @pytest.mark.asyncio
    async def test_only_failed_rows_are_released(self, scheduler, entities, emitter):
        since = datetime(2026, 10, 19, 18, 0)
        stored = {"id": uuid4(), "numero_mesa": "3", "ocupada_desde": since}
        lost = {"id": uuid4(), "numero_mesa": "4", "ocupada_desde": since}
        entities.claim_tables_over_duration.side_effect = [[stored, lost], []]
        emitter.emit_many.side_effect = lambda events: [
            EmitResult(notification_id=uuid4()),
            EmitResult(error=EmitError.STORE_FAILURE),
        ][: len(events)]

        events = await scheduler.run_once()

        assert [e.related.table_id for e in events] == [stored["id"]]
        entities.release_table_claim.assert_called_once_with(lost["id"], 75, since)

    @pytest.mark.asyncio
    async def test_validation_failure_keeps_claim(self, scheduler, entities, emitter):
        """A payload that cannot be rendered would fail again on every tick."""
        entities.claim_upcoming_reservations.side_effect = [[_upcoming()], []]
        emitter.emit_many.side_effect = lambda events: [
            EmitResult(error=EmitError.VALIDATION_FAILURE) for _ in events
        ]

        events = await scheduler.run_once()

        assert events == []
        entities.release_reservation_claim.assert_not_called()

    @pytest.mark.asyncio
    async def test_release_failure_is_logged_not_raised(self, scheduler, entities, emitter):
        entities.claim_upcoming_reservations.side_effect = [[_upcoming()], []]
        emitter.emit_many.side_effect = lambda events: [
            EmitResult(error=EmitError.STORE_FAILURE) for _ in events
        ]
        entities.release_reservation_claim.side_effect = StoreTransportError("commit")

        assert await scheduler.run_once() == []
        entities.claim_tables_over_duration.assert_called()
