"""Snapshot differencing: turns two states of a tracked collection into domain events."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog

from domain.entities.events import DomainEvent, EventKind
from domain.entities.notification import RelatedEntityIds
from domain.entities.snapshot import EntitySnapshot, Row
from domain.services.taxonomy import build_event

logger = structlog.get_logger()


@dataclass(frozen=True)
class TrackedCollection:
    """Describes how one entity collection is diffed.

    ``status_events`` maps the *new* status value to an event kind; target
    statuses missing from the map are ignored.
    """

    name: str
    table: str
    status_of: Callable[[Row], Any]
    status_events: Mapping[Any, EventKind]
    related_ids: Callable[[Row], RelatedEntityIds]
    created_kind: EventKind | None = None
    modified_kind: EventKind | None = None
    fields: tuple[str, ...] = ()


def _as_uuid(value: Any) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _field(name: str) -> Callable[[Row], Any]:
    return lambda row: row.get(name)


def _table_status(row: Row) -> Any:
    if row.get("activa") is False:
        return "fuera_servicio"
    return row.get("estado")


RESERVATIONS = TrackedCollection(
    name="reservations",
    table="reservas",
    status_of=_field("estado"),
    status_events={
        "confirmada": EventKind.RESERVATION_CONFIRMED,
        "cancelada": EventKind.RESERVATION_CANCELLED_BY_CUSTOMER,
        "cancelada_restaurante": EventKind.RESERVATION_CANCELLED_BY_RESTAURANT,
        "no_show": EventKind.RESERVATION_NO_SHOW,
    },
    related_ids=lambda row: RelatedEntityIds(
        reservation_id=_as_uuid(row.get("id")),
        customer_id=_as_uuid(row.get("cliente_id")),
        table_id=_as_uuid(row.get("mesa_id")),
    ),
    created_kind=EventKind.RESERVATION_CREATED,
    modified_kind=EventKind.RESERVATION_MODIFIED,
    fields=("fecha_reserva", "hora_reserva", "personas", "notas", "mesa_id"),
)

CUSTOMERS = TrackedCollection(
    name="customers",
    table="clientes",
    status_of=lambda row: bool(row.get("vip_status")),
    status_events={True: EventKind.CUSTOMER_VIP_CHANGED},
    related_ids=lambda row: RelatedEntityIds(customer_id=_as_uuid(row.get("id"))),
    created_kind=EventKind.CUSTOMER_NEW,
)

TABLES = TrackedCollection(
    name="tables",
    table="mesas",
    status_of=_table_status,
    status_events={
        "ocupada": EventKind.TABLE_OCCUPIED,
        "libre": EventKind.TABLE_RELEASED,
        "limpieza": EventKind.TABLE_CLEANING_REQUIRED,
        "fuera_servicio": EventKind.TABLE_OUT_OF_SERVICE,
    },
    related_ids=lambda row: RelatedEntityIds(table_id=_as_uuid(row.get("id"))),
)

BUILTIN_COLLECTIONS: tuple[TrackedCollection, ...] = (RESERVATIONS, CUSTOMERS, TABLES)


class SnapshotDiffer:
    """Computes the semantic transitions between two snapshots."""

    def diff(
        self,
        previous: EntitySnapshot,
        current: EntitySnapshot,
        collection: TrackedCollection,
    ) -> list[DomainEvent]:
        """Diff ``previous`` against ``current``.

        Per entity the first matching rule wins: creation, then status
        transition, then one batched field-change event. Ids missing from
        ``current`` produce nothing.
        """
        events: list[DomainEvent] = []
        for entity_id, row in current.items():
            before = previous.get(entity_id)
            if before is None:
                event = self._created(row, collection)
            elif collection.status_of(before) != collection.status_of(row):
                event = self._transition(before, row, collection)
            else:
                event = self._modified(before, row, collection)
            if event is not None:
                events.append(event)
        return events

    @staticmethod
    def compute_changes(
        old_row: Row, new_row: Row, fields: Iterable[str]
    ) -> dict[str, dict[str, Any]]:
        """Field-level diff restricted to ``fields``: ``{field: {"old", "new"}}``."""
        changes: dict[str, dict[str, Any]] = {}
        for name in fields:
            old_val = old_row.get(name)
            new_val = new_row.get(name)
            if old_val != new_val:
                changes[name] = {"old": old_val, "new": new_val}
        return changes

    @staticmethod
    def _created(row: Row, collection: TrackedCollection) -> DomainEvent | None:
        if collection.created_kind is None:
            return None
        return build_event(collection.created_kind, dict(row), collection.related_ids(row))

    @staticmethod
    def _transition(
        before: Row, row: Row, collection: TrackedCollection
    ) -> DomainEvent | None:
        old_status = collection.status_of(before)
        new_status = collection.status_of(row)
        kind = collection.status_events.get(new_status)
        if kind is None:
            logger.debug(
                "status_transition_ignored",
                collection=collection.name,
                old_status=old_status,
                new_status=new_status,
            )
            return None
        payload = {**row, "previous_status": old_status}
        return build_event(kind, payload, collection.related_ids(row))

    def _modified(
        self, before: Row, row: Row, collection: TrackedCollection
    ) -> DomainEvent | None:
        if collection.modified_kind is None:
            return None
        changes = self.compute_changes(before, row, collection.fields)
        if not changes:
            return None
        payload = {**row, "changes": changes}
        return build_event(collection.modified_kind, payload, collection.related_ids(row))


class SnapshotTracker:
    """Single owner of the live snapshot of every tracked collection.

    Each ``advance`` swaps in a new immutable snapshot; the first call for a
    collection only records the baseline so the initial load emits nothing.
    """

    def __init__(self, differ: SnapshotDiffer | None = None) -> None:
        self._differ = differ or SnapshotDiffer()
        self._snapshots: dict[str, EntitySnapshot] = {}

    def snapshot(self, collection: TrackedCollection) -> EntitySnapshot | None:
        return self._snapshots.get(collection.name)

    def is_primed(self, collection: TrackedCollection) -> bool:
        return collection.name in self._snapshots

    def advance(
        self, collection: TrackedCollection, rows: Iterable[Row]
    ) -> list[DomainEvent]:
        current = EntitySnapshot.from_rows(rows)
        previous = self._snapshots.get(collection.name)
        events = [] if previous is None else self._differ.diff(previous, current, collection)
        self._snapshots[collection.name] = current

        if previous is None:
            logger.debug("snapshot_primed", collection=collection.name, rows=len(current))
        elif events:
            logger.info(
                "snapshot_changes_detected",
                collection=collection.name,
                event_count=len(events),
            )
        return events

    def clear(self) -> None:
        self._snapshots.clear()
