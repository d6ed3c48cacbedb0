"""In-memory snapshots of tracked entity collections and store change signals."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any
from uuid import UUID

Row = Mapping[str, Any]


class EntitySnapshot(Mapping[Any, Row]):
    """Immutable, insertion-ordered ``id -> row`` view of one collection.

    A refresh builds a new snapshot; existing snapshots are never mutated.
    """

    __slots__ = ("_rows",)

    def __init__(self, rows: Mapping[Any, Row] | None = None) -> None:
        self._rows: Mapping[Any, Row] = MappingProxyType(
            {key: MappingProxyType(dict(row)) for key, row in (rows or {}).items()}
        )

    @classmethod
    def from_rows(cls, rows: Iterable[Row], key: str = "id") -> "EntitySnapshot":
        return cls({row[key]: row for row in rows})

    def __getitem__(self, entity_id: Any) -> Row:
        return self._rows[entity_id]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"EntitySnapshot({len(self)} rows)"


class ChangeOperation(StrEnum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class StoreChange:
    """Push signal: the store reports that a row in ``table`` changed."""

    table: str
    operation: ChangeOperation
    record: Mapping[str, Any] = field(default_factory=dict)

    @property
    def record_id(self) -> UUID | None:
        value = self.record.get("id")
        if value is None or isinstance(value, UUID):
            return value
        try:
            return UUID(str(value))
        except ValueError:
            return None
