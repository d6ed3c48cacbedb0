"""Entity service layer: reads of the tracked collections and temporal claims."""

from collections.abc import Callable
from datetime import datetime
from typing import Any
from uuid import UUID

from domain.repositories.unit_of_work import IUnitOfWork


class EntityService:
    """Service layer over the restaurant entity tables."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def fetch_rows(self, table: str) -> list[dict[str, Any]]:
        async with self._uow_factory() as uow:
            return await uow.entities.fetch_rows(table)

    async def claim_upcoming_reservations(
        self,
        window_minutes: int,
        max_results: int,
        after_minutes: int = 0,
    ) -> list[dict[str, Any]]:
        """Reservations newly entering the window; the claims are committed before returning."""
        async with self._uow_factory() as uow:
            rows = await uow.entities.claim_upcoming_reservations(
                window_minutes=window_minutes,
                max_results=max_results,
                after_minutes=after_minutes,
            )
            await uow.commit()
            return rows

    async def claim_tables_over_duration(
        self,
        threshold_percent: int,
        service_minutes: int,
        max_results: int,
    ) -> list[dict[str, Any]]:
        async with self._uow_factory() as uow:
            rows = await uow.entities.claim_tables_over_duration(
                threshold_percent=threshold_percent,
                service_minutes=service_minutes,
                max_results=max_results,
            )
            await uow.commit()
            return rows

    async def release_reservation_claim(self, reservation_id: UUID, window_minutes: int) -> bool:
        """Undo a claim whose notification could not be stored."""
        async with self._uow_factory() as uow:
            released = await uow.entities.release_reservation_claim(reservation_id, window_minutes)
            await uow.commit()
            return released

    async def release_table_claim(
        self, table_id: UUID, threshold_percent: int, occupied_since: datetime
    ) -> bool:
        async with self._uow_factory() as uow:
            released = await uow.entities.release_table_claim(
                table_id, threshold_percent, occupied_since
            )
            await uow.commit()
            return released
