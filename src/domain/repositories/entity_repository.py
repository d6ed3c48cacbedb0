"""Read access to the tracked restaurant entities and the server-side temporal queries."""

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID


class IEntityRepository(Protocol):
    """Repository interface for reservations, customers and tables."""

    async def fetch_rows(self, table: str) -> list[dict[str, Any]]:
        """Current rows of a tracked table, as plain column dicts."""
        ...

    async def claim_upcoming_reservations(
        self,
        window_minutes: int,
        max_results: int,
        after_minutes: int = 0,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Confirmed reservations starting in ``(after_minutes, window_minutes]``.

        Each reservation is returned once per window: the claim is recorded
        in the same transaction.
        """
        ...

    async def claim_tables_over_duration(
        self,
        threshold_percent: int,
        service_minutes: int,
        max_results: int,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Occupied tables whose elapsed time reached ``threshold_percent`` of the allotment.

        Each occupancy is returned once per threshold.
        """
        ...

    async def release_reservation_claim(self, reservation_id: UUID, window_minutes: int) -> bool:
        """Drop a reservation claim so the next check returns the reservation again."""
        ...

    async def release_table_claim(
        self, table_id: UUID, threshold_percent: int, occupied_since: datetime
    ) -> bool:
        ...
