"""SQLAlchemy implementation of the entity repository and temporal claim queries."""

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.models import (
    Base,
    CustomerModel,
    ReservationModel,
    ReservationReminderModel,
    TableModel,
    TableTimeAlertModel,
)

TRACKED_MODELS: dict[str, type[Base]] = {
    model.__tablename__: model for model in (ReservationModel, CustomerModel, TableModel)
}

_UTC = ZoneInfo("UTC")


def _row(model: Base) -> dict[str, Any]:
    return {column.key: getattr(model, column.key) for column in model.__table__.columns}


class SQLAlchemyEntityRepository:
    """SQLAlchemy implementation of IEntityRepository.

    Reservation dates and times are wall-clock values in ``timezone``; every
    other timestamp is naive UTC.
    """

    def __init__(self, session: AsyncSession, timezone: str = "UTC") -> None:
        self._session = session
        self._tz = ZoneInfo(timezone)

    async def fetch_rows(self, table: str) -> list[dict[str, Any]]:
        """Current rows of a tracked table."""
        model = TRACKED_MODELS.get(table)
        if model is None:
            raise ValueError(f"Table is not tracked: {table}")
        result = await self._session.execute(select(model))
        return [_row(m) for m in result.scalars()]

    async def claim_upcoming_reservations(
        self,
        window_minutes: int,
        max_results: int,
        after_minutes: int = 0,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Confirmed reservations starting in ``(after_minutes, window_minutes]`` not yet claimed."""
        local_now = (now or datetime.utcnow()).replace(tzinfo=_UTC).astimezone(self._tz)
        first_day = (local_now + timedelta(minutes=after_minutes)).date()
        last_day = (local_now + timedelta(minutes=window_minutes)).date()

        already_claimed = (
            select(ReservationReminderModel.id)
            .where(
                ReservationReminderModel.reservation_id == ReservationModel.id,
                ReservationReminderModel.window_minutes == window_minutes,
            )
            .exists()
        )
        stmt = (
            select(ReservationModel, TableModel.numero_mesa)
            .outerjoin(TableModel, ReservationModel.mesa_id == TableModel.id)
            .where(
                ReservationModel.estado == "confirmada",
                ReservationModel.fecha_reserva >= first_day,
                ReservationModel.fecha_reserva <= last_day,
                ~already_claimed,
            )
        )
        result = await self._session.execute(stmt)

        matches: list[tuple[datetime, dict[str, Any]]] = []
        for reservation, numero_mesa in result.all():
            starts_at = datetime.combine(
                reservation.fecha_reserva, reservation.hora_reserva, tzinfo=self._tz
            )
            minutes_until = (starts_at - local_now).total_seconds() / 60
            if not after_minutes < minutes_until <= window_minutes:
                continue
            row = _row(reservation)
            row["numero_mesa"] = numero_mesa
            row["minutes_until"] = max(1, round(minutes_until))
            matches.append((starts_at, row))

        matches.sort(key=lambda item: item[0])
        claimed = [row for _, row in matches[:max_results]]
        self._session.add_all(
            ReservationReminderModel(reservation_id=row["id"], window_minutes=window_minutes)
            for row in claimed
        )
        await self._session.flush()
        return claimed

    async def claim_tables_over_duration(
        self,
        threshold_percent: int,
        service_minutes: int,
        max_results: int,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Occupied tables past ``threshold_percent`` of the allotted time, once per occupancy."""
        now = now or datetime.utcnow()
        threshold = timedelta(minutes=service_minutes * threshold_percent / 100)

        already_claimed = (
            select(TableTimeAlertModel.id)
            .where(
                TableTimeAlertModel.table_id == TableModel.id,
                TableTimeAlertModel.threshold_percent == threshold_percent,
                TableTimeAlertModel.occupied_since == TableModel.ocupada_desde,
            )
            .exists()
        )
        stmt = (
            select(TableModel)
            .where(
                TableModel.estado == "ocupada",
                TableModel.activa.is_(True),
                TableModel.ocupada_desde.is_not(None),
                TableModel.ocupada_desde <= now - threshold,
                ~already_claimed,
            )
            .order_by(TableModel.ocupada_desde.asc())
            .limit(max_results)
        )
        result = await self._session.execute(stmt)

        claimed: list[dict[str, Any]] = []
        for table in result.scalars():
            occupied_since = table.ocupada_desde
            if occupied_since is None:
                continue
            row = _row(table)
            row["elapsed_minutes"] = int((now - occupied_since).total_seconds() // 60)
            row["service_minutes"] = service_minutes
            row["threshold_percent"] = threshold_percent
            claimed.append(row)
            self._session.add(
                TableTimeAlertModel(
                    table_id=table.id,
                    threshold_percent=threshold_percent,
                    occupied_since=occupied_since,
                )
            )
        await self._session.flush()
        return claimed

    async def release_reservation_claim(self, reservation_id: UUID, window_minutes: int) -> bool:
        """Forget that ``reservation_id`` was reported for ``window_minutes``."""
        result = await self._session.execute(
            delete(ReservationReminderModel).where(
                ReservationReminderModel.reservation_id == reservation_id,
                ReservationReminderModel.window_minutes == window_minutes,
            )
        )
        return result.rowcount > 0

    async def release_table_claim(
        self, table_id: UUID, threshold_percent: int, occupied_since: datetime
    ) -> bool:
        """Forget the alert recorded for one threshold of one occupancy."""
        result = await self._session.execute(
            delete(TableTimeAlertModel).where(
                TableTimeAlertModel.table_id == table_id,
                TableTimeAlertModel.threshold_percent == threshold_percent,
                TableTimeAlertModel.occupied_since == occupied_since,
            )
        )
        return result.rowcount > 0
