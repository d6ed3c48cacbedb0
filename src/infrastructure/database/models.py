"""SQLAlchemy ORM models."""

from datetime import date, datetime, time
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# --- Notifications ---


class NotificationTypeModel(Base):
    """Notification type catalog (seeded by migration, read-only at runtime)."""

    __tablename__ = "notification_types"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    icon_name: Mapped[str] = mapped_column(String(50), nullable=False, default="bell")
    color: Mapped[str] = mapped_column(String(30), nullable=False, default="blue")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class NotificationModel(Base):
    """User-facing notification record."""

    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint("priority IN ('high', 'normal', 'low')", name="ck_notifications_priority"),
        CheckConstraint(
            "(is_read AND read_at IS NOT NULL) OR (NOT is_read AND read_at IS NULL)",
            name="ck_notifications_read_state",
        ),
        Index(
            "ix_notifications_dedup",
            "type_code",
            "reservation_id",
            "customer_id",
            "table_id",
            "staff_id",
            "created_at",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    type_code: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("notification_types.code"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="normal")
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    read_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime)
    data: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict, nullable=False)
    actions: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)

    # Weak back-references: no foreign keys, the entity may be gone
    reservation_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    customer_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    table_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))
    staff_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True))


# --- Restaurant entities (owned by the back office, read here) ---


class CustomerModel(Base):
    """Customer (``clientes``)."""

    __tablename__ = "clientes"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    apellidos: Mapped[str | None] = mapped_column(String(150))
    email: Mapped[str | None] = mapped_column(String(255))
    telefono: Mapped[str | None] = mapped_column(String(30))
    vip_status: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


class TableModel(Base):
    """Dining table (``mesas``)."""

    __tablename__ = "mesas"
    __table_args__ = (
        CheckConstraint(
            "estado IN ('libre', 'ocupada', 'reservada', 'limpieza', 'fuera_servicio')",
            name="ck_mesas_estado",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    numero_mesa: Mapped[str] = mapped_column(String(20), nullable=False)
    capacidad: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    zona: Mapped[str | None] = mapped_column(String(50))
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="libre")
    activa: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    ocupada_desde: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


class ReservationModel(Base):
    """Reservation (``reservas``). Date and time are restaurant wall-clock values."""

    __tablename__ = "reservas"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    cliente_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("clientes.id", ondelete="SET NULL"),
    )
    mesa_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("mesas.id", ondelete="SET NULL"),
    )
    nombre: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    telefono: Mapped[str | None] = mapped_column(String(30))
    fecha_reserva: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    hora_reserva: Mapped[time] = mapped_column(Time, nullable=False)
    personas: Mapped[int] = mapped_column(Integer, nullable=False)
    estado: Mapped[str] = mapped_column(
        String(30), nullable=False, default="pendiente_confirmacion"
    )
    notas: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


# --- Temporal check claims ---


class ReservationReminderModel(Base):
    """Records that a reservation was reported for one upcoming window."""

    __tablename__ = "reservation_reminders"
    __table_args__ = (UniqueConstraint("reservation_id", "window_minutes"),)

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    reservation_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("reservas.id", ondelete="CASCADE"),
        nullable=False,
    )
    window_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    claimed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class TableTimeAlertModel(Base):
    """Records that one table occupancy crossed a duration threshold."""

    __tablename__ = "table_time_alerts"
    __table_args__ = (UniqueConstraint("table_id", "threshold_percent", "occupied_since"),)

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    table_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("mesas.id", ondelete="CASCADE"),
        nullable=False,
    )
    threshold_percent: Mapped[int] = mapped_column(Integer, nullable=False)
    occupied_since: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    claimed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
