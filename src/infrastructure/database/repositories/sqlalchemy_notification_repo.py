"""SQLAlchemy implementation of Notification repository."""

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.notification import (
    Notification,
    NotificationFilter,
    NotificationTypeDefinition,
    Priority,
    RelatedEntityIds,
)
from infrastructure.database.models import NotificationModel, NotificationTypeModel

_RELATED_COLUMNS = ("reservation_id", "customer_id", "table_id", "staff_id")


class SQLAlchemyNotificationRepository:
    """SQLAlchemy implementation of INotificationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        # Notifications created in this session, announced after commit
        self.created: list[Notification] = []

    # --- Catalog ---

    async def get_active_types(self) -> list[NotificationTypeDefinition]:
        """Get every active notification type."""
        stmt = (
            select(NotificationTypeModel)
            .where(NotificationTypeModel.is_active.is_(True))
            .order_by(NotificationTypeModel.code)
        )
        result = await self._session.execute(stmt)
        return [self._type_to_entity(m) for m in result.scalars()]

    # --- Notifications ---

    async def create(self, notification: Notification) -> Notification:
        """Create a new notification."""
        model = self._to_model(notification)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        created = self._to_entity(model)
        self.created.append(created)
        return created

    async def get(self, notification_id: UUID) -> Notification | None:
        """Get a notification by ID."""
        model = await self._get_model(notification_id)
        return self._to_entity(model) if model else None

    async def find_duplicate(
        self,
        type_code: str,
        related: RelatedEntityIds,
        since: datetime,
    ) -> Notification | None:
        """Find the earliest same-type notification for the same entities since ``since``."""
        stmt = (
            select(NotificationModel)
            .where(
                NotificationModel.type_code == type_code,
                NotificationModel.created_at >= since,
                *self._related_clauses(related),
            )
            .order_by(NotificationModel.created_at.asc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_notifications(self, filters: NotificationFilter) -> list[Notification]:
        """List notifications, newest first."""
        stmt = select(NotificationModel)

        if filters.is_read is not None:
            stmt = stmt.where(NotificationModel.is_read.is_(filters.is_read))

        if filters.priority is not None:
            stmt = stmt.where(NotificationModel.priority == filters.priority.value)

        if filters.type_code is not None:
            stmt = stmt.where(NotificationModel.type_code == filters.type_code)

        stmt = stmt.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        ).limit(filters.limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    async def get_unread_count(self) -> int:
        """Count unread notifications."""
        stmt = select(func.count(NotificationModel.id)).where(
            NotificationModel.is_read.is_(False)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def mark_read(self, notification_id: UUID, read_at: datetime) -> Notification | None:
        """Mark one notification read. An already read notification is left untouched."""
        model = await self._get_model(notification_id)
        if model is None:
            return None
        if not model.is_read:
            model.is_read = True
            model.read_at = read_at
            await self._session.flush()
        return self._to_entity(model)

    async def mark_all_read(self, read_at: datetime) -> int:
        """Mark all unread notifications as read. Returns count updated."""
        stmt = (
            update(NotificationModel)
            .where(NotificationModel.is_read.is_(False))
            .values(is_read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount  # type: ignore[return-value]

    # --- Cleanup ---

    async def list_with_related(self) -> list[Notification]:
        """Notifications that reference at least one entity, oldest first."""
        stmt = (
            select(NotificationModel)
            .where(
                or_(*(getattr(NotificationModel, c).is_not(None) for c in _RELATED_COLUMNS))
            )
            .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    async def delete_many(self, notification_ids: Iterable[UUID]) -> int:
        """Delete the given notifications. Returns count deleted."""
        ids = list(notification_ids)
        if not ids:
            return 0
        stmt = (
            delete(NotificationModel)
            .where(NotificationModel.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount  # type: ignore[return-value]

    async def delete_expired(self, now: datetime, created_before: datetime) -> int:
        """Delete expired notifications. Returns count deleted."""
        stmt = (
            delete(NotificationModel)
            .where(
                or_(
                    and_(
                        NotificationModel.expires_at.is_not(None),
                        NotificationModel.expires_at < now,
                    ),
                    and_(
                        NotificationModel.expires_at.is_(None),
                        NotificationModel.created_at < created_before,
                    ),
                )
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount  # type: ignore[return-value]

    # --- Helpers ---

    async def _get_model(self, notification_id: UUID) -> NotificationModel | None:
        stmt = select(NotificationModel).where(NotificationModel.id == notification_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _related_clauses(related: RelatedEntityIds) -> list:  # type: ignore[type-arg]
        clauses = []
        for column in _RELATED_COLUMNS:
            value = getattr(related, column)
            attr = getattr(NotificationModel, column)
            clauses.append(attr.is_(None) if value is None else attr == value)
        return clauses

    # --- Conversion methods ---

    def _type_to_entity(self, model: NotificationTypeModel) -> NotificationTypeDefinition:
        """Convert NotificationTypeModel to domain entity."""
        return NotificationTypeDefinition(
            code=model.code,
            display_name=model.name,
            icon_token=model.icon_name,
            color_token=model.color,
            active=model.is_active,
            description=model.description,
        )

    def _to_entity(self, model: NotificationModel) -> Notification:
        """Convert NotificationModel to domain entity."""
        return Notification(
            id=model.id,
            type_code=model.type_code,
            title=model.title,
            message=model.message,
            priority=Priority(model.priority),
            created_at=model.created_at,
            is_read=model.is_read,
            read_at=model.read_at,
            expires_at=model.expires_at,
            data=dict(model.data or {}),
            actions=list(model.actions or []),
            related=RelatedEntityIds(
                reservation_id=model.reservation_id,
                customer_id=model.customer_id,
                table_id=model.table_id,
                staff_id=model.staff_id,
            ),
        )

    def _to_model(self, entity: Notification) -> NotificationModel:
        """Convert domain entity to NotificationModel."""
        return NotificationModel(
            id=entity.id,
            type_code=entity.type_code,
            title=entity.title,
            message=entity.message,
            priority=entity.priority.value,
            is_read=entity.is_read,
            read_at=entity.read_at,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
            data=entity.data,
            actions=entity.actions,
            reservation_id=entity.related.reservation_id,
            customer_id=entity.related.customer_id,
            table_id=entity.related.table_id,
            staff_id=entity.related.staff_id,
        )
