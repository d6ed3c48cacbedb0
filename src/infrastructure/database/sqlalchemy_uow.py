"""SQLAlchemy Unit of Work implementation."""

from typing import Any, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import StoreTransportError
from domain.entities.snapshot import ChangeOperation, StoreChange
from domain.repositories.change_feed import IChangeFeed
from infrastructure.database.repositories.sqlalchemy_entity_repo import SQLAlchemyEntityRepository
from infrastructure.database.repositories.sqlalchemy_notification_repo import (
    SQLAlchemyNotificationRepository,
)

logger = structlog.get_logger()

# Failures of the database transport; asyncpg raises OSError for refused connections
_TRANSPORT_ERRORS = (SQLAlchemyError, OSError)


class SQLAlchemyUnitOfWork:
    """Unit of Work implementation using SQLAlchemy.

    Database errors leave the unit of work as ``StoreTransportError``. After a
    successful commit, newly created notifications are announced on the
    change feed.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        change_feed: IChangeFeed | None = None,
        timezone: str = "UTC",
    ) -> None:
        self._session_factory = session_factory
        self._change_feed = change_feed
        self._timezone = timezone
        self._session: Optional[AsyncSession] = None
        self._notifications: Optional[SQLAlchemyNotificationRepository] = None
        self._entities: Optional[SQLAlchemyEntityRepository] = None

    @property
    def notifications(self) -> SQLAlchemyNotificationRepository:
        """Get notification repository."""
        if not self._notifications:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._notifications

    @property
    def entities(self) -> SQLAlchemyEntityRepository:
        """Get restaurant entity repository."""
        if not self._entities:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._entities

    async def commit(self) -> None:
        """Commit the current transaction."""
        if not self._session:
            return
        try:
            await self._session.commit()
        except _TRANSPORT_ERRORS as e:
            raise StoreTransportError("commit", str(e)) from e
        self._announce_created()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session:
            await self._session.rollback()

    def _announce_created(self) -> None:
        if self._notifications is None:
            return
        created, self._notifications.created = self._notifications.created, []
        if self._change_feed is None:
            return
        for notification in created:
            self._change_feed.publish(
                StoreChange(
                    table="notifications",
                    operation=ChangeOperation.INSERT,
                    record={
                        "id": str(notification.id),
                        "type_code": notification.type_code,
                        "priority": notification.priority.value,
                    },
                )
            )

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter the context manager and create session."""
        self._session = self._session_factory()
        self._notifications = SQLAlchemyNotificationRepository(self._session)
        self._entities = SQLAlchemyEntityRepository(self._session, timezone=self._timezone)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        """Exit the context manager and cleanup."""
        if self._session:
            try:
                if exc_type:
                    await self.rollback()
                await self._session.close()
            except _TRANSPORT_ERRORS as e:
                logger.warning("session_cleanup_failed", error=str(e))
            finally:
                self._session = None
                self._notifications = None
                self._entities = None

        if isinstance(exc_val, _TRANSPORT_ERRORS):
            raise StoreTransportError(type(exc_val).__name__, str(exc_val)) from exc_val
