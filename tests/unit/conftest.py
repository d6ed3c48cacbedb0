"""Shared fixtures for unit tests."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.notification import DedupWindow, Notification, Priority, RelatedEntityIds
from domain.services.notification_service import NotificationService


class FakeUnitOfWork:
    """Fake Unit of Work with both repository mocks for unit testing."""

    def __init__(self) -> None:
        self.notifications = AsyncMock()
        self.entities = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def notification_service(uow: FakeUnitOfWork) -> NotificationService:
    return NotificationService(lambda: uow, dedup_window=DedupWindow())


@pytest.fixture
def reservation_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_notification() -> Callable[..., Notification]:
    """Build Notification entities with sensible defaults."""

    def _make(
        type_code: str = "reservation_new",
        priority: Priority = Priority.NORMAL,
        related: RelatedEntityIds | None = None,
        **kwargs: Any,
    ) -> Notification:
        return Notification(
            type_code=type_code,
            title=kwargs.pop("title", "Nueva Reserva"),
            message=kwargs.pop("message", "Mesa para 4 personas"),
            priority=priority,
            related=related or RelatedEntityIds(),
            **kwargs,
        )

    return _make
