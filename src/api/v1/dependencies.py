"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.entities.notification import DedupWindow
from domain.services.entity_service import EntityService
from domain.services.notification_service import NotificationService
from domain.services.orchestrator import NotificationOrchestrator, OrchestratorConfig
from infrastructure.change_bus import InProcessChangeBus
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


@lru_cache
def get_change_bus() -> InProcessChangeBus:
    """Process-wide change bus."""
    return InProcessChangeBus()


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""
    change_bus = get_change_bus()

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(
            async_session_factory,
            change_feed=change_bus,
            timezone=settings.restaurant_timezone,
        )

    return factory


@lru_cache
def get_notification_service() -> NotificationService:
    """Get Notification service instance."""
    return NotificationService(
        get_uow_factory(),
        dedup_window=DedupWindow(
            seconds=settings.notification_dedup_window_seconds,
            timezone=settings.restaurant_timezone,
        ),
        expiry_days=settings.notification_expiry_days,
    )


@lru_cache
def get_entity_service() -> EntityService:
    """Get Entity service instance."""
    return EntityService(get_uow_factory())


@lru_cache
def get_orchestrator() -> NotificationOrchestrator:
    """Get the process-wide notification orchestrator."""
    return NotificationOrchestrator(
        get_notification_service(),
        get_entity_service(),
        get_change_bus(),
        config=OrchestratorConfig.from_settings(settings),
    )
