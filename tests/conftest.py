"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

# Disable rate limiting and background activities in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ORCHESTRATOR_ENABLED"] = "false"
os.environ.setdefault("APP_ENV", "test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.notification import DedupWindow
from domain.services.entity_service import EntityService
from domain.services.notification_service import NotificationService
from domain.services.orchestrator import NotificationOrchestrator, OrchestratorConfig
from domain.services.taxonomy import BUILTIN_TYPE_DEFINITIONS
from infrastructure.change_bus import InProcessChangeBus
from infrastructure.database.models import Base, NotificationTypeModel
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test, with all tables created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(
    engine: AsyncEngine,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory over a database seeded with the notification type catalog."""
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with factory() as session:
        session.add_all(
            NotificationTypeModel(
                code=d.code,
                name=d.display_name,
                icon_name=d.icon_token,
                color=d.color_token,
            )
            for d in BUILTIN_TYPE_DEFINITIONS
        )
        await session.commit()
    yield factory


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def change_bus() -> InProcessChangeBus:
    return InProcessChangeBus()


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
    change_bus: InProcessChangeBus,
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """UoW factory bound to the test database and change bus."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory, change_feed=change_bus)

    return factory


@pytest.fixture
def orchestrator(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    change_bus: InProcessChangeBus,
) -> NotificationOrchestrator:
    """Orchestrator over the test database; not started."""
    return NotificationOrchestrator(
        NotificationService(uow_factory, dedup_window=DedupWindow()),
        EntityService(uow_factory),
        change_bus,
        config=OrchestratorConfig(),
    )


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    orchestrator: NotificationOrchestrator,
    change_bus: InProcessChangeBus,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async test client wired to the in-memory database.

    Overrides the orchestrator, the change bus and the raw session dependency
    so that every route talks to the test database.
    """
    from api.v1.dependencies import get_change_bus, get_orchestrator
    from infrastructure.database.session import get_async_session
    from main import create_app

    app = create_app()

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_change_bus] = lambda: change_bus
    app.dependency_overrides[get_async_session] = override_get_async_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    orchestrator.stop()
    app.dependency_overrides.clear()
