"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production models carry no
PostgreSQL-only column types, so the real metadata is created directly.

Verification codes live in an ``InMemoryCodeStore`` driven by a fake clock,
and a recording notifier captures every code that would have been sent.
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.code_store import InMemoryCodeStore
from src.infrastructure.database import Base
from tests.helpers import (
    FakeClock,
    RecordingNotifier,
    TestSessionFactory,
    test_engine,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def code_store(clock: FakeClock) -> InMemoryCodeStore:
    return InMemoryCodeStore(clock=clock)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionFactory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture
async def client(code_store, notifier) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite, the fake-clock store and the recorder."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    with (
        patch("src.workers.sweeper.start_sweep_loop", new_callable=AsyncMock),
        patch("src.workers.sweeper.stop_sweep_loop", new_callable=AsyncMock),
    ):

        async def _test_db():
            async with TestSessionFactory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        async def _test_code_store():
            return code_store

        from src.api.app import create_app
        from src.api.middleware import limiter
        from src.api.dependencies import get_db
        from src.infrastructure.code_store import get_code_store
        from src.infrastructure.notifier import get_notifier

        limiter.reset()
        app = create_app()
        app.dependency_overrides[get_db] = _test_db
        app.dependency_overrides[get_code_store] = _test_code_store
        app.dependency_overrides[get_notifier] = lambda: notifier

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()
