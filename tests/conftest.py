"""Pytest fixtures for testing."""
import os

# Settings are validated on first import of db.session; point them at SQLite and
# dev mode before any application module is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["VITE_DEV_MODE"] = "true"

from collections.abc import AsyncGenerator  # noqa: E402
from pathlib import Path  # noqa: E402
from uuid import UUID  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402
from uuid6 import uuid7  # noqa: E402

from core.config import get_settings  # noqa: E402
from db.session import enable_sqlite_foreign_keys, engine_options  # noqa: E402
from models.base import Base  # noqa: E402
from services.analytics_service import AnalyticsRecorder  # noqa: E402
from services.bookmark_store import BookmarkStore  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """
    A SQLite file per test.

    A file rather than ``:memory:`` so the store, the analytics recorder and the
    test itself can each open their own connection to the same data.
    """
    return f"sqlite+aiosqlite:///{tmp_path / 'bookmarks.db'}"


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create an async engine with the schema in place."""
    engine = create_async_engine(
        database_url,
        poolclass=NullPool,
        **engine_options(database_url, pool_size=0, max_overflow=0),
    )
    enable_sqlite_foreign_keys(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker:
    """Session factory shared by the store, the recorder and the test."""
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession]:
    """
    A session for calling services directly.

    Nothing is committed unless the test does so; the database file is discarded
    with tmp_path.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_id() -> UUID:
    """The signed-in user."""
    return uuid7()


@pytest.fixture
def other_user_id() -> UUID:
    """Another user, for isolation tests."""
    return uuid7()


@pytest.fixture
async def analytics(session_factory: async_sessionmaker) -> AsyncGenerator[AnalyticsRecorder]:
    """Analytics recorder; pending writes are flushed at teardown."""
    recorder = AnalyticsRecorder(session_factory)
    yield recorder
    await recorder.close()


@pytest.fixture
async def store(
    user_id: UUID,
    session_factory: async_sessionmaker,
    analytics: AnalyticsRecorder,
) -> AsyncGenerator[BookmarkStore]:
    """A loaded store for ``user_id``."""
    bookmark_store = BookmarkStore(user_id, session_factory, analytics)
    result = await bookmark_store.load()
    assert result.success
    yield bookmark_store
    await bookmark_store.dispose()


@pytest.fixture
async def other_store(
    other_user_id: UUID,
    session_factory: async_sessionmaker,
    analytics: AnalyticsRecorder,
) -> AsyncGenerator[BookmarkStore]:
    """A loaded store for ``other_user_id``."""
    bookmark_store = BookmarkStore(other_user_id, session_factory, analytics)
    result = await bookmark_store.load()
    assert result.success
    yield bookmark_store
    await bookmark_store.dispose()
