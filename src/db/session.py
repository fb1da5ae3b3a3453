"""Async SQLAlchemy session factory."""
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings


def engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict[str, Any]:
    """
    Build create_async_engine kwargs for a database URL.

    SQLite (local development and tests) gets no pool sizing, and its write
    transactions start with BEGIN IMMEDIATE: concurrent writers (e.g. an analytics
    write next to a bookmark update) then queue on the busy timeout instead of
    failing with "database is locked" when both try to upgrade a read lock.
    """
    if database_url.startswith("sqlite"):
        return {"echo": False, "connect_args": {"isolation_level": "IMMEDIATE"}}
    return {
        "echo": False,
        "pool_pre_ping": True,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
    }


def enable_sqlite_foreign_keys(sync_engine: Engine) -> None:
    """Turn on FK enforcement for every SQLite connection (off by default)."""

    @event.listens_for(sync_engine, "connect")
    def _set_pragma(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    **engine_options(
        settings.database_url, settings.db_pool_size, settings.db_max_overflow,
    ),
)
if settings.database_url.startswith("sqlite"):
    enable_sqlite_foreign_keys(engine.sync_engine)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def get_session_factory() -> async_sessionmaker:
    """Return the session factory for services that open their own sessions."""
    return async_session_factory


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield an async database session.

    Commit happens once here at request end; if anything fails, all changes are
    rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
