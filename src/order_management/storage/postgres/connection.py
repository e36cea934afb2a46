"""SQLAlchemy async engine pool and session management.

Provides a factory for creating async engines (asyncpg in production,
aiosqlite in tests), a session-factory helper, an async context manager
for transaction-scoped sessions, and lifecycle helpers for schema
creation and teardown.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from order_management.core.config import DatabaseConfig

from .models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _pool_options(url: str, config: DatabaseConfig) -> dict[str, Any]:
    """Engine keyword arguments for *url*'s pool.

    SQLite (tests, the demo) keeps SQLAlchemy's default pool for its
    dialect; the queue-pool sizing knobs only apply to server databases.
    """
    if config.use_null_pool:
        return {"poolclass": NullPool}
    if _is_sqlite(url):
        return {}
    return {
        "pool_size": config.pool_size,
        "max_overflow": config.max_overflow,
        "pool_timeout": config.pool_timeout,
        "pool_recycle": config.pool_recycle,
        "pool_pre_ping": True,
    }


def create_engine(url: str, config: DatabaseConfig | None = None) -> AsyncEngine:
    """Build the async engine for the orders database.

    Args:
        url: ``postgresql+asyncpg://...`` in production or
            ``sqlite+aiosqlite:///path.db`` in tests.
        config: Pool and echo options; defaults to :class:`DatabaseConfig`.

    Returns:
        An :class:`AsyncEngine`.  On SQLite every new connection runs
        ``PRAGMA foreign_keys=ON`` so the ``order_items`` cascade and the
        address reference are enforced as they are on PostgreSQL.
    """
    config = config or DatabaseConfig()
    engine = create_async_engine(url, echo=config.echo, **_pool_options(url, config))

    if _is_sqlite(url):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.info("Created async engine for %s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables defined in the ORM metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created / verified.")


async def drop_all(engine: AsyncEngine) -> None:
    """Drop all tables defined in the ORM metadata (tests only)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database tables dropped.")


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session whose block is one transaction.

    Usage::

        async with session_scope(factory) as session:
            session.add(record)
            ...

    The session is committed on successful exit and rolled back on
    exception.  It is always closed afterwards.
    """
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
