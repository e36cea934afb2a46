"""Tests for engine construction and the transaction scope."""

from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.pool import NullPool

from order_management.core.config import DatabaseConfig
from order_management.storage.postgres.connection import (
    _pool_options,
    create_all,
    create_engine,
    create_session_factory,
    drop_all,
    session_scope,
)


class TestPoolOptions:
    def test_server_database_gets_queue_pool_sizing(self):
        options = _pool_options(
            "postgresql+asyncpg://u:p@db/orders", DatabaseConfig(pool_size=3, max_overflow=1)
        )
        assert options["pool_size"] == 3
        assert options["max_overflow"] == 1
        assert options["pool_pre_ping"] is True

    def test_sqlite_uses_dialect_default(self):
        assert _pool_options("sqlite+aiosqlite:///x.db", DatabaseConfig()) == {}

    def test_null_pool_wins(self):
        options = _pool_options("postgresql+asyncpg://db/orders", DatabaseConfig(use_null_pool=True))
        assert options == {"poolclass": NullPool}


class TestSqliteEngine:
    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self, engine):
        async with engine.connect() as conn:
            result = await conn.execute(text("PRAGMA foreign_keys"))
            assert result.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_session_scope_rolls_back_on_error(self, engine, session_factory):
        with pytest.raises(RuntimeError):
            async with session_scope(session_factory) as session:
                await session.execute(
                    text(
                        "INSERT INTO shipping_addresses "
                        "(street, city, state_or_province, postal_code, country) "
                        "VALUES ('1 A St', 'B', 'C', 'D', 'E')"
                    )
                )
                raise RuntimeError("abort")

        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT COUNT(*) FROM shipping_addresses"))
            assert result.scalar_one() == 0

    @pytest.mark.asyncio
    async def test_drop_all(self, database_url):
        eng = create_engine(database_url)
        try:
            factory = create_session_factory(eng)
            await create_all(eng)
            await drop_all(eng)
            async with session_scope(factory) as session:
                result = await session.execute(
                    text("SELECT name FROM sqlite_master WHERE type = 'table'")
                )
                assert result.scalars().all() == []
        finally:
            await eng.dispose()
