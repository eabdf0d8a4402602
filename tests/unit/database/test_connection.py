"""Unit tests for database connection management."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import asyncpg
import pytest

import recipe_engagement.database.connection as db_module
from recipe_engagement.database import (
    StoreUnavailableError,
    check_database_health,
    close_database_pool,
    ensure_schema,
    get_database_pool,
    init_database_pool,
)
from recipe_engagement.database.schema import SCHEMA_STATEMENTS


if TYPE_CHECKING:
    from recipe_engagement.core.config import Settings


pytestmark = pytest.mark.unit


class TestInitDatabasePool:
    """Tests for init_database_pool."""

    async def test_creates_pool_from_settings(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should pass database settings to asyncpg and verify connectivity."""
        settings = MagicMock()
        settings.database.host = "db"
        settings.database.port = 5433
        settings.database.name = "recipes"
        settings.database.user = "cook"
        settings.database.min_pool_size = 1
        settings.database.max_pool_size = 4
        settings.database.command_timeout = 5.0
        settings.database.ssl = False
        settings.DATABASE_PASSWORD = "secret"

        with patch(
            "recipe_engagement.database.connection.asyncpg.create_pool",
            new=AsyncMock(return_value=mock_pool),
        ) as create_pool:
            pool = await init_database_pool(settings)

        assert pool is mock_pool
        assert db_module._pool is mock_pool
        kwargs = create_pool.call_args.kwargs
        assert kwargs["host"] == "db"
        assert kwargs["port"] == 5433
        assert kwargs["password"] == "secret"
        assert kwargs["ssl"] is None
        mock_conn.fetchval.assert_awaited_once_with("SELECT 1")

    async def test_unreachable_database(self, test_settings: Settings) -> None:
        """Should raise StoreUnavailableError and keep no pool."""
        with (
            patch(
                "recipe_engagement.database.connection.asyncpg.create_pool",
                new=AsyncMock(side_effect=OSError("connection refused")),
            ),
            pytest.raises(StoreUnavailableError) as exc_info,
        ):
            await init_database_pool(test_settings)

        assert exc_info.value.operation == "connect"
        assert db_module._pool is None

    async def test_failed_check_closes_pool(
        self, test_settings: Settings, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should close the new pool when SELECT 1 fails."""
        mock_pool.close = AsyncMock()
        mock_conn.fetchval.side_effect = ConnectionResetError("reset by peer")

        with (
            patch(
                "recipe_engagement.database.connection.asyncpg.create_pool",
                new=AsyncMock(return_value=mock_pool),
            ),
            pytest.raises(StoreUnavailableError),
        ):
            await init_database_pool(test_settings)

        mock_pool.close.assert_awaited_once()
        assert db_module._pool is None

    async def test_close_clears_pool(self, mock_pool: MagicMock) -> None:
        """Should close and forget the pool."""
        mock_pool.close = AsyncMock()
        db_module._pool = mock_pool

        await close_database_pool()

        mock_pool.close.assert_awaited_once()
        assert db_module._pool is None


class TestGetDatabasePool:
    """Tests for get_database_pool."""

    def test_raises_when_not_initialized(self) -> None:
        """Should raise StoreUnavailableError before startup."""
        with pytest.raises(StoreUnavailableError) as exc_info:
            get_database_pool()

        assert exc_info.value.operation == "acquire"

    def test_returns_pool(self, mock_pool: MagicMock) -> None:
        """Should return the initialized pool."""
        db_module._pool = mock_pool

        assert get_database_pool() is mock_pool


class TestCheckDatabaseHealth:
    """Tests for check_database_health."""

    async def test_not_initialized(self) -> None:
        """Should report not_initialized without a pool."""
        assert await check_database_health() == {"database": "not_initialized"}

    async def test_healthy(self, mock_pool: MagicMock, mock_conn: AsyncMock) -> None:
        """Should report healthy when SELECT 1 succeeds."""
        db_module._pool = mock_pool
        mock_conn.fetchval.return_value = 1

        assert await check_database_health() == {"database": "healthy"}

    async def test_unhealthy(self, mock_pool: MagicMock, mock_conn: AsyncMock) -> None:
        """Should report unhealthy when the query fails."""
        db_module._pool = mock_pool
        mock_conn.fetchval.side_effect = asyncpg.InterfaceError("closed")

        assert await check_database_health() == {"database": "unhealthy"}


class TestEnsureSchema:
    """Tests for ensure_schema."""

    async def test_runs_every_statement_in_a_transaction(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should execute the DDL statements in order inside one transaction."""
        mock_conn.transaction = MagicMock()
        mock_conn.transaction.return_value.__aenter__ = AsyncMock(return_value=None)
        mock_conn.transaction.return_value.__aexit__ = AsyncMock(return_value=None)

        await ensure_schema(mock_pool)

        executed = [c.args[0] for c in mock_conn.execute.await_args_list]
        assert executed == list(SCHEMA_STATEMENTS)
        mock_conn.transaction.assert_called_once()
