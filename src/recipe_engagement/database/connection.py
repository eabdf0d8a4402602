"""PostgreSQL connection pool.

One asyncpg pool per process, opened in the lifespan and shared by the
repositories. Connection problems surface as ``StoreUnavailableError`` so
the HTTP layer can answer 503 instead of 500.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import asyncpg

from recipe_engagement.core.config import get_settings
from recipe_engagement.database.exceptions import (
    StoreUnavailableError,
    translate_store_errors,
)
from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool

    from recipe_engagement.core.config import Settings

logger = get_logger(__name__)

# Seconds the readiness check waits for SELECT 1
HEALTH_CHECK_TIMEOUT = 2.0

_pool: Pool | None = None


def _pool_options(settings: Settings) -> dict[str, Any]:
    db = settings.database
    return {
        "host": db.host,
        "port": db.port,
        "database": db.name,
        "user": db.user,
        "password": settings.DATABASE_PASSWORD or None,
        "min_size": db.min_pool_size,
        "max_size": db.max_pool_size,
        "command_timeout": db.command_timeout,
        "ssl": True if db.ssl else None,
        # Shows up in pg_stat_activity
        "server_settings": {"application_name": str(settings.app.name)},
    }


async def _ping(pool: Pool) -> None:
    async with pool.acquire() as conn:
        await conn.fetchval("SELECT 1")


async def init_database_pool(settings: Settings | None = None) -> Pool:
    """Open the pool and run one query through it.

    Raises:
        StoreUnavailableError: If the database cannot be reached.
    """
    global _pool  # noqa: PLW0603

    settings = settings or get_settings()
    logger.info(
        "Opening recipe database pool",
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
        max_size=settings.database.max_pool_size,
    )

    with translate_store_errors("connect"):
        pool = await asyncpg.create_pool(**_pool_options(settings))
        try:
            await _ping(pool)
        except Exception:
            await pool.close()
            raise

    _pool = pool
    logger.info("Recipe database pool ready")
    return pool


async def close_database_pool() -> None:
    """Close the pool opened by ``init_database_pool``; no-op if none is open."""
    global _pool  # noqa: PLW0603

    if _pool is None:
        return
    pool, _pool = _pool, None
    await pool.close()
    logger.info("Recipe database pool closed")


def get_database_pool() -> Pool:
    """Return the process-wide pool.

    Raises:
        StoreUnavailableError: If the pool is not initialized.
    """
    if _pool is None:
        msg = "Database pool not initialized. Call init_database_pool() first."
        raise StoreUnavailableError(msg, "acquire")
    return _pool


async def check_database_health() -> dict[str, str]:
    """Readiness state of the database: healthy, unhealthy or not_initialized."""
    if _pool is None:
        return {"database": "not_initialized"}

    try:
        await asyncio.wait_for(_ping(_pool), timeout=HEALTH_CHECK_TIMEOUT)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, TimeoutError):
        logger.warning("Database health check failed")
        return {"database": "unhealthy"}
    return {"database": "healthy"}
