"""Integration test fixtures.

Provides a real PostgreSQL via testcontainers. The container lives for the
session; each test gets a fresh pool over emptied tables.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from testcontainers.postgres import PostgresContainer

from recipe_engagement.core.config import Settings
from recipe_engagement.database import (
    close_database_pool,
    ensure_schema,
    init_database_pool,
)
from recipe_engagement.database.repositories import (
    FavoriteRepository,
    RecipeRepository,
)


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator

    from asyncpg import Pool


pytestmark = pytest.mark.integration

USERS = (
    (1, "Ada", "ada", "ada@example.com"),
    (2, "Bola", "bola", "bola@example.com"),
    (3, "Chidi", "chidi", "chidi@example.com"),
)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer]:
    """Start a PostgreSQL container for the test session."""
    with PostgresContainer(
        "postgres:16-alpine",
        username="recipes",
        password="recipes",
        dbname="recipes",
    ) as postgres:
        yield postgres


@pytest.fixture
def db_settings(postgres_container: PostgresContainer) -> Settings:
    return Settings(
        APP_ENV="test",
        DATABASE_PASSWORD="recipes",
        database={
            "host": postgres_container.get_container_host_ip(),
            "port": int(postgres_container.get_exposed_port(5432)),
            "name": "recipes",
            "user": "recipes",
            "min_pool_size": 1,
            "max_pool_size": 10,
        },
    )


@pytest.fixture
async def pool(db_settings: Settings) -> AsyncGenerator[Pool]:
    """Pool over a schema holding only the three seed users."""
    database_pool = await init_database_pool(db_settings)
    await ensure_schema(database_pool)
    async with database_pool.acquire() as conn:
        await conn.execute(
            "TRUNCATE favorites, recipes, users RESTART IDENTITY CASCADE"
        )
        await conn.executemany(
            "INSERT INTO users (id, name, username, email, password) "
            "VALUES ($1, $2, $3, $4, 'x')",
            USERS,
        )
    try:
        yield database_pool
    finally:
        await close_database_pool()
        await database_pool.close()


@pytest.fixture
def recipes(pool: Pool) -> RecipeRepository:
    return RecipeRepository(pool)


@pytest.fixture
def favorites(pool: Pool) -> FavoriteRepository:
    return FavoriteRepository(pool)
