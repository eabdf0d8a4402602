"""Relational schema for users, recipes and favorites.

Applied at startup when ``database.create_schema`` is enabled. Statements are
idempotent so repeated startups are harmless.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recipe_engagement.database.exceptions import translate_store_errors
from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool

logger = get_logger(__name__)


SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE
            CHECK (email ~* '^[^@[:space:]]+@[^@[:space:]]+\\.[^@[:space:]]+$'),
        password TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS recipes (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        description TEXT,
        ingredients TEXT[] NOT NULL,
        direction TEXT NOT NULL,
        image_url TEXT,
        upvotes INTEGER NOT NULL DEFAULT 0 CHECK (upvotes >= 0),
        downvotes INTEGER NOT NULL DEFAULT 0 CHECK (downvotes >= 0),
        view_count INTEGER NOT NULL DEFAULT 0 CHECK (view_count >= 0),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS favorites (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        recipe_id INTEGER NOT NULL REFERENCES recipes (id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        UNIQUE (user_id, recipe_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS recipes_user_id_idx ON recipes (user_id)",
    "CREATE INDEX IF NOT EXISTS favorites_recipe_id_idx ON favorites (recipe_id)",
)


async def ensure_schema(pool: Pool) -> None:
    """Create tables and indexes that do not exist yet."""
    with translate_store_errors("ensure_schema"):
        async with pool.acquire() as conn, conn.transaction():
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)
    logger.info("Database schema ensured", tables=["users", "recipes", "favorites"])
