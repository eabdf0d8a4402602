"""Favorite data repository.

A favorite joins one user to one recipe; the pair is unique and the row is
removed when either side is deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recipe_engagement.database.connection import get_database_pool
from recipe_engagement.database.exceptions import translate_store_errors
from recipe_engagement.database.repositories.recipes import (
    OWNER_COLUMNS,
    RECIPE_COLUMNS,
    RecipeRecord,
    row_to_record,
)
from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool

logger = get_logger(__name__)


_FAVORITER_EMAILS_QUERY = """
    SELECT u.email
    FROM favorites f
    JOIN users u ON u.id = f.user_id
    WHERE f.recipe_id = $1
    ORDER BY f.id ASC
"""

_USER_FAVORITES_QUERY = f"""
    SELECT {RECIPE_COLUMNS}, {OWNER_COLUMNS}
    FROM favorites f
    JOIN recipes r ON r.id = f.recipe_id
    LEFT JOIN users u ON u.id = r.user_id
    WHERE f.user_id = $1
    ORDER BY f.id ASC
"""


class FavoriteRepository:
    """Repository for favorite rows."""

    def __init__(self, pool: Pool | None = None) -> None:
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()

    async def add(self, user_id: int, recipe_id: int) -> bool:
        """Favorite a recipe. Returns False if it was already a favorite."""
        with translate_store_errors("add_favorite"):
            async with self.pool.acquire() as conn:
                favorite_id = await conn.fetchval(
                    """
                    INSERT INTO favorites (user_id, recipe_id)
                    VALUES ($1, $2)
                    ON CONFLICT (user_id, recipe_id) DO NOTHING
                    RETURNING id
                    """,
                    user_id,
                    recipe_id,
                )
        return favorite_id is not None

    async def remove(self, user_id: int, recipe_id: int) -> bool:
        """Unfavorite a recipe. Returns False if it was not a favorite."""
        with translate_store_errors("remove_favorite"):
            async with self.pool.acquire() as conn:
                status = await conn.execute(
                    "DELETE FROM favorites WHERE user_id = $1 AND recipe_id = $2",
                    user_id,
                    recipe_id,
                )
        return status.split()[-1] != "0"

    async def find_favoriter_emails(self, recipe_id: int) -> list[str]:
        """E-mail addresses of users who favorited ``recipe_id``."""
        with translate_store_errors("find_favoriter_emails"):
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(_FAVORITER_EMAILS_QUERY, recipe_id)
        return [row["email"] for row in rows]

    async def find_recipes_for_user(self, user_id: int) -> list[RecipeRecord]:
        """Recipes favorited by ``user_id``, oldest favorite first."""
        with translate_store_errors("find_favorites"):
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(_USER_FAVORITES_QUERY, user_id)
        return [row_to_record(row) for row in rows]
