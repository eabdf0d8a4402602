"""Recipe data repository.

Raw asyncpg access to the ``recipes`` table. All counter changes go through
``increment``, a single ``UPDATE ... SET f = f + 1`` statement, so concurrent
votes and views never lose updates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from recipe_engagement.database.connection import get_database_pool
from recipe_engagement.database.exceptions import translate_store_errors
from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Mapping

    from asyncpg import Pool, Record

logger = get_logger(__name__)


# =============================================================================
# Data Transfer Objects
# =============================================================================


class OwnerSummary(BaseModel):
    """Public attributes of a recipe's owner."""

    name: str
    updated_at: datetime


class RecipeRecord(BaseModel):
    """A stored recipe, optionally with its owner's public attributes."""

    id: int
    user_id: int
    name: str
    description: str | None = None
    ingredients: list[str]
    direction: str
    image_url: str | None = None
    upvotes: int = 0
    downvotes: int = 0
    view_count: int = 0
    created_at: datetime
    updated_at: datetime
    owner: OwnerSummary | None = None


# =============================================================================
# Filtering
# =============================================================================


EXACT_MATCH_COLUMNS = frozenset(
    {
        "id",
        "user_id",
        "name",
        "description",
        "direction",
        "image_url",
        "upvotes",
        "downvotes",
        "view_count",
    }
)
TEXT_COLUMNS = frozenset({"name", "description", "direction"})
INGREDIENTS = "ingredients"
COUNTER_COLUMNS = frozenset({"upvotes", "downvotes", "view_count"})
WRITABLE_COLUMNS = frozenset(
    {"user_id", "name", "description", "ingredients", "direction", "image_url"}
)


class MatchMode(StrEnum):
    """How substring clauses are combined."""

    ALL = "all"
    ANY = "any"


class RecipeOrdering(StrEnum):
    """Supported result orderings."""

    ID_ASC = "id_asc"
    UPVOTES_DESC = "upvotes_desc"


_ORDER_CLAUSES = {
    RecipeOrdering.ID_ASC: "r.id ASC",
    RecipeOrdering.UPVOTES_DESC: "r.upvotes DESC, r.id ASC",
}


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class TextMatch:
    """Substring clause on a text column or on any ingredient entry."""

    column: str
    term: str
    case_sensitive: bool = False

    def __post_init__(self) -> None:
        if self.column not in TEXT_COLUMNS and self.column != INGREDIENTS:
            msg = f"Column not searchable: {self.column}"
            raise ValueError(msg)

    def to_sql(self, placeholder: str) -> str:
        operator = "LIKE" if self.case_sensitive else "ILIKE"
        if self.column == INGREDIENTS:
            return (
                "EXISTS (SELECT 1 FROM unnest(r.ingredients) AS ing "
                f"WHERE ing {operator} {placeholder} ESCAPE '\\')"
            )
        return f"r.{self.column} {operator} {placeholder} ESCAPE '\\'"


@dataclass(frozen=True)
class RecipeFilter:
    """Query description for ``RecipeRepository.find_all``.

    ``equals`` clauses are always ANDed. ``matches`` clauses are combined with
    AND or OR according to ``match_mode`` and then ANDed with ``equals``.
    """

    equals: Mapping[str, Any] = field(default_factory=dict)
    matches: tuple[TextMatch, ...] = ()
    match_mode: MatchMode = MatchMode.ALL
    order_by: RecipeOrdering = RecipeOrdering.ID_ASC
    include_owner: bool = True

    def __post_init__(self) -> None:
        unknown = set(self.equals) - EXACT_MATCH_COLUMNS
        if unknown:
            msg = f"Column not filterable: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

    def build_where(self) -> tuple[str, list[Any]]:
        """Render the WHERE clause (empty when unfiltered) and its arguments."""
        args: list[Any] = []
        clauses: list[str] = []

        for column in sorted(self.equals):
            args.append(self.equals[column])
            clauses.append(f"r.{column} = ${len(args)}")

        text_clauses: list[str] = []
        for match in self.matches:
            args.append(f"%{escape_like(match.term)}%")
            text_clauses.append(match.to_sql(f"${len(args)}"))

        if text_clauses:
            joiner = " OR " if self.match_mode is MatchMode.ANY else " AND "
            clauses.append(f"({joiner.join(text_clauses)})")

        if not clauses:
            return "", args
        return " WHERE " + " AND ".join(clauses), args

    def build_order(self) -> str:
        return f" ORDER BY {_ORDER_CLAUSES[self.order_by]}"


# =============================================================================
# Repository
# =============================================================================


RECIPE_COLUMNS = """
    r.id, r.user_id, r.name, r.description, r.ingredients, r.direction,
    r.image_url, r.upvotes, r.downvotes, r.view_count,
    r.created_at, r.updated_at
"""
OWNER_COLUMNS = "u.name AS owner_name, u.updated_at AS owner_updated_at"
OWNER_JOIN = "LEFT JOIN users u ON u.id = r.user_id"


def _select(source: str, *, include_owner: bool = True) -> str:
    if include_owner:
        return f"SELECT {RECIPE_COLUMNS}, {OWNER_COLUMNS} FROM {source} {OWNER_JOIN}"
    return f"SELECT {RECIPE_COLUMNS} FROM {source}"


def row_to_record(row: Record) -> RecipeRecord:
    """Map a row selected with ``RECIPE_COLUMNS`` (and owner columns)."""
    owner = None
    if row.get("owner_name") is not None:
        owner = OwnerSummary(
            name=row["owner_name"], updated_at=row["owner_updated_at"]
        )
    return RecipeRecord(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        description=row["description"],
        ingredients=list(row["ingredients"] or []),
        direction=row["direction"],
        image_url=row["image_url"],
        upvotes=row["upvotes"],
        downvotes=row["downvotes"],
        view_count=row["view_count"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        owner=owner,
    )


class RecipeRepository:
    """Repository for recipe rows.

    The only component that writes to the ``recipes`` table.
    """

    def __init__(self, pool: Pool | None = None) -> None:
        """Initialize repository with optional connection pool.

        Args:
            pool: asyncpg connection pool. If None, uses global pool.
        """
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()

    async def find_by_id(
        self, recipe_id: int, *, include_owner: bool = True
    ) -> RecipeRecord | None:
        """Get a recipe by primary key, or None if it does not exist."""
        query = _select("recipes r", include_owner=include_owner)
        query += " WHERE r.id = $1"
        with translate_store_errors("find_by_id"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, recipe_id)
        return row_to_record(row) if row else None

    async def find_all(
        self, recipe_filter: RecipeFilter | None = None
    ) -> list[RecipeRecord]:
        """Get all recipes matching ``recipe_filter`` in its requested order."""
        recipe_filter = recipe_filter or RecipeFilter()
        where, args = recipe_filter.build_where()
        query = (
            _select("recipes r", include_owner=recipe_filter.include_owner)
            + where
            + recipe_filter.build_order()
        )
        with translate_store_errors("find_all"):
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
        return [row_to_record(row) for row in rows]

    async def create(self, fields: Mapping[str, Any]) -> RecipeRecord:
        """Insert a recipe; counters start at zero."""
        columns = self._writable(fields)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = (
            f"WITH r AS (INSERT INTO recipes ({', '.join(columns)}) "
            f"VALUES ({placeholders}) RETURNING *) " + _select("r")
        )
        with translate_store_errors("create"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, *(fields[c] for c in columns))
        record = row_to_record(row)
        logger.info("Recipe created", recipe_id=record.id, user_id=record.user_id)
        return record

    async def update(
        self, recipe_id: int, fields: Mapping[str, Any]
    ) -> RecipeRecord | None:
        """Overwrite the given columns; None if the recipe does not exist."""
        columns = self._writable(fields)
        assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))
        query = (
            f"WITH r AS (UPDATE recipes SET {assignments}, updated_at = now() "
            "WHERE id = $1 RETURNING *) " + _select("r")
        )
        with translate_store_errors("update"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    query, recipe_id, *(fields[c] for c in columns)
                )
        return row_to_record(row) if row else None

    async def destroy(self, recipe_id: int) -> bool:
        """Delete a recipe (favorites cascade). Returns False if absent."""
        with translate_store_errors("destroy"):
            async with self.pool.acquire() as conn:
                status = await conn.execute(
                    "DELETE FROM recipes WHERE id = $1", recipe_id
                )
        return status.split()[-1] != "0"

    async def increment(self, recipe_id: int, column: str) -> RecipeRecord | None:
        """Atomically add one to a counter column.

        Returns the post-increment row, or None if the recipe does not exist.
        """
        if column not in COUNTER_COLUMNS:
            msg = f"Column is not a counter: {column}"
            raise ValueError(msg)

        query = (
            f"WITH r AS (UPDATE recipes SET {column} = {column} + 1 "
            "WHERE id = $1 RETURNING *) " + _select("r")
        )
        with translate_store_errors("increment"):
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, recipe_id)
        return row_to_record(row) if row else None

    @staticmethod
    def _writable(fields: Mapping[str, Any]) -> list[str]:
        unknown = set(fields) - WRITABLE_COLUMNS
        if unknown:
            msg = f"Column not writable: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        if not fields:
            msg = "No columns to write"
            raise ValueError(msg)
        return sorted(fields)
