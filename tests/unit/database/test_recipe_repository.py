"""Unit tests for RecipeRepository and RecipeFilter."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import asyncpg
import pytest

import recipe_engagement.database.connection as db_module
from recipe_engagement.database import StoreConstraintError, StoreUnavailableError
from recipe_engagement.database.repositories import (
    MatchMode,
    RecipeFilter,
    RecipeOrdering,
    RecipeRepository,
    TextMatch,
)
from recipe_engagement.database.repositories.recipes import (
    escape_like,
    row_to_record,
)


if TYPE_CHECKING:
    from unittest.mock import AsyncMock, MagicMock


pytestmark = pytest.mark.unit

STAMP = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


def recipe_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": 1,
        "user_id": 7,
        "name": "Egg Fried Rice",
        "description": "Quick dinner",
        "ingredients": ["Rice", "2 Eggs"],
        "direction": "Fry everything",
        "image_url": None,
        "upvotes": 5,
        "downvotes": 3,
        "view_count": 1,
        "created_at": STAMP,
        "updated_at": STAMP,
        "owner_name": "Ada",
        "owner_updated_at": STAMP,
    }
    row.update(overrides)
    return row


class TestEscapeLike:
    """Tests for LIKE wildcard escaping."""

    def test_escapes_wildcards(self) -> None:
        """Should escape percent and underscore."""
        assert escape_like("50%_off") == "50\\%\\_off"

    def test_escapes_backslash_first(self) -> None:
        """Should double backslashes before escaping wildcards."""
        assert escape_like("a\\%") == "a\\\\\\%"

    def test_leaves_plain_text(self) -> None:
        """Should leave ordinary text untouched."""
        assert escape_like("egg") == "egg"


class TestTextMatch:
    """Tests for substring clauses."""

    def test_text_column_is_case_insensitive_by_default(self) -> None:
        """Should render ILIKE on the column."""
        sql = TextMatch("name", "rice").to_sql("$1")

        assert sql == "r.name ILIKE $1 ESCAPE '\\'"

    def test_case_sensitive_uses_like(self) -> None:
        """Should render LIKE when case sensitive."""
        sql = TextMatch("name", "Rice", case_sensitive=True).to_sql("$2")

        assert sql == "r.name LIKE $2 ESCAPE '\\'"

    def test_ingredients_match_any_entry(self) -> None:
        """Should match against each ingredient entry, not the joined list."""
        sql = TextMatch("ingredients", "egg").to_sql("$1")

        assert "unnest(r.ingredients)" in sql
        assert "ing ILIKE $1" in sql

    def test_rejects_unknown_column(self) -> None:
        """Should refuse columns that are not searchable."""
        with pytest.raises(ValueError, match="not searchable"):
            TextMatch("password", "x")


class TestRecipeFilter:
    """Tests for WHERE and ORDER BY rendering."""

    def test_empty_filter(self) -> None:
        """Should render no WHERE clause and order by id."""
        where, args = RecipeFilter().build_where()

        assert where == ""
        assert args == []
        assert RecipeFilter().build_order() == " ORDER BY r.id ASC"

    def test_equals_are_anded_in_column_order(self) -> None:
        """Should AND equality clauses with numbered placeholders."""
        where, args = RecipeFilter(equals={"user_id": 7, "name": "Soup"}).build_where()

        assert where == " WHERE r.name = $1 AND r.user_id = $2"
        assert args == ["Soup", 7]

    def test_matches_all_mode(self) -> None:
        """Should AND text clauses by default and wrap the term in wildcards."""
        recipe_filter = RecipeFilter(
            matches=(TextMatch("name", "rice"), TextMatch("description", "quick"))
        )

        where, args = recipe_filter.build_where()

        assert " AND " in where
        assert args == ["%rice%", "%quick%"]

    def test_matches_any_mode_groups_clauses(self) -> None:
        """Should OR text clauses inside parentheses and AND them with equals."""
        recipe_filter = RecipeFilter(
            equals={"user_id": 3},
            matches=(TextMatch("name", "a"), TextMatch("ingredients", "a")),
            match_mode=MatchMode.ANY,
        )

        where, args = recipe_filter.build_where()

        assert where.startswith(" WHERE r.user_id = $1 AND (")
        assert " OR " in where
        assert where.endswith(")")
        assert args == [3, "%a%", "%a%"]

    def test_terms_are_escaped(self) -> None:
        """Should escape wildcards in search terms."""
        _, args = RecipeFilter(matches=(TextMatch("name", "100%"),)).build_where()

        assert args == ["%100\\%%"]

    def test_upvotes_order_breaks_ties_by_id(self) -> None:
        """Should order by upvotes descending then id ascending."""
        order = RecipeFilter(order_by=RecipeOrdering.UPVOTES_DESC).build_order()

        assert order == " ORDER BY r.upvotes DESC, r.id ASC"

    def test_rejects_unknown_equals_column(self) -> None:
        """Should refuse columns that cannot be filtered."""
        with pytest.raises(ValueError, match="not filterable"):
            RecipeFilter(equals={"password": "x"})


class TestRowToRecord:
    """Tests for row mapping."""

    def test_maps_owner(self) -> None:
        """Should nest owner attributes when present."""
        record = row_to_record(recipe_row())

        assert record.owner is not None
        assert record.owner.name == "Ada"
        assert record.ingredients == ["Rice", "2 Eggs"]

    def test_without_owner_columns(self) -> None:
        """Should leave owner unset when the row has no owner columns."""
        row = recipe_row()
        del row["owner_name"], row["owner_updated_at"]

        assert row_to_record(row).owner is None


class TestRecipeRepository:
    """Tests for RecipeRepository."""

    async def test_find_by_id(self, mock_pool: MagicMock, mock_conn: AsyncMock) -> None:
        """Should fetch one row joined with its owner."""
        mock_conn.fetchrow.return_value = recipe_row()
        repo = RecipeRepository(mock_pool)

        record = await repo.find_by_id(1)

        assert record is not None
        assert record.id == 1
        query, recipe_id = mock_conn.fetchrow.call_args.args
        assert "LEFT JOIN users u" in query
        assert recipe_id == 1

    async def test_find_by_id_without_owner(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should skip the owner join when not requested."""
        mock_conn.fetchrow.return_value = recipe_row(owner_name=None)
        repo = RecipeRepository(mock_pool)

        await repo.find_by_id(1, include_owner=False)

        assert "JOIN" not in mock_conn.fetchrow.call_args.args[0]

    async def test_find_by_id_missing(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should return None when no row matches."""
        mock_conn.fetchrow.return_value = None
        repo = RecipeRepository(mock_pool)

        assert await repo.find_by_id(99) is None

    async def test_find_all_passes_filter_arguments(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should render the filter into the query and bind its arguments."""
        mock_conn.fetch.return_value = [recipe_row(), recipe_row(id=2)]
        repo = RecipeRepository(mock_pool)

        records = await repo.find_all(
            RecipeFilter(matches=(TextMatch("ingredients", "egg"),))
        )

        assert [r.id for r in records] == [1, 2]
        query, arg = mock_conn.fetch.call_args.args
        assert "unnest(r.ingredients)" in query
        assert query.endswith("ORDER BY r.id ASC")
        assert arg == "%egg%"

    async def test_create_inserts_sorted_columns(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should insert writable columns and return the joined row."""
        mock_conn.fetchrow.return_value = recipe_row(upvotes=0, downvotes=0)
        repo = RecipeRepository(mock_pool)

        record = await repo.create(
            {
                "user_id": 7,
                "name": "Egg Fried Rice",
                "ingredients": ["Rice", "2 Eggs"],
                "direction": "Fry everything",
            }
        )

        assert record.upvotes == 0
        args = mock_conn.fetchrow.call_args.args
        assert "INSERT INTO recipes (direction, ingredients, name, user_id)" in args[0]
        assert args[1:] == ("Fry everything", ["Rice", "2 Eggs"], "Egg Fried Rice", 7)

    async def test_create_rejects_unknown_columns(self, mock_pool: MagicMock) -> None:
        """Should refuse to write counters or unknown columns."""
        repo = RecipeRepository(mock_pool)

        with pytest.raises(ValueError, match="not writable"):
            await repo.create({"name": "x", "upvotes": 10})

    async def test_update_touches_updated_at(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should set the given columns and refresh updated_at."""
        mock_conn.fetchrow.return_value = recipe_row(name="New")
        repo = RecipeRepository(mock_pool)

        record = await repo.update(1, {"name": "New"})

        assert record is not None
        query, recipe_id, name = mock_conn.fetchrow.call_args.args
        assert "SET name = $2, updated_at = now()" in query
        assert (recipe_id, name) == (1, "New")

    async def test_update_missing_returns_none(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should return None when the recipe does not exist."""
        mock_conn.fetchrow.return_value = None
        repo = RecipeRepository(mock_pool)

        assert await repo.update(1, {"name": "New"}) is None

    @pytest.mark.parametrize(
        ("status", "expected"), [("DELETE 1", True), ("DELETE 0", False)]
    )
    async def test_destroy(
        self,
        mock_pool: MagicMock,
        mock_conn: AsyncMock,
        status: str,
        expected: bool,
    ) -> None:
        """Should report whether a row was deleted."""
        mock_conn.execute.return_value = status
        repo = RecipeRepository(mock_pool)

        assert await repo.destroy(1) is expected

    async def test_increment_is_single_statement(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should add one in SQL rather than writing a computed value."""
        mock_conn.fetchrow.return_value = recipe_row(upvotes=6)
        repo = RecipeRepository(mock_pool)

        record = await repo.increment(1, "upvotes")

        assert record is not None
        assert record.upvotes == 6
        query = mock_conn.fetchrow.call_args.args[0]
        assert "SET upvotes = upvotes + 1" in query
        assert "updated_at" not in query.split("RETURNING")[0]

    async def test_increment_rejects_non_counter(self, mock_pool: MagicMock) -> None:
        """Should refuse to increment a non-counter column."""
        repo = RecipeRepository(mock_pool)

        with pytest.raises(ValueError, match="not a counter"):
            await repo.increment(1, "name")

    async def test_constraint_violation_is_translated(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should raise StoreConstraintError for integrity violations."""
        mock_conn.fetchrow.side_effect = asyncpg.ForeignKeyViolationError("fk")
        repo = RecipeRepository(mock_pool)

        with pytest.raises(StoreConstraintError) as exc_info:
            await repo.create({"user_id": 404, "name": "x"})

        assert exc_info.value.operation == "create"

    async def test_uses_global_pool_when_not_injected(
        self, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should fall back to the module-level pool."""
        db_module._pool = mock_pool
        mock_conn.fetchrow.return_value = None

        assert await RecipeRepository().find_by_id(1) is None

    async def test_without_pool_is_unavailable(self) -> None:
        """Should raise StoreUnavailableError when no pool exists."""
        with pytest.raises(StoreUnavailableError):
            await RecipeRepository().find_by_id(1)
