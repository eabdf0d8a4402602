"""Search strategy selection and execution.

The request shape picks exactly one strategy. Predicates are checked in
priority order and the first match wins:

1. ``sort=upvotes&order=descending``  -> most upvoted first
2. ``ingredients=<term>``             -> substring match on any ingredient
3. ``recipes=<term>``                 -> substring match on the name
4. ``search=<term>``                  -> name OR ingredients OR description
5. anything else                      -> every recipe

Matching is case-insensitive. Terms that are blank after whitespace
normalization are treated as absent.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from recipe_engagement.database.repositories import (
    MatchMode,
    RecipeFilter,
    RecipeOrdering,
    TextMatch,
)
from recipe_engagement.observability.logging import get_logger
from recipe_engagement.observability.metrics import discovery_requests_total
from recipe_engagement.services.engagement.constants import (
    ORDER_DESCENDING,
    SORT_BY_UPVOTES,
)
from recipe_engagement.services.engagement.text import normalize_whitespace


if TYPE_CHECKING:
    from collections.abc import Callable

    from recipe_engagement.database.repositories import (
        RecipeRecord,
        RecipeRepository,
    )

logger = get_logger(__name__)


class Strategy(StrEnum):
    """Discovery strategy."""

    MOST_UPVOTED = "most_upvoted"
    INGREDIENTS = "ingredients"
    NAME = "name"
    KEYWORD = "keyword"
    DEFAULT = "default"


@dataclass(frozen=True)
class DiscoveryParams:
    """Raw discovery query parameters; all optional."""

    sort: str | None = None
    order: str | None = None
    ingredients: str | None = None
    recipes: str | None = None
    search: str | None = None

    def normalized(self) -> DiscoveryParams:
        """Collapse whitespace runs, trim, and turn blank values into None."""
        return replace(
            self,
            sort=normalize_whitespace(self.sort) or None,
            order=normalize_whitespace(self.order) or None,
            ingredients=normalize_whitespace(self.ingredients) or None,
            recipes=normalize_whitespace(self.recipes) or None,
            search=normalize_whitespace(self.search) or None,
        )


@dataclass(frozen=True)
class DiscoveryResult:
    """Recipes found and the strategy that found them."""

    strategy: Strategy
    recipes: list[RecipeRecord]


def _wants_most_upvoted(params: DiscoveryParams) -> bool:
    return params.sort == SORT_BY_UPVOTES and params.order == ORDER_DESCENDING


STRATEGY_PRIORITY: tuple[tuple[Callable[[DiscoveryParams], bool], Strategy], ...] = (
    (_wants_most_upvoted, Strategy.MOST_UPVOTED),
    (lambda params: params.ingredients is not None, Strategy.INGREDIENTS),
    (lambda params: params.recipes is not None, Strategy.NAME),
    (lambda params: params.search is not None, Strategy.KEYWORD),
)


def select_strategy(params: DiscoveryParams) -> Strategy:
    """Return the first strategy whose predicate accepts normalized ``params``."""
    for predicate, strategy in STRATEGY_PRIORITY:
        if predicate(params):
            return strategy
    return Strategy.DEFAULT


def build_filter(strategy: Strategy, params: DiscoveryParams) -> RecipeFilter:
    """Translate a strategy and its term into a repository filter."""
    if strategy is Strategy.MOST_UPVOTED:
        return RecipeFilter(order_by=RecipeOrdering.UPVOTES_DESC)

    if strategy is Strategy.INGREDIENTS:
        return RecipeFilter(matches=(TextMatch("ingredients", params.ingredients),))

    if strategy is Strategy.NAME:
        return RecipeFilter(matches=(TextMatch("name", params.recipes),))

    if strategy is Strategy.KEYWORD:
        return RecipeFilter(
            matches=(
                TextMatch("name", params.search),
                TextMatch("ingredients", params.search),
                TextMatch("description", params.search),
            ),
            match_mode=MatchMode.ANY,
        )

    return RecipeFilter()


def _dedupe_by_id(recipes: list[RecipeRecord]) -> list[RecipeRecord]:
    seen: set[int] = set()
    unique: list[RecipeRecord] = []
    for recipe in recipes:
        if recipe.id not in seen:
            seen.add(recipe.id)
            unique.append(recipe)
    return unique


class RecipeDiscovery:
    """Run the discovery strategy selected by a request's parameters."""

    def __init__(self, recipes: RecipeRepository) -> None:
        self._recipes = recipes

    async def discover(self, params: DiscoveryParams) -> DiscoveryResult:
        """Select a strategy and return its results (possibly empty).

        Raises:
            StoreError: If the repository query fails.
        """
        params = params.normalized()
        strategy = select_strategy(params)

        recipes = await self._recipes.find_all(build_filter(strategy, params))
        if strategy is Strategy.KEYWORD:
            recipes = _dedupe_by_id(recipes)

        discovery_requests_total.labels(strategy=strategy.value).inc()
        logger.debug(
            "Discovery completed",
            strategy=strategy.value,
            result_count=len(recipes),
        )
        return DiscoveryResult(strategy=strategy, recipes=recipes)
