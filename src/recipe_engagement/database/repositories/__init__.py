"""Database repositories."""

from recipe_engagement.database.repositories.favorites import FavoriteRepository
from recipe_engagement.database.repositories.recipes import (
    MatchMode,
    OwnerSummary,
    RecipeFilter,
    RecipeOrdering,
    RecipeRecord,
    RecipeRepository,
    TextMatch,
)


__all__ = [
    "FavoriteRepository",
    "MatchMode",
    "OwnerSummary",
    "RecipeFilter",
    "RecipeOrdering",
    "RecipeRecord",
    "RecipeRepository",
    "TextMatch",
]
