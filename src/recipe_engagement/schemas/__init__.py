"""Response bodies of the recipe API."""

from recipe_engagement.schemas.base import CamelModel, MessageResponse
from recipe_engagement.schemas.recipe import (
    RecipeListResponse,
    RecipeOut,
    RecipeOwner,
    RecipeResponse,
)


__all__ = [
    "CamelModel",
    "MessageResponse",
    "RecipeListResponse",
    "RecipeOut",
    "RecipeOwner",
    "RecipeResponse",
]
