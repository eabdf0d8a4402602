"""Input models for the engagement service."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, BeforeValidator

from recipe_engagement.services.engagement.text import (
    normalize_whitespace,
    split_ingredients,
)


NormalizedText = Annotated[str, BeforeValidator(normalize_whitespace)]
IngredientList = Annotated[list[str], BeforeValidator(split_ingredients)]


class RecipeDraft(BaseModel):
    """Recipe fields supplied by a user on create or update.

    Whitespace runs are collapsed and ends trimmed on construction. Blank
    required fields are allowed here and rejected by the service so the
    caller gets a field-specific message.
    """

    name: NormalizedText = ""
    description: NormalizedText = ""
    ingredients: IngredientList = []
    direction: NormalizedText = ""
