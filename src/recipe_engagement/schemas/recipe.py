"""Recipe response schemas.

Every body carries ``success`` and ``message``. Recipes are camelCase with
the owner's public attributes nested under ``User``.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import Field

from recipe_engagement.schemas.base import CamelModel, MessageResponse


if TYPE_CHECKING:
    from recipe_engagement.database.repositories import RecipeRecord


class RecipeOwner(CamelModel):
    """Owner attributes shown alongside a recipe."""

    name: str
    updated_at: datetime


class RecipeOut(CamelModel):
    """A recipe as returned to clients."""

    id: int
    user_id: int
    name: str
    description: str | None = None
    ingredients: list[str]
    direction: str
    image_url: str | None = None
    upvotes: int
    downvotes: int
    view_count: int
    created_at: datetime
    updated_at: datetime
    user: RecipeOwner | None = Field(default=None, alias="User")

    @classmethod
    def from_record(cls, record: RecipeRecord) -> RecipeOut:
        owner = None
        if record.owner is not None:
            owner = RecipeOwner(
                name=record.owner.name, updated_at=record.owner.updated_at
            )
        return cls(
            id=record.id,
            user_id=record.user_id,
            name=record.name,
            description=record.description,
            ingredients=record.ingredients,
            direction=record.direction,
            image_url=record.image_url,
            upvotes=record.upvotes,
            downvotes=record.downvotes,
            view_count=record.view_count,
            created_at=record.created_at,
            updated_at=record.updated_at,
            user=owner,
        )


class RecipeResponse(MessageResponse):
    """Envelope around one recipe."""

    recipe: RecipeOut


class RecipeListResponse(MessageResponse):
    """Envelope around a list of recipes; empty lists are still successful."""

    recipe: list[RecipeOut] = []

    @classmethod
    def from_records(
        cls, records: list[RecipeRecord], *, message: str
    ) -> RecipeListResponse:
        return cls(message=message, recipe=[RecipeOut.from_record(r) for r in records])
