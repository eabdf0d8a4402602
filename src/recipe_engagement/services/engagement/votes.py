"""Vote tally.

Votes are applied with the repository's single-statement increment, never
read-modify-write, so N concurrent votes always add exactly N. Votes are not
deduplicated per user.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from recipe_engagement.observability.logging import get_logger
from recipe_engagement.observability.metrics import votes_total
from recipe_engagement.services.engagement.exceptions import RecipeNotFoundError


if TYPE_CHECKING:
    from recipe_engagement.database.repositories import RecipeRepository

logger = get_logger(__name__)


class VoteDirection(StrEnum):
    """Vote direction."""

    UP = "up"
    DOWN = "down"

    @property
    def column(self) -> str:
        return "upvotes" if self is VoteDirection.UP else "downvotes"


@dataclass(frozen=True)
class VoteCounts:
    """Counter pair after a vote was applied."""

    upvotes: int
    downvotes: int


class VoteTally:
    """Apply up/down votes to recipes."""

    def __init__(self, recipes: RecipeRepository) -> None:
        self._recipes = recipes

    async def apply_vote(
        self, recipe_id: int, direction: VoteDirection | str
    ) -> VoteCounts:
        """Increment the counter for ``direction`` on ``recipe_id``.

        Args:
            recipe_id: Recipe to vote on.
            direction: ``"up"`` or ``"down"``.

        Returns:
            The post-increment counters.

        Raises:
            RecipeNotFoundError: If the recipe does not exist.
            ValueError: If ``direction`` is not a known direction.
        """
        direction = VoteDirection(direction)

        # UPDATE ... RETURNING yields no row when the recipe is absent
        record = await self._recipes.increment(recipe_id, direction.column)
        if record is None:
            msg = "Recipe not found"
            raise RecipeNotFoundError(msg, recipe_id)

        votes_total.labels(direction=direction.value).inc()
        logger.info(
            "Vote applied",
            recipe_id=recipe_id,
            direction=direction.value,
            upvotes=record.upvotes,
            downvotes=record.downvotes,
        )
        return VoteCounts(upvotes=record.upvotes, downvotes=record.downvotes)
