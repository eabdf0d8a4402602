"""Recipe engagement service.

Single entry point for the HTTP layer: discovery, recipe lifecycle, voting
and favorites. Validation and ownership checks happen before any write.
File cleanup and favoriter notification run only after the write succeeded.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import TYPE_CHECKING

from recipe_engagement.database import StoreReferenceError
from recipe_engagement.database.repositories import RecipeFilter
from recipe_engagement.observability.logging import get_logger
from recipe_engagement.services.engagement.constants import REQUIRED_FIELD_MESSAGES
from recipe_engagement.services.engagement.discovery import RecipeDiscovery
from recipe_engagement.services.engagement.exceptions import (
    RecipeNotFoundError,
    RecipeOwnershipError,
    RecipeValidationError,
    UserNotFoundError,
)
from recipe_engagement.services.engagement.hooks import PostCommitHooks, TaskTracker
from recipe_engagement.services.engagement.votes import VoteDirection, VoteTally


if TYPE_CHECKING:
    from collections.abc import Iterator

    from recipe_engagement.database.repositories import (
        FavoriteRepository,
        RecipeRecord,
        RecipeRepository,
    )
    from recipe_engagement.services.engagement.discovery import (
        DiscoveryParams,
        DiscoveryResult,
    )
    from recipe_engagement.services.engagement.schemas import RecipeDraft
    from recipe_engagement.services.images import ImageStore, ImageUpload
    from recipe_engagement.services.notifications import FavoriteNotifier

logger = get_logger(__name__)


def _not_found(recipe_id: int) -> RecipeNotFoundError:
    return RecipeNotFoundError(f"No matching recipe with id: {recipe_id}", recipe_id)


@contextmanager
def _missing_references(user_id: int, recipe_id: int | None = None) -> Iterator[None]:
    """Turn a dangling user or recipe foreign key into the matching not-found."""
    try:
        yield
    except StoreReferenceError as e:
        if e.references("user_id"):
            raise UserNotFoundError(user_id) from e
        if recipe_id is not None and e.references("recipe_id"):
            raise _not_found(recipe_id) from e
        raise


class RecipeEngagementService:
    """Facade over the repositories, vote tally, discovery and notifier.

    Example:
        ```python
        service = RecipeEngagementService(
            recipes=RecipeRepository(),
            favorites=FavoriteRepository(),
            notifier=FavoriteNotifier(favorites, LoggingDeliveryClient()),
            images=ImageStore("client/public"),
            tasks=TaskTracker(),
        )
        recipe = await service.get_recipe(5)
        ```
    """

    def __init__(
        self,
        *,
        recipes: RecipeRepository,
        favorites: FavoriteRepository,
        notifier: FavoriteNotifier,
        images: ImageStore,
        tasks: TaskTracker,
        notify_on_update: bool = True,
        update_subject: str = "Favorite Recipe Modified",
        update_body: str = "One of your favorite recipes has been modified",
    ) -> None:
        self._recipes = recipes
        self._favorites = favorites
        self._notifier = notifier
        self._images = images
        self._tasks = tasks
        self._notify_on_update = notify_on_update
        self._update_subject = update_subject
        self._update_body = update_body
        self._discovery = RecipeDiscovery(recipes)
        self._votes = VoteTally(recipes)

    # =========================================================================
    # Reads
    # =========================================================================

    async def discover(self, params: DiscoveryParams) -> DiscoveryResult:
        return await self._discovery.discover(params)

    async def list_user_recipes(self, user_id: int) -> list[RecipeRecord]:
        return await self._recipes.find_all(RecipeFilter(equals={"user_id": user_id}))

    async def get_recipe(self, recipe_id: int) -> RecipeRecord:
        """Count a view and return the recipe as stored afterwards.

        Raises:
            RecipeNotFoundError: If the recipe does not exist.
        """
        if await self._recipes.increment(recipe_id, "view_count") is None:
            raise _not_found(recipe_id)
        return await self._reload(recipe_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def create_recipe(
        self,
        requester_id: int,
        draft: RecipeDraft,
        image: ImageUpload | None = None,
    ) -> RecipeRecord:
        """Validate and store a new recipe owned by ``requester_id``.

        Raises:
            RecipeValidationError: If a required field is blank.
            ImageRejectedError: If the image is not an acceptable upload.
            UserNotFoundError: If ``requester_id`` has no account.
            StoreError: If the insert fails; a saved image is removed again.
        """
        self._validate(draft)

        async with PostCommitHooks() as hooks:
            image_url = None
            if image is not None:
                image_url = await self._images.save(image)
                hooks.after_rollback(
                    partial(self._images.delete, image_url), name="remove_upload"
                )

            with _missing_references(requester_id):
                record = await self._recipes.create(
                    {
                        "user_id": requester_id,
                        "name": draft.name,
                        "description": draft.description,
                        "ingredients": draft.ingredients,
                        "direction": draft.direction,
                        "image_url": image_url,
                    }
                )

        return record

    async def update_recipe(
        self,
        requester_id: int,
        recipe_id: int,
        draft: RecipeDraft,
        image: ImageUpload | None = None,
    ) -> RecipeRecord:
        """Overwrite a recipe's fields; only its owner may do so.

        A new image replaces the old one, which is deleted once the update is
        stored. Favoriters are notified in the background afterwards.

        Raises:
            RecipeValidationError: If a required field is blank.
            RecipeNotFoundError: If the recipe does not exist.
            RecipeOwnershipError: If ``requester_id`` is not the owner.
            ImageRejectedError: If the image is not an acceptable upload.
            StoreError: If the update fails; a saved image is removed again.
        """
        self._validate(draft)
        existing = await self._require_owned(
            requester_id,
            recipe_id,
            "You cannot modify a recipe not created by You!",
        )

        async with PostCommitHooks() as hooks:
            fields = {
                "name": draft.name,
                "description": draft.description,
                "ingredients": draft.ingredients,
                "direction": draft.direction,
            }
            if image is not None:
                fields["image_url"] = await self._images.save(image)
                hooks.after_rollback(
                    partial(self._images.delete, fields["image_url"]),
                    name="remove_upload",
                )

            updated = await self._recipes.update(recipe_id, fields)
            if updated is None:
                # Deleted between the ownership check and the update
                raise _not_found(recipe_id)

            if image is not None and existing.image_url:
                hooks.after_commit(
                    partial(self._images.delete, existing.image_url),
                    name="remove_replaced_image",
                )
            if self._notify_on_update:
                hooks.after_commit(
                    partial(self._schedule_update_notification, recipe_id),
                    name="notify_favoriters",
                )

        logger.info("Recipe updated", recipe_id=recipe_id, user_id=requester_id)
        return updated

    async def delete_recipe(self, requester_id: int, recipe_id: int) -> None:
        """Delete a recipe and, once deleted, its image.

        Raises:
            RecipeNotFoundError: If the recipe does not exist.
            RecipeOwnershipError: If ``requester_id`` is not the owner.
            StoreError: If the delete fails.
        """
        existing = await self._require_owned(
            requester_id, recipe_id, "You cannot delete this recipe"
        )

        async with PostCommitHooks() as hooks:
            if not await self._recipes.destroy(recipe_id):
                raise _not_found(recipe_id)
            if existing.image_url:
                hooks.after_commit(
                    partial(self._images.delete, existing.image_url),
                    name="remove_image",
                )

        logger.info("Recipe deleted", recipe_id=recipe_id, user_id=requester_id)

    # =========================================================================
    # Engagement
    # =========================================================================

    async def vote(
        self, recipe_id: int, direction: VoteDirection | str
    ) -> RecipeRecord:
        """Apply a vote and return the recipe with its committed counters."""
        await self._votes.apply_vote(recipe_id, direction)
        return await self._reload(recipe_id)

    async def add_favorite(self, user_id: int, recipe_id: int) -> RecipeRecord:
        """Favorite a recipe; favoriting twice is a no-op.

        Raises:
            RecipeNotFoundError: If the recipe does not exist.
            UserNotFoundError: If ``user_id`` has no account.
        """
        recipe = await self._recipes.find_by_id(recipe_id)
        if recipe is None:
            raise _not_found(recipe_id)
        with _missing_references(user_id, recipe_id):
            await self._favorites.add(user_id, recipe_id)
        return recipe

    async def remove_favorite(self, user_id: int, recipe_id: int) -> None:
        """Unfavorite a recipe.

        Raises:
            RecipeNotFoundError: If the recipe was not a favorite of the user.
        """
        if not await self._favorites.remove(user_id, recipe_id):
            raise _not_found(recipe_id)

    async def list_favorites(self, user_id: int) -> list[RecipeRecord]:
        return await self._favorites.find_recipes_for_user(user_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _validate(draft: RecipeDraft) -> None:
        for field, message in REQUIRED_FIELD_MESSAGES.items():
            if not getattr(draft, field):
                raise RecipeValidationError(message, field)

    async def _require_owned(
        self, requester_id: int, recipe_id: int, message: str
    ) -> RecipeRecord:
        recipe = await self._recipes.find_by_id(recipe_id, include_owner=False)
        if recipe is None:
            raise _not_found(recipe_id)
        if recipe.user_id != requester_id:
            logger.info(
                "Ownership check failed",
                recipe_id=recipe_id,
                owner_id=recipe.user_id,
                requester_id=requester_id,
            )
            raise RecipeOwnershipError(message, recipe_id)
        return recipe

    async def _reload(self, recipe_id: int) -> RecipeRecord:
        recipe = await self._recipes.find_by_id(recipe_id)
        if recipe is None:
            raise _not_found(recipe_id)
        return recipe

    async def _schedule_update_notification(self, recipe_id: int) -> None:
        self._tasks.spawn(
            self._notifier.notify_favoriters(
                recipe_id, self._update_subject, self._update_body
            ),
            name=f"notify-favoriters-{recipe_id}",
        )
