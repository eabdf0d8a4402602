"""Recipe endpoints.

Provides:
- GET /recipes for discovery (sort, ingredient, name and keyword search)
- GET /recipes/{recipe_id} for a single recipe, counting the view
- POST /recipes and PUT /recipes/{recipe_id} (multipart, optional image)
- DELETE /recipes/{recipe_id}
- POST /recipes/{recipe_id}/upvotes and /downvotes
- GET /myrecipes for the caller's own recipes

Status codes follow the established client contract: 201 for any
successful read or write, 205 (no body) for a delete, and 404 with ``success: true``
when a listing is empty.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status
from fastapi.responses import ORJSONResponse, Response

from recipe_engagement.api.dependencies import EngagementServiceDep
from recipe_engagement.api.errors import engagement_errors
from recipe_engagement.auth import CurrentUserDep
from recipe_engagement.core.config import Settings, get_settings
from recipe_engagement.observability.logging import get_logger
from recipe_engagement.schemas import (
    MessageResponse,
    RecipeListResponse,
    RecipeOut,
    RecipeResponse,
)
from recipe_engagement.services.engagement import (
    DiscoveryParams,
    RecipeDraft,
    VoteDirection,
)
from recipe_engagement.services.images import ImageUpload


if TYPE_CHECKING:
    from recipe_engagement.database.repositories import RecipeRecord
    from recipe_engagement.services.engagement import RecipeEngagementService

logger = get_logger(__name__)

router = APIRouter(tags=["Recipes"])

RecipeId = Annotated[int, Path(description="Recipe identifier")]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def list_response(
    records: list[RecipeRecord], *, found: str, empty: str
) -> ORJSONResponse:
    """201 with the recipes, or 404 (still ``success: true``) when empty."""
    if records:
        body = RecipeListResponse.from_records(records, message=found)
        code = status.HTTP_201_CREATED
    else:
        body = RecipeListResponse(message=empty)
        code = status.HTTP_404_NOT_FOUND
    return ORJSONResponse(status_code=code, content=body.model_dump(mode="json"))


def _ingredients_input(values: list[str] | None) -> str | list[str] | None:
    # One form field holds one ingredient per line; repeated fields are one each
    if values and len(values) == 1:
        return values[0]
    return values


async def _read_upload(image: UploadFile | None, max_bytes: int) -> ImageUpload | None:
    if image is None or not image.filename:
        return None
    # One byte past the limit is enough to reject oversize files
    content = await image.read(max_bytes + 1)
    return ImageUpload(filename=image.filename, content=content)


def _draft(
    name: str | None,
    description: str | None,
    ingredients: list[str] | None,
    direction: str | None,
) -> RecipeDraft:
    return RecipeDraft(
        name=name,
        description=description,
        ingredients=_ingredients_input(ingredients),
        direction=direction,
    )


# =============================================================================
# Reads
# =============================================================================


@router.get(
    "/recipes",
    response_model=RecipeListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Discover recipes",
    description=(
        "Returns recipes selected by the first matching parameter: "
        "sort=upvotes&order=descending, ingredients, recipes (name), "
        "search (name, ingredients or description), otherwise all recipes."
    ),
    responses={
        404: {"description": "No recipes matched", "model": RecipeListResponse},
        500: {"description": "Unable to fetch recipes", "model": MessageResponse},
    },
)
async def discover_recipes(
    service: EngagementServiceDep,
    sort: Annotated[str | None, Query()] = None,
    order: Annotated[str | None, Query()] = None,
    ingredients: Annotated[str | None, Query()] = None,
    recipes: Annotated[str | None, Query()] = None,
    search: Annotated[str | None, Query()] = None,
) -> ORJSONResponse:
    params = DiscoveryParams(
        sort=sort,
        order=order,
        ingredients=ingredients,
        recipes=recipes,
        search=search,
    )
    with engagement_errors("Unable to fetch recipes"):
        result = await service.discover(params)

    return list_response(
        result.recipes, found="Recipes found", empty="No Stored Recipes found"
    )


@router.get(
    "/recipes/{recipe_id}",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Get a recipe",
    description="Returns one recipe and counts the view.",
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
async def get_recipe(
    recipe_id: RecipeId,
    service: EngagementServiceDep,
) -> RecipeResponse:
    with engagement_errors("Unable to fetch recipes"):
        record = await service.get_recipe(recipe_id)
    return RecipeResponse(message="Recipe found", recipe=RecipeOut.from_record(record))


@router.get(
    "/myrecipes",
    response_model=RecipeListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List the caller's recipes",
    responses={
        401: {"model": MessageResponse},
        404: {"model": RecipeListResponse},
        500: {"model": MessageResponse},
    },
)
async def list_my_recipes(
    user: CurrentUserDep,
    service: EngagementServiceDep,
) -> ORJSONResponse:
    with engagement_errors("Unable to get user recipes"):
        records = await service.list_user_recipes(user.id)

    return list_response(
        records, found="User Recipes found", empty="No User Stored Recipes found"
    )


# =============================================================================
# Lifecycle
# =============================================================================


@router.post(
    "/recipes",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a recipe",
    description=(
        "Multipart form with name, description, ingredients (one per line "
        "or repeated) and direction, plus an optional jpg/jpeg/png image."
    ),
    responses={
        400: {"description": "Image rejected", "model": MessageResponse},
        401: {"model": MessageResponse},
        403: {"description": "Missing required field", "model": MessageResponse},
        500: {"model": MessageResponse},
        503: {"model": MessageResponse},
    },
)
async def create_recipe(
    user: CurrentUserDep,
    service: EngagementServiceDep,
    settings: SettingsDep,
    name: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    ingredients: Annotated[list[str] | None, Form()] = None,
    direction: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> RecipeResponse:
    draft = _draft(name, description, ingredients, direction)
    upload = await _read_upload(image, settings.uploads.max_bytes)

    with engagement_errors("Error Creating Recipe"):
        record = await service.create_recipe(user.id, draft, upload)

    return RecipeResponse(
        message="New Recipe created", recipe=RecipeOut.from_record(record)
    )


@router.put(
    "/recipes/{recipe_id}",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Modify a recipe",
    description="Only the recipe's creator may modify it. Favoriters are notified.",
    responses={
        400: {"description": "Image rejected", "model": MessageResponse},
        401: {"description": "Not the recipe's creator", "model": MessageResponse},
        403: {"description": "Missing required field", "model": MessageResponse},
        404: {"model": MessageResponse},
        500: {"model": MessageResponse},
        503: {"model": MessageResponse},
    },
)
async def update_recipe(
    recipe_id: RecipeId,
    user: CurrentUserDep,
    service: EngagementServiceDep,
    settings: SettingsDep,
    name: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    ingredients: Annotated[list[str] | None, Form()] = None,
    direction: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> RecipeResponse:
    draft = _draft(name, description, ingredients, direction)
    upload = await _read_upload(image, settings.uploads.max_bytes)

    with engagement_errors("Error Modifying Recipe"):
        record = await service.update_recipe(user.id, recipe_id, draft, upload)

    return RecipeResponse(
        message="Recipe record updated", recipe=RecipeOut.from_record(record)
    )


@router.delete(
    "/recipes/{recipe_id}",
    status_code=status.HTTP_205_RESET_CONTENT,
    response_class=Response,
    summary="Delete a recipe",
    description="Only the recipe's creator may delete it. 205 carries no body.",
    responses={
        401: {"description": "Not the recipe's creator", "model": MessageResponse},
        404: {"model": MessageResponse},
        500: {"model": MessageResponse},
        503: {"model": MessageResponse},
    },
)
async def delete_recipe(
    recipe_id: RecipeId,
    user: CurrentUserDep,
    service: EngagementServiceDep,
) -> Response:
    with engagement_errors("Error Deleting Recipe"):
        await service.delete_recipe(user.id, recipe_id)
    return Response(status_code=status.HTTP_205_RESET_CONTENT)


# =============================================================================
# Votes
# =============================================================================


_VOTE_MESSAGES = {
    VoteDirection.UP: "Recipe upvoted",
    VoteDirection.DOWN: "Recipe downvoted",
}


async def _vote(
    service: RecipeEngagementService, recipe_id: int, direction: VoteDirection
) -> RecipeResponse:
    with engagement_errors("Error Voting Recipe"):
        record = await service.vote(recipe_id, direction)
    return RecipeResponse(
        message=_VOTE_MESSAGES[direction],
        recipe=RecipeOut.from_record(record),
    )


@router.post(
    "/recipes/{recipe_id}/upvotes",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upvote a recipe",
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
async def upvote_recipe(
    recipe_id: RecipeId,
    user: CurrentUserDep,
    service: EngagementServiceDep,
) -> RecipeResponse:
    logger.debug("Upvote requested", recipe_id=recipe_id, user_id=user.id)
    return await _vote(service, recipe_id, VoteDirection.UP)


@router.post(
    "/recipes/{recipe_id}/downvotes",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Downvote a recipe",
    responses={404: {"model": MessageResponse}, 500: {"model": MessageResponse}},
)
async def downvote_recipe(
    recipe_id: RecipeId,
    user: CurrentUserDep,
    service: EngagementServiceDep,
) -> RecipeResponse:
    logger.debug("Downvote requested", recipe_id=recipe_id, user_id=user.id)
    return await _vote(service, recipe_id, VoteDirection.DOWN)
