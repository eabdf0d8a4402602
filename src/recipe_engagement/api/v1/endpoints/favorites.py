"""Favorite endpoints.

Provides:
- POST /recipes/{recipe_id}/favorites to favorite a recipe (idempotent)
- DELETE /recipes/{recipe_id}/favorites to unfavorite it
- GET /favorites for the caller's favorite recipes
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Path, status
from fastapi.responses import ORJSONResponse, Response

from recipe_engagement.api.dependencies import EngagementServiceDep
from recipe_engagement.api.errors import engagement_errors
from recipe_engagement.api.v1.endpoints.recipes import list_response
from recipe_engagement.auth import CurrentUserDep
from recipe_engagement.schemas import (
    MessageResponse,
    RecipeListResponse,
    RecipeOut,
    RecipeResponse,
)


router = APIRouter(tags=["Favorites"])

RecipeId = Annotated[int, Path(description="Recipe identifier")]


@router.post(
    "/recipes/{recipe_id}/favorites",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Favorite a recipe",
    responses={
        401: {"model": MessageResponse},
        404: {"model": MessageResponse},
        500: {"model": MessageResponse},
    },
)
async def add_favorite(
    recipe_id: RecipeId,
    user: CurrentUserDep,
    service: EngagementServiceDep,
) -> RecipeResponse:
    with engagement_errors("Error Adding Favorite"):
        record = await service.add_favorite(user.id, recipe_id)
    return RecipeResponse(
        message="Recipe added to favorites", recipe=RecipeOut.from_record(record)
    )


@router.delete(
    "/recipes/{recipe_id}/favorites",
    status_code=status.HTTP_205_RESET_CONTENT,
    response_class=Response,
    summary="Unfavorite a recipe",
    responses={
        401: {"model": MessageResponse},
        404: {"model": MessageResponse},
        500: {"model": MessageResponse},
    },
)
async def remove_favorite(
    recipe_id: RecipeId,
    user: CurrentUserDep,
    service: EngagementServiceDep,
) -> Response:
    with engagement_errors("Error Removing Favorite"):
        await service.remove_favorite(user.id, recipe_id)
    return Response(status_code=status.HTTP_205_RESET_CONTENT)


@router.get(
    "/favorites",
    response_model=RecipeListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List the caller's favorite recipes",
    responses={
        401: {"model": MessageResponse},
        404: {"model": RecipeListResponse},
        500: {"model": MessageResponse},
    },
)
async def list_favorites(
    user: CurrentUserDep,
    service: EngagementServiceDep,
) -> ORJSONResponse:
    with engagement_errors("Unable to get favorite recipes"):
        records = await service.list_favorites(user.id)

    return list_response(
        records, found="Favorite Recipes found", empty="No Favorite Recipes found"
    )
