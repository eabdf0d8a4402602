"""Version 1 of the recipe API, mounted at ``api.v1_prefix``."""

from __future__ import annotations

from fastapi import APIRouter

from recipe_engagement.api.v1.endpoints import favorites, health, recipes


router = APIRouter()

for endpoint_module in (health, recipes, favorites):
    router.include_router(endpoint_module.router)
