"""FastAPI dependencies for service access.

Services are created during application startup and stored in app.state.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from recipe_engagement.core.exceptions import ServiceUnavailableException
from recipe_engagement.services.engagement import RecipeEngagementService


async def get_engagement_service(request: Request) -> RecipeEngagementService:
    """Get the engagement service from app state.

    Raises:
        ServiceUnavailableException: 503 if the service is not initialized.
    """
    service: RecipeEngagementService | None = getattr(
        request.app.state, "engagement_service", None
    )
    if service is None:
        raise ServiceUnavailableException("Recipe service not available")
    return service


EngagementServiceDep = Annotated[
    RecipeEngagementService, Depends(get_engagement_service)
]
