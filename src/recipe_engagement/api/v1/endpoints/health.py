"""Liveness and readiness checks.

``/health`` only proves the process answers. ``/ready`` also checks the
recipe database and answers 503 while it is unusable, so a load balancer
stops routing traffic to an instance that can only fail.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from recipe_engagement.core.config import Settings, get_settings
from recipe_engagement.database import check_database_health


router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    status: Literal["ready", "degraded"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str
    environment: str
    dependencies: dict[str, str] = Field(
        default_factory=dict,
        description="State of each backing service, e.g. database: healthy",
    )


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    return HealthResponse(version=settings.app.version, environment=settings.APP_ENV)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReadinessResponse:
    """Check the database; 503 with ``status: degraded`` when it is not healthy."""
    dependencies = await check_database_health()
    ready = all(state == "healthy" for state in dependencies.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies=dependencies,
    )
