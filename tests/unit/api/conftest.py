"""API unit test fixtures.

The application is built with ``create_app`` but the lifespan never runs:
the engagement service and the caller's identity are dependency overrides.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from recipe_engagement.api.dependencies import get_engagement_service
from recipe_engagement.auth.dependencies import CurrentUser, get_current_user
from recipe_engagement.core.config import get_settings
from recipe_engagement.factory import create_app


if TYPE_CHECKING:
    from fastapi import FastAPI

    from recipe_engagement.core.config import Settings


@pytest.fixture
def service() -> AsyncMock:
    """Stand-in for RecipeEngagementService."""
    return AsyncMock()


@pytest.fixture
def app(test_settings: Settings, service: AsyncMock) -> FastAPI:
    application = create_app(test_settings)
    application.dependency_overrides[get_settings] = lambda: test_settings
    application.dependency_overrides[get_engagement_service] = lambda: service
    application.dependency_overrides[get_current_user] = lambda: CurrentUser(id=2)
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)
