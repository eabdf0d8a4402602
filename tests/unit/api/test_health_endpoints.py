"""Unit tests for health check endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Response

from recipe_engagement.api.v1.endpoints.health import health_check, readiness_check


if TYPE_CHECKING:
    from fastapi.testclient import TestClient


pytestmark = pytest.mark.unit


@pytest.fixture
def response() -> Response:
    return Response(status_code=200)


@pytest.fixture
def settings() -> MagicMock:
    settings = MagicMock()
    settings.app.version = "1.0.0"
    settings.APP_ENV = "test"
    return settings


class TestHealthCheck:
    """Tests for the liveness check."""

    async def test_returns_healthy(self, settings: MagicMock) -> None:
        """Should report healthy with version and environment."""
        result = await health_check(settings)

        assert result.status == "healthy"
        assert result.version == "1.0.0"
        assert result.environment == "test"
        assert result.timestamp is not None


class TestReadinessCheck:
    """Tests for the readiness check."""

    async def test_ready_when_database_healthy(
        self, settings: MagicMock, response: Response
    ) -> None:
        """Should report ready when every dependency is healthy."""
        with patch(
            "recipe_engagement.api.v1.endpoints.health.check_database_health",
            new=AsyncMock(return_value={"database": "healthy"}),
        ):
            result = await readiness_check(response, settings)

        assert result.status == "ready"
        assert response.status_code == 200
        assert result.dependencies == {"database": "healthy"}

    @pytest.mark.parametrize("state", ["unhealthy", "not_initialized"])
    async def test_degraded_otherwise(
        self, settings: MagicMock, response: Response, state: str
    ) -> None:
        """Should report degraded with 503 when the database is not usable."""
        with patch(
            "recipe_engagement.api.v1.endpoints.health.check_database_health",
            new=AsyncMock(return_value={"database": state}),
        ):
            result = await readiness_check(response, settings)

        assert result.status == "degraded"
        assert response.status_code == 503
        assert result.dependencies == {"database": state}


class TestHealthRoutes:
    """Tests for the routes as mounted by the application."""

    def test_health_route(self, client: TestClient) -> None:
        """Should serve the liveness check under the API prefix."""
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers

    def test_ready_route_degraded(self, client: TestClient) -> None:
        """Should answer 503 while the database is unavailable."""
        with patch(
            "recipe_engagement.api.v1.endpoints.health.check_database_health",
            new=AsyncMock(return_value={"database": "not_initialized"}),
        ):
            response = client.get("/api/v1/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
