"""Shared test fixtures for the Recipe Engagement service tests.

Provides test settings, in-memory repositories, and a fully wired
engagement service that needs neither a database nor a network.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest


# Select the test YAML overlay before any settings are loaded
os.environ.setdefault("APP_ENV", "test")

from recipe_engagement.core.config import Settings, get_settings
from recipe_engagement.database.repositories import OwnerSummary, RecipeRecord
from recipe_engagement.services.engagement import (
    RecipeEngagementService,
    TaskTracker,
)
from recipe_engagement.services.images import ImageStore
from recipe_engagement.services.notifications import FavoriteNotifier
from tests.fixtures.stores import (
    InMemoryFavoriteStore,
    InMemoryRecipeStore,
    RecordingDeliveryClient,
)


if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from pathlib import Path


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings for the test environment with uploads under ``tmp_path``."""
    return Settings(
        APP_ENV="test",
        JWT_SECRET_KEY="test-secret-key",
        uploads={"directory": str(tmp_path / "public")},
        observability={"metrics": {"enabled": False}},
    )


@pytest.fixture
def make_record() -> Callable[..., RecipeRecord]:
    """Build a ``RecipeRecord`` with sensible defaults."""

    def _make(**overrides: Any) -> RecipeRecord:
        stamp = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
        fields: dict[str, Any] = {
            "id": 1,
            "user_id": 1,
            "name": "Jollof Rice",
            "description": "Party rice",
            "ingredients": ["Rice", "Tomato", "Pepper"],
            "direction": "Cook the rice in the tomato base",
            "image_url": None,
            "upvotes": 0,
            "downvotes": 0,
            "view_count": 0,
            "created_at": stamp,
            "updated_at": stamp,
            "owner": OwnerSummary(name="Ada", updated_at=stamp),
        }
        fields.update(overrides)
        return RecipeRecord(**fields)

    return _make


@pytest.fixture
def recipe_store() -> InMemoryRecipeStore:
    store = InMemoryRecipeStore()
    store.add_user(1, "Ada", "ada@example.com")
    store.add_user(2, "Bola", "bola@example.com")
    store.add_user(3, "Chidi", "chidi@example.com")
    return store


@pytest.fixture
def favorite_store(recipe_store: InMemoryRecipeStore) -> InMemoryFavoriteStore:
    return InMemoryFavoriteStore(recipe_store)


@pytest.fixture
def delivery_client() -> RecordingDeliveryClient:
    return RecordingDeliveryClient()


@pytest.fixture
def image_store(tmp_path: Path) -> ImageStore:
    return ImageStore(tmp_path / "public", max_bytes=1024)


@pytest.fixture
async def task_tracker() -> AsyncIterator[TaskTracker]:
    tracker = TaskTracker()
    yield tracker
    await tracker.drain(timeout=1.0)


@pytest.fixture
def engagement_service(
    recipe_store: InMemoryRecipeStore,
    favorite_store: InMemoryFavoriteStore,
    delivery_client: RecordingDeliveryClient,
    image_store: ImageStore,
    task_tracker: TaskTracker,
) -> RecipeEngagementService:
    """Engagement service over the in-memory stores."""
    return RecipeEngagementService(
        recipes=recipe_store,
        favorites=favorite_store,
        notifier=FavoriteNotifier(favorite_store, delivery_client),
        images=image_store,
        tasks=task_tracker,
    )
