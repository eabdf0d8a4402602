"""Application lifespan event handlers.

Startup builds the object graph behind the HTTP surface (database pool,
repositories, notifier, image store, background task tracker and the
engagement service) and stores it in ``app.state``. Shutdown drains pending
notifications before closing connections.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from recipe_engagement.auth.providers import (
    initialize_auth_provider,
    shutdown_auth_provider,
)
from recipe_engagement.core.config import Settings, get_settings
from recipe_engagement.database import (
    close_database_pool,
    ensure_schema,
    init_database_pool,
)
from recipe_engagement.database.repositories import (
    FavoriteRepository,
    RecipeRepository,
)
from recipe_engagement.observability.logging import get_logger, setup_logging
from recipe_engagement.services.engagement import (
    RecipeEngagementService,
    TaskTracker,
)
from recipe_engagement.services.images import ImageStore
from recipe_engagement.services.notifications import (
    FavoriteNotifier,
    LoggingDeliveryClient,
    NotificationClient,
)


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

    from recipe_engagement.services.notifications import DeliveryClient

logger = get_logger(__name__)

# Seconds to wait for in-flight notifications at shutdown
SHUTDOWN_DRAIN_TIMEOUT = 10.0


def _create_delivery_client(settings: Settings) -> DeliveryClient:
    if settings.notifications.url:
        return NotificationClient(
            settings.notifications.url,
            timeout=settings.notifications.timeout,
            token=settings.NOTIFICATION_SERVICE_TOKEN,
        )
    return LoggingDeliveryClient()


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize all application services during startup."""
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
        log_file=settings.logging.file,
    )
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    try:
        await initialize_auth_provider(settings)
        logger.info("Auth provider initialized", mode=settings.auth.mode)
    except Exception:
        logger.exception("Failed to initialize auth provider")
        raise

    pool = await init_database_pool(settings)
    if settings.database.create_schema:
        await ensure_schema(pool)

    recipes = RecipeRepository(pool)
    favorites = FavoriteRepository(pool)

    delivery_client = _create_delivery_client(settings)
    await delivery_client.initialize()
    app.state.delivery_client = delivery_client

    tasks = TaskTracker()
    app.state.task_tracker = tasks

    app.state.engagement_service = RecipeEngagementService(
        recipes=recipes,
        favorites=favorites,
        notifier=FavoriteNotifier(favorites, delivery_client),
        images=ImageStore.from_settings(settings),
        tasks=tasks,
        notify_on_update=settings.notifications.enabled,
        update_subject=settings.notifications.update_subject,
        update_body=settings.notifications.update_body,
    )

    logger.info("Application startup complete")


async def _shutdown(app: FastAPI) -> None:
    """Shutdown all application services."""
    logger.info("Shutting down application")

    tasks: TaskTracker | None = getattr(app.state, "task_tracker", None)
    if tasks is not None:
        await tasks.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)

    delivery_client: DeliveryClient | None = getattr(
        app.state, "delivery_client", None
    )
    if delivery_client is not None:
        await delivery_client.shutdown()

    app.state.engagement_service = None
    await close_database_pool()
    await shutdown_auth_provider()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Run startup, hand control to the application, then run shutdown."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    await _startup(app, settings)
    try:
        yield
    finally:
        await _shutdown(app)
