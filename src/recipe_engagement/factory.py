"""Builds the FastAPI application.

``create_app`` wires the pieces together: exception handlers that produce
the ``{success, message}`` envelope, the middleware stack, the v1 routes
and, when enabled, Prometheus instrumentation. Startup and shutdown work
(database pool, auth provider, notification client) lives in the lifespan.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from recipe_engagement.api.v1.router import router as v1_router
from recipe_engagement.core.config import Settings, get_settings
from recipe_engagement.core.events import lifespan
from recipe_engagement.core.exceptions import setup_exception_handlers
from recipe_engagement.core.middleware import LoggingMiddleware, RequestIDMiddleware
from recipe_engagement.observability.metrics import setup_metrics


def create_app(settings: Settings | None = None) -> FastAPI:
    """Return a configured application; ``settings`` defaults to ``get_settings()``.

    Interactive docs are only served in development.
    """
    settings = settings or get_settings()
    docs = settings.is_development

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Recipe discovery, voting, favorites and change notifications",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        debug=settings.app.debug,
    )
    app.state.settings = settings

    setup_exception_handlers(app)
    _add_middleware(app, settings)
    app.include_router(v1_router, prefix=settings.api.v1_prefix)
    setup_metrics(app, settings)
    return app


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    # Added innermost first: requests pass RequestID, then Logging, then CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=[
                "Authorization",
                "Content-Type",
                "X-Request-ID",
                settings.auth.user_id_header,
            ],
            expose_headers=["X-Request-ID"],
        )

    prefix = settings.api.v1_prefix
    quiet = {f"{prefix}/{name}" for name in ("health", "ready", "metrics")}
    app.add_middleware(LoggingMiddleware, exclude_paths=quiet | {"/favicon.ico"})
    app.add_middleware(RequestIDMiddleware)
