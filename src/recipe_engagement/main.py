"""ASGI entry point.

``uvicorn recipe_engagement.main:app`` serves the API; running this module
directly starts uvicorn with the host, port and log level from settings
(auto-reload in development).
"""

from recipe_engagement.core.config import get_settings
from recipe_engagement.factory import create_app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "recipe_engagement.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
        # Request logging is done by LoggingMiddleware
        access_log=False,
    )


if __name__ == "__main__":
    run()
