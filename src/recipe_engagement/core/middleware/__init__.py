"""Request ID and access-log middleware, added by ``create_app``."""

from recipe_engagement.core.middleware.logging import LoggingMiddleware
from recipe_engagement.core.middleware.request_id import (
    RequestIDMiddleware,
    resolve_request_id,
)


__all__ = ["LoggingMiddleware", "RequestIDMiddleware", "resolve_request_id"]
