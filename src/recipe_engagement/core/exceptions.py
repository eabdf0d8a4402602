"""HTTP-facing exceptions and exception handlers.

Every error response uses the same envelope as successful ones:
``{"success": false, "message": "..."}``. Messages are fixed and
human-readable; internal error detail is logged, never returned.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from recipe_engagement.observability.logging import get_logger
from recipe_engagement.schemas.base import MessageResponse


if TYPE_CHECKING:
    from fastapi import Request

logger = get_logger(__name__)


class AppException(Exception):
    """Base application exception.

    Raised by endpoint handlers once a domain error has been mapped to the
    status code and message the client should see.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class BadRequestException(AppException):
    """Malformed upload or request payload (400)."""

    def __init__(self, message: str) -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, message)


class UnauthorizedException(AppException):
    """Missing identity or ownership mismatch (401)."""

    def __init__(self, message: str = "Could not validate credentials") -> None:
        super().__init__(status.HTTP_401_UNAUTHORIZED, message)


class ValidationFailedException(AppException):
    """Missing or malformed input (403)."""

    def __init__(self, message: str) -> None:
        super().__init__(status.HTTP_403_FORBIDDEN, message)


class NotFoundException(AppException):
    """Referenced resource is absent (404)."""

    def __init__(self, message: str) -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, message)


class InternalErrorException(AppException):
    """Persistence failure (500)."""

    def __init__(self, message: str) -> None:
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class ServiceUnavailableException(AppException):
    """Persistence layer unreachable (503)."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, message)


def _error(status_code: int, message: str) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content=MessageResponse(success=False, message=message).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        _request: Request,
        exc: AppException,
    ) -> ORJSONResponse:
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request,
        exc: StarletteHTTPException,
    ) -> ORJSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> ORJSONResponse:
        """Schema validation failures share the 403 used for field validation."""
        errors = exc.errors()
        logger.info(
            "Request validation failed",
            path=request.url.path,
            fields=[".".join(str(loc) for loc in e["loc"]) for e in errors],
        )
        first = errors[0] if errors else None
        if first is not None and first.get("loc"):
            field = str(first["loc"][-1])
            message = f"Invalid value for {field}!"
        else:
            message = "Invalid request!"
        return _error(status.HTTP_403_FORBIDDEN, message)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> ORJSONResponse:
        logger.opt(exception=exc).error(
            "Unhandled exception", path=request.url.path
        )
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred"
        )
