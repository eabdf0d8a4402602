"""Store Adapter exceptions.

Every failure raised by the database layer is a ``StoreError``. Callers can
tell constraint violations (bad data, will fail again) apart from
availability problems (the database could not be reached in time).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import asyncpg

from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger(__name__)


class StoreError(Exception):
    """Base exception for persistence failures."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.message = message
        self.operation = operation
        super().__init__(message)


class StoreConstraintError(StoreError):
    """Unique, not-null, foreign-key or check constraint violated."""


class StoreReferenceError(StoreConstraintError):
    """A foreign key points at a row that does not exist."""

    def __init__(
        self, message: str, operation: str | None = None, constraint: str | None = None
    ) -> None:
        self.constraint = constraint
        super().__init__(message, operation)

    def references(self, column: str) -> bool:
        """Whether the violated key is the one on ``column``, e.g. ``user_id``."""
        return bool(self.constraint) and self.constraint.endswith(f"_{column}_fkey")


class StoreUnavailableError(StoreError):
    """Connection lost, timed out, or pool not initialized."""


_UNAVAILABLE_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.InterfaceError,
    asyncpg.PostgresConnectionError,
    asyncpg.CannotConnectNowError,
    asyncpg.TooManyConnectionsError,
    OSError,
    TimeoutError,
)


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Re-raise asyncpg and socket failures as ``StoreError`` subclasses.

    Args:
        operation: Short name of the repository operation, for logging.
    """
    try:
        yield
    except StoreError:
        raise
    except asyncpg.ForeignKeyViolationError as e:
        constraint = getattr(e, "constraint_name", None)
        logger.info(
            "Store reference missing", operation=operation, constraint=constraint
        )
        raise StoreReferenceError(str(e), operation, constraint) from e
    except asyncpg.IntegrityConstraintViolationError as e:
        logger.warning(
            "Store constraint violated",
            operation=operation,
            constraint=getattr(e, "constraint_name", None),
        )
        raise StoreConstraintError(str(e), operation) from e
    except _UNAVAILABLE_ERRORS as e:
        logger.error("Store unavailable", operation=operation, error=str(e))
        raise StoreUnavailableError(str(e) or type(e).__name__, operation) from e
    except asyncpg.PostgresError as e:
        logger.error("Store operation failed", operation=operation, error=str(e))
        raise StoreError(str(e), operation) from e
