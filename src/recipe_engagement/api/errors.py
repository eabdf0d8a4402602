"""Translation of service exceptions into HTTP exceptions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from recipe_engagement.core.exceptions import (
    BadRequestException,
    InternalErrorException,
    NotFoundException,
    ServiceUnavailableException,
    UnauthorizedException,
    ValidationFailedException,
)
from recipe_engagement.database import StoreError, StoreUnavailableError
from recipe_engagement.observability.logging import get_logger
from recipe_engagement.services.engagement.exceptions import (
    RecipeNotFoundError,
    RecipeOwnershipError,
    RecipeValidationError,
    UserNotFoundError,
)
from recipe_engagement.services.images import ImageRejectedError


if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger(__name__)


@contextmanager
def engagement_errors(store_message: str) -> Iterator[None]:
    """Map domain errors raised inside the block to status codes.

    Args:
        store_message: Fixed message returned when persistence fails.
    """
    try:
        yield
    except RecipeValidationError as e:
        raise ValidationFailedException(e.message) from None
    except ImageRejectedError as e:
        raise BadRequestException(str(e)) from None
    except (RecipeNotFoundError, UserNotFoundError) as e:
        raise NotFoundException(e.message) from None
    except RecipeOwnershipError as e:
        raise UnauthorizedException(e.message) from None
    except StoreUnavailableError as e:
        logger.error("Store unavailable", operation=e.operation, reply=store_message)
        raise ServiceUnavailableException() from None
    except StoreError as e:
        logger.error("Store failure", operation=e.operation, reply=store_message)
        raise InternalErrorException(store_message) from None
