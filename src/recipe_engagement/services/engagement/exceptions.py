"""Exceptions for the engagement service.

Raised before any mutation happens, so a caller that receives one can assume
nothing was written. The endpoint layer converts them to HTTP responses.
"""

from __future__ import annotations


class EngagementError(Exception):
    """Base exception for engagement service errors."""

    def __init__(self, message: str, recipe_id: int | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            recipe_id: Optional recipe ID related to the error.
        """
        self.message = message
        self.recipe_id = recipe_id
        super().__init__(message)


class RecipeNotFoundError(EngagementError):
    """Raised when the referenced recipe does not exist."""


class UserNotFoundError(EngagementError):
    """Raised when the acting user has no account row."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"No matching user with id: {user_id}")


class RecipeOwnershipError(EngagementError):
    """Raised when a user modifies or deletes a recipe they did not create."""


class RecipeValidationError(EngagementError):
    """Raised when a recipe draft is missing a required field."""

    def __init__(self, message: str, field: str) -> None:
        self.field = field
        super().__init__(message)
