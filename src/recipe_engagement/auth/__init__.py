"""Caller identity: providers and FastAPI dependencies."""

from recipe_engagement.auth.dependencies import (
    CurrentUser,
    CurrentUserDep,
    get_current_user,
)


__all__ = ["CurrentUser", "CurrentUserDep", "get_current_user"]
