"""Shared pieces of the identity providers.

A provider turns the credentials on a request into the id of the acting
user. Every failure is an ``AuthenticationError`` (or a subclass), which the
request dependency turns into a 401; ``ConfigurationError`` is raised at
startup instead, when a mode cannot run with the current settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


if TYPE_CHECKING:
    from starlette.requests import Request


class AuthProviderError(Exception):
    pass


class AuthenticationError(AuthProviderError):
    """No acting user could be established for the request."""


class TokenExpiredError(AuthenticationError):
    pass


class TokenInvalidError(AuthenticationError):
    """Malformed or badly signed token, or a ``sub`` that is not a user id."""


class ConfigurationError(AuthProviderError):
    """The selected auth mode is missing settings it needs."""


class AuthResult(BaseModel):
    """Who is acting, and how we know."""

    model_config = ConfigDict(frozen=True)

    user_id: PositiveInt
    token_type: str = "access"  # "access", "header" or "none"
    expires_at: int | None = None
    raw_claims: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class AuthProvider(Protocol):
    @property
    def provider_name(self) -> str: ...

    async def validate_token(
        self,
        token: str,
        request: Request | None = None,
    ) -> AuthResult:
        """Identify the caller from ``token`` or the request.

        Raises:
            AuthenticationError: If the caller cannot be identified.
        """
        ...

    async def initialize(self) -> None: ...

    async def shutdown(self) -> None: ...


def parse_user_id(raw: object) -> int | None:
    """Return ``raw`` as a positive user id, or None if it is not one."""
    if isinstance(raw, bool):
        return None
    try:
        user_id = int(str(raw).strip())
    except ValueError:
        return None
    return user_id if user_id > 0 else None
