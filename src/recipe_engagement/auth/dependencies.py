"""FastAPI authentication dependencies.

The configured provider (local_jwt, header, or disabled) establishes the
caller's identity; any failure is a 401.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel

from recipe_engagement.auth.providers import (
    AuthenticationError,
    AuthResult,
    TokenExpiredError,
    get_auth_provider,
)
from recipe_engagement.core.exceptions import UnauthorizedException
from recipe_engagement.observability.logging import bind_context, get_logger


logger = get_logger(__name__)

# Token extraction only; validation is the provider's job
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/oauth/token",
    scheme_name="JWT",
    description="JWT Bearer token authentication",
    auto_error=False,
)


class CurrentUser(BaseModel):
    """The authenticated caller."""

    id: int
    token_type: str = "access"

    @classmethod
    def from_auth_result(cls, result: AuthResult) -> CurrentUser:
        return cls(id=result.user_id, token_type=result.token_type)


async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> CurrentUser:
    """Resolve the caller's identity.

    Raises:
        UnauthorizedException: If no valid identity can be established.
    """
    provider = get_auth_provider()
    try:
        result = await provider.validate_token(token or "", request)
    except TokenExpiredError:
        raise UnauthorizedException("Token has expired") from None
    except AuthenticationError as e:
        logger.info("Authentication failed", provider=provider.provider_name)
        raise UnauthorizedException(str(e) or "Authentication failed") from None

    bind_context(user_id=result.user_id)
    return CurrentUser.from_auth_result(result)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
