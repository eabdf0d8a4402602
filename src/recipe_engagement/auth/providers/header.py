"""Gateway-header identity.

An upstream gateway authenticates the user and forwards their id in a
header (``X-User-ID`` by default). The service must not be reachable except
through that gateway when this mode is on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recipe_engagement.auth.providers.base import (
    AuthenticationError,
    AuthResult,
    parse_user_id,
)
from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from starlette.requests import Request

logger = get_logger(__name__)


class HeaderAuthProvider:
    def __init__(self, user_id_header: str = "X-User-ID") -> None:
        self.user_id_header = user_id_header

    @property
    def provider_name(self) -> str:
        return "header"

    async def validate_token(
        self,
        _token: str,
        request: Request | None = None,
    ) -> AuthResult:
        """Read the acting user from the configured header; any token is ignored.

        Raises:
            AuthenticationError: If the header is absent or not a positive integer.
        """
        raw = request.headers.get(self.user_id_header) if request else None
        if not raw:
            msg = f"Missing required header: {self.user_id_header}"
            raise AuthenticationError(msg)

        user_id = parse_user_id(raw)
        if user_id is None:
            msg = f"Invalid user id in header: {self.user_id_header}"
            raise AuthenticationError(msg)

        return AuthResult(
            user_id=user_id,
            token_type="header",  # noqa: S106 - not a password
            raw_claims={self.user_id_header: raw},
        )

    async def initialize(self) -> None:
        logger.warning(
            "Trusting user ids from request headers; "
            "only run this behind an authenticating gateway",
            user_id_header=self.user_id_header,
        )

    async def shutdown(self) -> None:
        pass
