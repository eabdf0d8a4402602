"""Bearer JWT identity.

Tokens are issued by the account service with the shared ``JWT_SECRET_KEY``
and name the user in ``sub``. Issuer and audience are checked only when
configured.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from recipe_engagement.auth.providers.base import (
    AuthResult,
    ConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
    parse_user_id,
)
from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from starlette.requests import Request

logger = get_logger(__name__)


class LocalJWTAuthProvider:
    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str | None = None,
        audience: list[str] | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience or None

    @property
    def provider_name(self) -> str:
        return "local_jwt"

    def _decode(self, token: str) -> dict[str, Any]:
        # jose compares ``aud`` against one string; several are allowed here
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as e:
            msg = "Token has expired"
            raise TokenExpiredError(msg) from e
        except JWTClaimsError as e:
            logger.info("Rejected token claims", error=str(e))
            raise TokenInvalidError(str(e)) from e
        except JWTError as e:
            logger.info("Rejected token", error=str(e))
            msg = "Invalid token"
            raise TokenInvalidError(msg) from e

        if self.audience and not self._audience_matches(claims.get("aud")):
            msg = "Invalid audience"
            raise TokenInvalidError(msg)
        return claims

    def _audience_matches(self, claim: object) -> bool:
        if isinstance(claim, str):
            granted = [claim]
        elif isinstance(claim, list):
            granted = claim
        else:
            granted = []
        return any(aud in granted for aud in self.audience or ())

    async def validate_token(
        self,
        token: str,
        _request: Request | None = None,
    ) -> AuthResult:
        """Verify ``token`` and return the user named by its ``sub`` claim.

        Raises:
            TokenExpiredError: If ``exp`` has passed.
            TokenInvalidError: For a missing, malformed or badly signed token,
                or a ``sub`` that is not a positive integer.
        """
        if not token:
            msg = "Missing bearer token"
            raise TokenInvalidError(msg)

        claims = self._decode(token)
        user_id = parse_user_id(claims.get("sub"))
        if user_id is None:
            msg = "Token 'sub' claim is not a user id"
            raise TokenInvalidError(msg)

        return AuthResult(
            user_id=user_id,
            token_type=claims.get("type", "access"),
            expires_at=claims.get("exp"),
            raw_claims=claims,
        )

    async def initialize(self) -> None:
        if not self.secret_key:
            msg = "JWT secret key is not configured"
            raise ConfigurationError(msg)
        logger.info(
            "Validating bearer tokens locally",
            algorithm=self.algorithm,
            checks_issuer=bool(self.issuer),
            checks_audience=bool(self.audience),
        )

    async def shutdown(self) -> None:
        pass
