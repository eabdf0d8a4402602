"""Selection and lifetime of the process-wide identity provider.

``initialize_auth_provider`` runs in the lifespan; request dependencies use
``get_auth_provider``. ``set_auth_provider`` lets tests install their own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recipe_engagement.auth.providers.base import AuthResult, ConfigurationError
from recipe_engagement.auth.providers.header import HeaderAuthProvider
from recipe_engagement.auth.providers.local_jwt import LocalJWTAuthProvider
from recipe_engagement.core.config import AuthMode, get_settings
from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from recipe_engagement.auth.providers.base import AuthProvider
    from recipe_engagement.core.config import Settings

logger = get_logger(__name__)

# Used outside production when JWT_SECRET_KEY is unset
_DEV_JWT_SECRET = "insecure-dev-key-do-not-use-in-production"  # noqa: S105

_state: dict[str, AuthProvider | None] = {"provider": None}


class DisabledAuthProvider:
    """Every request acts as ``user_id``; refused in production."""

    def __init__(self, user_id: int = 1) -> None:
        self.user_id = user_id

    @property
    def provider_name(self) -> str:
        return "disabled"

    async def validate_token(
        self,
        _token: str,
        _request: object = None,
    ) -> AuthResult:
        return AuthResult(
            user_id=self.user_id,
            token_type="none",  # noqa: S106 - not a password
            raw_claims={"auth_disabled": True},
        )

    async def initialize(self) -> None:
        logger.warning(
            "Authentication is disabled; all requests act as one user",
            user_id=self.user_id,
        )

    async def shutdown(self) -> None:
        pass


def _jwt_secret(settings: Settings) -> str:
    if settings.JWT_SECRET_KEY:
        return settings.JWT_SECRET_KEY
    if settings.is_production:
        msg = "JWT_SECRET_KEY must be set in production for local_jwt auth mode"
        raise ConfigurationError(msg)
    logger.warning("JWT_SECRET_KEY is unset; using the development secret")
    return _DEV_JWT_SECRET


def create_auth_provider(settings: Settings | None = None) -> AuthProvider:
    """Build the provider named by ``auth.mode``.

    Raises:
        ConfigurationError: If the mode cannot run with these settings.
        ValueError: If ``auth.mode`` is not a known mode.
    """
    settings = settings or get_settings()
    auth = settings.auth
    mode = settings.auth_mode_enum

    if mode is AuthMode.HEADER:
        return HeaderAuthProvider(user_id_header=auth.user_id_header)

    if mode is AuthMode.DISABLED:
        if settings.is_production:
            msg = "auth.mode 'disabled' is not allowed in production"
            raise ConfigurationError(msg)
        return DisabledAuthProvider(user_id=auth.disabled_user_id)

    return LocalJWTAuthProvider(
        secret_key=_jwt_secret(settings),
        algorithm=auth.jwt.algorithm,
        issuer=auth.jwt.issuer,
        audience=auth.jwt.audience,
    )


def get_auth_provider() -> AuthProvider:
    """Return the installed provider.

    Raises:
        RuntimeError: Before ``initialize_auth_provider`` or ``set_auth_provider``.
    """
    provider = _state["provider"]
    if provider is None:
        msg = "Auth provider not initialized"
        raise RuntimeError(msg)
    return provider


def set_auth_provider(provider: AuthProvider | None) -> None:
    _state["provider"] = provider


async def initialize_auth_provider(settings: Settings | None = None) -> AuthProvider:
    provider = create_auth_provider(settings)
    await provider.initialize()
    set_auth_provider(provider)
    logger.info("Auth provider ready", provider=provider.provider_name)
    return provider


async def shutdown_auth_provider() -> None:
    provider, _state["provider"] = _state["provider"], None
    if provider is not None:
        await provider.shutdown()
