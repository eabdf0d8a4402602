"""Identity providers selected by ``auth.mode``: local_jwt, header, disabled."""

from recipe_engagement.auth.providers.base import (
    AuthenticationError,
    AuthProvider,
    AuthProviderError,
    AuthResult,
    ConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
)
from recipe_engagement.auth.providers.factory import (
    DisabledAuthProvider,
    create_auth_provider,
    get_auth_provider,
    initialize_auth_provider,
    set_auth_provider,
    shutdown_auth_provider,
)
from recipe_engagement.auth.providers.header import HeaderAuthProvider
from recipe_engagement.auth.providers.local_jwt import LocalJWTAuthProvider


__all__ = [
    "AuthProvider",
    "AuthProviderError",
    "AuthResult",
    "AuthenticationError",
    "ConfigurationError",
    "DisabledAuthProvider",
    "HeaderAuthProvider",
    "LocalJWTAuthProvider",
    "TokenExpiredError",
    "TokenInvalidError",
    "create_auth_provider",
    "get_auth_provider",
    "initialize_auth_provider",
    "set_auth_provider",
    "shutdown_auth_provider",
]
