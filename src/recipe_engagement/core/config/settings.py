"""Service settings.

Every section of the service's configuration is a small pydantic model;
``Settings`` stitches them together and reads values from, in order of
precedence, constructor arguments, the process environment, ``.env`` and
the YAML tree under ``config/`` (base files plus the ``APP_ENV`` overlay).
Secrets are only ever read from the environment.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import (
    BaseModel,
    BeforeValidator,
    PositiveInt,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


class AuthMode(StrEnum):
    """How a request's acting user is identified.

    - LOCAL_JWT: bearer JWT signed with ``JWT_SECRET_KEY``; ``sub`` is the user id
    - HEADER: user id taken from a header an upstream gateway sets
    - DISABLED: every request acts as ``auth.disabled_user_id`` (never in production)
    """

    LOCAL_JWT = "local_jwt"
    HEADER = "header"
    DISABLED = "disabled"


def parse_list(v: str | list[str]) -> list[str]:
    """Split ``"a, b,,c"`` into ``["a", "b", "c"]``; lists pass through."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


CommaList = Annotated[list[str], BeforeValidator(parse_list)]


class AppSettings(BaseModel):
    name: str = "Recipe Engagement Service"
    version: str = "0.1.0"
    debug: bool = False


class ServerSettings(BaseModel):
    """Bind address used by ``python -m recipe_engagement.main``."""

    host: str = "127.0.0.1"
    port: int = 8000


class ApiSettings(BaseModel):
    v1_prefix: str = "/api/v1"
    cors_origins: CommaList = []


class JwtSettings(BaseModel):
    """Bearer token checks for ``local_jwt`` mode."""

    algorithm: str = "HS256"
    issuer: str | None = None
    audience: CommaList = []


class AuthSettings(BaseModel):
    mode: str = "local_jwt"
    jwt: JwtSettings = JwtSettings()
    user_id_header: str = "X-User-ID"
    disabled_user_id: PositiveInt = 1


class DatabaseSettings(BaseModel):
    """Recipe store connection and pool sizing."""

    host: str = "localhost"
    port: int = 5432
    name: str = "recipes"
    user: str | None = None
    min_pool_size: int = 5
    max_pool_size: int = 20
    command_timeout: float = 30.0  # seconds per statement
    ssl: bool = False
    create_schema: bool = False

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> DatabaseSettings:
        if not 0 <= self.min_pool_size <= self.max_pool_size:
            msg = (
                "database.min_pool_size must be between 0 and "
                f"max_pool_size ({self.max_pool_size})"
            )
            raise ValueError(msg)
        return self


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"  # "json" or "text"
    file: str | None = None

    @field_validator("level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()


class MetricsSettings(BaseModel):
    enabled: bool = True


class ObservabilitySettings(BaseModel):
    metrics: MetricsSettings = MetricsSettings()


class NotificationSettings(BaseModel):
    """Mail sent to favoriters when a recipe they favorited changes.

    With no ``url`` the messages are only logged.
    """

    enabled: bool = True
    url: str | None = None
    timeout: float = 5.0
    update_subject: str = "Favorite Recipe Modified"
    update_body: str = "One of your favorite recipes has been modified"


class UploadSettings(BaseModel):
    """Where recipe images are written and what is accepted.

    Stored images live at ``{directory}/{subdirectory}/<name>`` and are
    referenced in recipes as ``/{subdirectory}/<name>``.
    """

    directory: str = "client/public"
    subdirectory: str = "recipes"
    max_bytes: PositiveInt = 204800
    allowed_extensions: CommaList = ["jpg", "jpeg", "png"]

    @field_validator("allowed_extensions")
    @classmethod
    def _normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext.lower().lstrip(".") for ext in v]


class Settings(BaseSettings):
    """All configuration for one process.

    Nested values can be overridden from the environment with ``__``
    between levels, e.g. ``DATABASE__HOST=db.internal`` or
    ``UPLOADS__MAX_BYTES=409600``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    auth: AuthSettings = AuthSettings()
    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
    notifications: NotificationSettings = NotificationSettings()
    uploads: UploadSettings = UploadSettings()

    # Secrets; kept out of the YAML tree
    JWT_SECRET_KEY: str = ""
    DATABASE_PASSWORD: str = ""
    NOTIFICATION_SERVICE_TOKEN: str | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML ranks below anything set explicitly for this process
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def auth_mode_enum(self) -> AuthMode:
        """``auth.mode`` as an ``AuthMode``, case-insensitive.

        Raises:
            ValueError: If the configured mode is unknown.
        """
        try:
            return AuthMode(self.auth.mode.lower())
        except ValueError:
            allowed = ", ".join(m.value for m in AuthMode)
            msg = f"Invalid auth mode: {self.auth.mode}. Must be one of: {allowed}"
            raise ValueError(msg) from None

    @property
    def database_url(self) -> str:
        """Password-free DSN, safe to log."""
        db = self.database
        user = f"{db.user}@" if db.user else ""
        return f"postgresql://{user}{db.host}:{db.port}/{db.name}"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_testing(self) -> bool:
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    return Settings()
