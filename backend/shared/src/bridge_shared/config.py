"""Application settings loaded once at startup.

Settings are read from the process environment (and an optional ``.env``
file) into a frozen model. The instance is built by the app factory and
handed to every component explicitly; nothing reads the environment after
startup.

Usage:
    from bridge_shared.config import get_settings

    settings = get_settings()
    if settings.is_strict:
        ...
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_PORT = 4242
DEFAULT_MAX_BODY_BYTES = 50 * 1024
DEFAULT_WEBHOOK_MAX_BODY_BYTES = 100 * 1024


class Environment(str, Enum):
    """Deployment profile."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Immutable runtime configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    environment: Environment = Environment.DEVELOPMENT
    strict_mode: bool = Field(
        default=False,
        description="Force strict mode outside production",
    )

    # Stripe
    stripe_secret_key: str = Field(..., min_length=1)
    stripe_publishable_key: str | None = None
    stripe_webhook_secret: str | None = None
    stripe_timeout_seconds: float = 30.0
    stripe_max_network_retries: int = 2

    # HTTP
    allowed_origins: Annotated[list[str], NoDecode] = Field(default_factory=list)
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    webhook_max_body_bytes: int = DEFAULT_WEBHOOK_MAX_BODY_BYTES
    rate_limit_enabled: bool = True

    log_level: str = "INFO"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Accept a comma-separated string as well as a list."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        if isinstance(value, (list, tuple)):
            return [str(origin).strip() for origin in value if str(origin).strip()]
        return value

    @field_validator("stripe_publishable_key", "stripe_webhook_secret", mode="before")
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_strict_requirements(self) -> "Settings":
        if self.is_strict and not self.allowed_origins:
            raise ValueError("ALLOWED_ORIGINS must be set when running in strict mode")
        return self

    @property
    def is_strict(self) -> bool:
        """Whether the production-safe profile is active."""
        return self.strict_mode or self.environment == Environment.PRODUCTION


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide Settings instance.

    Raises:
        pydantic.ValidationError: If required configuration is missing.
    """
    return Settings()  # type: ignore[call-arg]
