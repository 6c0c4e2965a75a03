"""Client configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Storefront client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Storefront backend
    api_url: str = Field(
        default="http://localhost:3000",
        validation_alias="STOREFRONT_API_URL",
    )
    api_timeout: float = Field(default=30.0, validation_alias="STOREFRONT_API_TIMEOUT")

    # Sent as X-Request-Source on every request
    request_source: str = Field(
        default="storefront-client",
        validation_alias="STOREFRONT_REQUEST_SOURCE",
    )

    # Bearer token; storage and refresh are owned by the host application
    api_token: str | None = Field(default=None, validation_alias="STOREFRONT_API_TOKEN")

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so resource paths can be appended directly."""
        return v.rstrip("/")

    @field_validator("api_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Reject non-positive timeouts."""
        if v <= 0:
            raise ValueError("STOREFRONT_API_TIMEOUT must be positive")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
