"""Revocation engine configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from ``JWT_REVOCATION_*`` environment variables.

    Instances can also be built explicitly, e.g. ``Settings(strict_on_error=True)``,
    to configure an engine without touching the environment.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_REVOCATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Claims
    token_id_claim: str = "sub"
    index_by_claim: str = "iat"

    # Keys
    key_prefix: str = "jwt-blacklist:"

    # Verdict returned when the store cannot be read
    strict_on_error: bool = False

    # Store
    store_type: Literal["memory", "redis"] = "memory"
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Observability
    debug: bool = False
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("token_id_claim", "index_by_claim", "key_prefix")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        """Claim names and the key prefix must be non-empty strings."""
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v

    @property
    def effective_log_level(self) -> str:
        """Log level, forced to DEBUG when ``debug`` is enabled."""
        return "DEBUG" if self.debug else self.log_level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
