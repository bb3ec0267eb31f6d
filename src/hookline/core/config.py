"""Configuration management for hookline.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is read once per
registry and is immutable afterwards.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated when loaded.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HOOKLINE_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "testing"] = "development"

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"
    log_chain_steps: bool = Field(
        default=False,
        description="Emit a debug entry for every step of every chain",
    )

    # Error Routing Settings
    reraise_unhandled: bool = Field(
        default=True,
        description=(
            "Re-raise primary chain failures to the caller when no error "
            "handler is configured"
        ),
    )

    # Trailing Chain Settings
    drain_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Default timeout for waiting on pending trailing chains",
    )

    @field_validator("drain_timeout_seconds")
    @classmethod
    def validate_drain_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Validate that the drain timeout is positive when set."""
        if v is not None and v <= 0:
            raise ValueError("drain_timeout_seconds must be positive")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()
