"""
Configuration management using Pydantic Settings.

Loads configuration from environment variables (prefixed with
``TASKFIELDS_``) and .env files.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Evaluation core settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TASKFIELDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    # ==========================================================================
    # Formula Engine
    # ==========================================================================
    formula_max_length: int = Field(
        default=10_000,
        ge=1,
        description="Longest formula source accepted by the parser",
    )

    # ==========================================================================
    # Rollups
    # ==========================================================================
    rollup_concat_delimiter: str = Field(
        default=", ",
        description="Delimiter used by the concat rollup aggregation",
    )

    # ==========================================================================
    # Filters
    # ==========================================================================
    date_equals_tolerance_ms: int = Field(
        default=86_400_000,
        ge=0,
        description="Window in milliseconds within which two dates are equal",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
