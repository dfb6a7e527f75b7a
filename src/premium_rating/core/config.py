# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from pathlib import Path

from beartype import beartype
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SLOW_STAGE_THRESHOLD_MS = 50.0


class Settings(BaseSettings):
    """Rating settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PREMIUM_RATING_",
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    calculation_version: str = Field(
        default="1.0.0",
        pattern=r"^\d+\.\d+\.\d+$",
        description="Calculation-logic version stamped on every result",
    )
    rating_tables_path: Path | None = Field(
        default=None,
        description="Optional JSON file replacing the built-in reference tables",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the rating loggers",
    )
    slow_stage_threshold_ms: float = Field(
        default=DEFAULT_SLOW_STAGE_THRESHOLD_MS,
        gt=0,
        le=60000.0,
        description="Stages slower than this are logged as warnings",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls: type["Settings"], v: str) -> str:
        """Ensure the log level is one the logging module knows."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("rating_tables_path")
    @classmethod
    def validate_rating_tables_path(
        cls: type["Settings"], v: Path | None
    ) -> Path | None:
        """Rate table overrides must be JSON documents."""
        if v is not None and v.suffix.lower() != ".json":
            raise ValueError(f"Rating tables must be a .json file: {v}")
        return v


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
