"""
Configuration management for sqlayout.

This module provides environment-based configuration using Pydantic
BaseSettings. Every compile option the CLI exposes has a setting here, so a
deployment can fix its DDL style once (for example in a ``.env`` file) and
command-line flags only override it.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_OVERRIDE = os.getenv("SQLAYOUT_ENV_FILE")
SETTINGS_ENV_FILE = Path(ENV_FILE_OVERRIDE).expanduser() if ENV_FILE_OVERRIDE else Path(".env")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are loaded with the SQLAYOUT_ prefix, e.g.
    SQLAYOUT_QUOTE_IDENTIFIERS=false. LOG_LEVEL is read without a prefix.
    """

    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    quote_identifiers: bool = Field(
        default=True, description="Double-quote every emitted identifier"
    )
    if_not_exists: bool = Field(
        default=False, description="Emit CREATE ... IF NOT EXISTS guards"
    )
    transaction: bool = Field(
        default=False, description="Wrap rendered scripts in BEGIN/COMMIT"
    )
    allow_deferrable_cycles: bool = Field(
        default=True,
        description="Accept foreign key cycles that are broken by deferrable constraints",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {_LOG_LEVELS}, got '{value}'")
        return level

    model_config = SettingsConfigDict(
        env_prefix="SQLAYOUT_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
