"""Configuration management for the ranged ammunition system.

This module provides centralized configuration management using
pydantic-settings, supporting environment variables, .env files, and
runtime overrides.

Example:
    >>> from ranged_ammo.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.ammunition.advanced_system
    True

Environment Variables:
    RANGED_AMMO_AMMUNITION_ADVANCED_SYSTEM: Track which ammunition is loaded
    RANGED_AMMO_AMMUNITION_CONJURED_ROUND_DURATION_ROUNDS: Out-of-combat duration
    RANGED_AMMO_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    RANGED_AMMO_LOG_JSON_FORMAT: Emit JSON log lines
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ranged_ammo.core.exceptions import ConfigurationError


class AmmunitionSettings(BaseSettings):
    """Configuration for the ammunition rules.

    Attributes:
        advanced_system: Track which ammunition is loaded, magazines and
            returning unloaded rounds to inventory. When disabled, unloading
            only removes the loaded state.
        conjured_round_duration_rounds: Duration given to a conjured round
            created outside of combat.
        post_chat_messages: Post a chat message describing each action.
        floating_text: Stage floating-text notifications in the ledger.
    """

    model_config = SettingsConfigDict(
        env_prefix="RANGED_AMMO_AMMUNITION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    advanced_system: bool = Field(
        default=True,
        description="Use the advanced ammunition system",
    )
    conjured_round_duration_rounds: int = Field(
        default=1,
        ge=1,
        le=100,
        description="Conjured round duration outside combat",
    )
    post_chat_messages: bool = Field(
        default=True,
        description="Post chat messages for actions",
    )
    floating_text: bool = Field(
        default=True,
        description="Stage floating text notifications",
    )


class LoggingSettings(BaseSettings):
    """Configuration for structured logging.

    Attributes:
        level: Application logging level.
        json_format: Render log lines as JSON.
        file: Optional log file path.
    """

    model_config = SettingsConfigDict(
        env_prefix="RANGED_AMMO_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_format: bool = Field(
        default=False,
        description="Render logs as JSON",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file",
    )

    @model_validator(mode="after")
    def validate_log_file(self) -> "LoggingSettings":
        """Ensure the log file, when set, is not a directory.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the log file path points at a directory.
        """
        if self.file is not None and self.file.is_dir():
            raise ConfigurationError(
                f"Log file {self.file} is a directory",
                config_key="file",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name stamped on log entries.
        debug: Log at DEBUG level regardless of the logging section.
        ammunition: Ammunition rule settings.
        logging: Logging settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="RANGED_AMMO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Ranged Ammunition System",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Force DEBUG logging",
    )

    ammunition: AmmunitionSettings = Field(default_factory=AmmunitionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "AmmunitionSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
