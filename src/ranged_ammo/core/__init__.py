"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        RangedAmmoError: Base exception for all application errors.
        AmmunitionError: Base for errors raised while computing an action.
        ConfigurationError: Configuration-related errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from ranged_ammo.core.config import (
    AmmunitionSettings,
    LoggingSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from ranged_ammo.core.exceptions import (
    AmmunitionError,
    ConfigurationError,
    InvalidMarkerStateError,
    LedgerAlreadyAppliedError,
    LedgerError,
    PersistenceError,
    RangedAmmoError,
    TemplateNotFoundError,
    ValidationError,
)
from ranged_ammo.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)


__all__ = [
    # Base exception
    "RangedAmmoError",
    # Ammunition exceptions
    "AmmunitionError",
    "InvalidMarkerStateError",
    "TemplateNotFoundError",
    "LedgerError",
    "LedgerAlreadyAppliedError",
    "PersistenceError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "AmmunitionSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
