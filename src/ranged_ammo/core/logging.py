"""Structured logging for the ranged ammunition system.

Actions and engines log through structlog. Hosts call
``configure_logging_from_settings(get_settings())`` once at start-up;
``configure_logging`` is available for callers that do not use the
settings layer.

Example:
    >>> from ranged_ammo.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Weapon unloaded", weapon_id="w1", rounds=2)
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from ranged_ammo.core.config import Settings


DEFAULT_APP_NAME = "ranged_ammo"
STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def app_context(app_name: str = DEFAULT_APP_NAME) -> Processor:
    """Build a processor stamping every entry with the application name.

    Args:
        app_name: Value stored under the ``app`` key.

    Returns:
        A structlog processor.
    """

    def add_app_context(
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict["app"] = app_name
        return event_dict

    return add_app_context


def _resolve_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def _renderer(json_format: bool) -> list[Processor]:
    if json_format:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
    app_name: str = DEFAULT_APP_NAME,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Render JSON lines instead of console output.
        log_file: Optional file that also receives standard library records.
        app_name: Application name added to every structlog entry.
    """
    numeric_level = _resolve_level(level)
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        app_context(app_name),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *_renderer(json_format),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Host integrations log through the standard library
    logging.basicConfig(format=STDLIB_FORMAT, level=numeric_level, stream=sys.stdout, force=True)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setLevel(numeric_level)
        handler.setFormatter(logging.Formatter(STDLIB_FORMAT))
        logging.getLogger().addHandler(handler)


def configure_logging_from_settings(settings: Settings) -> None:
    """Configure logging from the application settings.

    Debug mode forces the DEBUG level whatever ``settings.logging.level``
    says.
    """
    log_settings = settings.logging
    configure_logging(
        level="DEBUG" if settings.debug else log_settings.level,
        json_format=log_settings.json_format,
        log_file=str(log_settings.file) if log_settings.file else None,
        app_name=settings.app_name,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger, typically named after the calling module."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values included in every later entry of this context.

    Actions bind the actor and weapon they operate on so every staged
    operation can be traced back to them.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop every bound context value."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "app_context",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
