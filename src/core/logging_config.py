"""Structured logging configuration.

This module configures structlog with a stable JSON event format.
Components receive loggers from here through their constructors.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL

_configured_level: str | None = None


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog processors and the minimum event level.

    Args:
        level: Lower-case level name, e.g. ``info`` or ``debug``.
    """
    global _configured_level
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )
    _configured_level = level


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger bound to the module name.
    """
    if _configured_level is None:
        configure_logging()
    return structlog.get_logger(logger_name=name)


def _level_number(level: str) -> int:
    """Map a level name onto the stdlib numeric level."""
    return logging.getLevelName(level.upper())


def _stderr_logger_factory(*args: Any) -> Any:
    """Create a print logger bound to the current ``sys.stderr``."""
    return structlog.PrintLogger(file=sys.stderr)
