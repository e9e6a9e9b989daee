"""Structured logging setup."""

import logging
from typing import Optional

import structlog

from stackwire.config import Settings, get_settings

__all__ = ["configure_logging"]


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog from settings.

    Resolution events are logged at debug level, so ``log_level="DEBUG"``
    shows every unit created and every construct cached.
    """
    settings = settings or get_settings()
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level)
        ),
    )
