"""Logging setup for the exporter process."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from ttn_exporter.config.constants import DEFAULT_LOG_LEVEL

LOGGER_NAME = "ttn_exporter"


def configure_logging(level: str = DEFAULT_LOG_LEVEL, *, console: Console | None = None) -> logging.Logger:
    """Attach a single Rich handler to the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.addHandler(
        RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
    )
    return logger
