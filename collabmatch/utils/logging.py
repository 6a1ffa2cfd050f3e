"""Console logging for the CollabMatch command line.

Library modules only call ``logging.getLogger(__name__)`` and never install
handlers; the entry point attaches one console handler to the package
logger so every ``collabmatch.*`` record ends up in the same place.
"""

import logging
import sys
from typing import TextIO

from collabmatch.config.settings import Settings

LOGGER_NAME = "collabmatch"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "collabmatch-console"


def _resolve_level(settings: Settings | None, level: str | None) -> int:
    name = level or (settings.log_level if settings is not None else None) or "INFO"
    return getattr(logging, name.upper(), logging.INFO)


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def configure_logging(
    settings: Settings | None = None,
    *,
    level: str | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install (or retune) the console handler on the package logger.

    Args:
        settings: Application settings; ``settings.log_level`` is used
            unless ``level`` is given.
        level: Explicit level name, e.g. from ``--log-level``.
        stream: Where records go; stderr by default. Only used the first
            time the handler is installed.

    Returns:
        The ``collabmatch`` logger.
    """
    log_level = _resolve_level(settings, level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    handler = _console_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    handler.setLevel(log_level)

    return logger


def reset_logging() -> None:
    """Drop all handlers and hand records back to the root logger (tests)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
