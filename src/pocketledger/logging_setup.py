"""Logging configuration for the ``pocketledger`` package.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by entry points such as the CLI.
"""

import logging
import sys
from typing import IO, Optional, Union

_PKG_LOGGER_NAME = "pocketledger"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False

# Library default: stay silent unless the host application configures logging
logging.getLogger(_PKG_LOGGER_NAME).addHandler(logging.NullHandler())


def get_log_level(level: Union[int, str, None]) -> int:
    """Translate a level name (or number) into a logging constant."""
    if isinstance(level, int):
        return level
    if level is None:
        return logging.INFO
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(level.strip().upper(), logging.INFO)


def configure_logging(level: Union[int, str, None] = None, stream: Optional[IO[str]] = None) -> None:
    """Attach a single stream handler to the package logger exactly once."""
    global _configured
    if _configured:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(get_log_level(level))
    _configured = True
