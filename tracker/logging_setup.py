"""Logging for the ``tracker`` package.

The Streamlit app calls ``configure_logging()`` once at startup; the level
comes from the argument, else ``TRACKER_LOG_LEVEL``, else INFO. Engine modules
only ever call ``get_logger(__name__)``.
"""

import logging
import os
import sys
from typing import IO, Optional, Union

LOGGER_NAME = "tracker"
LEVEL_ENV_VAR = "TRACKER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: Optional[logging.Handler] = None


def resolve_level(level: Union[int, str, None] = None) -> int:
    if level is None:
        level = os.getenv(LEVEL_ENV_VAR, "INFO")
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None, stream: IO[str] = sys.stderr) -> logging.Logger:
    """Route package logs to ``stream``; later calls only adjust the level."""
    global _handler
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(level))
    if _handler is None:
        for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
            logger.removeHandler(h)
        _handler = logging.StreamHandler(stream)
        _handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
