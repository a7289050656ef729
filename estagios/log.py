"""
Logger setup.

User-facing output goes to stdout (print / rich). Diagnostics go through
these loggers to stderr so they never mix with command output.
"""

from __future__ import annotations

import logging
import sys

from estagios.config import LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "estagios") -> logging.Logger:
    """
    Return a configured logger, adding the handler only once per name.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(LOG_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
