"""Logging setup for the server process.

Stdout carries the JSON-RPC stream, so every log record goes to stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

_LOGGER_NAME = "remodern"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "WARNING", *, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stderr handler to the ``remodern`` logger and set its level.

    Calling it again replaces the previous handler rather than stacking one.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_remodern", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._remodern = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger
