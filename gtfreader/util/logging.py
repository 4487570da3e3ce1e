"""
MIT License

Logging setup shared by the gtfreader modules and CLI.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_LOGGER: Optional[logging.Logger] = None


def _build_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def get_logger(name: str = "gtfreader") -> logging.Logger:
    """Return the process-wide gtfreader logger, creating it on first use."""
    global _LOGGER
    if _LOGGER is None:
        _LOGGER = _build_logger(name)
    return _LOGGER


def set_verbose(verbose: bool) -> None:
    """Log skipped lines (DEBUG) when ``verbose``, otherwise INFO and above."""
    get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)


__all__ = ["LOG_FORMAT", "get_logger", "set_verbose"]
