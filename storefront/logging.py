"""
Logging setup for the storefront cart.

Usage:
    from storefront.logging import get_logger
    logger = get_logger(__name__)

Cart session keys and product ids arrive from clients; pass them through
sanitize_id_for_logging before they reach a log line.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Product service calls would otherwise log every request
QUIET_LOGGERS = ("httpx", "httpcore")

_CONTROL_CHARS = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def configure_logging() -> None:
    """Attach a stdout handler to the root logger unless one exists."""
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    # Vercel adds its own timestamps
    handler.setFormatter(logging.Formatter(
        LOG_FORMAT_SIMPLE if os.environ.get("VERCEL") == "1" else LOG_FORMAT
    ))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_for_logging(value, max_length: int = 50, ellipsis: bool = True) -> str:
    """
    Escape control characters (CWE-117) and cut value to max_length.

    Empty values log as "N/A".
    """
    if value is None or value == "":
        return "N/A"
    safe_value = str(value).translate(_CONTROL_CHARS)
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + ("..." if ellipsis else "")


def sanitize_id_for_logging(id_value) -> str:
    """Short form of a session key or product id: first 8 characters."""
    return sanitize_for_logging(id_value, max_length=8, ellipsis=False)
