"""Stdout logging for the derivative handler and CLI."""

import os
import sys
import logging
from typing import Optional

DEFAULT_LOGGER_NAME = "image-derivatives"

# CloudWatch keeps one line per record; the structured layout names the call site
STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def _build_formatter(format_type: str) -> logging.Formatter:
    if os.getenv("LOG_FORMAT", format_type).lower() == "structured":
        return logging.Formatter(STRUCTURED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return logging.Formatter(SIMPLE_FORMAT)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Return the named logger, writing to stdout.

    An explicit level wins over LOG_LEVEL; unknown names fall back to INFO.
    LOG_FORMAT ("structured" or "simple") wins over format_type. The level is
    refreshed on every call, the handler is attached only once per process.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    # Warm Lambda containers call this once per invocation
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_build_formatter(format_type))
        logger.addHandler(handler)

    # Records would otherwise be printed again by the runtime's root handler
    logger.propagate = False
    return logger
