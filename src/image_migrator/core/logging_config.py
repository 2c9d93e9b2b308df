"""Centralized logging configuration for the image migrator."""

import os
import sys
import logging
from typing import Optional

ROOT_LOGGER = "image-migrator"

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
# Progress lines are read by an operator, keep them short
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def _build_formatter(format_type: str) -> logging.Formatter:
    if os.getenv("LOG_FORMAT", format_type).lower() == "structured":
        return logging.Formatter(STRUCTURED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return logging.Formatter(SIMPLE_FORMAT, datefmt="%H:%M:%S")


def setup_logger(
    name: str = ROOT_LOGGER,
    level: Optional[str] = None,
    format_type: str = "simple",
) -> logging.Logger:
    """
    Configure a stdout logger once and return it.

    The first call for ``name`` attaches the handler and sets the level from
    ``level`` or ``LOG_LEVEL``. Later calls only change the level when
    ``level`` is given, so an earlier ``--debug`` survives repeated lookups.

    Args:
        name: Logger name (defaults to "image-migrator")
        level: Explicit level, e.g. "DEBUG"
        format_type: "structured" or "simple", overridden by ``LOG_FORMAT``

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_build_formatter(format_type))
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(_resolve_level(level))
    elif level:
        logger.setLevel(_resolve_level(level))

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return the configured logger without touching its level."""
    return setup_logger(name)


logger = setup_logger()
