# =============================================================================
# LOGGER - Logging Configuration
# =============================================================================
# Configures the package logger; modules log through logging.getLogger(__name__)
# =============================================================================

from __future__ import annotations

import logging
import sys
from typing import Optional

from bank_transfer.core.constants import LoggingConstants


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
    name: str = LoggingConstants.ROOT_LOGGER,
) -> logging.Logger:
    """
    Setup and configure the package logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        log_file: Optional file to write logs to
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if format_string is None:
        format_string = LoggingConstants.DEFAULT_FORMAT

    formatter = logging.Formatter(format_string)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = LoggingConstants.ROOT_LOGGER) -> logging.Logger:
    """Get a logger by name."""
    return logging.getLogger(name)
