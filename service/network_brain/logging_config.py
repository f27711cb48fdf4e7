"""
Logging configuration for the API service.
"""

import logging
import sys

from network_brain.config import get_settings


def setup_logging(level: str = "INFO"):
    """Setup logging with proper format and handlers."""

    logger = logging.getLogger("network_brain")
    logger.setLevel(level.upper())

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level.upper())

    formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


# Global logger instance
logger = setup_logging(get_settings().log_level)
