"""
Logging configuration for the saree catalog.

All modules log under the ``saree_catalog`` logger tree. The level is taken
from the ``LOG_LEVEL`` environment variable (default: INFO).
"""
import logging
import sys

from settings import Settings

ROOT_LOGGER_NAME = "saree_catalog"

logger = logging.getLogger(ROOT_LOGGER_NAME)
logger.setLevel(Settings.LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(Settings.LOG_LEVEL)
    console_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

# Keep uvicorn's root handlers from printing every record twice
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (appended to 'saree_catalog')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logger
