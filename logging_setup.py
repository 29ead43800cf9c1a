"""Logging configuration for the FoodFeed service."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "foodfeed"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the service logger

    Safe to call more than once: existing handlers are replaced,
    so gunicorn reloads don't duplicate every line.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the service namespace (pass __name__)"""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
