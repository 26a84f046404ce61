"""
Logging utilities for consistent logging setup across the application.
"""

import logging

from keylic.common.config import Config


def setup_logger(logger: logging.Logger, log_level: int | None = None) -> None:
    """
    Set up a logger with a StreamHandler and standard formatter.

    Args:
        logger: The logger instance to configure
        log_level: The logging level to set, the configured level when None
    """
    config = Config()
    if log_level is None:
        log_level = config.LOG_LEVEL
    logger.setLevel(log_level)
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
        logger.addHandler(handler)
