import logging
import logging.handlers

from .config import Config


def setup_logging(config: Config | None = None) -> logging.Logger:
    """Configure the package logger for the command-line tool."""
    config = config or Config()

    logger = logging.getLogger("keylic")
    logger.setLevel(config.LOG_LEVEL)

    # Remove existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(config.LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.LOG_LEVEL)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (rotating)
    if config.LOG_FILE:
        config.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            config.LOG_FILE,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(config.LOG_LEVEL)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
