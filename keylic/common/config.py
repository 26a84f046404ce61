"""
Configuration settings for the license management system.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path


class Config:
    """Central configuration class for all system settings."""

    def __init__(self) -> None:
        # File names
        self.LICENSE_FILE_EXTENSION: str = ".lic"
        self.PRIVATE_FILE_EXTENSION: str = ".private"

        # Keypair file format; documents without a version are imported as legacy
        self.KEYPAIR_FORMAT_VERSION: int = 2

        # Identity binding
        self.PRODUCT_IDENTITY_SEPARATOR: str = " "

        # Shown with every validation failure
        self.SUPPORT_MESSAGE: str = os.getenv(
            "KEYLIC_SUPPORT_MESSAGE",
            "Please contact your company's IT department or the product's support team.",
        )

        # Logging
        self.LOG_LEVEL: int = logging.getLevelName(
            os.getenv("KEYLIC_LOG_LEVEL", "INFO").upper()
        )
        if not isinstance(self.LOG_LEVEL, int):
            self.LOG_LEVEL = logging.INFO
        self.LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        log_file = os.getenv("KEYLIC_LOG_FILE")
        self.LOG_FILE: Path | None = Path(log_file) if log_file else None


# A license without an expiration date never expires.
NEVER_EXPIRES = datetime(9999, 12, 31, tzinfo=timezone.utc)
