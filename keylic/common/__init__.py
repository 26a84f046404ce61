# Common utilities
from keylic.common.crypto import CryptoUtils as CryptoUtils
from keylic.common.logging_utils import setup_logger as setup_logger
from keylic.common.mixins import DirtyTracking as DirtyTracking

__all__ = ["CryptoUtils", "DirtyTracking", "setup_logger"]
