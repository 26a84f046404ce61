"""
Custom exceptions for the license system.
"""

from __future__ import annotations


class LicenseError(Exception):
    """Base class for all licensing errors."""


class ArgumentError(LicenseError, ValueError):
    """Exception for invalid arguments, reserved names and missing required fields."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class MissingFileError(LicenseError, FileNotFoundError):
    """Exception for a keypair or lock file that does not exist."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class KeypairMismatchError(LicenseError):
    """Exception for a private key that cannot be decrypted with the passphrase."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Unable to decrypt the private key. The passphrase was probably "
            "changed without generating a new keypair."
        )


class KeypairFormatError(LicenseError):
    """Exception for a keypair file that cannot be read or imported."""


class AttributeNotFoundError(LicenseError, KeyError):
    """Exception for a product feature or license attribute that does not exist."""

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])
