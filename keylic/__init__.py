# keylic: offline signed license files

from keylic.client.license_record import LicenseRecord
from keylic.client.license_validator import LicenseValidator, ValidationFailure
from keylic.common.models import LicenseType
from keylic.issuer.keypair_store import KeypairStore

__all__ = [
    "KeypairStore",
    "LicenseRecord",
    "LicenseType",
    "LicenseValidator",
    "ValidationFailure",
]
