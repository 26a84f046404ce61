"""
Licensee side: validate a license file inside the licensed application.
"""

from keylic.client.license_record import LicenseRecord
from keylic.client.license_validator import LicenseValidator

__all__ = ["LicenseRecord", "LicenseValidator"]
