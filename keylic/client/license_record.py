"""Validated license terms as seen by the licensed application.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from keylic.common.attributes import LicenseAttributes, ProductFeatures
from keylic.common.config import NEVER_EXPIRES
from keylic.common.models import LicenseType


@dataclass
class LicenseRecord:
    """
    Read side of a license.

    A fresh record is created for each validation. Its defaults are the
    restrictive "invalid" shape; the fields are populated only when the
    license validates.
    """

    license_type: LicenseType = LicenseType.TRIAL
    expiration_date_utc: datetime = NEVER_EXPIRES
    expiration_days: int = 0
    quantity: int = 1

    product: str = ""
    version: str = ""
    publish_date: date | None = None

    product_features: ProductFeatures = field(default_factory=ProductFeatures)
    license_attributes: LicenseAttributes = field(default_factory=LicenseAttributes)

    name: str = ""
    email: str = ""
    company: str = ""

    product_id: str = ""
    is_locked_to_assembly: bool = False
    path_assembly: str = ""

    @property
    def never_expires(self) -> bool:
        return self.expiration_date_utc == NEVER_EXPIRES

    def get_product_feature(self, name: str) -> str:
        return self.product_features.get_value(name)

    def has_product_feature(self, name: str) -> bool:
        return self.product_features.has(name)

    def get_license_attribute(self, name: str) -> str:
        return self.license_attributes.get_value(name)

    def has_license_attribute(self, name: str) -> bool:
        return self.license_attributes.has(name)
