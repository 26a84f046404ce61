"""
Pydantic models for the license artifact, the keypair file and the CLI overrides.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class LicenseType(str, Enum):
    STANDARD = "Standard"
    TRIAL = "Trial"

    def __str__(self) -> str:
        return self.value


# Signed license artifact (.lic)


class Customer(BaseModel):
    name: str
    email: str
    company: str | None = None


class LicensePayload(BaseModel):
    id: str
    type: LicenseType
    quantity: int = Field(ge=1)
    expiration: datetime | None = None
    customer: Customer
    product_features: dict[str, str] = Field(default_factory=dict)
    additional_attributes: dict[str, str] = Field(default_factory=dict)


class SignedLicense(BaseModel):
    payload: LicensePayload
    signature: str


# Keypair file (.private)


class NameValue(BaseModel):
    name: str
    value: str = ""


class SecretBlock(BaseModel):
    passphrase: str = ""
    private_key: str = ""


class ApplicationBlock(BaseModel):
    public_key: str = ""
    product_id: str = ""


class CustomerBlock(BaseModel):
    name: str = ""
    email: str = ""
    company: str = ""


class ProductBlock(BaseModel):
    name: str = ""
    version: str = ""
    publish_date: date | None = None


class LicenseTermsBlock(BaseModel):
    type: LicenseType = LicenseType.STANDARD
    expiration_date: datetime | None = None
    expiration_days: int = 0
    quantity: int = 1


class KeypairDocument(BaseModel):
    version: int
    id: str
    secret: SecretBlock = Field(default_factory=SecretBlock)
    application: ApplicationBlock = Field(default_factory=ApplicationBlock)
    customer: CustomerBlock = Field(default_factory=CustomerBlock)
    product: ProductBlock = Field(default_factory=ProductBlock)
    product_features: list[NameValue] = Field(default_factory=list)
    license_attributes: list[NameValue] = Field(default_factory=list)
    license: LicenseTermsBlock = Field(default_factory=LicenseTermsBlock)
    path_assembly: str = ""


class LegacyKeypairDocument(BaseModel):
    """Unversioned keypair file; the remaining terms live in the sibling license file."""

    id: str
    passphrase: str
    private_key: str
    public_key: str
    product_id: str
    path_assembly: str = ""


# Overrides


class OverrideSet(BaseModel):
    license_type: LicenseType | None = None
    quantity: int | None = Field(default=None, ge=1)
    expiration_days: int | None = Field(default=None, ge=0)
    expiration_date: datetime | None = None
    product_version: str | None = None
    product_publish_date: date | None = None
    product_features: dict[str, str] = Field(default_factory=dict)
    license_attributes: dict[str, str] = Field(default_factory=dict)
    lock_path: str | None = None

    def has_overrides(self) -> bool:
        return bool(
            self.product_version
            or self.product_publish_date is not None
            or self.product_features
            or self.license_type is not None
            or self.quantity is not None
            or self.expiration_days is not None
            or self.expiration_date is not None
            or self.license_attributes
            or self.lock_path
        )


class CliOptions(OverrideSet):
    private_file_path: str = ""
    save_keypair: bool = False
    license_file_path: str = ""
    force_overwrite: bool = False
