"""
License signer: builds the terms of a keypair store into a signed license file.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from keylic.common import clock
from keylic.common.attributes import (
    ATTRIBUTE_ASSEMBLY_IDENTITY,
    ATTRIBUTE_EXPIRATION_DAYS,
    ATTRIBUTE_PRODUCT_IDENTITY,
    FEATURE_PRODUCT,
    FEATURE_PUBLISH_DATE,
    FEATURE_VERSION,
    LicenseAttributes,
    ProductFeatures,
)
from keylic.common.config import Config
from keylic.common.crypto import CryptoUtils
from keylic.common.exceptions import ArgumentError
from keylic.common.logging_utils import setup_logger
from keylic.common.models import Customer, LicensePayload, SignedLicense

if TYPE_CHECKING:
    from keylic.issuer.keypair_store import KeypairStore


class LicenseSigner:
    """License signer for creating signed licenses."""

    def __init__(self, config: Config | None = None, log_level: int | None = None):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)
        # Handlers only when a level is requested
        if log_level is not None:
            setup_logger(self.logger, log_level)

    @staticmethod
    def validate(store: KeypairStore) -> None:
        """
        Check the properties a license requires.

        Required: passphrase, private key, public key, id, product id, product,
        version, quantity, name, email. Optional: expiration days, company and
        the assembly lock.

        Raises:
            ArgumentError: Names the first missing or invalid property
        """
        for field in ("passphrase", "key_private", "key_public"):
            _require(store, field)

        if store.id == uuid.UUID(int=0):
            msg = "Id must be a valid GUID."
            raise ArgumentError(msg, field="id")

        for field in ("product_id", "product", "version"):
            _require(store, field)

        if store.quantity < 1:
            msg = "License quantity must be one or more."
            raise ArgumentError(msg, field="quantity")
        if store.expiration_days < 0:
            msg = "Expiration days must be zero (no expiry) or positive."
            raise ArgumentError(msg, field="expiration_days")

        for field in ("name", "email"):
            _require(store, field)

    def build_payload(self, store: KeypairStore) -> LicensePayload:
        """Terms of the license with the reserved features and attributes filled in."""
        self.validate(store)
        ProductFeatures.check_names(store.product_features)
        LicenseAttributes.check_names(store.license_attributes)

        # The public key is in every license, so without this hash a license
        # would be valid for any product signed with the same keys.
        identity_product = CryptoUtils.compute_product_identity(
            store.product_id, store.key_public, self.config
        )

        # Optionally, tie the license to one instance of the calling program.
        identity_assembly = (
            CryptoUtils.compute_assembly_identity(store.path_assembly)
            if store.is_locked_to_assembly and store.path_assembly.strip()
            else ""
        )

        expiration = None
        if store.expiration_days > 0:
            expiration = clock.utc_today() + timedelta(days=store.expiration_days)

        return LicensePayload(
            id=str(store.id),
            type=store.license_type,
            quantity=store.quantity,
            expiration=expiration,
            customer=Customer(
                name=store.name,
                email=store.email,
                company=store.company if store.company.strip() else None,
            ),
            product_features={
                **store.product_features,
                FEATURE_PRODUCT: store.product,
                FEATURE_VERSION: store.version,
                FEATURE_PUBLISH_DATE: (
                    store.publish_date.isoformat() if store.publish_date else ""
                ),
            },
            additional_attributes={
                **store.license_attributes,
                ATTRIBUTE_PRODUCT_IDENTITY: identity_product,
                ATTRIBUTE_ASSEMBLY_IDENTITY: identity_assembly,
                ATTRIBUTE_EXPIRATION_DAYS: (
                    "" if store.expiration_days == 0 else str(store.expiration_days)
                ),
            },
        )

    def generate_license(self, store: KeypairStore) -> SignedLicense:
        """
        Build and sign a license.

        Raises:
            ArgumentError: A required property is missing or invalid
            KeypairMismatchError: The passphrase does not decrypt the private key
        """
        payload = self.build_payload(store)
        private_key = CryptoUtils.decrypt_private_key(store.key_private, store.passphrase)
        signature = CryptoUtils.sign(private_key, payload.model_dump(mode="json"))
        return SignedLicense(payload=payload, signature=signature)

    def save_license_file(self, store: KeypairStore, path_license: str | Path) -> None:
        """
        Sign a license and write it to path_license, overwriting any existing file.

        The license is clear text; the signature prevents tampering.
        """
        license_data = self.generate_license(store)
        Path(path_license).write_text(
            json.dumps(license_data.model_dump(mode="json"), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        store._clear_license_dirty_flag()  # noqa: SLF001
        self.logger.info("License %s written to %s", license_data.payload.id, path_license)


def _require(store: KeypairStore, field: str) -> None:
    value = getattr(store, field)
    if not value or not value.strip():
        msg = f"{field} is required."
        raise ArgumentError(msg, field=field)
