"""
License validation for the licensed application.

The application supplies its own product id and public key (compiled in,
never read from the license file). A license is valid only when it was signed
by the matching private key, was issued for this product, optionally matches
this copy of the program, and has not expired.

Example:
    validator = LicenseValidator()
    is_valid, record, messages = validator.is_license_valid(PRODUCT_ID, PUBLIC_KEY)
    if not is_valid:
        run_unlicensed(messages)
    elif record.license_type is LicenseType.TRIAL:
        limit_features()
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from keylic.client.license_record import LicenseRecord
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
from keylic.common.config import NEVER_EXPIRES, Config
from keylic.common.crypto import CryptoUtils
from keylic.common.exceptions import ArgumentError
from keylic.common.models import SignedLicense

MESSAGE_LICENSE_MISSING = "Unable to find license file {0}."
MESSAGE_INVALID_PRODUCT_IDENTITY = "License file {0} is not associated with this product."
MESSAGE_INVALID_PRODUCT_INSTANCE = (
    "License file {0} is not associated with this instance of the product {1}."
)
MESSAGE_INVALID_SIGNATURE = "License signature validation error!"
MESSAGE_EXPIRED = "Licensing for this product has expired!"
MESSAGE_BUILD_DATE = "This license is not valid for the current version of the product."


@dataclass(frozen=True)
class ValidationFailure:
    """One reason a license is invalid."""

    kind: str
    message: str
    how_to_resolve: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}\n{self.how_to_resolve}"


class LicenseValidator:
    """Validates signed license files and reconstructs their terms."""

    def __init__(self, config: Config | None = None):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)

    def is_license_valid(
        self, product_id: str, public_key: str
    ) -> tuple[bool, LicenseRecord, str]:
        """
        Validate the license file that sits beside the running program.

        The program's modification time is its build date.
        """
        program = self.get_program_path()
        path_license = program.with_suffix(self.config.LICENSE_FILE_EXTENSION)
        return self.is_this_license_valid(
            product_id,
            public_key,
            path_license,
            path_assembly=program,
            build_date=self.get_build_date(program),
        )

    @staticmethod
    def get_program_path() -> Path:
        return Path(sys.argv[0]).resolve()

    @staticmethod
    def get_build_date(program: Path) -> datetime | None:
        """Modification time of the program in UTC, None when it cannot be read."""
        try:
            return datetime.fromtimestamp(program.stat().st_mtime, timezone.utc)
        except OSError:
            return None

    def is_this_license_valid(
        self,
        product_id: str,
        public_key: str,
        path_license: str | Path,
        path_assembly: str | Path | None = None,
        build_date: datetime | None = None,
    ) -> tuple[bool, LicenseRecord, str]:
        """
        Validate the passed license file.

        Validation failures are reported, never raised: every failed check is
        collected and returned together in the messages.

        Args:
            product_id: Verifies that the license file is associated with this product
            public_key: Public key of the product (base64)
            path_license: Path to the license file
            path_assembly: Path to the program the license may be locked to
            build_date: Build date of the product; must not be after the expiration

        Returns:
            Whether the license is valid, the license record (populated only
            when valid) and the messages
        """
        for name, value in (
            ("product_id", product_id),
            ("public_key", public_key),
            ("path_license", str(path_license or "")),
        ):
            if not value or not value.strip():
                msg = f"{name} is required."
                raise ArgumentError(msg, field=name)

        record = LicenseRecord()
        path = Path(path_license)
        support = self.config.SUPPORT_MESSAGE

        if not path.is_file():
            self.logger.info("License file %s not found", path)
            return False, record, f"{MESSAGE_LICENSE_MISSING.format(path)}\n\n{support}"

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            signed = SignedLicense.model_validate(raw)
        except (OSError, ValueError) as err:
            self.logger.info("License file %s could not be read: %s", path, err)
            return False, record, str(err)

        payload = signed.payload
        attributes = payload.additional_attributes
        failures: list[ValidationFailure] = []

        # Required
        identity_product = CryptoUtils.compute_product_identity(
            product_id, public_key, self.config
        )
        if attributes.get(ATTRIBUTE_PRODUCT_IDENTITY) != identity_product:
            failures.append(
                ValidationFailure(
                    "ProductIdentityValidationFailure",
                    MESSAGE_INVALID_PRODUCT_IDENTITY.format(path),
                    support,
                )
            )

        # Optional: the license is locked when it carries an assembly hash
        is_locked = False
        identity_assembly_license = attributes.get(ATTRIBUTE_ASSEMBLY_IDENTITY, "")
        if identity_assembly_license.strip():
            is_locked = True
            try:
                identity_assembly = CryptoUtils.compute_assembly_identity(path_assembly)
            except OSError as err:
                self.logger.info("Unable to hash %s: %s", path_assembly, err)
                identity_assembly = ""
            if identity_assembly != identity_assembly_license:
                failures.append(
                    ValidationFailure(
                        "AssemblyIdentityValidationFailure",
                        MESSAGE_INVALID_PRODUCT_INSTANCE.format(path, path_assembly),
                        support,
                    )
                )

        failures.extend(
            self._validate_license(signed, raw["payload"], public_key, build_date)
        )

        if failures:
            self.logger.info("License %s invalid (%d failures)", payload.id, len(failures))
            return False, record, "\n".join(str(failure) for failure in failures)

        try:
            self._populate(record, signed, product_id, is_locked, path_assembly)
        except ValueError as err:
            return False, LicenseRecord(), str(err)

        self.logger.debug("License %s valid", payload.id)
        return True, record, ""

    def _validate_license(
        self,
        signed: SignedLicense,
        raw_payload: dict[str, Any],
        public_key: str,
        build_date: datetime | None,
    ) -> list[ValidationFailure]:
        """Signature, expiration and build-date checks."""
        failures: list[ValidationFailure] = []
        payload = signed.payload

        try:
            is_signed = CryptoUtils.verify(
                CryptoUtils.load_public_key(public_key), signed.signature, raw_payload
            )
        except ValueError as err:
            self.logger.info("Public key rejected: %s", err)
            is_signed = False
        if not is_signed:
            failures.append(
                ValidationFailure(
                    "InvalidSignatureValidationFailure",
                    MESSAGE_INVALID_SIGNATURE,
                    "The license signature and data do not match. This usually "
                    "happens when a license file is corrupted or has been altered.",
                )
            )

        # Expiry is enforced only when the license carries an expiration-days value.
        expiration_days = payload.additional_attributes.get(ATTRIBUTE_EXPIRATION_DAYS, "")
        if expiration_days and payload.expiration is not None:
            now = clock.utc_now()
            self.logger.debug(
                "License %s expiration=%s, now=%s", payload.id, payload.expiration, now
            )
            if clock.as_utc(payload.expiration) < now:
                failures.append(
                    ValidationFailure(
                        "LicenseExpiredValidationFailure",
                        MESSAGE_EXPIRED,
                        "Your license is expired. Please contact your distributor "
                        "or vendor to renew the license.",
                    )
                )

        if build_date is not None and payload.expiration is not None:
            if clock.as_utc(build_date) > clock.as_utc(payload.expiration):
                failures.append(
                    ValidationFailure(
                        "ProductBuildDateValidationFailure",
                        MESSAGE_BUILD_DATE,
                        "This version of the product was built after the license "
                        "expired. Please contact your distributor or vendor to "
                        "renew the license.",
                    )
                )

        return failures

    @staticmethod
    def _populate(
        record: LicenseRecord,
        signed: SignedLicense,
        product_id: str,
        is_locked: bool,  # noqa: FBT001
        path_assembly: str | Path | None,
    ) -> None:
        payload = signed.payload
        features = ProductFeatures(payload.product_features)

        record.product = features.get(FEATURE_PRODUCT, "")
        record.version = features.get(FEATURE_VERSION, "")
        publish_date = features.get(FEATURE_PUBLISH_DATE, "")
        record.publish_date = date.fromisoformat(publish_date) if publish_date else None

        record.product_features = features.without_reserved()
        record.license_attributes = LicenseAttributes(
            payload.additional_attributes
        ).without_reserved()

        record.license_type = payload.type
        # Days REMAINING until expiry, not the days originally granted.
        if payload.expiration is not None:
            record.expiration_date_utc = clock.as_utc(payload.expiration).replace(
                hour=0, minute=0, second=0, microsecond=0
            )
            record.expiration_days = (
                record.expiration_date_utc - clock.utc_today()
            ).days
        else:
            record.expiration_date_utc = NEVER_EXPIRES
            record.expiration_days = 0
        record.quantity = payload.quantity

        record.name = payload.customer.name
        record.email = payload.customer.email
        record.company = payload.customer.company or ""

        record.product_id = product_id
        record.is_locked_to_assembly = is_locked
        record.path_assembly = str(path_assembly) if path_assembly else ""
