"""
Keypair file persistence.

The keypair file holds the passphrase and the private key and MUST be kept
secret. It never ships with the product.
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from keylic.common import clock
from keylic.common.attributes import (
    ATTRIBUTE_EXPIRATION_DAYS,
    FEATURE_PRODUCT,
    FEATURE_PUBLISH_DATE,
    FEATURE_VERSION,
)
from keylic.common.config import Config
from keylic.common.exceptions import KeypairFormatError, MissingFileError
from keylic.common.models import (
    ApplicationBlock,
    CustomerBlock,
    KeypairDocument,
    LegacyKeypairDocument,
    LicenseTermsBlock,
    ProductBlock,
    SecretBlock,
    SignedLicense,
)

logger = logging.getLogger(__name__)


class KeypairPersistence:
    """Handles loading and saving keypair files."""

    @staticmethod
    def save_keypair(file_path: Path, document: KeypairDocument) -> None:
        """Save the keypair document, overwriting the file."""
        file_path.write_text(document.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("Keypair file saved: %s", file_path)

    @staticmethod
    def load_keypair(
        file_path: Path, config: Config | None = None
    ) -> tuple[KeypairDocument, bool]:
        """
        Load a keypair document.

        Returns:
            The document and whether it was imported from the legacy layout

        Raises:
            MissingFileError: The file does not exist
            KeypairFormatError: The file cannot be parsed
        """
        if not file_path.is_file():
            msg = f"Keypair file does not exist: {file_path}"
            raise MissingFileError(msg, str(file_path))

        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except ValueError as err:
            msg = f"Keypair file {file_path} is not valid: {err}"
            raise KeypairFormatError(msg) from err
        if not isinstance(raw, dict):
            msg = f"Keypair file {file_path} is not valid."
            raise KeypairFormatError(msg)

        if "version" not in raw:
            logger.info("Importing legacy keypair file %s", file_path)
            return KeypairPersistence._import_legacy(file_path, raw, config), True

        try:
            return KeypairDocument.model_validate(raw), False
        except ValidationError as err:
            msg = f"Keypair file {file_path} is not valid: {err}"
            raise KeypairFormatError(msg) from err

    @staticmethod
    def _import_legacy(
        file_path: Path, raw: dict[str, Any], config: Config | None
    ) -> KeypairDocument:
        """
        Build a current document from the legacy two-file layout.

        The legacy keypair file held only the secrets and the application
        identity; the license terms were read back from the sibling license file.
        """
        config = config or Config()
        path_license = file_path.with_suffix(config.LICENSE_FILE_EXTENSION)
        try:
            legacy = LegacyKeypairDocument.model_validate(raw)
            payload = SignedLicense.model_validate_json(
                path_license.read_text(encoding="utf-8")
            ).payload

            features = payload.product_features
            expiration_days = int(
                payload.additional_attributes.get(ATTRIBUTE_EXPIRATION_DAYS) or 0
            )
            publish_date = features.get(FEATURE_PUBLISH_DATE) or None
            expiration_date = (
                clock.utc_today() + timedelta(days=expiration_days)
                if expiration_days > 0
                else None
            )

            return KeypairDocument(
                version=config.KEYPAIR_FORMAT_VERSION,
                id=legacy.id,
                secret=SecretBlock(
                    passphrase=legacy.passphrase, private_key=legacy.private_key
                ),
                application=ApplicationBlock(
                    public_key=legacy.public_key, product_id=legacy.product_id
                ),
                customer=CustomerBlock(
                    name=payload.customer.name,
                    email=payload.customer.email,
                    company=payload.customer.company or "",
                ),
                product=ProductBlock(
                    name=features.get(FEATURE_PRODUCT, ""),
                    version=features.get(FEATURE_VERSION, ""),
                    publish_date=publish_date,
                ),
                license=LicenseTermsBlock(
                    type=payload.type,
                    expiration_date=expiration_date,
                    expiration_days=expiration_days,
                    quantity=payload.quantity,
                ),
                path_assembly=legacy.path_assembly,
            )
        except (OSError, ValueError) as err:
            msg = f"Failed to convert old private file format: {err}"
            raise KeypairFormatError(msg) from err
