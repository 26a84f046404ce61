"""
Licensor-side keypair store.

Holds the passphrase, the encrypted private key, the public key, the product
identity and every editable license term. Any change marks the store dirty:
``is_keypair_dirty`` until the keypair file is saved, ``is_license_dirty``
until a license is signed.

Example:
    store = KeypairStore()
    store.passphrase = "My secret passphrase."
    store.create_keypair()
    store.product = "My Product"
    store.version = "5.8.02 Beta"
    ...
    store.save_keypair(Path("my.private"))
    store.save_license_file(Path("MyApplication.lic"))
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import date, datetime, timedelta
from pathlib import Path

from keylic.client.license_record import LicenseRecord
from keylic.client.license_validator import LicenseValidator
from keylic.common import clock
from keylic.common.attributes import (
    LicenseAttributes,
    ProductFeatures,
    dictionaries_equal,
)
from keylic.common.config import NEVER_EXPIRES, Config
from keylic.common.exceptions import KeypairFormatError
from keylic.common.mixins import DirtyTracking, Tracked
from keylic.common.models import (
    ApplicationBlock,
    CustomerBlock,
    KeypairDocument,
    LicenseTermsBlock,
    LicenseType,
    NameValue,
    ProductBlock,
    SecretBlock,
)
from keylic.issuer.keygen import KeyGenerator
from keylic.issuer.license_signer import LicenseSigner
from keylic.issuer.persistence import KeypairPersistence

logger = logging.getLogger(__name__)


class KeypairStore(DirtyTracking):
    """Mutable, secret-bearing license terms owned by the licensor."""

    id: Tracked[uuid.UUID] = Tracked()
    passphrase: Tracked[str] = Tracked()
    key_public: Tracked[str] = Tracked()
    product_id: Tracked[str] = Tracked()

    product: Tracked[str] = Tracked()
    version: Tracked[str] = Tracked()
    publish_date: Tracked[date | None] = Tracked()

    name: Tracked[str] = Tracked()
    email: Tracked[str] = Tracked()
    company: Tracked[str] = Tracked()

    license_type: Tracked[LicenseType] = Tracked()
    quantity: Tracked[int] = Tracked()

    # Not part of the signed terms: only hashes of these are embedded in a license.
    path_assembly: Tracked[str] = Tracked()
    is_locked_to_assembly: Tracked[bool] = Tracked()

    def __init__(self, config: Config | None = None) -> None:
        super().__init__()
        self.config = config or Config()

        self._id = uuid.uuid4()
        self._passphrase = ""
        self._key_private = ""
        self._key_public = ""
        self._product_id = ""

        self._product = ""
        self._version = ""
        self._publish_date: date | None = None
        self._product_features = ProductFeatures()
        self._license_attributes = LicenseAttributes()

        self._name = ""
        self._email = ""
        self._company = ""

        self._license_type = LicenseType.STANDARD
        self._expiration_date_utc = NEVER_EXPIRES
        self._expiration_days = 0
        self._quantity = 1

        self._path_assembly = ""
        self._is_locked_to_assembly = False

    # Keys and identity

    @property
    def key_private(self) -> str:
        """Passphrase-encrypted private key (base64). Set only by create_keypair or loading."""
        return self._key_private

    def create_keypair(self) -> None:
        """Generate a new keypair protected by the current passphrase."""
        key_private, key_public = KeyGenerator.generate_keypair(self.passphrase)
        self._set_tracked("key_private", key_private)
        self.key_public = key_public

    def new_id(self) -> None:
        self.id = uuid.uuid4()

    @staticmethod
    def is_reserved_feature_name(name: str) -> bool:
        return ProductFeatures.is_reserved_name(name)

    @staticmethod
    def is_reserved_attribute_name(name: str) -> bool:
        return LicenseAttributes.is_reserved_name(name)

    # Expiration

    @property
    def expiration_days(self) -> int:
        return self._expiration_days

    @expiration_days.setter
    def expiration_days(self, value: int) -> None:
        """Setting the days recomputes the expiration date; zero never expires."""
        if self._set_tracked("expiration_days", value):
            self.expiration_date_utc = (
                NEVER_EXPIRES
                if value == 0
                else clock.utc_today() + timedelta(days=value)
            )

    @property
    def expiration_date_utc(self) -> datetime:
        return self._expiration_date_utc

    @expiration_date_utc.setter
    def expiration_date_utc(self, value: datetime) -> None:
        """Setting the date directly does not change the expiration days."""
        self._set_tracked("expiration_date_utc", clock.as_utc(value))

    def override_expiration_date(self, value: datetime) -> None:
        """Pin the expiration date and derive the remaining days from it once."""
        self.expiration_date_utc = value
        self._set_tracked(
            "expiration_days", (self.expiration_date_utc - clock.utc_today()).days
        )

    # Product features and license attributes

    @property
    def product_features(self) -> ProductFeatures:
        return self._product_features

    @product_features.setter
    def product_features(self, value: Mapping[str, str]) -> None:
        self.update_product_features(value)

    @property
    def license_attributes(self) -> LicenseAttributes:
        return self._license_attributes

    @license_attributes.setter
    def license_attributes(self, value: Mapping[str, str]) -> None:
        self.update_license_attributes(value)

    def update_product_features(self, new_features: Mapping[str, str]) -> None:
        """
        Replace the product features.

        Only an actual change replaces the map and marks the store dirty.

        Raises:
            ArgumentError: A feature name is reserved
        """
        if dictionaries_equal(new_features, self._product_features):
            return
        ProductFeatures.check_names(new_features)
        self._set_tracked("product_features", ProductFeatures(new_features))

    def update_license_attributes(self, new_attributes: Mapping[str, str]) -> None:
        """
        Replace the license attributes.

        Only an actual change replaces the map and marks the store dirty.

        Raises:
            ArgumentError: An attribute name is reserved
        """
        if dictionaries_equal(new_attributes, self._license_attributes):
            return
        LicenseAttributes.check_names(new_attributes)
        self._set_tracked("license_attributes", LicenseAttributes(new_attributes))

    # Persistence

    def save_keypair(self, path_keypair: str | Path) -> None:
        """
        Save passphrase, keys, identity and license terms.

        THIS FILE MUST BE KEPT SECRET.
        """
        KeypairPersistence.save_keypair(Path(path_keypair), self._to_document())
        self._clear_keypair_dirty_flag()

    def load_keypair(self, path_keypair: str | Path) -> None:
        """
        Load a keypair file; a freshly loaded store is never dirty.

        Raises:
            MissingFileError: The keypair file does not exist
            KeypairFormatError: The keypair file cannot be read
        """
        path = Path(path_keypair)
        document, is_legacy = KeypairPersistence.load_keypair(path, self.config)
        self._apply_document(document)
        if is_legacy:
            self.save_keypair(path)
        logger.info("Loaded keypair for %s %s", self.product, self.version)

        self._clear_keypair_dirty_flag()
        self._clear_license_dirty_flag()

    def _to_document(self) -> KeypairDocument:
        return KeypairDocument(
            version=self.config.KEYPAIR_FORMAT_VERSION,
            id=str(self.id),
            secret=SecretBlock(passphrase=self.passphrase, private_key=self.key_private),
            application=ApplicationBlock(
                public_key=self.key_public, product_id=self.product_id
            ),
            customer=CustomerBlock(name=self.name, email=self.email, company=self.company),
            product=ProductBlock(
                name=self.product, version=self.version, publish_date=self.publish_date
            ),
            product_features=[
                NameValue(name=name, value=value)
                for name, value in self.product_features.items()
            ],
            license_attributes=[
                NameValue(name=name, value=value)
                for name, value in self.license_attributes.items()
            ],
            license=LicenseTermsBlock(
                type=self.license_type,
                expiration_date=(
                    None if self.expiration_days == 0 else self.expiration_date_utc
                ),
                expiration_days=self.expiration_days,
                quantity=self.quantity,
            ),
            path_assembly=self.path_assembly,
        )

    def _apply_document(self, document: KeypairDocument) -> None:
        try:
            self.id = uuid.UUID(document.id)
        except ValueError as err:
            msg = f"Keypair id is not a valid UUID: {document.id}"
            raise KeypairFormatError(msg) from err

        self.passphrase = document.secret.passphrase
        self._set_tracked("key_private", document.secret.private_key)
        self.key_public = document.application.public_key
        self.product_id = document.application.product_id

        self.name = document.customer.name
        self.email = document.customer.email
        self.company = document.customer.company

        self.product = document.product.name
        self.version = document.product.version
        self.publish_date = document.product.publish_date

        self._set_tracked(
            "product_features",
            ProductFeatures(
                (feature.name, feature.value)
                for feature in document.product_features
                if feature.name
            ),
        )
        self._set_tracked(
            "license_attributes",
            LicenseAttributes(
                (attribute.name, attribute.value)
                for attribute in document.license_attributes
                if attribute.name
            ),
        )

        terms = document.license
        self.license_type = terms.type
        if terms.expiration_date is None:
            self._set_tracked("expiration_date_utc", NEVER_EXPIRES)
            self._set_tracked("expiration_days", terms.expiration_days)
        else:
            self._set_tracked("expiration_date_utc", clock.as_utc(terms.expiration_date))
            self._set_tracked(
                "expiration_days", (self.expiration_date_utc - clock.utc_today()).days
            )
        self.quantity = terms.quantity

        self.path_assembly = document.path_assembly
        self.is_locked_to_assembly = bool(document.path_assembly)

    # Licenses

    def save_license_file(self, path_license: str | Path) -> None:
        """
        Sign a license with the current terms and write it to path_license.

        Raises:
            ArgumentError: A required property is missing or invalid
            KeypairMismatchError: The passphrase does not decrypt the private key
        """
        LicenseSigner(config=self.config).save_license_file(self, path_license)

    def is_this_license_valid(
        self,
        product_id: str,
        public_key: str,
        path_license: str | Path,
        path_assembly: str | Path | None = None,
    ) -> tuple[bool, str]:
        """
        Validate a license file against this store and adopt its terms.

        A valid license whose terms differ from the store is still valid; the
        differences are returned as an informational message.

        Returns:
            Whether the license is valid and the messages
        """
        try:
            self.key_public = public_key
            is_valid, record, messages = LicenseValidator(
                self.config
            ).is_this_license_valid(product_id, public_key, path_license, path_assembly)
            if not is_valid:
                return False, messages

            path_assembly_str = str(path_assembly) if path_assembly else ""
            differences = self.compare_with(record, path_assembly_str)
            messages = ""
            if differences:
                messages = (
                    "The license is valid but the following properties differ "
                    "from the keypair file:\n" + "\n".join(differences)
                )

            self.product_id = record.product_id
            self.path_assembly = path_assembly_str
            self.is_locked_to_assembly = record.is_locked_to_assembly

            self.product = record.product
            self.version = record.version
            self.publish_date = record.publish_date
            self.update_product_features(record.product_features)
            self.update_license_attributes(record.license_attributes)

            self.license_type = record.license_type
            self.expiration_date_utc = record.expiration_date_utc
            self._set_tracked("expiration_days", record.expiration_days)
            self.quantity = record.quantity

            self.name = record.name
            self.email = record.email
            self.company = record.company
            return True, messages
        finally:
            self._clear_license_dirty_flag()

    def compare_with(self, record: LicenseRecord, path_assembly: str = "") -> list[str]:
        """Human-readable differences between this store and a validated license."""
        differences: list[str] = []

        def differ(label: str, current: object, new: object) -> None:
            differences.append(f"{label}: Current = {current}, New = {new}")

        def expiration(value: datetime) -> str:
            return "None" if value == NEVER_EXPIRES else value.date().isoformat()

        if self.product_id and self.product_id != record.product_id:
            differ("Product ID", self.product_id, record.product_id)
        if self.path_assembly and self.path_assembly != path_assembly:
            differ("Assembly path", self.path_assembly, path_assembly)
        if self.is_locked_to_assembly != record.is_locked_to_assembly:
            differ(
                "IsLockedToAssembly",
                self.is_locked_to_assembly,
                record.is_locked_to_assembly,
            )
        if self.product and self.product != record.product:
            differ("Product", self.product, record.product)
        if self.version and self.version != record.version:
            differ("Version", self.version, record.version)
        if self.publish_date is not None and self.publish_date != record.publish_date:
            differ("Publish date", self.publish_date, record.publish_date)
        if self.license_type != record.license_type:
            differ("Type", self.license_type, record.license_type)
        if self.expiration_date_utc != record.expiration_date_utc:
            differ(
                "Expiration date",
                expiration(self.expiration_date_utc),
                expiration(record.expiration_date_utc),
            )
        if self.expiration_days != record.expiration_days:
            differ("Expiration days", self.expiration_days, record.expiration_days)
        if self.quantity != record.quantity:
            differ("Quantity", self.quantity, record.quantity)
        if self.name and self.name != record.name:
            differ("Name", self.name, record.name)
        if self.email and self.email != record.email:
            differ("Email", self.email, record.email)
        if self.company and self.company != record.company:
            differ("Company", self.company, record.company)

        for label, current, new in (
            ("Product feature", self.product_features, record.product_features),
            ("License attribute", self.license_attributes, record.license_attributes),
        ):
            for key, value in current.items():
                if new.get(key) != value:
                    differ(f"{label} '{key}'", value, new.get(key, "not present"))
            for key, value in new.items():
                if key not in current:
                    differ(f"{label} '{key}'", "not present", value)

        return differences
