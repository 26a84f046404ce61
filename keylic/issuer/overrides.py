"""
Apply sparse overrides to the terms of a keypair store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from keylic.common import clock
from keylic.common.attributes import LicenseAttributes, ProductFeatures
from keylic.common.exceptions import ArgumentError, MissingFileError

if TYPE_CHECKING:
    from keylic.common.models import CliOptions, OverrideSet
    from keylic.issuer.keypair_store import KeypairStore

logger = logging.getLogger(__name__)


def validate_overrides(overrides: OverrideSet) -> None:
    """
    Reject overrides that cannot be applied. Runs before anything is mutated.

    Raises:
        ArgumentError: Mutually exclusive options or a reserved name
        MissingFileError: The lock file does not exist
    """
    ProductFeatures.check_names(overrides.product_features)

    if overrides.expiration_days is not None and overrides.expiration_date is not None:
        msg = "Cannot specify both --expiration-days and --expiration-date. Use only one."
        raise ArgumentError(msg, field="expiration")

    LicenseAttributes.check_names(overrides.license_attributes)

    if overrides.lock_path and overrides.lock_path.strip():
        if not Path(overrides.lock_path).is_file():
            msg = f"Lock file does not exist: {overrides.lock_path}"
            raise MissingFileError(msg, overrides.lock_path)


def validate_options(options: CliOptions) -> None:
    """
    Validate command-line options, including the files they name.

    Raises:
        ArgumentError: Missing or conflicting options
        MissingFileError: The keypair or lock file does not exist
    """
    if not options.private_file_path.strip():
        msg = "Private file path is required. Use --private or -p argument."
        raise ArgumentError(msg, field="private")

    if not Path(options.private_file_path).is_file():
        msg = f"Private file does not exist: {options.private_file_path}"
        raise MissingFileError(msg, options.private_file_path)

    if not options.save_keypair and not options.license_file_path.strip():
        msg = "Either --license or --save must be specified."
        raise ArgumentError(msg, field="license")

    if options.license_file_path.strip():
        path_license = Path(options.license_file_path)
        if path_license.exists() and not options.force_overwrite:
            msg = (
                "License file already exists and will not be overwritten: "
                f"{options.license_file_path}"
            )
            raise ArgumentError(msg, field="license")

        directory = path_license.parent
        if str(directory) and not directory.is_dir():
            msg = f"Directory does not exist for license file: {directory}"
            raise MissingFileError(msg, str(directory))

    validate_overrides(options)


def apply_overrides(overrides: OverrideSet, store: KeypairStore) -> None:
    """
    Apply overrides to the store, changing only the values that differ.

    Features and attributes are merged into the existing maps, not replaced.

    Raises:
        ArgumentError: The overrides are invalid; nothing has been changed
        MissingFileError: The lock file does not exist; nothing has been changed
    """
    validate_overrides(overrides)

    # Product properties
    if overrides.product_version and store.version != overrides.product_version:
        store.version = overrides.product_version

    if (
        overrides.product_publish_date is not None
        and store.publish_date != overrides.product_publish_date
    ):
        store.publish_date = overrides.product_publish_date

    if overrides.product_features:
        store.update_product_features(
            {**store.product_features, **overrides.product_features}
        )

    # License properties
    if overrides.license_type is not None and store.license_type != overrides.license_type:
        store.license_type = overrides.license_type

    if overrides.quantity is not None and store.quantity != overrides.quantity:
        store.quantity = overrides.quantity

    if (
        overrides.expiration_days is not None
        and store.expiration_days != overrides.expiration_days
    ):
        store.expiration_days = overrides.expiration_days
    elif overrides.expiration_date is not None and store.expiration_date_utc != clock.as_utc(
        overrides.expiration_date
    ):
        store.override_expiration_date(overrides.expiration_date)

    if overrides.license_attributes:
        store.update_license_attributes(
            {**store.license_attributes, **overrides.license_attributes}
        )

    if overrides.lock_path and overrides.lock_path.strip():
        if store.path_assembly != overrides.lock_path:
            store.path_assembly = overrides.lock_path
            store.is_locked_to_assembly = True

    if store.is_keypair_dirty:
        logger.debug("Overrides changed the keypair terms")
