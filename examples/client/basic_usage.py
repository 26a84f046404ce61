"""
Basic usage example of LicenseValidator.

This example demonstrates how a licensed application checks the license file
that sits beside it and reads the licensed terms.
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path to import keylic
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from keylic import LicenseType, LicenseValidator

# Compiled into the application, never read from the license file.
PRODUCT_ID = "Replace with the product id of your keypair file"
PUBLIC_KEY = "Replace with the public key of your keypair file"


def main() -> None:
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    validator = LicenseValidator()
    # Looks for <program>.lic next to the running program
    is_valid, record, messages = validator.is_license_valid(PRODUCT_ID, PUBLIC_KEY)
    if not is_valid:
        logger.error("License is not valid:\n%s", messages)
        sys.exit(1)

    logger.info("Licensed to %s <%s>", record.name, record.email)
    if record.license_type is LicenseType.TRIAL:
        logger.info("Trial license, %s days remaining", record.expiration_days)

    if record.has_product_feature("Reports"):
        logger.info("Reports enabled: %s", record.get_product_feature("Reports"))


if __name__ == "__main__":
    main()
