"""
Create a keypair file and sign a license with it.
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path to import keylic
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from keylic import KeypairStore, LicenseType


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    store = KeypairStore()
    store.passphrase = "My secret passphrase."
    store.create_keypair()
    store.product_id = "My product id"
    store.product = "My Product"
    store.version = "5.8.02 Beta"
    store.update_product_features({"Reports": "Advanced"})
    store.name = "Jane Doe"
    store.email = "jane@example.com"
    store.license_type = LicenseType.TRIAL
    store.expiration_days = 30

    store.save_keypair(Path("my.private"))
    store.save_license_file(Path("MyApplication.lic"))
    logger.info("Public key for the application: %s", store.key_public)


if __name__ == "__main__":
    main()
