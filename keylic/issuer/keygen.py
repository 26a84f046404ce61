"""
Key generator for licensor Ed25519 keypairs.
"""

from __future__ import annotations

import logging

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from keylic.common.crypto import CryptoUtils
from keylic.common.exceptions import ArgumentError

logger = logging.getLogger(__name__)


class KeyGenerator:
    """Key generator for creating passphrase-protected signing keys."""

    @staticmethod
    def generate_keypair(passphrase: str) -> tuple[str, str]:
        """
        Generate a new keypair.

        Returns:
            The passphrase-encrypted private key and the public key, both base64 DER
        """
        if not passphrase:
            msg = "Passphrase is required to create a keypair."
            raise ArgumentError(msg, field="passphrase")

        logger.info("Generating Ed25519 license signing keys...")
        private_key = Ed25519PrivateKey.generate()

        key_private = CryptoUtils.encrypt_private_key(private_key, passphrase)
        key_public = CryptoUtils.public_key_to_string(private_key.public_key())

        logger.info("Keypair generated. Keep the passphrase and private key secure!")
        return key_private, key_public
