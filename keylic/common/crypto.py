"""Common cryptographic utilities.
"""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Any, cast

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from keylic.common.config import Config
from keylic.common.exceptions import KeypairMismatchError


class CryptoUtils:
    """Utility class for cryptographic operations."""

    @staticmethod
    def sha256_hex(data: bytes) -> str:
        digest = hashes.Hash(hashes.SHA256())
        digest.update(data)
        return digest.finalize().hex()

    @staticmethod
    def compute_product_identity(
        product_id: str, public_key: str, config: Config | None = None
    ) -> str:
        """Hash binding a license to the product id and public key of one product."""
        separator = (config or Config()).PRODUCT_IDENTITY_SEPARATOR
        return CryptoUtils.sha256_hex(
            (product_id + separator + public_key).encode("utf-8")
        )

    @staticmethod
    def compute_assembly_identity(path: str | Path | None) -> str:
        """Hash of the file contents, or an empty string when there is no file to lock to."""
        if not path:
            return ""
        digest = hashes.Hash(hashes.SHA256())
        with Path(path).open("rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                digest.update(chunk)
        return digest.finalize().hex()

    @staticmethod
    def canonical_bytes(obj: dict[str, Any]) -> bytes:
        """Deterministic encoding of a payload for signing and verification."""
        return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode()

    @staticmethod
    def encrypt_private_key(private_key: Ed25519PrivateKey, passphrase: str) -> str:
        der = private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.BestAvailableEncryption(
                passphrase.encode("utf-8")
            ),
        )
        return base64.b64encode(der).decode("ascii")

    @staticmethod
    def decrypt_private_key(key_private: str, passphrase: str) -> Ed25519PrivateKey:
        """
        Load the passphrase-encrypted private key.

        Raises:
            KeypairMismatchError: The passphrase does not decrypt the key
        """
        try:
            der = base64.b64decode(key_private, validate=True)
            private_key = serialization.load_der_private_key(
                der, password=passphrase.encode("utf-8")
            )
        except (ValueError, TypeError, binascii.Error) as err:
            raise KeypairMismatchError from err
        if not isinstance(private_key, Ed25519PrivateKey):
            msg = "The private key is not an Ed25519 key."
            raise KeypairMismatchError(msg)
        return private_key

    @staticmethod
    def public_key_to_string(public_key: Ed25519PublicKey) -> str:
        der = public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return base64.b64encode(der).decode("ascii")

    @staticmethod
    def load_public_key(key_public: str) -> Ed25519PublicKey:
        """
        Raises:
            ValueError: The string is not a base64 Ed25519 public key
        """
        try:
            der = base64.b64decode(key_public, validate=True)
        except binascii.Error as err:
            msg = "Public key is not valid base64."
            raise ValueError(msg) from err
        try:
            public_key = serialization.load_der_public_key(der)
        except UnsupportedAlgorithm as err:
            msg = "Public key algorithm is not supported."
            raise ValueError(msg) from err
        if not isinstance(public_key, Ed25519PublicKey):
            msg = "Public key is not an Ed25519 key."
            raise ValueError(msg)
        return cast("Ed25519PublicKey", public_key)

    @staticmethod
    def sign(private_key: Ed25519PrivateKey, obj: dict[str, Any]) -> str:
        return private_key.sign(CryptoUtils.canonical_bytes(obj)).hex()

    @staticmethod
    def verify(public_key: Ed25519PublicKey, signature: str, obj: dict[str, Any]) -> bool:
        try:
            public_key.verify(bytes.fromhex(signature), CryptoUtils.canonical_bytes(obj))
        except (InvalidSignature, ValueError):
            return False
        return True
