import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from keylic.common.crypto import CryptoUtils
from keylic.common.exceptions import ArgumentError
from keylic.issuer.keygen import KeyGenerator


def test_key_generator_generate_keypair():
    """Test key generation and that both keys can be loaded back."""
    key_private, key_public = KeyGenerator.generate_keypair("passphrase")

    private_key = CryptoUtils.decrypt_private_key(key_private, "passphrase")
    public_key = CryptoUtils.load_public_key(key_public)

    assert isinstance(private_key, Ed25519PrivateKey)
    assert isinstance(public_key, Ed25519PublicKey)
    assert CryptoUtils.public_key_to_string(private_key.public_key()) == key_public


def test_key_generator_unique_keys():
    first = KeyGenerator.generate_keypair("passphrase")
    second = KeyGenerator.generate_keypair("passphrase")

    assert first[1] != second[1]


def test_key_generator_requires_passphrase():
    with pytest.raises(ArgumentError) as excinfo:
        KeyGenerator.generate_keypair("")
    assert excinfo.value.field == "passphrase"
