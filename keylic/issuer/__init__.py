"""
Licensor side: keypairs, license terms and signing.
"""

from keylic.issuer.keypair_store import KeypairStore
from keylic.issuer.license_signer import LicenseSigner

__all__ = ["KeypairStore", "LicenseSigner"]
