import logging
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

import pytest

from keylic.common import clock
from keylic.issuer.keypair_store import KeypairStore

PASSPHRASE = "My secret passphrase."
PRODUCT_ID = "a3d5bc21-product-id"


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """The CLI attaches handlers to streams that CliRunner closes afterwards."""
    yield
    logging.getLogger("keylic").handlers.clear()


@pytest.fixture
def store() -> KeypairStore:
    """A keypair store with a fresh keypair and every required term set."""
    keypair = KeypairStore()
    keypair.passphrase = PASSPHRASE
    keypair.create_keypair()
    keypair.product_id = PRODUCT_ID
    keypair.product = "My Product"
    keypair.version = "5.8.02 Beta"
    keypair.name = "Jane Doe"
    keypair.email = "jane@example.com"
    keypair.company = "Example Ltd"
    return keypair


@pytest.fixture
def freeze_now(monkeypatch: pytest.MonkeyPatch):
    """Pin the clock; returns a setter taking an offset in days from the real now."""
    real_now = datetime.now(timezone.utc)

    def freeze(days: int = 0) -> datetime:
        pinned = real_now + timedelta(days=days)
        monkeypatch.setattr(clock, "utc_now", lambda: pinned)
        return pinned

    return freeze
