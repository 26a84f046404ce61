import json
import logging
import uuid

import pytest

from keylic.common.crypto import CryptoUtils
from keylic.common.exceptions import ArgumentError, KeypairMismatchError
from keylic.issuer.license_signer import LicenseSigner

from conftest import PRODUCT_ID


def test_build_payload_adds_reserved_entries(store, freeze_now):
    freeze_now()
    store.update_product_features({"Reports": "Advanced"})
    store.expiration_days = 15

    payload = LicenseSigner().build_payload(store)

    assert payload.id == str(store.id)
    assert payload.expiration == store.expiration_date_utc
    assert payload.product_features == {
        "Reports": "Advanced",
        "Product": "My Product",
        "Version": "5.8.02 Beta",
        "Publish Date": "",
    }
    assert payload.additional_attributes == {
        "Product Identity": CryptoUtils.compute_product_identity(
            PRODUCT_ID, store.key_public
        ),
        "Assembly Identity": "",
        "Expiration Days": "15",
    }


def test_build_payload_never_expires(store):
    store.company = "  "

    payload = LicenseSigner().build_payload(store)

    assert payload.expiration is None
    assert payload.additional_attributes["Expiration Days"] == ""
    assert payload.customer.company is None


def test_license_file_is_signed_json(store, tmp_path):
    path = tmp_path / "app.lic"

    LicenseSigner().save_license_file(store, path)

    document = json.loads(path.read_text(encoding="utf-8"))
    assert set(document) == {"payload", "signature"}
    assert CryptoUtils.verify(
        CryptoUtils.load_public_key(store.key_public),
        document["signature"],
        document["payload"],
    )


def test_save_overwrites_existing_license(store, tmp_path):
    path = tmp_path / "app.lic"
    path.write_text("old", encoding="utf-8")

    store.save_license_file(path)

    assert json.loads(path.read_text(encoding="utf-8"))["payload"]["id"] == str(store.id)


@pytest.mark.parametrize(
    "field", ["passphrase", "key_public", "product_id", "product", "version", "name", "email"]
)
def test_required_fields(store, field):
    setattr(store, field, " ")

    with pytest.raises(ArgumentError) as excinfo:
        LicenseSigner().generate_license(store)
    assert excinfo.value.field == field


def test_nil_id_rejected(store):
    store.id = uuid.UUID(int=0)

    with pytest.raises(ArgumentError, match="Id must be a valid GUID."):
        LicenseSigner.validate(store)


def test_invalid_quantity_rejected(store):
    store.quantity = 0

    with pytest.raises(ArgumentError, match="quantity"):
        LicenseSigner.validate(store)


def test_changed_passphrase(store, tmp_path):
    store.passphrase = "A different passphrase"
    path = tmp_path / "app.lic"

    with pytest.raises(KeypairMismatchError):
        store.save_license_file(path)
    assert not path.exists()
    assert store.is_license_dirty


def test_signer_leaves_logging_to_the_application():
    logger = logging.getLogger("keylic.issuer.license_signer")
    logger.setLevel(logging.NOTSET)
    handlers = list(logger.handlers)

    LicenseSigner()

    assert logger.level == logging.NOTSET
    assert logger.handlers == handlers


def test_signer_log_level_on_request():
    logger = logging.getLogger("keylic.issuer.license_signer")

    LicenseSigner(log_level=logging.DEBUG)

    assert logger.level == logging.DEBUG
    logger.setLevel(logging.NOTSET)
