import pytest

from keylic.common.attributes import (
    LicenseAttributes,
    ProductFeatures,
    convert_text_to_dictionary,
    dictionaries_equal,
    parse_key_value_pairs,
)
from keylic.common.exceptions import ArgumentError, AttributeNotFoundError


def test_convert_text_to_dictionary():
    text = "a=1\n\n  b = 2  \r\nflag\n=orphan\na=3\nurl=http://x?y=z"

    result = convert_text_to_dictionary(text)

    assert result == {"a": "3", "b": "2", "flag": "", "url": "http://x?y=z"}
    assert list(result) == ["a", "b", "flag", "url"]


@pytest.mark.parametrize("text", [None, "", "   \n\t\n"])
def test_convert_text_to_dictionary_empty(text):
    assert convert_text_to_dictionary(text) == {}


def test_dictionaries_equal():
    assert dictionaries_equal({}, {})
    assert dictionaries_equal({"a": "1", "b": "2"}, {"b": "2", "a": "1"})
    assert not dictionaries_equal({"a": "1"}, {"a": "2"})
    assert not dictionaries_equal({"a": "1"}, {"b": "1"})
    assert not dictionaries_equal({"a": "1"}, {"a": "1", "b": "2"})


def test_reserved_names_are_case_sensitive():
    assert ProductFeatures.is_reserved_name("Product")
    assert ProductFeatures.is_reserved_name("Publish Date")
    assert not ProductFeatures.is_reserved_name("product")
    assert LicenseAttributes.is_reserved_name("Expiration Days")
    assert not LicenseAttributes.is_reserved_name("Product")


def test_check_names_rejects_reserved():
    with pytest.raises(ArgumentError, match="'Version' is a reserved product feature name"):
        ProductFeatures.check_names({"Reports": "yes", "Version": "2"})

    with pytest.raises(ArgumentError, match="reserved license attribute name"):
        LicenseAttributes.check_names({"Product Identity": "x"})


def test_attribute_map_access():
    features = ProductFeatures()
    features.set("Reports", "Advanced")

    assert features.has("Reports")
    assert features.get_value("Reports") == "Advanced"

    features.remove("Reports")
    features.remove("Reports")
    assert not features.has("Reports")

    with pytest.raises(AttributeNotFoundError) as excinfo:
        features.get_value("Reports")
    assert str(excinfo.value) == "Product feature 'Reports' does not exist in this license."


def test_without_reserved():
    attributes = LicenseAttributes(
        {"Seats": "5", "Product Identity": "abc", "Expiration Days": "10"}
    )

    stripped = attributes.without_reserved()

    assert isinstance(stripped, LicenseAttributes)
    assert stripped == {"Seats": "5"}


def test_parse_key_value_pairs():
    assert parse_key_value_pairs("Reports=Advanced Seats=5", "features") == {
        "Reports": "Advanced",
        "Seats": "5",
    }
    assert parse_key_value_pairs(None, "features") == {}

    with pytest.raises(ArgumentError, match="Invalid features format"):
        parse_key_value_pairs("Reports=Advanced =5", "features")
