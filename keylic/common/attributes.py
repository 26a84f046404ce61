"""
Name/value maps for product features and license attributes.

Each map kind has a fixed set of reserved names. Reserved entries are written
into a signed license by the signer and stripped again by the validator; they
are exposed through dedicated fields, never through the maps. The maps do not
reject reserved names themselves: callers check with ``is_reserved_name``
before accepting names from user input.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

from keylic.common.exceptions import ArgumentError, AttributeNotFoundError

FEATURE_PRODUCT = "Product"
FEATURE_VERSION = "Version"
FEATURE_PUBLISH_DATE = "Publish Date"

ATTRIBUTE_PRODUCT_IDENTITY = "Product Identity"
ATTRIBUTE_ASSEMBLY_IDENTITY = "Assembly Identity"
ATTRIBUTE_EXPIRATION_DAYS = "Expiration Days"


class AttributeMap(dict[str, str]):
    """Mapping of unique string names to string values."""

    RESERVED_NAMES: ClassVar[frozenset[str]] = frozenset()
    KIND: ClassVar[str] = "attribute"

    @classmethod
    def is_reserved_name(cls, name: str) -> bool:
        """Case-sensitive exact match against the reserved names."""
        return name in cls.RESERVED_NAMES

    @classmethod
    def check_names(cls, names: Mapping[str, str]) -> None:
        """Raise ArgumentError for the first reserved name."""
        for name in names:
            if cls.is_reserved_name(name):
                msg = f"'{name}' is a reserved {cls.KIND} name and cannot be used."
                raise ArgumentError(msg, field=name)

    def set(self, name: str, value: str) -> None:
        self[name] = value

    def get_value(self, name: str) -> str:
        try:
            return self[name]
        except KeyError:
            msg = f"{self.KIND.capitalize()} '{name}' does not exist in this license."
            raise AttributeNotFoundError(msg, name) from None

    def has(self, name: str) -> bool:
        return name in self

    def remove(self, name: str) -> None:
        self.pop(name, None)

    def without_reserved(self) -> AttributeMap:
        """Copy of this map with the reserved entries removed."""
        return type(self)(
            (name, value)
            for name, value in self.items()
            if not self.is_reserved_name(name)
        )


class ProductFeatures(AttributeMap):
    RESERVED_NAMES = frozenset(
        {FEATURE_PRODUCT, FEATURE_VERSION, FEATURE_PUBLISH_DATE}
    )
    KIND = "product feature"


class LicenseAttributes(AttributeMap):
    RESERVED_NAMES = frozenset(
        {
            ATTRIBUTE_PRODUCT_IDENTITY,
            ATTRIBUTE_ASSEMBLY_IDENTITY,
            ATTRIBUTE_EXPIRATION_DAYS,
        }
    )
    KIND = "license attribute"


def convert_text_to_dictionary(text: str | None) -> dict[str, str]:
    """
    Convert a multi-line block of ``key=value`` lines to a dictionary.

    Lines are trimmed and split on the first ``=``. A line without ``=`` is a
    key with an empty value. Blank lines and lines with an empty key are
    skipped. Later duplicates overwrite earlier ones.

    Args:
        text: The multi-line text, may be None

    Returns:
        The parsed name/value pairs in input order
    """
    dictionary: dict[str, str] = {}
    if not text or not text.strip():
        return dictionary

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue

        key, _, value = trimmed.partition("=")
        key = key.strip()
        if not key:
            continue

        dictionary[key] = value.strip()

    return dictionary


def dictionaries_equal(first: Mapping[str, str], second: Mapping[str, str]) -> bool:
    """True when both maps hold the same names with identical values."""
    if len(first) != len(second):
        return False

    for key, value in first.items():
        if key not in second or second[key] != value:
            return False

    return True


def parse_key_value_pairs(text: str | None, argument_name: str) -> dict[str, str]:
    """
    Parse space-separated ``key=value`` pairs as given on the command line.

    Raises:
        ArgumentError: A token did not produce exactly one pair
    """
    if not text or not text.strip():
        return {}

    pairs = text.split()
    parsed = convert_text_to_dictionary("\n".join(pairs))
    if len(parsed) != len(pairs):
        msg = f"Invalid {argument_name} format. Expected key=value format."
        raise ArgumentError(msg, field=argument_name)
    return parsed
