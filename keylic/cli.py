"""
Command-line interface for keylic.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import click
from pydantic import ValidationError

from keylic.client.license_validator import LicenseValidator
from keylic.common.attributes import LicenseAttributes, ProductFeatures, parse_key_value_pairs
from keylic.common.config import NEVER_EXPIRES, Config
from keylic.common.exceptions import (
    ArgumentError,
    KeypairFormatError,
    KeypairMismatchError,
    MissingFileError,
)
from keylic.common.logging_config import setup_logging
from keylic.common.models import CliOptions, LicenseType
from keylic.issuer.keypair_store import KeypairStore
from keylic.issuer.overrides import apply_overrides, validate_options


class CliError(click.ClickException):
    """Any failure: reported on stderr with exit code 1."""

    exit_code = 1


@click.group()
def cli() -> None:
    """keylic: create and validate signed license files"""
    setup_logging(Config())


@cli.command()
@click.option("--private", "-p", "private_file_path", required=True, help="Path to the new .private file")
@click.option("--passphrase", prompt=True, hide_input=True, confirmation_prompt=True, help="Passphrase protecting the private key")
@click.option("--product-id", required=True, help="Secret product identifier compiled into the application")
@click.option("--product", required=True, help="Product name")
@click.option("--product-version", required=True, help="Product version")
@click.option("--name", required=True, help="Customer name")
@click.option("--email", required=True, help="Customer email")
@click.option("--company", default="", help="Customer company")
@click.option("--force", "-f", "force_overwrite", is_flag=True, help="Overwrite the .private file if it already exists")
def keygen(
    private_file_path: str,
    passphrase: str,
    product_id: str,
    product: str,
    product_version: str,
    name: str,
    email: str,
    company: str,
    force_overwrite: bool,  # noqa: FBT001
) -> None:
    """Generate a new keypair file"""
    path = Path(private_file_path)
    if path.exists() and not force_overwrite:
        msg = f"Private file already exists and will not be overwritten: {path}"
        raise CliError(msg)

    store = KeypairStore()
    store.passphrase = passphrase
    try:
        store.create_keypair()
    except ArgumentError as err:
        raise CliError(str(err)) from err
    store.product_id = product_id
    store.product = product
    store.version = product_version
    store.name = name
    store.email = email
    store.company = company

    try:
        store.save_keypair(path)
    except OSError as err:
        msg = f"I/O error - {err}"
        raise CliError(msg) from err

    click.echo(f"Keypair file saved: {path}")
    click.echo(f"Public key: {store.key_public}")


@cli.command()
@click.option("--private", "-p", "private_file_path", default="", help="Path to the .private file")
@click.option("--save", "-s", "save_keypair", is_flag=True, help="Save the keypair file")
@click.option("--license", "-l", "license_file_path", default="", help="Path to the new .lic file (will not overwrite unless --force)")
@click.option("--force", "-f", "force_overwrite", is_flag=True, help="Overwrite the license file if it already exists")
@click.option("--product-version", "-v", default=None, help="Product version")
@click.option("--product-publish-date", "-pd", default=None, help="Product publish date (YYYY-MM-DD format)")
@click.option("--product-features", "-pf", default=None, help='Product features as "key1=value1 key2=value2"')
@click.option("--type", "-t", "license_type", default=None, help="License type: Standard or Trial")
@click.option("--quantity", "-q", default=None, help="License quantity (positive integer)")
@click.option("--expiration-days", "-dy", default=None, help="Expiration in days (0 = no expiry)")
@click.option("--expiration-date", "-dt", default=None, help="Expiration date (YYYY-MM-DD format)")
@click.option("--license-attributes", "-la", default=None, help='License attributes as "key1=value1 key2=value2"')
@click.option("--lock", "lock_path", default=None, help="Lock license to a specific file (e.g., the executable)")
def issue(**kwargs: str | bool | None) -> None:
    """Create license files from .private files

    \b
    If neither --save nor --license is given, the properties of the
    .private file are displayed.

    \b
    Cannot override: passphrase, keys, product name, customer info.
    Reserved feature names: Product, Version, Publish Date.
    Reserved attribute names: Product Identity, Assembly Identity, Expiration Days.
    """
    try:
        options = build_options(**kwargs)

        if not options.save_keypair and not options.license_file_path.strip():
            display_keypair_properties(options)
            return

        validate_options(options)

        store = KeypairStore()
        store.load_keypair(options.private_file_path)
        click.echo(f"Loaded private information for: {store.product} {store.version}")

        apply_overrides(options, store)
        if options.has_overrides():
            display_override_properties(options, store)

        if options.save_keypair:
            click.echo()
            click.echo(f"Saving keypair file: {options.private_file_path}")
            store.save_keypair(options.private_file_path)
            click.echo("Keypair file saved successfully.")

        if options.license_file_path.strip():
            click.echo()
            click.echo(f"Creating license file: {options.license_file_path}")
            store.save_license_file(options.license_file_path)
            click.echo("License file created successfully.")
    except ArgumentError as err:
        msg = f"{err}\n\nUse --help for usage information."
        raise CliError(msg) from err
    except MissingFileError as err:
        msg = f"File not found - {err}"
        raise CliError(msg) from err
    except (KeypairMismatchError, KeypairFormatError) as err:
        raise CliError(str(err)) from err
    except PermissionError as err:
        msg = f"Access denied - {err}"
        raise CliError(msg) from err
    except OSError as err:
        msg = f"I/O error - {err}"
        raise CliError(msg) from err
    except Exception as err:
        msg = f"Unexpected error - {err}"
        raise CliError(msg) from err


@cli.command()
@click.option("--license", "-l", "license_file_path", required=True, help="Path to the .lic file")
@click.option("--product-id", required=True, help="Product identifier of the application")
@click.option("--public-key", required=True, help="Public key of the application")
@click.option("--assembly", "path_assembly", default=None, help="Path to the program the license is locked to")
def validate(
    license_file_path: str, product_id: str, public_key: str, path_assembly: str | None
) -> None:
    """Validate a license file"""
    try:
        is_valid, record, messages = LicenseValidator().is_this_license_valid(
            product_id, public_key, license_file_path, path_assembly
        )
    except ArgumentError as err:
        msg = f"{err}\n\nUse --help for usage information."
        raise CliError(msg) from err
    except Exception as err:
        msg = f"Unexpected error - {err}"
        raise CliError(msg) from err
    if not is_valid:
        msg = f"License is invalid.\n{messages}"
        raise CliError(msg)

    click.echo("License is valid.")
    click.echo(f"Product: {record.product} {record.version}")
    click.echo(f"Customer: {record.name} <{record.email}>")
    if record.company:
        click.echo(f"Company: {record.company}")
    click.echo(f"License type: {record.license_type}")
    click.echo(f"Quantity: {record.quantity}")
    if record.never_expires:
        click.echo("Expiration: Never")
    else:
        click.echo(
            f"Expiration: {record.expiration_date_utc.date().isoformat()} "
            f"({record.expiration_days} days remaining)"
        )
    _echo_map("Product features", record.product_features)
    _echo_map("License attributes", record.license_attributes)


def build_options(
    private_file_path: str = "",
    save_keypair: bool = False,  # noqa: FBT001, FBT002
    license_file_path: str = "",
    force_overwrite: bool = False,  # noqa: FBT001, FBT002
    product_version: str | None = None,
    product_publish_date: str | None = None,
    product_features: str | None = None,
    license_type: str | None = None,
    quantity: str | None = None,
    expiration_days: str | None = None,
    expiration_date: str | None = None,
    license_attributes: str | None = None,
    lock_path: str | None = None,
) -> CliOptions:
    """
    Convert raw option strings to CliOptions.

    Raises:
        ArgumentError: An option value is invalid
    """
    values: dict[str, object] = {
        "private_file_path": private_file_path,
        "save_keypair": save_keypair,
        "license_file_path": license_file_path,
        "force_overwrite": force_overwrite,
        "product_version": product_version,
        "lock_path": lock_path,
        "product_features": parse_key_value_pairs(product_features, "product features"),
        "license_attributes": parse_key_value_pairs(
            license_attributes, "license attributes"
        ),
    }

    if product_publish_date is not None:
        values["product_publish_date"] = _parse_date(
            product_publish_date, "Invalid product-publish date format. Use YYYY-MM-DD format"
        )

    if license_type is not None:
        matches = [t for t in LicenseType if t.value.lower() == license_type.lower()]
        if not matches:
            msg = f"Invalid license type '{license_type}'. Valid values: Standard, Trial"
            raise ArgumentError(msg, field="type")
        values["license_type"] = matches[0]

    if quantity is not None:
        values["quantity"] = _parse_int(quantity, 1, "Quantity must be a positive integer")

    if expiration_days is not None:
        values["expiration_days"] = _parse_int(
            expiration_days, 0, "Expiration days must be zero or a positive integer"
        )

    if expiration_date is not None:
        parsed = _parse_date(
            expiration_date, "Invalid expiration-date format. Use YYYY-MM-DD format"
        )
        values["expiration_date"] = datetime(parsed.year, parsed.month, parsed.day)

    try:
        return CliOptions.model_validate(values)
    except ValidationError as err:
        raise ArgumentError(str(err)) from err


def _parse_int(text: str, minimum: int, message: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise ArgumentError(message) from None
    if value < minimum:
        raise ArgumentError(message)
    return value


def _parse_date(text: str, message: str) -> date:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        raise ArgumentError(message) from None


def _echo_map(title: str, values: ProductFeatures | LicenseAttributes) -> None:
    if values:
        click.echo(f"{title}:")
        for key, value in values.items():
            click.echo(f"  {key} = {value}")


def display_keypair_properties(options: CliOptions) -> None:
    """Show the properties of a keypair file without changing it."""
    if not options.private_file_path.strip():
        msg = "Private file path is required. Use --private or -p argument."
        raise ArgumentError(msg, field="private")

    store = KeypairStore()
    store.load_keypair(options.private_file_path)

    click.echo()
    click.echo(f"Product ID: {store.product_id}")
    click.echo(f"Public key: {store.key_public}")
    click.echo()

    click.echo(f"Product: {store.product}")
    click.echo(f"Version: {store.version}")
    _echo_map("Product features", store.product_features)
    click.echo()

    click.echo(f"Customer: {store.name} <{store.email}>")
    if store.company:
        click.echo(f"Company: {store.company}")
    click.echo()

    click.echo(f"License type: {store.license_type}")
    click.echo(f"Quantity: {store.quantity}")
    if store.expiration_days > 0:
        expiration = (
            "None"
            if store.expiration_date_utc == NEVER_EXPIRES
            else store.expiration_date_utc.date().isoformat()
        )
        click.echo(f"Expiration days: {store.expiration_days} ({expiration})")
    _echo_map("License attributes", store.license_attributes)
    if store.is_locked_to_assembly and store.path_assembly:
        exists = "Exists" if Path(store.path_assembly).is_file() else "Does NOT exist"
        click.echo(f"Lock file: {store.path_assembly} ({exists})")


def display_override_properties(options: CliOptions, store: KeypairStore) -> None:
    click.echo()
    click.echo("Applied CLI overrides:")
    if options.product_version:
        click.echo(f"  Product Version: {store.version}")
    if options.product_publish_date is not None:
        click.echo(f"  Product Publish Date: {store.publish_date}")
    if options.product_features:
        click.echo("  Product Features:")
        for key, value in options.product_features.items():
            click.echo(f"    {key} = {value}")
    if options.license_type is not None:
        click.echo(f"  License Type: {store.license_type}")
    if options.quantity is not None:
        click.echo(f"  Quantity: {store.quantity}")
    if options.expiration_days is not None:
        click.echo(f"  Expiration Days: {store.expiration_days}")
    if options.expiration_date is not None:
        click.echo(f"  Expiration Date: {store.expiration_date_utc:%Y-%m-%d}")
    if options.license_attributes:
        click.echo("  License Attributes:")
        for key, value in options.license_attributes.items():
            click.echo(f"    {key} = {value}")
    if options.lock_path:
        click.echo(f"  Lock File: {store.path_assembly}")


if __name__ == "__main__":
    cli()
