import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from keylic.cli import build_options, cli
from keylic.common.exceptions import ArgumentError
from keylic.common.models import LicenseType
from keylic.issuer.keypair_store import KeypairStore

PRODUCT_ID = "cli-product-id"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def keypair_file(runner, tmp_path):
    path = tmp_path / "my.private"
    result = runner.invoke(
        cli,
        [
            "keygen",
            "--private", str(path),
            "--passphrase", "secret",
            "--product-id", PRODUCT_ID,
            "--product", "My Product",
            "--product-version", "1.0",
            "--name", "Jane Doe",
            "--email", "jane@example.com",
        ],
    )  # fmt: skip
    assert result.exit_code == 0, result.output
    return path


def public_key(path: Path) -> str:
    return json.loads(path.read_text(encoding="utf-8"))["application"]["public_key"]


def test_cli_help(runner):
    """Test CLI help command."""
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.output
    for command in ("keygen", "issue", "validate"):
        assert command in result.output


def test_cli_keygen(runner, keypair_file):
    """Test keygen command."""
    document = json.loads(keypair_file.read_text(encoding="utf-8"))

    assert document["version"] == 2  # noqa: PLR2004
    assert document["secret"]["passphrase"] == "secret"
    assert document["product"]["name"] == "My Product"


def test_cli_keygen_will_not_overwrite(runner, keypair_file):
    result = runner.invoke(
        cli,
        [
            "keygen", "-p", str(keypair_file), "--passphrase", "x",
            "--product-id", "p", "--product", "p", "--product-version", "1",
            "--name", "n", "--email", "e",
        ],
    )  # fmt: skip
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_cli_issue_and_validate(runner, keypair_file, tmp_path):
    path_license = tmp_path / "app.lic"

    result = runner.invoke(
        cli,
        [
            "issue", "-p", str(keypair_file), "-l", str(path_license),
            "-q", "5", "-t", "trial", "-dy", "30",
            "-pf", "Reports=Advanced", "-la", "Seats=10",
        ],
    )  # fmt: skip
    assert result.exit_code == 0, result.output
    assert "Applied CLI overrides:" in result.output
    assert "  Quantity: 5" in result.output
    assert "License file created successfully." in result.output
    assert path_license.exists()

    result = runner.invoke(
        cli,
        [
            "validate", "--license", str(path_license),
            "--product-id", PRODUCT_ID, "--public-key", public_key(keypair_file),
        ],
    )  # fmt: skip
    assert result.exit_code == 0, result.output
    assert "License is valid." in result.output
    assert "License type: Trial" in result.output
    assert "Quantity: 5" in result.output
    assert "Reports = Advanced" in result.output
    assert "Seats = 10" in result.output
    assert "(30 days remaining)" in result.output


def test_cli_issue_without_save_leaves_keypair(runner, keypair_file, tmp_path):
    before = keypair_file.read_text(encoding="utf-8")

    result = runner.invoke(
        cli, ["issue", "-p", str(keypair_file), "-l", str(tmp_path / "a.lic"), "-q", "9"]
    )

    assert result.exit_code == 0, result.output
    assert keypair_file.read_text(encoding="utf-8") == before


def test_cli_issue_save(runner, keypair_file):
    result = runner.invoke(cli, ["issue", "-p", str(keypair_file), "-s", "-v", "2.0"])

    assert result.exit_code == 0, result.output
    assert "Keypair file saved successfully." in result.output
    document = json.loads(keypair_file.read_text(encoding="utf-8"))
    assert document["product"]["version"] == "2.0"


def test_cli_issue_displays_properties(runner, keypair_file):
    result = runner.invoke(cli, ["issue", "-p", str(keypair_file)])

    assert result.exit_code == 0, result.output
    assert f"Product ID: {PRODUCT_ID}" in result.output
    assert "Product: My Product" in result.output
    assert "Customer: Jane Doe <jane@example.com>" in result.output


def test_cli_validate_wrong_product(runner, keypair_file, tmp_path):
    path_license = tmp_path / "app.lic"
    runner.invoke(cli, ["issue", "-p", str(keypair_file), "-l", str(path_license)])

    result = runner.invoke(
        cli,
        [
            "validate", "-l", str(path_license),
            "--product-id", "other", "--public-key", public_key(keypair_file),
        ],
    )  # fmt: skip

    assert result.exit_code == 1
    assert "ProductIdentityValidationFailure" in result.output


@pytest.mark.parametrize(
    ("extra", "message"),
    [
        (["-dy", "3", "-dt", "2030-01-01"], "Cannot specify both"),
        (["-q", "zero"], "Quantity must be a positive integer"),
        (["-t", "Gold"], "Invalid license type"),
        (["-dt", "01/02/2030"], "Use YYYY-MM-DD format"),
        (["-pf", "Product=Other"], "reserved product feature name"),
        (["--lock", "missing.exe"], "File not found"),
    ],
)
def test_cli_issue_errors(runner, keypair_file, tmp_path, extra, message):
    path_license = tmp_path / "app.lic"

    result = runner.invoke(
        cli, ["issue", "-p", str(keypair_file), "-l", str(path_license), *extra]
    )

    assert result.exit_code == 1
    assert message in result.output
    assert not path_license.exists()


def test_cli_issue_missing_private(runner, tmp_path):
    result = runner.invoke(
        cli, ["issue", "-p", str(tmp_path / "none.private"), "-l", str(tmp_path / "a.lic")]
    )

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_cli_issue_existing_license_needs_force(runner, keypair_file, tmp_path):
    path_license = tmp_path / "app.lic"
    path_license.write_text("{}", encoding="utf-8")
    args = ["issue", "-p", str(keypair_file), "-l", str(path_license)]

    result = runner.invoke(cli, args)
    assert result.exit_code == 1
    assert "Use --help for usage information." in result.output

    result = runner.invoke(cli, [*args, "-f"])
    assert result.exit_code == 0, result.output


def test_build_options():
    options = build_options(
        private_file_path="my.private",
        license_type="STANDARD",
        quantity="3",
        expiration_date="2030-06-01",
        product_features="a=1 b=2",
    )

    assert options.license_type is LicenseType.STANDARD
    assert options.quantity == 3  # noqa: PLR2004
    assert options.expiration_date.year == 2030  # noqa: PLR2004
    assert options.product_features == {"a": "1", "b": "2"}

    with pytest.raises(ArgumentError):
        build_options(expiration_days="-1")


def test_cli_validate_blank_product_id(runner, keypair_file, tmp_path):
    path_license = tmp_path / "app.lic"
    runner.invoke(cli, ["issue", "-p", str(keypair_file), "-l", str(path_license)])

    result = runner.invoke(
        cli,
        [
            "validate", "-l", str(path_license),
            "--product-id", " ", "--public-key", public_key(keypair_file),
        ],
    )  # fmt: skip

    assert result.exit_code == 1
    assert "product_id is required." in result.output
    assert isinstance(result.exception, SystemExit)


def test_cli_issue_unexpected_error(runner, keypair_file, tmp_path, monkeypatch):
    def fail(self, path_license):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(KeypairStore, "save_license_file", fail)

    result = runner.invoke(
        cli, ["issue", "-p", str(keypair_file), "-l", str(tmp_path / "app.lic")]
    )

    assert result.exit_code == 1
    assert "Unexpected error - disk on fire" in result.output
    assert isinstance(result.exception, SystemExit)
