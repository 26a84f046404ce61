import logging
from pathlib import Path
from typing import Any

from keylic.common.config import NEVER_EXPIRES, Config
from keylic.common.logging_config import setup_logging


def test_config_defaults(monkeypatch: Any) -> None:
    monkeypatch.delenv("KEYLIC_LOG_LEVEL", raising=False)
    monkeypatch.delenv("KEYLIC_LOG_FILE", raising=False)
    monkeypatch.delenv("KEYLIC_SUPPORT_MESSAGE", raising=False)

    config = Config()

    assert config.LICENSE_FILE_EXTENSION == ".lic"
    assert config.PRIVATE_FILE_EXTENSION == ".private"
    assert config.KEYPAIR_FORMAT_VERSION == 2  # noqa: PLR2004
    assert config.PRODUCT_IDENTITY_SEPARATOR == " "
    assert config.LOG_LEVEL == logging.INFO
    assert config.LOG_FILE is None
    assert "support team" in config.SUPPORT_MESSAGE


def test_config_from_environment(monkeypatch: Any, tmp_path: Path) -> None:
    monkeypatch.setenv("KEYLIC_LOG_LEVEL", "debug")
    monkeypatch.setenv("KEYLIC_LOG_FILE", str(tmp_path / "keylic.log"))
    monkeypatch.setenv("KEYLIC_SUPPORT_MESSAGE", "Call us.")

    config = Config()

    assert config.LOG_LEVEL == logging.DEBUG
    assert config.LOG_FILE == tmp_path / "keylic.log"
    assert config.SUPPORT_MESSAGE == "Call us."


def test_config_unknown_log_level(monkeypatch: Any) -> None:
    monkeypatch.setenv("KEYLIC_LOG_LEVEL", "chatty")

    assert Config().LOG_LEVEL == logging.INFO


def test_never_expires_is_utc() -> None:
    assert NEVER_EXPIRES.year == 9999  # noqa: PLR2004
    assert NEVER_EXPIRES.utcoffset().total_seconds() == 0


def test_setup_logging_with_file(monkeypatch: Any, tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "keylic.log"
    monkeypatch.setenv("KEYLIC_LOG_FILE", str(log_file))

    logger = setup_logging(Config())
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
        handler.close()

    assert len(logger.handlers) == 2  # noqa: PLR2004
    assert "hello" in log_file.read_text(encoding="utf-8")
