"""Tests for logging setup."""

import logging
import warnings

import pytest
import structlog

from core.logging import configure_logging, get_logger

from conftest import make_settings


@pytest.fixture(autouse=True)
def restore_structlog():
    yield
    structlog.reset_defaults()
    logging.basicConfig(force=True)


@pytest.mark.parametrize("log_format", ["console", "json"])
def test_configure_emits_no_deprecation_warnings(tmp_path, log_format):
    settings = make_settings(tmp_path, log_format=log_format)

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        configure_logging(settings)
        get_logger("portfolio.test").info("configured", format=log_format)


def test_debug_forces_debug_level(tmp_path):
    configure_logging(make_settings(tmp_path, debug=True, log_level="WARNING"))

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_log_file_is_written(tmp_path):
    log_file = tmp_path / "logs" / "server.log"
    configure_logging(make_settings(tmp_path, log_file=str(log_file), log_format="json"))

    get_logger("portfolio.test").warning("written to file", table_id=7)
    logging.shutdown()

    content = log_file.read_text(encoding="utf-8")
    assert "written to file" in content
    assert '"table_id": 7' in content
