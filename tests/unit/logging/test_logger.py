"""Tests for logger setup."""

import io
import json
import logging

import pytest

from image_relay.logging.config import LogFormat, LoggingConfig, LogLevel
from image_relay.logging.formatters import HumanFormatter, JSONFormatter
from image_relay.logging.logger import reset_logging, setup_logging


@pytest.fixture(autouse=True)
def _reset():
    reset_logging()
    yield
    reset_logging()


class TestSetupLogging:
    def test_json_output(self):
        stream = io.StringIO()
        setup_logging(LoggingConfig(), stream)
        logging.getLogger("image_relay.test").info("relayed", extra={"original_size": 10})
        output = json.loads(stream.getvalue().strip())
        assert output["message"] == "relayed"
        assert output["original_size"] == 10

    def test_json_formatter_installed(self):
        setup_logging(LoggingConfig(), io.StringIO())
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_human_formatter_installed(self):
        setup_logging(LoggingConfig(log_format=LogFormat.HUMAN), io.StringIO())
        assert isinstance(logging.getLogger().handlers[0].formatter, HumanFormatter)

    def test_level(self):
        setup_logging(LoggingConfig(log_level=LogLevel.WARNING), io.StringIO())
        assert logging.getLogger().level == logging.WARNING

    def test_quiets_third_party_loggers(self):
        setup_logging(LoggingConfig(log_level=LogLevel.DEBUG), io.StringIO())
        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("PIL").level == logging.WARNING

    def test_idempotent_without_force(self):
        first = io.StringIO()
        setup_logging(LoggingConfig(), first)
        setup_logging(LoggingConfig(), io.StringIO())
        assert logging.getLogger().handlers[0].stream is first

    def test_force_reconfigures(self):
        setup_logging(LoggingConfig(), io.StringIO())
        second = io.StringIO()
        setup_logging(LoggingConfig(), second, force=True)
        assert len(logging.getLogger().handlers) == 1
        assert logging.getLogger().handlers[0].stream is second

