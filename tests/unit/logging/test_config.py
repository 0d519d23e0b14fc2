"""Tests for logging configuration."""

import pytest
from pydantic import ValidationError

from image_relay.logging.config import LogFormat, LoggingConfig, LogLevel, get_logging_config


class TestLoggingConfig:
    def test_defaults(self):
        config = LoggingConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_format == LogFormat.JSON
        assert config.service_name == "image-relay"
        assert config.include_location is False
        assert "urllib3" in config.quiet_loggers

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FORMAT", "human")
        config = LoggingConfig()
        assert config.log_level == LogLevel.DEBUG
        assert config.log_format == LogFormat.HUMAN

    def test_rejects_unknown_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "VERBOSE")
        with pytest.raises(ValidationError):
            LoggingConfig()


class TestGetLoggingConfig:
    def test_cached(self):
        assert get_logging_config() is get_logging_config()
