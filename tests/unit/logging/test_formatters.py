"""Tests for log formatters."""

import json
import logging
import sys

from image_relay.logging.context import clear_context, set_correlation_id, set_extra_context
from image_relay.logging.formatters import HumanFormatter, JSONFormatter


def _make_record(message: str = "hello", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="image_relay.test",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def setup_method(self):
        clear_context()

    def test_basic_fields(self):
        output = json.loads(JSONFormatter().format(_make_record()))
        assert output["level"] == "INFO"
        assert output["logger"] == "image_relay.test"
        assert output["message"] == "hello"
        assert output["service"] == "image-relay"
        assert "timestamp" in output

    def test_without_timestamp(self):
        output = json.loads(JSONFormatter(include_timestamp=False).format(_make_record()))
        assert "timestamp" not in output

    def test_location_off_by_default(self):
        output = json.loads(JSONFormatter().format(_make_record()))
        assert "line" not in output

    def test_location_when_enabled(self):
        output = json.loads(JSONFormatter(include_location=True).format(_make_record()))
        assert output["line"] == 10

    def test_correlation_id(self):
        set_correlation_id("req-1")
        output = json.loads(JSONFormatter().format(_make_record()))
        assert output["correlation_id"] == "req-1"

    def test_extra_context_and_record_extras(self):
        set_extra_context(target_url="https://example.com/a.png")
        record = _make_record(original_size=1000, compressed_size=400)
        output = json.loads(JSONFormatter().format(record))
        assert output["target_url"] == "https://example.com/a.png"
        assert output["original_size"] == 1000
        assert output["compressed_size"] == 400

    def test_non_serializable_extra(self):
        output = json.loads(JSONFormatter().format(_make_record(payload=object())))
        assert isinstance(output["payload"], str)

    def test_exception_info(self):
        try:
            raise ValueError("broken")
        except ValueError:
            record = _make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()
        output = json.loads(JSONFormatter().format(record))
        assert output["exception"]["type"] == "ValueError"
        assert output["exception"]["message"] == "broken"


class TestHumanFormatter:
    def setup_method(self):
        clear_context()

    def test_plain_line(self):
        output = HumanFormatter(use_colors=False).format(_make_record())
        assert "INFO" in output
        assert "hello" in output
        assert "\033[" not in output

    def test_colors(self):
        output = HumanFormatter(use_colors=True).format(_make_record())
        assert "\033[32m" in output

    def test_fields_appended(self):
        set_correlation_id("req-1")
        output = HumanFormatter(use_colors=False).format(_make_record(duration_ms=12))
        assert "correlation_id=req-1" in output
        assert "duration_ms=12" in output

    def test_long_logger_name_truncated(self):
        record = _make_record()
        record.name = "image_relay." + "nested." * 10 + "module"
        output = HumanFormatter(use_colors=False).format(record)
        assert "..." in output
