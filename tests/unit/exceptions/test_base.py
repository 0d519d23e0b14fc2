"""Tests for base exception classes."""

from http import HTTPStatus

from image_relay.exceptions.base import ImageRelayError
from image_relay.exceptions.client_errors import InvalidContentTypeError


class TestImageRelayError:
    def test_default_error_code(self):
        assert ImageRelayError("failed").error_code == "INTERNAL_ERROR"

    def test_default_response_status(self):
        assert ImageRelayError("failed").response_status == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_str_is_message(self):
        assert str(ImageRelayError("failed", context={"url": "https://example.com"})) == "failed"

    def test_to_log_dict(self):
        result = ImageRelayError("test message", context={"url": "https://example.com"}).to_log_dict()
        assert result == {
            "error_code": "INTERNAL_ERROR",
            "http_status": 500,
            "exception_type": "ImageRelayError",
            "message": "test message",
            "url": "https://example.com",
        }

    def test_subclass_log_dict(self):
        result = InvalidContentTypeError("text/html").to_log_dict()
        assert result["error_code"] == "INVALID_CONTENT_TYPE"
        assert result["http_status"] == 400
        assert result["content_type"] == "text/html"
