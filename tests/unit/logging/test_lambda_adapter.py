"""Tests for the Lambda logging adapter."""

from unittest.mock import MagicMock

import pytest

from image_relay.logging.adapters.lambda_adapter import set_lambda_context
from image_relay.logging.context import clear_context, get_correlation_id, get_extra_context


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


def _make_context() -> MagicMock:
    context = MagicMock()
    context.aws_request_id = "lambda-req"
    context.function_name = "image-relay"
    return context


class TestSetLambdaContext:
    def test_sets_correlation_id(self):
        set_lambda_context({}, _make_context())
        assert get_correlation_id() == "lambda-req"
        assert get_extra_context()["function_name"] == "image-relay"

    def test_api_request_id_and_source_ip(self):
        event = {"requestContext": {"requestId": "api-1", "identity": {"sourceIp": "10.0.0.1"}}}
        set_lambda_context(event, _make_context())
        extra = get_extra_context()
        assert extra["api_request_id"] == "api-1"
        assert extra["source_ip"] == "10.0.0.1"

    def test_without_lambda_context(self):
        set_lambda_context({"requestContext": {"requestId": "api-1"}}, None)
        assert get_correlation_id() == ""
        assert get_extra_context() == {"api_request_id": "api-1"}

    def test_ignores_malformed_request_context(self):
        set_lambda_context({"requestContext": "nope"}, _make_context())
        assert "api_request_id" not in get_extra_context()
