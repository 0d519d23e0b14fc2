"""Structured logging for the image relay.

Usage:
    import logging

    from image_relay.logging import request_scope, setup_logging

    setup_logging()
    logger = logging.getLogger(__name__)
    with request_scope(context.aws_request_id):
        logger.info("Bypass success", extra={"original_size": 512})
"""

from image_relay.logging.config import LoggingConfig
from image_relay.logging.context import (
    clear_context,
    get_correlation_id,
    get_extra_context,
    request_scope,
    set_correlation_id,
    set_extra_context,
)
from image_relay.logging.formatters import HumanFormatter, JSONFormatter
from image_relay.logging.logger import reset_logging, setup_logging

__all__ = [
    "HumanFormatter",
    "JSONFormatter",
    "LoggingConfig",
    "clear_context",
    "get_correlation_id",
    "get_extra_context",
    "request_scope",
    "reset_logging",
    "set_correlation_id",
    "set_extra_context",
    "setup_logging",
]
