"""Root logger installation for the relay process."""

import logging
import sys
from typing import TextIO

from image_relay.logging.config import LogFormat, LoggingConfig, get_logging_config
from image_relay.logging.formatters import HumanFormatter, JSONFormatter

# Warm Lambda containers reuse the module; the root handler is installed once.
_installed = False


def _build_formatter(config: LoggingConfig, stream: TextIO | None) -> logging.Formatter:
    if config.log_format == LogFormat.HUMAN:
        return HumanFormatter(use_colors=stream is None and sys.stdout.isatty())
    return JSONFormatter(
        service_name=config.service_name,
        include_timestamp=config.include_timestamp,
        include_location=config.include_location,
    )


def setup_logging(
    config: LoggingConfig | None = None,
    stream: TextIO | None = None,
    *,
    force: bool = False,
) -> None:
    """Install a single stream handler on the root logger.

    Args:
        config: Logging configuration; read from the environment when omitted.
        stream: Destination of log lines, stdout by default.
        force: Replace the handler even when one was already installed.
    """
    global _installed
    if _installed and not force:
        return

    config = config or get_logging_config()
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(_build_formatter(config, stream))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(config.log_level.value)

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    _installed = True


def reset_logging() -> None:
    """Remove the installed handler so the next setup starts fresh."""
    global _installed
    _installed = False
    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    get_logging_config.cache_clear()
