"""JSON and terminal formatters for relay log records."""

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any, ClassVar

from image_relay.logging.context import get_correlation_id, get_extra_context

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_NAME_WIDTH = 30


def _context_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Correlation ID, request-scoped fields and per-call extras, in that order."""
    fields: dict[str, Any] = {}
    corr_id = get_correlation_id()
    if corr_id:
        fields["correlation_id"] = corr_id
    fields.update(get_extra_context())
    fields.update(
        (key, value)
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    )
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per line, as CloudWatch Logs Insights expects."""

    def __init__(
        self,
        *,
        service_name: str = "image-relay",
        include_timestamp: bool = True,
        include_location: bool = False,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._include_timestamp = include_timestamp
        self._include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {}
        if self._include_timestamp:
            entry["timestamp"] = datetime.now(UTC).isoformat(timespec="milliseconds")
        entry.update(
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
            service=self._service_name,
        )
        if self._include_location:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)
        entry.update(_context_fields(record))

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else "Unknown",
                "message": str(exc_value) if exc_value else "",
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Pipe-separated lines for local runs, optionally colored by level."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, *, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _level(self, levelname: str) -> str:
        padded = f"{levelname:<8}"
        if not self._use_colors:
            return padded
        return f"{self.COLORS.get(levelname, '')}{padded}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if len(name) > _NAME_WIDTH:
            name = "..." + name[-(_NAME_WIDTH - 3) :]

        columns = [
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            self._level(record.levelname),
            f"{name:<{_NAME_WIDTH}}",
            record.getMessage(),
        ]
        fields = _context_fields(record)
        if fields:
            columns.append(" ".join(f"{key}={value}" for key, value in fields.items()))

        line = " | ".join(columns)
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return line
