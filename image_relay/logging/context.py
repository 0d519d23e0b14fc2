"""Request-scoped fields attached to every log record.

Each relay invocation binds its own correlation ID and fields such as the
target URL; contextvars keep them isolated between concurrent invocations.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any
from uuid import uuid4

_EMPTY: Mapping[str, Any] = MappingProxyType({})

_correlation_id: ContextVar[str] = ContextVar("relay_correlation_id", default="")
_fields: ContextVar[Mapping[str, Any]] = ContextVar("relay_log_fields", default=_EMPTY)


def get_correlation_id() -> str:
    return _correlation_id.get()


def set_correlation_id(value: str) -> None:
    _correlation_id.set(value)


def get_extra_context() -> dict[str, Any]:
    """Copy of the fields bound to the current request."""
    return dict(_fields.get())


def set_extra_context(**kwargs: Any) -> None:
    """Bind fields to every later log record of the current request."""
    _fields.set(MappingProxyType({**_fields.get(), **kwargs}))


def clear_context() -> None:
    _correlation_id.set("")
    _fields.set(_EMPTY)


@contextmanager
def request_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind a correlation ID for one invocation and clear all fields afterwards.

    Args:
        request_id: Correlation ID to use; a UUID is generated when absent.

    Yields:
        The correlation ID in effect.
    """
    bound = request_id or str(uuid4())
    set_correlation_id(bound)
    try:
        yield bound
    finally:
        clear_context()
