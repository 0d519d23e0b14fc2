"""Cancellation tokens shared by the network phases of one request.

A token is cancelled either explicitly (the caller went away) or by the
timer armed for the phase currently running. Timers are always disarmed when
their phase exits, whatever the outcome.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum

from image_relay.exceptions.server_errors import UpstreamAbortedError


class CancelReason(StrEnum):
    """Why a token was cancelled."""

    CLIENT = "client"
    TIMEOUT = "timeout"


class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: CancelReason | None = None
        self._phase: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> CancelReason | None:
        return self._reason

    def cancel(self, reason: CancelReason = CancelReason.CLIENT, phase: str | None = None) -> None:
        """Cancel the token. Only the first cancellation is recorded."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._phase = phase
            self._event.set()

    def aborted_error(self) -> UpstreamAbortedError:
        """Build the error describing this token's cancellation."""
        if self._reason == CancelReason.TIMEOUT:
            return UpstreamAbortedError(
                f"Request timed out during {self._phase or 'fetch'}",
                context={"phase": self._phase},
            )
        return UpstreamAbortedError("Request cancelled by client")

    def raise_if_cancelled(self) -> None:
        """Raise UpstreamAbortedError if the token has been cancelled."""
        if self._event.is_set():
            raise self.aborted_error()

    @contextmanager
    def deadline(self, seconds: float, phase: str) -> Iterator["CancellationToken"]:
        """Cancel the token if the enclosed phase runs longer than ``seconds``.

        Args:
            seconds: Time budget of the phase.
            phase: Phase name recorded when the timer fires.

        Yields:
            This token.
        """
        timer = threading.Timer(seconds, self.cancel, args=(CancelReason.TIMEOUT, phase))
        timer.daemon = True
        timer.start()
        try:
            yield self
        finally:
            timer.cancel()
