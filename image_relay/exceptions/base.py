"""Root of the relay's exception tree.

Each subclass fixes an ``error_code`` for logs and the ``http_status`` the
proxy answers with; the handler decorator turns any of them into a response.
"""

from http import HTTPStatus
from typing import Any, ClassVar


class ImageRelayError(Exception):
    """Failure that the relay reports to the caller as a status and a message.

    Attributes:
        message: Text sent back as the plain-text response body.
        error_code: Stable identifier used in structured logs.
        http_status: Default status of the response.
        context: Fields logged alongside the error, never sent to the caller.
    """

    error_code: ClassVar[str] = "INTERNAL_ERROR"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def response_status(self) -> int:
        """Status code to answer the client with."""
        return int(self.http_status)

    def to_log_dict(self) -> dict[str, Any]:
        """Fields describing this error for a structured log record."""
        return {
            "error_code": self.error_code,
            "http_status": self.response_status,
            "exception_type": type(self).__name__,
            "message": self.message,
            **self.context,
        }
