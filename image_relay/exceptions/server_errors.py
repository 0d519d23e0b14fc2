"""Server error exceptions (HTTP 5xx and relay-specific statuses)."""

from http import HTTPStatus
from typing import Any, ClassVar

from image_relay.exceptions.base import ImageRelayError

CLIENT_CLOSED_REQUEST = 499


class ServerError(ImageRelayError):
    """Base class for all server errors (5xx)."""

    error_code: ClassVar[str] = "SERVER_ERROR"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR


class UpstreamFetchError(ServerError):
    """Upstream answered the download with a non-success status.

    The client is answered with the upstream's own status when one is known.
    """

    error_code: ClassVar[str] = "UPSTREAM_FETCH_FAILED"
    http_status: ClassVar[int] = HTTPStatus.BAD_GATEWAY

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize upstream fetch error.

        Args:
            message: Description of the failure.
            upstream_status: HTTP status returned by the upstream.
            context: Additional context information.
        """
        context_dict = context or {}
        if upstream_status is not None:
            context_dict["upstream_status"] = upstream_status
        super().__init__(message, context=context_dict)
        self.upstream_status = upstream_status

    @property
    def response_status(self) -> int:
        """Upstream status, or 502 when the upstream gave none."""
        if self.upstream_status:
            return self.upstream_status
        return int(self.http_status)


class UpstreamAbortedError(ServerError):
    """Network phase was cancelled by the caller or timed out."""

    error_code: ClassVar[str] = "UPSTREAM_ABORTED"
    http_status: ClassVar[int] = CLIENT_CLOSED_REQUEST


class TranscodeError(ServerError):
    """Codec could not probe or encode the source image.

    Never answered directly: the handler degrades it into a redirect to the
    original resource.
    """

    error_code: ClassVar[str] = "TRANSCODE_FAILED"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR

    @property
    def reason(self) -> str:
        """Codec message carried to the diagnostic header."""
        return self.message


class ConfigurationError(ServerError):
    """Configuration is invalid or missing."""

    error_code: ClassVar[str] = "CONFIGURATION_ERROR"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR
