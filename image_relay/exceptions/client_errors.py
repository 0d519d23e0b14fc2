"""Client error exceptions (HTTP 4xx)."""

from http import HTTPStatus
from typing import Any, ClassVar

from image_relay.exceptions.base import ImageRelayError


class ClientError(ImageRelayError):
    """Base class for all client errors (4xx)."""

    error_code: ClassVar[str] = "CLIENT_ERROR"
    http_status: ClassVar[int] = HTTPStatus.BAD_REQUEST


class InvalidContentTypeError(ClientError):
    """Upstream resource does not declare an image content type."""

    error_code: ClassVar[str] = "INVALID_CONTENT_TYPE"
    http_status: ClassVar[int] = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        content_type: str,
        *,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending content type.

        Args:
            content_type: Content type declared by the upstream.
            context: Additional context information.
        """
        context_dict = context or {}
        context_dict["content_type"] = content_type
        super().__init__(
            f"Invalid content type: {content_type}. Only image types are supported.",
            context=context_dict,
        )


class SourceTooLargeError(ClientError):
    """Source image exceeds the configured size ceiling.

    Raised both for an oversized declared length during preflight and for an
    oversized body after (or while) downloading.
    """

    error_code: ClassVar[str] = "SOURCE_TOO_LARGE"
    http_status: ClassVar[int] = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        size_bytes: int,
        limit_bytes: int,
        *,
        after_download: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the measured size and the limit.

        Args:
            size_bytes: Declared or actual size of the source.
            limit_bytes: Configured ceiling.
            after_download: Whether the size was measured on downloaded bytes.
            context: Additional context information.
        """
        context_dict = context or {}
        context_dict["size_bytes"] = size_bytes
        context_dict["limit_bytes"] = limit_bytes
        prefix = "Image too large after download" if after_download else "Image too large"
        super().__init__(
            f"{prefix}: {_megabytes(size_bytes)} MB. "
            f"Maximum allowed: {_megabytes(limit_bytes)} MB.",
            context=context_dict,
        )
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


def _megabytes(size_bytes: int) -> str:
    """Format a byte count as megabytes with two decimals."""
    return f"{size_bytes / 1024 / 1024:.2f}"
