"""Image relay exception hierarchy.

Architecture:
    ImageRelayError (base)
    ├── ClientError (4xx)
    │   ├── InvalidContentTypeError (400)
    │   └── SourceTooLargeError (400)
    └── ServerError (5xx)
        ├── UpstreamFetchError (upstream status, 502 fallback)
        ├── UpstreamAbortedError (499)
        ├── TranscodeError (500, answered as a redirect to the original)
        └── ConfigurationError (500)

Usage:
    from image_relay.exceptions import InvalidContentTypeError

    def check_content_type(content_type: str) -> None:
        if not content_type.startswith("image/"):
            raise InvalidContentTypeError(content_type)
"""

from image_relay.exceptions.base import ImageRelayError
from image_relay.exceptions.client_errors import (
    ClientError,
    InvalidContentTypeError,
    SourceTooLargeError,
)
from image_relay.exceptions.handlers import (
    create_error_response,
    create_exception_handler,
)
from image_relay.exceptions.server_errors import (
    CLIENT_CLOSED_REQUEST,
    ConfigurationError,
    ServerError,
    TranscodeError,
    UpstreamAbortedError,
    UpstreamFetchError,
)

__all__ = [
    "CLIENT_CLOSED_REQUEST",
    "ClientError",
    "ConfigurationError",
    "ImageRelayError",
    "InvalidContentTypeError",
    "ServerError",
    "SourceTooLargeError",
    "TranscodeError",
    "UpstreamAbortedError",
    "UpstreamFetchError",
    "create_error_response",
    "create_exception_handler",
]
