"""Proxy response builders for the relay handler."""

import base64
import re
from http import HTTPStatus

from image_relay.transform.models import SourceImage, TranscodeResult
from image_relay.types import LambdaResponse

LIVENESS_BODY = "bandwidth-hero-proxy"
UNHANDLED_REASON = "unhandled_error"

NO_CACHE_HEADERS: dict[str, str] = {
    "cache-control": "no-store, no-cache, must-revalidate",
    "pragma": "no-cache",
    "expires": "0",
}

_UNSAFE_REASON_CHARACTERS = re.compile(r"[^a-zA-Z0-9]")


def sanitize_reason(reason: str) -> str:
    """Replace every non-alphanumeric character so the reason fits a header."""
    return _UNSAFE_REASON_CHARACTERS.sub("_", reason)


def liveness_response() -> LambdaResponse:
    return {"statusCode": int(HTTPStatus.OK), "body": LIVENESS_BODY}


def bypass_response(source: SourceImage) -> LambdaResponse:
    """Serve the source bytes unmodified.

    Args:
        source: Downloaded source image.

    Returns:
        Base64-transported response carrying the original bytes.
    """
    headers = {
        "content-encoding": "identity",
        "content-length": str(source.actual_length),
        **source.headers,
        **NO_CACHE_HEADERS,
    }
    return {
        "statusCode": int(HTTPStatus.OK),
        "headers": headers,
        "body": base64.b64encode(source.data).decode("ascii"),
        "isBase64Encoded": True,
    }


def transcoded_response(source: SourceImage, result: TranscodeResult) -> LambdaResponse:
    """Serve the encoded output; transcode headers override upstream ones.

    Args:
        source: Downloaded source image, for its filtered headers.
        result: Successful transcode result.

    Returns:
        Base64-transported response carrying the encoded bytes.
    """
    headers = {
        "content-encoding": "identity",
        **source.headers,
        **result.headers,
        **NO_CACHE_HEADERS,
    }
    return {
        "statusCode": int(HTTPStatus.OK),
        "headers": headers,
        "body": base64.b64encode(result.output).decode("ascii"),
        "isBase64Encoded": True,
    }


def redirect_response(location: str, reason: str) -> LambdaResponse:
    """Send the client to the original resource.

    Args:
        location: Original image URL.
        reason: Diagnostic reason; sanitized before use as a header value.

    Returns:
        302 response with an empty body.
    """
    return {
        "statusCode": int(HTTPStatus.FOUND),
        "headers": {
            "Location": location,
            "Cache-Control": NO_CACHE_HEADERS["cache-control"],
            "Pragma": NO_CACHE_HEADERS["pragma"],
            "Expires": NO_CACHE_HEADERS["expires"],
            "X-Redirect-Reason": sanitize_reason(reason),
        },
        "body": "",
    }


def internal_error_response() -> LambdaResponse:
    return {
        "statusCode": int(HTTPStatus.INTERNAL_SERVER_ERROR),
        "headers": {"content-type": "text/plain; charset=utf-8"},
        "body": "Internal server error",
    }
