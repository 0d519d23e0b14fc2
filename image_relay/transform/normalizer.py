"""Normalization of raw query parameters into a TransformRequest."""

import json
import logging
import re
from collections.abc import Mapping

from image_relay.config import Settings
from image_relay.transform.models import TransformRequest

logger = logging.getLogger(__name__)

# Some clients prepend a bandwidth-monitor host before the real URL.
_SENTINEL_PREFIX = re.compile(r"http://1\.1\.\d\.\d/bmi/(https?://)?", re.IGNORECASE)
_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")

_ARRAY_SEPARATOR = "&url="


def normalize_target_url(raw_url: str) -> str:
    """Resolve the ``url`` parameter into the URL to fetch.

    Args:
        raw_url: Raw ``url`` query value, possibly JSON encoded.

    Returns:
        The target URL with any sentinel prefix rewritten to ``http://``.
    """
    target = raw_url
    try:
        parsed = json.loads(raw_url)
    except ValueError:
        logger.debug("url is not JSON, using raw string")
    else:
        if isinstance(parsed, list):
            target = _ARRAY_SEPARATOR.join(_join_item(item) for item in parsed)
        elif isinstance(parsed, str):
            target = parsed

    return _SENTINEL_PREFIX.sub("http://", target)


def _join_item(item: object) -> str:
    """Render one array element the way a JavaScript array join does."""
    if item is None:
        return ""
    if isinstance(item, bool):
        return "true" if item else "false"
    if isinstance(item, list):
        return ",".join(_join_item(nested) for nested in item)
    return str(item)


def parse_quality(raw_quality: str | None, default: int) -> int:
    """Parse the ``l`` parameter and clamp it into [0, 100].

    Leading digits are honoured (``"55abc"`` is 55). Missing, non-numeric
    and zero values fall back to ``default``.
    """
    quality = default
    if raw_quality:
        match = _LEADING_INTEGER.match(raw_quality)
        if match and int(match.group(1)) != 0:
            quality = int(match.group(1))
    return clamp_quality(quality)


def clamp_quality(quality: int) -> int:
    return min(100, max(0, quality))


def normalize_request(
    query: Mapping[str, str | None] | None,
    settings: Settings,
) -> TransformRequest | None:
    """Build the canonical request from query parameters.

    Args:
        query: Raw query string parameters of the proxy event.
        settings: Relay settings providing the default quality.

    Returns:
        The TransformRequest, or None when no ``url`` was supplied.
    """
    params = query or {}
    raw_url = params.get("url")
    if not raw_url:
        return None

    grayscale_value = params.get("bw")
    return TransformRequest(
        target_url=normalize_target_url(raw_url),
        want_webp="jpeg" not in params,
        grayscale_requested=bool(grayscale_value) and grayscale_value != "0",
        quality=parse_quality(params.get("l"), settings.default_quality),
    )
