"""Header allow-list and deny-list handling.

Header names are lower-cased before any comparison.
"""

from collections.abc import Iterable, Mapping

FORWARDED_CLIENT_HEADERS: tuple[str, ...] = (
    "cookie",
    "dnt",
    "referer",
    "user-agent",
    "accept",
    "accept-language",
    "accept-encoding",
)

# Invalidated by transcoding or hop-by-hop.
EXCLUDED_RESPONSE_HEADERS: frozenset[str] = frozenset(
    {
        "content-encoding",
        "content-length",
        "transfer-encoding",
        "connection",
        "x-original-size",
        "x-bytes-saved",
    }
)


def normalize_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]] | None) -> dict[str, str]:
    """Lower-case header names, keeping the first-seen order.

    Later duplicates (differing only in case) override earlier values.
    """
    if headers is None:
        return {}
    items = headers.items() if isinstance(headers, Mapping) else headers
    normalized: dict[str, str] = {}
    for name, value in items:
        if value is None:
            continue
        normalized[name.lower()] = str(value)
    return normalized


def pick_forwarded_headers(
    client_headers: Mapping[str, str] | None,
    client_ip: str | None,
) -> dict[str, str]:
    """Select the client headers that are safe to send upstream.

    Args:
        client_headers: Headers of the incoming request.
        client_ip: Caller address, used when no ``x-forwarded-for`` arrived.

    Returns:
        Allow-listed headers plus ``x-forwarded-for`` when an address is known.
    """
    normalized = normalize_headers(client_headers)
    picked = {name: normalized[name] for name in FORWARDED_CLIENT_HEADERS if name in normalized}
    forwarded_for = normalized.get("x-forwarded-for") or client_ip
    if forwarded_for:
        picked["x-forwarded-for"] = forwarded_for
    return picked


def filter_response_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]] | None) -> dict[str, str]:
    """Drop upstream headers that must not be carried into the response."""
    return {
        name: value
        for name, value in normalize_headers(headers).items()
        if name not in EXCLUDED_RESPONSE_HEADERS
    }
