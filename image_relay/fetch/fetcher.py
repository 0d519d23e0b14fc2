"""Two-phase retrieval of the upstream image.

A HEAD preflight validates the declared content type and length before the
full GET is issued. Both phases share one cancellation token; each arms its
own deadline on it. Nothing is retried.
"""

import logging
from collections.abc import Mapping

import requests

from image_relay.config import Settings
from image_relay.exceptions.client_errors import InvalidContentTypeError, SourceTooLargeError
from image_relay.exceptions.server_errors import UpstreamFetchError
from image_relay.fetch.cancellation import CancellationToken, CancelReason
from image_relay.fetch.headers import filter_response_headers
from image_relay.transform.models import SourceImage

logger = logging.getLogger(__name__)

PREFLIGHT_PHASE = "preflight"
DOWNLOAD_PHASE = "download"


def parse_declared_length(value: str | None) -> int | None:
    """Parse a content-length header value; unusable values count as absent."""
    if value is None:
        return None
    try:
        length = int(value.strip())
    except ValueError:
        return None
    return length if length >= 0 else None


class SourceFetcher:
    """Fetches source images through a requests session."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        """Initialize the fetcher.

        Args:
            settings: Relay settings with timeouts and the size ceiling.
            session: HTTP session; a new one is created when omitted.
        """
        self._settings = settings
        self._session = session or requests.Session()

    def fetch(
        self,
        url: str,
        forwarded_headers: Mapping[str, str],
        token: CancellationToken,
    ) -> SourceImage:
        """Preflight and download the source image.

        Args:
            url: Target URL.
            forwarded_headers: Client headers allowed to reach the upstream.
            token: Cancellation token shared by both phases.

        Returns:
            The downloaded source image.

        Raises:
            InvalidContentTypeError: If the upstream does not declare an image.
            SourceTooLargeError: If the declared or actual size exceeds the ceiling.
            UpstreamFetchError: If the download returns a non-success status.
            requests.RequestException: If the transport fails other than by timing out.
            UpstreamAbortedError: If the token is cancelled or a phase times out.
        """
        headers = dict(forwarded_headers)
        token.raise_if_cancelled()

        with token.deadline(self._settings.preflight_timeout_seconds, PREFLIGHT_PHASE):
            content_type, declared_length = self._preflight(url, headers, token)

        with token.deadline(self._settings.fetch_timeout_seconds, DOWNLOAD_PHASE):
            return self._download(url, headers, token, content_type, declared_length)

    def _preflight(
        self,
        url: str,
        headers: dict[str, str],
        token: CancellationToken,
    ) -> tuple[str, int | None]:
        """Probe the upstream with HEAD and validate what it declares."""
        try:
            response = self._session.head(
                url,
                headers=headers,
                timeout=self._settings.preflight_timeout_seconds,
                allow_redirects=True,
            )
        except requests.RequestException as error:
            self._raise_if_aborted(error, token, PREFLIGHT_PHASE)
            raise

        token.raise_if_cancelled()

        if not response.ok:
            logger.warning(
                "Preflight request failed",
                extra={"upstream_status": response.status_code, "upstream_reason": response.reason},
            )

        content_type = response.headers.get("content-type") or ""
        declared_length = parse_declared_length(response.headers.get("content-length"))

        if not content_type.lower().startswith("image/"):
            raise InvalidContentTypeError(content_type)

        limit = self._settings.max_image_size_bytes
        if declared_length is not None and declared_length > limit:
            raise SourceTooLargeError(declared_length, limit)

        return content_type, declared_length

    def _download(
        self,
        url: str,
        headers: dict[str, str],
        token: CancellationToken,
        preflight_content_type: str,
        declared_length: int | None,
    ) -> SourceImage:
        """Download the full body, checking the token between chunks."""
        limit = self._settings.max_image_size_bytes
        try:
            with self._session.get(
                url,
                headers=headers,
                timeout=self._settings.fetch_timeout_seconds,
                stream=True,
            ) as response:
                if not response.ok:
                    logger.error(
                        "Fetch failed",
                        extra={"upstream_status": response.status_code, "upstream_reason": response.reason},
                    )
                    raise UpstreamFetchError(
                        f"Failed to fetch image: {response.reason}",
                        upstream_status=response.status_code,
                    )

                body = bytearray()
                for chunk in response.iter_content(chunk_size=self._settings.download_chunk_size):
                    token.raise_if_cancelled()
                    body.extend(chunk)
                    if len(body) > limit:
                        raise SourceTooLargeError(len(body), limit, after_download=True)

                response_headers = filter_response_headers(response.headers)
                content_type = response.headers.get("content-type") or preflight_content_type
        except requests.RequestException as error:
            self._raise_if_aborted(error, token, DOWNLOAD_PHASE)
            raise

        token.raise_if_cancelled()

        return SourceImage(
            data=bytes(body),
            declared_content_type=content_type,
            declared_length=declared_length,
            headers=response_headers,
        )

    def _raise_if_aborted(
        self,
        error: requests.RequestException,
        token: CancellationToken,
        phase: str,
    ) -> None:
        """Report a timed-out or cancelled phase as an abort.

        Other transport failures are left to the caller, which redirects to
        the original resource.
        """
        if isinstance(error, requests.Timeout):
            token.cancel(CancelReason.TIMEOUT, phase)
        if token.cancelled:
            raise token.aborted_error() from error
