"""Execution of a compression plan against the codec."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from image_relay.codec.pillow_codec import ImageCodec
from image_relay.exceptions.server_errors import TranscodeError
from image_relay.transform.models import CompressionPlan, SourceImage, TranscodeResult

logger = logging.getLogger(__name__)


def build_transcode_headers(plan: CompressionPlan, original_size: int, encoded_size: int) -> dict[str, str]:
    """Headers describing the encoded output and the bytes it saved."""
    return {
        "content-type": plan.content_type,
        "content-length": str(encoded_size),
        "x-original-size": str(original_size),
        "x-bytes-saved": str(original_size - encoded_size),
    }


class TranscodeExecutor:
    """Runs the codec for one plan under an independent timeout."""

    def __init__(self, codec: ImageCodec, timeout_seconds: float) -> None:
        """Initialize the executor.

        Args:
            codec: Codec collaborator.
            timeout_seconds: Time budget of the codec call.
        """
        self._codec = codec
        self._timeout_seconds = timeout_seconds

    def execute(self, source: SourceImage, plan: CompressionPlan) -> TranscodeResult:
        """Transcode the source according to the plan.

        Only the codec call is timed; fetch time is excluded.

        Args:
            source: Downloaded source image.
            plan: Compression plan.

        Returns:
            The encoded output with its headers and duration.

        Raises:
            TranscodeError: If the codec fails or exceeds the time budget.
        """
        if plan.fallback_applied:
            logger.warning("Applying WebP to JPEG fallback", extra={"resize_target": plan.resize_target})

        started = time.perf_counter()
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="transcode")
        try:
            future = pool.submit(self._codec.transform, source.data, plan)
            output, encoded_size = future.result(timeout=self._timeout_seconds)
        except FutureTimeoutError as error:
            # The worker thread cannot be interrupted; it keeps running until the
            # codec returns and its result is discarded.
            logger.warning(
                "Abandoning codec call still running after %gs",
                self._timeout_seconds,
                extra={"output_format": plan.output_format.value},
            )
            raise TranscodeError(
                f"Compression timed out after {self._timeout_seconds:g}s",
            ) from error
        except TranscodeError:
            raise
        except Exception as error:
            raise TranscodeError(str(error) or error.__class__.__name__) from error
        finally:
            pool.shutdown(wait=False, cancel_futures=True)
        duration_ms = (time.perf_counter() - started) * 1000.0

        return TranscodeResult(
            output=output,
            headers=build_transcode_headers(plan, source.actual_length, encoded_size),
            duration_ms=duration_ms,
            fallback_applied=plan.fallback_applied,
        )
