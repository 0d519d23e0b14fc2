"""Image relay Lambda handler.

Fetches the image named by the ``url`` query parameter and answers with a
smaller re-encoding of it, the untouched original when transcoding is not
worthwhile, or a redirect to the original when transcoding fails.
"""

import logging
import time
from typing import Any

from pydantic import ValidationError

from image_relay.codec.executor import TranscodeExecutor
from image_relay.codec.pillow_codec import ImageCodec, PillowCodec
from image_relay.config import Settings, get_settings
from image_relay.exceptions.client_errors import ClientError
from image_relay.exceptions.handlers import create_exception_handler
from image_relay.exceptions.server_errors import (
    ConfigurationError,
    TranscodeError,
    UpstreamAbortedError,
    UpstreamFetchError,
)
from image_relay.fetch.cancellation import CancellationToken
from image_relay.fetch.fetcher import SourceFetcher
from image_relay.fetch.headers import normalize_headers, pick_forwarded_headers
from image_relay.handlers.responses import (
    UNHANDLED_REASON,
    bypass_response,
    internal_error_response,
    liveness_response,
    redirect_response,
    transcoded_response,
)
from image_relay.logging.adapters.lambda_adapter import set_lambda_context
from image_relay.logging.context import request_scope, set_extra_context
from image_relay.logging.logger import setup_logging
from image_relay.transform.decision import CompressionThresholds, should_compress
from image_relay.transform.normalizer import normalize_request
from image_relay.transform.planner import plan_transcode, validate_metadata
from image_relay.types import LambdaContext, LambdaResponse

logger = logging.getLogger(__name__)

# Left for the platform to flush the response before the invocation is killed.
_INVOCATION_MARGIN_SECONDS = 1.0


def _load_settings() -> Settings:
    """Load settings, reporting invalid configuration as a relay error."""
    try:
        return get_settings()
    except ValidationError as error:
        raise ConfigurationError(f"Invalid relay configuration: {error.error_count()} errors") from error


def _client_ip(event: dict[str, Any]) -> str | None:
    """Caller address from the proxy request context."""
    request_context = event.get("requestContext")
    if isinstance(request_context, dict):
        identity = request_context.get("identity")
        if isinstance(identity, dict) and identity.get("sourceIp"):
            return str(identity["sourceIp"])
    ip = event.get("ip")
    return str(ip) if ip else None


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


def process_request(
    event: dict[str, Any],
    settings: Settings,
    fetcher: SourceFetcher,
    codec: ImageCodec,
    token: CancellationToken,
) -> LambdaResponse:
    """Run the relay pipeline for one proxy event.

    Args:
        event: Proxy event with ``queryStringParameters`` and ``headers``.
        settings: Relay settings.
        fetcher: Source fetcher.
        codec: Codec used for the probe and the transcode.
        token: Cancellation token for the network phases.

    Returns:
        Proxy response.

    Raises:
        ClientError: If the upstream resource fails validation.
        UpstreamFetchError: If the upstream download fails.
        UpstreamAbortedError: If the request is cancelled or times out.
    """
    started = time.perf_counter()
    query: dict[str, str] = event.get("queryStringParameters") or {}
    client_headers = normalize_headers(event.get("headers"))
    client_ip = _client_ip(event)

    logger.info(
        "Request started",
        extra={
            "url": query.get("url"),
            "ip": client_headers.get("x-forwarded-for") or client_ip,
            "user_agent": client_headers.get("user-agent"),
        },
    )

    try:
        request = normalize_request(query, settings)
    except Exception:
        logger.exception("Request normalization failed")
        return internal_error_response()

    if request is None:
        return liveness_response()

    set_extra_context(target_url=request.target_url)
    logger.info(
        "Request parameters",
        extra={
            "output_format": "webp" if request.want_webp else "jpeg",
            "grayscale": request.grayscale_requested,
            "quality": request.quality,
        },
    )

    try:
        source = fetcher.fetch(
            request.target_url,
            pick_forwarded_headers(client_headers, client_ip),
            token,
        )
        logger.info(
            "Image info",
            extra={
                "content_type": source.declared_content_type,
                "original_size": source.actual_length,
            },
        )

        thresholds = CompressionThresholds.from_settings(settings)
        if not should_compress(
            source.declared_content_type,
            source.actual_length,
            request.want_webp,
            thresholds,
        ):
            logger.info("Bypass success", extra={"total_duration_ms": round(_elapsed_ms(started), 2)})
            return bypass_response(source)

        metadata = codec.probe(source.data)
        validate_metadata(metadata, settings)
        plan = plan_transcode(metadata, request, settings)
        result = TranscodeExecutor(codec, settings.transcode_timeout_seconds).execute(source, plan)
    except (ClientError, UpstreamFetchError, UpstreamAbortedError):
        raise
    except TranscodeError as error:
        logger.error(
            "Compression failed, redirecting to original",
            extra={"reason": error.reason, "total_duration_ms": round(_elapsed_ms(started), 2)},
        )
        return redirect_response(request.target_url, error.reason)
    except Exception as error:
        logger.exception("Unhandled error, redirecting to original", extra={"error_type": type(error).__name__})
        return redirect_response(request.target_url, UNHANDLED_REASON)

    original_size = source.actual_length
    saved = original_size - len(result.output)
    logger.info(
        "Compression success",
        extra={
            "original_size": original_size,
            "compressed_size": len(result.output),
            "saved_percent": round(saved / original_size * 100, 2),
            "codec_duration_ms": round(result.duration_ms, 2),
            "total_duration_ms": round(_elapsed_ms(started), 2),
            "fallback": "WebP -> JPEG" if result.fallback_applied else "None",
        },
    )
    return transcoded_response(source, result)


def _invocation_budget(context: LambdaContext | None) -> float | None:
    """Seconds left for this invocation, minus a flush margin."""
    if context is None:
        return None
    remaining_ms = context.get_remaining_time_in_millis()
    if not isinstance(remaining_ms, int):
        return None
    return max(remaining_ms / 1000.0 - _INVOCATION_MARGIN_SECONDS, 0.001)


@create_exception_handler
def handler(event: dict[str, Any], context: LambdaContext | None) -> LambdaResponse:
    """Relay one image request.

    Args:
        event: API Gateway proxy event.
        context: Lambda context.

    Returns:
        Proxy response.
    """
    setup_logging()
    settings = _load_settings()
    token = CancellationToken()

    with request_scope(getattr(context, "aws_request_id", None)):
        set_lambda_context(event, context)
        fetcher = SourceFetcher(settings)
        budget = _invocation_budget(context)
        if budget is None:
            return process_request(event, settings, fetcher, PillowCodec(), token)
        with token.deadline(budget, "invocation"):
            return process_request(event, settings, fetcher, PillowCodec(), token)
