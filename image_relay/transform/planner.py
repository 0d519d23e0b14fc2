"""Transcode planning.

Derives the concrete transcode parameters (target geometry, color mode,
output format, encoder options) from probed image metadata and the request.
Planning is pure: the codec is only invoked afterwards with the finished plan.
"""

import logging
import math

from image_relay.config import Settings
from image_relay.exceptions.server_errors import TranscodeError
from image_relay.transform.models import (
    CompressionPlan,
    ImageMetadata,
    JpegOptions,
    OutputFormat,
    SharpenSettings,
    TransformRequest,
    WebpOptions,
)

logger = logging.getLogger(__name__)

COLOR_SHARPEN = SharpenSettings(radius=0.5, percent=150, threshold=2)
# Stronger edge emphasis keeps line art and text legible after downscaling.
GRAYSCALE_SHARPEN = SharpenSettings(radius=0.7, percent=200, threshold=2)


def is_effectively_monochrome(metadata: ImageMetadata) -> bool:
    """Check whether the source carries no useful color information."""
    return metadata.channel_count <= 2 or metadata.bit_depth == 1


def estimate_resize(metadata: ImageMetadata, target_width: int) -> tuple[int, int] | None:
    """Compute the downscaled geometry, or None when no shrink is needed.

    Args:
        metadata: Probed source metadata.
        target_width: Width to shrink wider sources to.

    Returns:
        ``(target_width, estimated_height)`` for sources wider than the
        target, otherwise None. Sources are never enlarged.
    """
    if metadata.width <= target_width:
        return None
    resize_factor = target_width / metadata.width
    estimated_height = max(1, math.floor(metadata.height * resize_factor + 0.5))
    return target_width, estimated_height


def validate_metadata(metadata: ImageMetadata, settings: Settings) -> None:
    """Reject sources the codec cannot or should not decode.

    Runs before planning, on the single probe result of the request.

    Raises:
        TranscodeError: If no format was detected or a side exceeds the
            configured maximum source dimension.
    """
    if not metadata.detected_format:
        raise TranscodeError("Invalid image format")

    limit = settings.max_source_dimension
    if metadata.width > limit or metadata.height > limit:
        raise TranscodeError(
            f"Image dimensions too large: {metadata.width}x{metadata.height}. "
            f"Maximum allowed: {limit}x{limit}.",
            context={"width": metadata.width, "height": metadata.height},
        )


def plan_transcode(
    metadata: ImageMetadata,
    request: TransformRequest,
    settings: Settings,
) -> CompressionPlan:
    """Build the compression plan for one source image.

    Args:
        metadata: Probed source metadata.
        request: Normalized transform request.
        settings: Relay settings with geometry and threshold parameters.

    Returns:
        The compression plan.
    """
    grayscale = request.grayscale_requested or is_effectively_monochrome(metadata)
    output_format = OutputFormat.WEBP if request.want_webp else OutputFormat.JPEG
    fallback_applied = False

    resize_target = estimate_resize(metadata, settings.target_width)
    if resize_target is not None:
        estimated_height = resize_target[1]
        if output_format == OutputFormat.WEBP and estimated_height > settings.max_webp_dimension:
            output_format = OutputFormat.JPEG
            fallback_applied = True
            logger.warning(
                "WebP limit of %dpx exceeded, switching output to JPEG",
                settings.max_webp_dimension,
                extra={"estimated_height": estimated_height},
            )

    sharpen = None
    if resize_target is not None:
        sharpen = GRAYSCALE_SHARPEN if grayscale else COLOR_SHARPEN

    jpeg_options = None
    webp_options = None
    if output_format == OutputFormat.JPEG:
        jpeg_options = JpegOptions()
    else:
        webp_options = WebpOptions(sharp_yuv=not grayscale)

    return CompressionPlan(
        output_format=output_format,
        resize_target=resize_target,
        effective_grayscale=grayscale,
        effective_quality=request.quality,
        fallback_applied=fallback_applied,
        sharpen=sharpen,
        threshold=settings.grayscale_threshold if grayscale else None,
        jpeg_options=jpeg_options,
        webp_options=webp_options,
    )
