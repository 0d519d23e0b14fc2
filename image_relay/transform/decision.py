"""Decision whether a source image is worth transcoding."""

from dataclasses import dataclass

from image_relay.config import Settings

_TRANSPARENT_SUFFIXES = ("png", "gif")


@dataclass(frozen=True)
class CompressionThresholds:
    """Minimum source sizes, in bytes, below which transcoding is skipped.

    Attributes:
        min_compress_length: Threshold for WebP output and opaque JPEG sources.
        min_transparent_compress_length: Threshold for PNG/GIF converted to JPEG.
    """

    min_compress_length: int = 1024
    min_transparent_compress_length: int = 10240

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompressionThresholds":
        return cls(
            min_compress_length=settings.min_compress_length,
            min_transparent_compress_length=settings.min_transparent_compress_length,
        )


def is_transparent_format(content_type: str) -> bool:
    """Check whether the content type names a format that can carry alpha."""
    return content_type.lower().split(";", 1)[0].strip().endswith(_TRANSPARENT_SUFFIXES)


def should_compress(
    content_type: str,
    size: int,
    want_webp: bool,
    thresholds: CompressionThresholds | None = None,
) -> bool:
    """Decide whether transcoding is worth the CPU cost.

    PNG and GIF sources lose their alpha channel when converted to JPEG, so a
    larger threshold applies to them when JPEG output is requested.

    Args:
        content_type: Content type of the source.
        size: Actual byte length of the source.
        want_webp: Whether WebP output was requested.
        thresholds: Size thresholds; defaults when omitted.

    Returns:
        True if the source should be transcoded, False to bypass.
    """
    limits = thresholds or CompressionThresholds()

    if not content_type or not content_type.lower().startswith("image/") or size == 0:
        return False

    if want_webp:
        return size >= limits.min_compress_length

    if is_transparent_format(content_type):
        return size >= limits.min_transparent_compress_length

    return size >= limits.min_compress_length
