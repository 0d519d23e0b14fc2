"""Relay tuning parameters read from environment variables.

There are no .env files; each deployment sets what it needs to change.
Logging has its own settings in ``image_relay.logging.config``.

Usage:
    from image_relay.config import get_settings

    settings = get_settings()
    print(settings.default_quality)
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MEGABYTE = 1024 * 1024


class Settings(BaseSettings):
    """Relay settings.

    Attributes:
        default_quality: Encode quality used when the request carries none.
        target_width: Width sources are shrunk to when wider.
        max_webp_dimension: Per-axis pixel limit of the WebP encoder.
        max_source_dimension: Largest accepted source width or height.
        grayscale_threshold: Brightness cut used to binarize grayscale output.
        max_image_size_bytes: Ceiling for declared and downloaded source size.
        min_compress_length: Smallest source worth transcoding.
        min_transparent_compress_length: Smallest PNG/GIF worth converting to JPEG.
        preflight_timeout_seconds: Bound on the HEAD probe.
        fetch_timeout_seconds: Bound on the full download.
        transcode_timeout_seconds: Bound on the codec call.
        download_chunk_size: Bytes read per chunk while streaming the source.
    """

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore",
        str_strip_whitespace=True,
    )

    # Encoding
    default_quality: int = Field(default=40, ge=0, le=100)
    target_width: int = Field(default=854, ge=1)
    max_webp_dimension: int = Field(default=16383, ge=1)
    max_source_dimension: int = Field(default=32768, ge=1)
    grayscale_threshold: int = Field(default=128, ge=0, le=255)

    # Size limits
    max_image_size_bytes: int = Field(default=25 * MEGABYTE, ge=1)
    min_compress_length: int = Field(default=1024, ge=0)
    min_transparent_compress_length: int = Field(default=10240, ge=0)

    # Timeouts
    preflight_timeout_seconds: float = Field(default=10.0, gt=0, le=300)
    fetch_timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    transcode_timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    download_chunk_size: int = Field(default=64 * 1024, ge=1024)


@lru_cache
def get_settings() -> Settings:
    return Settings()
