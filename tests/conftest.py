"""Shared test fixtures."""

import io

import pytest
from PIL import Image

from image_relay.config import get_settings
from image_relay.logging.config import get_logging_config


@pytest.fixture(autouse=True)
def _clear_environment(monkeypatch):
    """Clear environment variables that affect settings."""
    env_vars_to_clear = [
        "SERVICE_NAME",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "DEFAULT_QUALITY",
        "MAX_IMAGE_SIZE_BYTES",
        "MIN_COMPRESS_LENGTH",
        "MIN_TRANSPARENT_COMPRESS_LENGTH",
        "TARGET_WIDTH",
        "MAX_WEBP_DIMENSION",
        "MAX_SOURCE_DIMENSION",
        "GRAYSCALE_THRESHOLD",
        "PREFLIGHT_TIMEOUT_SECONDS",
        "FETCH_TIMEOUT_SECONDS",
        "TRANSCODE_TIMEOUT_SECONDS",
        "DOWNLOAD_CHUNK_SIZE",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    get_logging_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_logging_config.cache_clear()


def encode_image(
    image: Image.Image,
    image_format: str,
    **save_options,
) -> bytes:
    """Encode a Pillow image into bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format=image_format, **save_options)
    return buffer.getvalue()


@pytest.fixture()
def encode():
    """Expose the encoder helper to tests."""
    return encode_image


@pytest.fixture()
def noisy_jpeg() -> bytes:
    """A 1200x800 JPEG whose noise keeps it well above the size thresholds."""
    image = Image.effect_noise((1200, 800), 64).convert("RGB")
    return encode_image(image, "JPEG", quality=95)


@pytest.fixture()
def small_png() -> bytes:
    """A 64x64 RGBA PNG."""
    image = Image.new("RGBA", (64, 64), (200, 30, 30, 128))
    return encode_image(image, "PNG")
