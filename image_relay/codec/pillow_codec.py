"""Pillow-backed image codec.

The relay talks to the codec through two calls only: ``probe`` to read
metadata without decoding pixels, and ``transform`` to execute a plan.
Pillow errors surface as TranscodeError carrying the library's message.
"""

import io
from typing import Any, Protocol

from PIL import Image, ImageFilter, UnidentifiedImageError

from image_relay.exceptions.server_errors import TranscodeError
from image_relay.transform.models import CompressionPlan, ImageMetadata, OutputFormat

# Sources are bounded by the byte ceiling and the dimension check instead.
Image.MAX_IMAGE_PIXELS = None

_BIT_DEPTH_BY_MODE: dict[str, int] = {
    "1": 1,
    "I": 32,
    "F": 32,
    "I;16": 16,
    "I;16B": 16,
    "I;16L": 16,
    "I;16N": 16,
}

_CODEC_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)


class ImageCodec(Protocol):
    """Interface of the external codec collaborator."""

    def probe(self, data: bytes) -> ImageMetadata:
        """Read metadata of an encoded image."""
        ...

    def transform(self, data: bytes, plan: CompressionPlan) -> tuple[bytes, int]:
        """Execute a plan, returning encoded bytes and their size."""
        ...


class PillowCodec:
    """Codec implementation on top of Pillow."""

    def probe(self, data: bytes) -> ImageMetadata:
        """Read image metadata without decoding pixel data.

        Args:
            data: Encoded source image.

        Returns:
            Probed metadata.

        Raises:
            TranscodeError: If Pillow cannot identify the image.
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                width, height = image.size
                return ImageMetadata(
                    width=width,
                    height=height,
                    channel_count=_channel_count(image),
                    bit_depth=_BIT_DEPTH_BY_MODE.get(image.mode, 8),
                    detected_format=image.format.lower() if image.format else None,
                )
        except UnidentifiedImageError as error:
            raise TranscodeError(f"Invalid image format: {error}") from error
        except _CODEC_ERRORS as error:
            raise TranscodeError(str(error) or error.__class__.__name__) from error

    def transform(self, data: bytes, plan: CompressionPlan) -> tuple[bytes, int]:
        """Decode, reshape and re-encode an image according to the plan.

        Args:
            data: Encoded source image.
            plan: Compression plan to execute.

        Returns:
            Tuple of encoded bytes and encoded size.

        Raises:
            TranscodeError: If decoding or encoding fails.
        """
        try:
            with Image.open(io.BytesIO(data)) as source:
                source.load()
                image = self._reshape(source, plan)
                output = io.BytesIO()
                image.save(output, **self._save_arguments(image, plan))
        except _CODEC_ERRORS as error:
            raise TranscodeError(str(error) or error.__class__.__name__) from error

        encoded = output.getvalue()
        return encoded, len(encoded)

    def _reshape(self, image: Image.Image, plan: CompressionPlan) -> Image.Image:
        if image.mode not in ("RGB", "RGBA", "L", "LA"):
            image = image.convert("RGBA" if _has_alpha(image) else "RGB")

        if plan.resize_target is not None:
            image = image.resize(plan.resize_target, Image.Resampling.LANCZOS)
            if plan.sharpen is not None:
                image = image.filter(
                    ImageFilter.UnsharpMask(
                        radius=plan.sharpen.radius,
                        percent=plan.sharpen.percent,
                        threshold=plan.sharpen.threshold,
                    )
                )

        if plan.effective_grayscale:
            image = image.convert("L")
            if plan.threshold is not None:
                cut = plan.threshold
                image = image.point(lambda value: 255 if value >= cut else 0)

        return _to_output_mode(image, plan.output_format)

    def _save_arguments(self, image: Image.Image, plan: CompressionPlan) -> dict[str, Any]:
        arguments: dict[str, Any] = {"quality": plan.effective_quality}
        if plan.output_format == OutputFormat.JPEG:
            options = plan.jpeg_options
            arguments["format"] = "JPEG"
            if options is not None:
                arguments["progressive"] = options.progressive
                arguments["optimize"] = options.optimize
                if image.mode != "L":
                    arguments["subsampling"] = options.subsampling
            return arguments

        arguments["format"] = "WEBP"
        if plan.webp_options is not None:
            arguments["lossless"] = plan.webp_options.lossless
            arguments["method"] = plan.webp_options.method
        return arguments


def _channel_count(image: Image.Image) -> int:
    """Channels of the decoded colours; palette images count as RGB or RGBA."""
    if image.mode == "PA":
        return 4
    if image.mode == "P":
        return 4 if "transparency" in image.info else 3
    return len(image.getbands())


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info


def _to_output_mode(image: Image.Image, output_format: OutputFormat) -> Image.Image:
    """Convert to a mode the target encoder accepts."""
    if output_format == OutputFormat.JPEG:
        if image.mode == "LA":
            return image.convert("L")
        if image.mode not in ("RGB", "L"):
            return image.convert("RGB")
        return image
    if image.mode == "LA":
        return image.convert("RGBA")
    if image.mode == "L":
        return image.convert("RGB")
    return image
