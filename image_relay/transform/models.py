"""Transform pipeline data models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OutputFormat(StrEnum):
    """Formats the relay can encode to."""

    WEBP = "webp"
    JPEG = "jpeg"


class TransformRequest(BaseModel):
    """Canonical form of one incoming relay call."""

    model_config = ConfigDict(frozen=True)

    target_url: str = Field(min_length=1)
    want_webp: bool = True
    grayscale_requested: bool = False
    quality: int = Field(ge=0, le=100)


class SourceImage(BaseModel):
    """Downloaded upstream resource.

    ``actual_length`` is authoritative; ``declared_length`` comes from the
    upstream headers and may be absent or wrong.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes
    declared_content_type: str = ""
    declared_length: int | None = None
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def actual_length(self) -> int:
        return len(self.data)


class ImageMetadata(BaseModel):
    """Result of probing a source image before any pixel work."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(ge=0)
    height: int = Field(ge=0)
    channel_count: int = Field(ge=1)
    bit_depth: int = Field(ge=1)
    detected_format: str | None = None


class SharpenSettings(BaseModel):
    """Unsharp-mask parameters applied after a downscale."""

    model_config = ConfigDict(frozen=True)

    radius: float = Field(gt=0)
    percent: int = Field(ge=0)
    threshold: int = Field(ge=0)


class JpegOptions(BaseModel):
    """JPEG encoder options."""

    model_config = ConfigDict(frozen=True)

    progressive: bool = True
    optimize: bool = True
    subsampling: str = "4:2:0"
    trellis_quantisation: bool = True
    overshoot_deringing: bool = True


class WebpOptions(BaseModel):
    """WebP encoder options."""

    model_config = ConfigDict(frozen=True)

    lossless: bool = False
    method: int = Field(default=6, ge=0, le=6)
    sharp_yuv: bool = True


class CompressionPlan(BaseModel):
    """Concrete transcode parameters derived from metadata and request."""

    model_config = ConfigDict(frozen=True)

    output_format: OutputFormat
    resize_target: tuple[int, int] | None = None
    effective_grayscale: bool = False
    effective_quality: int = Field(ge=0, le=100)
    fallback_applied: bool = False
    sharpen: SharpenSettings | None = None
    threshold: int | None = Field(default=None, ge=0, le=255)
    jpeg_options: JpegOptions | None = None
    webp_options: WebpOptions | None = None

    @model_validator(mode="after")
    def _check_fallback_format(self) -> "CompressionPlan":
        if self.fallback_applied and self.output_format != OutputFormat.JPEG:
            error_message = "fallback_applied requires jpeg output"
            raise ValueError(error_message)
        return self

    @property
    def content_type(self) -> str:
        return f"image/{self.output_format.value}"


class TranscodeResult(BaseModel):
    """Encoded output of a successful transcode."""

    model_config = ConfigDict(frozen=True)

    output: bytes
    headers: dict[str, str]
    duration_ms: float = Field(ge=0)
    fallback_applied: bool = False
