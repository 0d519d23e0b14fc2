"""Tests for transform data models."""

import pytest
from pydantic import ValidationError

from image_relay.transform.models import (
    CompressionPlan,
    OutputFormat,
    SourceImage,
    TransformRequest,
)


class TestTransformRequest:
    def test_quality_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            TransformRequest(target_url="https://example.com/a.jpg", quality=101)

    def test_empty_url_rejected(self):
        with pytest.raises(ValidationError):
            TransformRequest(target_url="", quality=40)


class TestSourceImage:
    def test_actual_length_from_bytes(self):
        source = SourceImage(data=b"abcdef", declared_length=999)
        assert source.actual_length == 6
        assert source.declared_length == 999


class TestCompressionPlan:
    def test_fallback_requires_jpeg(self):
        with pytest.raises(ValidationError):
            CompressionPlan(output_format=OutputFormat.WEBP, effective_quality=40, fallback_applied=True)

    def test_fallback_with_jpeg_allowed(self):
        plan = CompressionPlan(output_format=OutputFormat.JPEG, effective_quality=40, fallback_applied=True)
        assert plan.content_type == "image/jpeg"
