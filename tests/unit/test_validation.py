"""Tests for bannerworks.editor.validation."""

import pytest

from bannerworks.core.errors import BannerworksError
from bannerworks.editor.validation import (
    EXPORT_QUALITY_RANGE,
    FONT_SIZE_RANGE,
    SHADOW_OFFSET_RANGE,
    ValidationError,
    clamp_to_range,
    validate_export_quality,
    validate_watermark_upload,
)


class TestValidateWatermarkUpload:
    """Tests for validate_watermark_upload function."""

    def test_valid_upload(self):
        data = b"x" * 100
        assert validate_watermark_upload(data, max_bytes=100) is data

    def test_empty_upload(self):
        with pytest.raises(ValidationError, match="empty"):
            validate_watermark_upload(b"", max_bytes=100)

    def test_too_large(self):
        with pytest.raises(ValidationError, match="too large"):
            validate_watermark_upload(b"x" * (6 * 1024 * 1024), max_bytes=5 * 1024 * 1024)

    def test_is_a_bannerworks_error(self):
        assert issubclass(ValidationError, BannerworksError)


class TestValidateExportQuality:
    """Tests for validate_export_quality function."""

    @pytest.mark.parametrize("quality", [0.1, 0.5, 0.92, 1])
    def test_valid(self, quality):
        assert validate_export_quality(quality) == float(quality)

    @pytest.mark.parametrize("quality", [0, 0.05, -0.01, 1.5, 92])
    def test_invalid(self, quality):
        with pytest.raises(ValidationError):
            validate_export_quality(quality)

    def test_bounds_follow_slider_range(self):
        low, high = EXPORT_QUALITY_RANGE
        assert validate_export_quality(low) == low
        assert validate_export_quality(high) == high
        with pytest.raises(ValidationError, match="between 0.1 and 1.0"):
            validate_export_quality(low / 2)


class TestClampToRange:
    """Tests for clamp_to_range function."""

    def test_inside(self):
        assert clamp_to_range(48, FONT_SIZE_RANGE) == 48

    def test_below(self):
        assert clamp_to_range(-50, SHADOW_OFFSET_RANGE) == -20

    def test_above(self):
        assert clamp_to_range(500, FONT_SIZE_RANGE) == 200
