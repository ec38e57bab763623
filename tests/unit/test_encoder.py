"""Tests for bannerworks.core.encoder — format encoding and file output.

Tests cover:
- png, jpeg and webp output with the right MIME type and dimensions.
- Quality mapping: lower jpeg quality never produces a larger file.
- JPEG flattening of transparent pixels.
- Error handling for unknown formats, bad quality and empty buffers.
- Suggested filenames and atomic saving.
"""

from __future__ import annotations

import os
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, features

from bannerworks.core.encoder import (
    build_filename,
    encode_image,
    normalize_format,
    save_encoded,
)
from bannerworks.core.errors import EncodingError

requires_webp = pytest.mark.skipif(not features.check("webp"), reason="Pillow built without webp")


def decode(data: bytes) -> Image.Image:
    image = Image.open(BytesIO(data))
    image.load()
    return image


class TestFormats:
    """Tests for the supported output formats."""

    def test_png_is_lossless(self, sample_image):
        encoded = encode_image(sample_image, "png")
        assert encoded.format == "png"
        assert encoded.mime_type == "image/png"
        assert (encoded.width, encoded.height) == (1200, 900)
        assert decode(encoded.data).convert("RGBA").tobytes() == sample_image.tobytes()

    def test_jpeg_output(self, sample_image):
        encoded = encode_image(sample_image, "jpeg", quality=0.8)
        assert encoded.mime_type == "image/jpeg"
        decoded = decode(encoded.data)
        assert decoded.format == "JPEG"
        assert decoded.size == (1200, 900)

    def test_jpg_alias(self, sample_image):
        assert encode_image(sample_image, "JPG").format == "jpeg"

    @requires_webp
    def test_webp_output(self, sample_image):
        encoded = encode_image(sample_image, "webp", quality=0.7)
        assert encoded.mime_type == "image/webp"
        assert decode(encoded.data).format == "WEBP"

    def test_jpeg_quality_is_monotonic(self, sample_image):
        """Quality 0.5 never produces more bytes than quality 1.0."""
        low = encode_image(sample_image, "jpeg", quality=0.5)
        high = encode_image(sample_image, "jpeg", quality=1.0)
        assert low.byte_size <= high.byte_size

    def test_jpeg_flattens_transparency_onto_black(self):
        transparent = Image.new("RGBA", (16, 16), (255, 255, 255, 0))
        encoded = encode_image(transparent, "jpeg", quality=1.0)
        r, g, b = decode(encoded.data).getpixel((8, 8))
        assert max(r, g, b) <= 2

    def test_png_ignores_quality(self, sample_image):
        assert (
            encode_image(sample_image, "png", quality=0.1).data
            == encode_image(sample_image, "png", quality=1.0).data
        )


class TestEncodingErrors:
    """Tests for rejected encoder input."""

    def test_unknown_format(self, sample_image):
        with pytest.raises(EncodingError):
            encode_image(sample_image, "gif")

    @pytest.mark.parametrize("quality", [-0.1, 1.01])
    def test_quality_out_of_range(self, sample_image, quality):
        with pytest.raises(EncodingError):
            encode_image(sample_image, "jpeg", quality=quality)

    def test_empty_image(self):
        with pytest.raises(EncodingError):
            encode_image(Image.new("RGBA", (0, 0)), "png")

    def test_writer_failure_is_wrapped(self, sample_image, monkeypatch):
        def broken_save(self, fp, format=None, **params):
            raise OSError("encoder exploded")

        monkeypatch.setattr(Image.Image, "save", broken_save)
        with pytest.raises(EncodingError, match="encoder exploded"):
            encode_image(sample_image, "png")

    def test_normalize_format(self):
        assert normalize_format(" PNG ") == "png"
        assert normalize_format("jpg") == "jpeg"


class TestFilenames:
    """Tests for suggested download names."""

    def test_build_filename(self):
        assert build_filename("png", timestamp_ms=1718000000000) == "edited-banner-1718000000000.png"

    def test_custom_prefix(self):
        assert build_filename("webp", prefix="promo", timestamp_ms=5) == "promo-5.webp"

    def test_encoded_filename_uses_format(self, sample_image):
        encoded = encode_image(sample_image, "jpg", filename_prefix="sale")
        assert encoded.filename.startswith("sale-")
        assert encoded.filename.endswith(".jpeg")


class TestSaveEncoded:
    """Tests for writing exports to disk."""

    def test_writes_file(self, sample_image, temp_dir: Path):
        encoded = encode_image(sample_image, "png")
        path = save_encoded(encoded, temp_dir / "exports")

        assert path == temp_dir / "exports" / encoded.filename
        assert path.read_bytes() == encoded.data

    def test_no_partial_file_left_on_failure(self, sample_image, temp_dir: Path, monkeypatch):
        encoded = encode_image(sample_image, "png")

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", failing_replace)
        with pytest.raises(EncodingError, match="disk full"):
            save_encoded(encoded, temp_dir)

        assert list(temp_dir.iterdir()) == []
