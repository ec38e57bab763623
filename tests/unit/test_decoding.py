"""Tests for bannerworks.core.decoding — source and watermark decoding."""

from __future__ import annotations

import asyncio
from io import BytesIO

import pytest
from PIL import Image

from bannerworks.core.decoding import decode_image, load_image
from bannerworks.core.errors import DecodeError


def encode(image: Image.Image, fmt: str = "PNG", **params) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=fmt, **params)
    return buffer.getvalue()


class TestDecodeImage:
    """Tests for synchronous decoding."""

    def test_png_round_trip(self, sample_image, sample_png_bytes):
        decoded = decode_image(sample_png_bytes)
        assert decoded.mode == "RGBA"
        assert decoded.tobytes() == sample_image.tobytes()

    def test_rgb_jpeg_becomes_rgba(self):
        decoded = decode_image(encode(Image.new("RGB", (40, 30), (10, 20, 30)), "JPEG"))
        assert decoded.mode == "RGBA"
        assert decoded.size == (40, 30)

    def test_exif_orientation_applied(self):
        """An image tagged as rotated 90 degrees comes back upright."""
        exif = Image.Exif()
        exif[0x0112] = 6
        data = encode(Image.new("RGB", (40, 20), (200, 0, 0)), "JPEG", exif=exif.tobytes())
        assert decode_image(data).size == (20, 40)

    def test_empty_bytes(self):
        with pytest.raises(DecodeError, match="No source image data"):
            decode_image(b"")

    def test_garbage_bytes(self):
        with pytest.raises(DecodeError, match="watermark"):
            decode_image(b"definitely not an image", label="watermark")

    def test_truncated_file(self, sample_png_bytes):
        with pytest.raises(DecodeError):
            decode_image(sample_png_bytes[: len(sample_png_bytes) // 2])


class TestLoadImage:
    """Tests for decoding off the event loop."""

    def test_load_image(self, sample_png_bytes):
        decoded = asyncio.run(load_image(sample_png_bytes))
        assert decoded.size == (1200, 900)

    def test_load_image_propagates_errors(self):
        with pytest.raises(DecodeError):
            asyncio.run(load_image(b"nope"))
