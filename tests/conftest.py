"""Shared pytest fixtures for Bannerworks tests."""

import pytest
from io import BytesIO
from pathlib import Path
import tempfile
import shutil
from typing import Generator

import numpy as np
from PIL import Image

from bannerworks.core.config import EditorConfig
from bannerworks.editor import EditorState


def encode_png(image: Image.Image) -> bytes:
    """Encode an image to PNG bytes."""
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> EditorConfig:
    """Create a test configuration that writes into a temporary directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        EditorConfig instance for testing
    """
    return EditorConfig(
        outputs_dir=temp_dir / "outputs",
        default_export_format="png",
        default_export_quality=0.92,
        _env_file=None,
    )


@pytest.fixture
def sample_image() -> Image.Image:
    """A 1200x900 RGBA gradient, the size of a typical 4:3 banner.

    Returns:
        Opaque RGBA image with distinct pixel values across the frame
    """
    height, width = 900, 1200
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = xs * 255 // width
    pixels[..., 1] = ys * 255 // height
    pixels[..., 2] = (xs + ys) % 256
    pixels[..., 3] = 255
    return Image.fromarray(pixels)


@pytest.fixture
def sample_png_bytes(sample_image: Image.Image) -> bytes:
    """The sample image encoded as PNG."""
    return encode_png(sample_image)


@pytest.fixture
def solid_image() -> Image.Image:
    """A 1000x750 mid-gray image, convenient for overlay measurements."""
    return Image.new("RGBA", (1000, 750), (40, 40, 40, 255))


@pytest.fixture
def watermark_png_bytes() -> bytes:
    """A 200x100 opaque red logo encoded as PNG."""
    return encode_png(Image.new("RGBA", (200, 100), (255, 0, 0, 255)))


@pytest.fixture
def editor_state(test_config: EditorConfig) -> EditorState:
    """Create a fresh editing session for a 1200x900 source.

    Returns:
        EditorState instance
    """
    return EditorState(source_width=1200, source_height=900, config=test_config)
