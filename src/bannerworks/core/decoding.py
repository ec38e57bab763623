"""Decoding of source and watermark image bytes.

Decoding is the only step of an export that may wait on something: the
async :func:`load_image` hands the work to a worker thread so an event loop
stays responsive while Pillow decodes.  Both variants fully load the pixel
data before returning, so a corrupt file fails here rather than half-way
through a render.
"""

from __future__ import annotations

import asyncio
import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from bannerworks.core.errors import DecodeError

logger = logging.getLogger(__name__)


def decode_image(data: bytes, label: str = "source") -> Image.Image:
    """Decode raw image bytes into an RGBA image.

    EXIF orientation is applied so the pixels match what a browser shows.

    Args:
        data: Encoded image bytes (png, jpeg, webp, ...).
        label: Name used in log and error messages ("source", "watermark").

    Returns:
        Fully loaded RGBA image.

    Raises:
        DecodeError: If ``data`` is empty or cannot be decoded.
    """
    if not data:
        raise DecodeError(f"No {label} image data")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            decoded = ImageOps.exif_transpose(img).convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"Failed to decode {label} image: {e}")
        raise DecodeError(f"Could not decode {label} image: {e}") from e

    logger.debug(f"Decoded {label} image {decoded.size[0]}x{decoded.size[1]}")
    return decoded


async def load_image(data: bytes, label: str = "source") -> Image.Image:
    """Decode ``data`` in a worker thread.  See :func:`decode_image`."""
    return await asyncio.to_thread(decode_image, data, label)
