"""Encoder: final pixel buffer to png, jpeg or webp bytes.

Quality is expressed in [0, 1] like the editor slider and mapped onto
Pillow's 0-100 scale for the lossy formats.  png is lossless and ignores it.

Encoding happens entirely in memory.  :func:`save_encoded` then writes the
bytes through a temporary file and an atomic rename, so a failed export
never leaves a partial file behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from io import BytesIO
from pathlib import Path

from PIL import Image, features

from bannerworks.core.errors import EncodingError
from bannerworks.core.models import EncodedImage

logger = logging.getLogger(__name__)

DEFAULT_FILENAME_PREFIX = "edited-banner"
DEFAULT_QUALITY = 0.92

# format -> (Pillow format name, MIME type)
FORMATS: dict[str, tuple[str, str]] = {
    "png": ("PNG", "image/png"),
    "jpeg": ("JPEG", "image/jpeg"),
    "webp": ("WEBP", "image/webp"),
}

_ALIASES = {"jpg": "jpeg"}


def normalize_format(fmt: str) -> str:
    """Return the canonical format name.

    Raises:
        EncodingError: If the format is unknown or the installed Pillow
            cannot write it.
    """
    name = _ALIASES.get(fmt.lower().strip(), fmt.lower().strip())
    if name not in FORMATS:
        raise EncodingError(f"Unsupported export format: {fmt!r}")

    pil_format = FORMATS[name][0]
    Image.init()
    if pil_format not in Image.SAVE or (name == "webp" and not features.check("webp")):
        raise EncodingError(f"Export format {name!r} is not available in this Pillow build")
    return name


def build_filename(
    fmt: str,
    prefix: str = DEFAULT_FILENAME_PREFIX,
    timestamp_ms: int | None = None,
) -> str:
    """Suggested download name, e.g. ``edited-banner-1718000000000.png``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{prefix}-{timestamp_ms}.{fmt}"


def encode_image(
    image: Image.Image,
    fmt: str,
    quality: float = DEFAULT_QUALITY,
    filename_prefix: str = DEFAULT_FILENAME_PREFIX,
) -> EncodedImage:
    """Serialize ``image`` to ``fmt``.

    Args:
        image: Final composited buffer.
        fmt: "png", "jpeg" (or "jpg") or "webp".
        quality: Lossy quality in [0, 1]; ignored for png.
        filename_prefix: Prefix of the suggested filename.

    Returns:
        :class:`EncodedImage` with the bytes and suggested filename.

    Raises:
        EncodingError: If the buffer is empty, the format is unsupported,
            quality is out of range, or Pillow fails to write the image.
    """
    width, height = image.size
    if width <= 0 or height <= 0:
        raise EncodingError("Cannot encode an empty image")
    if not 0.0 <= quality <= 1.0:
        raise EncodingError(f"Quality must be between 0 and 1, got {quality}")

    name = normalize_format(fmt)
    pil_format, mime_type = FORMATS[name]

    save_kwargs: dict = {}
    if name == "png":
        out = image
    elif name == "jpeg":
        # jpeg has no alpha channel; transparent pixels end up black.
        rgba = image.convert("RGBA")
        backdrop = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
        out = Image.alpha_composite(backdrop, rgba).convert("RGB")
        save_kwargs["quality"] = int(round(quality * 100))
    else:
        out = image
        save_kwargs["quality"] = int(round(quality * 100))

    buffer = BytesIO()
    try:
        out.save(buffer, format=pil_format, **save_kwargs)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Failed to encode {width}x{height} image as {name}: {e}")
        raise EncodingError(f"Could not encode image as {name}: {e}") from e

    data = buffer.getvalue()
    logger.debug(f"Encoded {width}x{height} image as {name} ({len(data)} bytes)")
    return EncodedImage(
        data=data,
        filename=build_filename(name, filename_prefix),
        format=name,
        mime_type=mime_type,
        width=width,
        height=height,
    )


def save_encoded(encoded: EncodedImage, directory: Path) -> Path:
    """Write ``encoded`` into ``directory`` under its suggested filename.

    The bytes go to a temporary file in the same directory which is then
    renamed into place.

    Args:
        encoded: Result of :func:`encode_image`.
        directory: Destination directory (created if missing).

    Returns:
        Path of the written file.

    Raises:
        EncodingError: If the file cannot be written.
    """
    directory = Path(directory)
    destination = directory / encoded.filename
    tmp_path: str | None = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".partial-", dir=directory)
        with os.fdopen(fd, "wb") as handle:
            handle.write(encoded.data)
        os.replace(tmp_path, destination)
    except OSError as e:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        logger.error(f"Failed to write {destination}: {e}")
        raise EncodingError(f"Could not write {destination}: {e}") from e

    logger.info(f"Saved export to: {destination}")
    return destination
