"""Geometry mapper: preview crop state to a source-pixel rectangle.

The editor shows the source image behind a fixed 4:3 crop viewport.  The
user pans the image (in viewport pixels) and zooms it (a scalar >= 1).
This module converts that interactive state into the :class:`CropRegion`
the export draws from.

Mapping rules
-------------
- At zoom 1 the region is the largest 4:3 rectangle that fits the source,
  centered.
- Zoom ``z`` divides both sides of that rectangle by ``z``.
- One viewport pixel covers ``region_width / viewport_width`` source
  pixels.  A positive pan moves the image right/down inside the viewport,
  which moves the region left/up in source space.
- The region is clamped to the source bounds; the pan that produced the
  clamped region is reported back so the preview can snap to it.
"""

from __future__ import annotations

import logging
import math

from bannerworks.core.errors import InvalidCropError
from bannerworks.core.models import CropRegion, PanOffset

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 4 / 3
DEFAULT_VIEWPORT_WIDTH = 600.0


def _is_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def maximal_crop_size(source_size: tuple[int, int], aspect_ratio: float) -> tuple[float, float]:
    """Return the largest ``(width, height)`` with ``aspect_ratio`` inside the source.

    Args:
        source_size: Source ``(width, height)`` in pixels.
        aspect_ratio: Target width / height.

    Returns:
        Tuple of float width and height.
    """
    source_width, source_height = source_size
    if source_width / source_height > aspect_ratio:
        return source_height * aspect_ratio, float(source_height)
    return float(source_width), source_width / aspect_ratio


def map_crop(
    source_size: tuple[int, int],
    pan: PanOffset | None = None,
    zoom: float = 1.0,
    aspect_ratio: float | None = None,
    viewport_size: tuple[float, float] | None = None,
) -> tuple[CropRegion, PanOffset]:
    """Map pan/zoom state to a crop region and the clamped pan.

    Args:
        source_size: Source image ``(width, height)`` in pixels.
        pan: Pan in viewport pixels.  Defaults to no pan.
        zoom: Zoom factor, must be >= 1.
        aspect_ratio: Crop viewport width / height.  Defaults to 4:3.
        viewport_size: Viewport ``(width, height)`` in preview pixels.
            Defaults to 600 px wide at ``aspect_ratio``.

    Returns:
        Tuple of ``(CropRegion, PanOffset)`` where the pan has been clamped
        so that the region stays inside the source.

    Raises:
        InvalidCropError: If the source is empty, zoom is below 1, or any
            input is not a finite number.
    """
    pan = pan or PanOffset()
    aspect_ratio = aspect_ratio or DEFAULT_ASPECT_RATIO
    if viewport_size is None:
        viewport_size = (DEFAULT_VIEWPORT_WIDTH, DEFAULT_VIEWPORT_WIDTH / aspect_ratio)

    source_width, source_height = source_size
    if source_width <= 0 or source_height <= 0:
        raise InvalidCropError(f"Source image is empty ({source_width}x{source_height})")
    if not _is_finite(pan.x, pan.y, zoom, aspect_ratio, *viewport_size):
        raise InvalidCropError("Crop state contains a non-finite value")
    if aspect_ratio <= 0 or viewport_size[0] <= 0 or viewport_size[1] <= 0:
        raise InvalidCropError("Crop viewport must have a positive size")
    if zoom < 1.0:
        raise InvalidCropError(f"Zoom must be >= 1 to cover the viewport, got {zoom}")

    base_width, base_height = maximal_crop_size(source_size, aspect_ratio)
    width = base_width / zoom
    height = base_height / zoom

    # Source pixels covered by one viewport pixel at this zoom.
    per_px_x = width / viewport_size[0]
    per_px_y = height / viewport_size[1]

    center_x = source_width / 2 - pan.x * per_px_x
    center_y = source_height / 2 - pan.y * per_px_y

    x = max(0.0, min(center_x - width / 2, source_width - width))
    y = max(0.0, min(center_y - height / 2, source_height - height))

    clamped = PanOffset(
        x=(source_width / 2 - (x + width / 2)) / per_px_x,
        y=(source_height / 2 - (y + height / 2)) / per_px_y,
    )
    region = CropRegion(x=x, y=y, width=width, height=height)

    logger.debug(f"Mapped zoom={zoom} pan=({pan.x}, {pan.y}) to {region}")
    return region, clamped


def compute_crop_region(
    source_size: tuple[int, int],
    pan: PanOffset | None = None,
    zoom: float = 1.0,
    aspect_ratio: float | None = None,
    viewport_size: tuple[float, float] | None = None,
) -> CropRegion:
    """Return only the crop region for the given pan/zoom state.

    See :func:`map_crop` for arguments and errors.
    """
    region, _ = map_crop(source_size, pan, zoom, aspect_ratio, viewport_size)
    return region


def clamp_pan(
    source_size: tuple[int, int],
    pan: PanOffset,
    zoom: float = 1.0,
    aspect_ratio: float | None = None,
    viewport_size: tuple[float, float] | None = None,
) -> PanOffset:
    """Return ``pan`` clamped so the crop region stays inside the source."""
    _, clamped = map_crop(source_size, pan, zoom, aspect_ratio, viewport_size)
    return clamped
