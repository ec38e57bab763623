"""Validation utilities for editor session inputs."""

import logging

from bannerworks.core.errors import BannerworksError

logger = logging.getLogger(__name__)

# Slider ranges of the editor controls
FONT_SIZE_RANGE = (12, 200)
SHADOW_BLUR_RANGE = (0, 20)
SHADOW_OFFSET_RANGE = (-20, 20)
WATERMARK_PERCENT_SIZE_RANGE = (1, 100)
WATERMARK_PIXEL_SIZE_RANGE = (20, 800)
EXPORT_QUALITY_RANGE = (0.1, 1.0)


class ValidationError(BannerworksError):
    """User-friendly validation error.

    This exception is raised when user input fails validation.
    The message is intended to be displayed directly to the user.
    """

    pass


def validate_watermark_upload(data: bytes, max_bytes: int) -> bytes:
    """Check an uploaded watermark image before it is stored.

    Args:
        data: Raw uploaded bytes
        max_bytes: Largest accepted upload in bytes

    Returns:
        The unchanged bytes if valid

    Raises:
        ValidationError: If the upload is empty or too large
    """
    if not data:
        raise ValidationError("Watermark image is empty")

    if len(data) > max_bytes:
        logger.warning(f"Rejected watermark upload of {len(data)} bytes (limit {max_bytes})")
        raise ValidationError(
            f"Watermark image is too large ({len(data) / (1024 * 1024):.1f} MB). "
            f"Maximum is {max_bytes / (1024 * 1024):.0f} MB."
        )

    return data


def validate_export_quality(quality: float) -> float:
    """Validate a lossy export quality value.

    Args:
        quality: Quality in EXPORT_QUALITY_RANGE

    Returns:
        The quality as a float

    Raises:
        ValidationError: If quality is outside EXPORT_QUALITY_RANGE
    """
    low, high = EXPORT_QUALITY_RANGE
    if not low <= quality <= high:
        raise ValidationError(f"Export quality must be between {low} and {high}, got {quality}")
    return float(quality)


def clamp_to_range(value: float, bounds: tuple[float, float]) -> float:
    """Clamp a slider value into its range."""
    low, high = bounds
    return min(max(value, low), high)
