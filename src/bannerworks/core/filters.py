"""Color filter stage and the built-in color presets.

The five adjustments follow the CSS filter-effects definitions the preview
uses, so the exported file matches what the user saw:

==============  ==========================================================
Adjustment      Operation (amount ``a`` = percentage / 100)
==============  ==========================================================
brightness      ``v * a``
contrast        ``(v - 127.5) * a + 127.5``
saturation      saturate color matrix with ``a``
grayscale       grayscale color matrix, ``a`` clamped to [0, 1]
sepia           sepia color matrix, ``a`` clamped to [0, 1]
==============  ==========================================================

They are applied in that order.  Every operation is affine in RGB, so the
chain is folded into a single 4x4 matrix and applied once per pixel; the
result is rounded and clamped to 0-255.  Alpha is carried through untouched.
"""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from bannerworks.core.models import ColorAdjustment, Preset

logger = logging.getLogger(__name__)

PRESETS: tuple[Preset, ...] = tuple(
    Preset(
        name=name,
        adjustment=ColorAdjustment(
            brightness=b, contrast=c, saturation=s, grayscale=g, sepia=sep
        ),
    )
    for name, b, c, s, g, sep in (
        ("Normal", 100, 100, 100, 0, 0),
        ("Vivid", 115, 115, 140, 0, 0),
        ("Vintage", 110, 85, 80, 0, 40),
        ("Noir", 100, 130, 0, 100, 0),
        ("Cinematic", 95, 125, 110, 0, 0),
        ("Sepia", 105, 100, 100, 0, 100),
        ("Warm", 105, 100, 110, 0, 20),
        ("Cold", 100, 110, 80, 0, 0),
    )
)


def get_preset(name: str) -> Preset:
    """Look up a built-in preset by name (case-insensitive).

    Raises:
        KeyError: If no preset has that name.
    """
    for preset in PRESETS:
        if preset.name.lower() == name.lower():
            return preset
    raise KeyError(f"Unknown preset: {name}")


def _affine(linear: np.ndarray, offset: float = 0.0) -> np.ndarray:
    matrix = np.eye(4)
    matrix[:3, :3] = linear
    matrix[:3, 3] = offset
    return matrix


def _brightness(amount: float) -> np.ndarray:
    return _affine(np.eye(3) * amount)


def _contrast(amount: float) -> np.ndarray:
    return _affine(np.eye(3) * amount, 127.5 * (1.0 - amount))


def _saturate(amount: float) -> np.ndarray:
    s = amount
    return _affine(
        np.array(
            [
                [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
                [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
                [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
            ]
        )
    )


def _grayscale(amount: float) -> np.ndarray:
    k = 1.0 - min(max(amount, 0.0), 1.0)
    return _affine(
        np.array(
            [
                [0.2126 + 0.7874 * k, 0.7152 - 0.7152 * k, 0.0722 - 0.0722 * k],
                [0.2126 - 0.2126 * k, 0.7152 + 0.2848 * k, 0.0722 - 0.0722 * k],
                [0.2126 - 0.2126 * k, 0.7152 - 0.7152 * k, 0.0722 + 0.9278 * k],
            ]
        )
    )


def _sepia(amount: float) -> np.ndarray:
    k = 1.0 - min(max(amount, 0.0), 1.0)
    return _affine(
        np.array(
            [
                [0.393 + 0.607 * k, 0.769 - 0.769 * k, 0.189 - 0.189 * k],
                [0.349 - 0.349 * k, 0.686 + 0.314 * k, 0.168 - 0.168 * k],
                [0.272 - 0.272 * k, 0.534 - 0.534 * k, 0.131 + 0.869 * k],
            ]
        )
    )


def color_matrix(adjustment: ColorAdjustment) -> np.ndarray:
    """Fold the five adjustments into one 4x4 affine matrix over 0-255 RGB.

    The returned matrix ``M`` maps a column vector ``[r, g, b, 1]`` to the
    adjusted (unclamped) color.
    """
    steps = (
        (_brightness, adjustment.brightness, 100.0),
        (_contrast, adjustment.contrast, 100.0),
        (_saturate, adjustment.saturation, 100.0),
        (_grayscale, adjustment.grayscale, 0.0),
        (_sepia, adjustment.sepia, 0.0),
    )
    matrix = np.eye(4)
    for build, value, neutral in steps:
        # Neutral steps are skipped so they add no floating point noise.
        if value == neutral:
            continue
        step = build(value / 100.0)
        # Later operations multiply from the left.
        matrix = step @ matrix
    return matrix


def apply_color_adjustment(image: Image.Image, adjustment: ColorAdjustment) -> Image.Image:
    """Apply ``adjustment`` to every pixel and return a new RGBA image.

    Args:
        image: Cropped region to filter.  It is not modified.
        adjustment: Tone adjustments to apply.

    Returns:
        New RGBA image with the same size as ``image``.
    """
    rgba = image.convert("RGBA") if image.mode != "RGBA" else image
    if adjustment.is_identity():
        return rgba.copy()

    matrix = color_matrix(adjustment)
    pixels = np.asarray(rgba, dtype=np.float64)
    rgb = pixels[..., :3] @ matrix[:3, :3].T + matrix[:3, 3]

    out = np.empty(pixels.shape, dtype=np.uint8)
    out[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    out[..., 3] = pixels[..., 3].astype(np.uint8)

    logger.debug(f"Applied color adjustment {adjustment!r} to {rgba.size[0]}x{rgba.size[1]} image")
    return Image.fromarray(out)
