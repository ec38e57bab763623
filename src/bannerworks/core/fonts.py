"""Font resolution for the text layer and the text watermark.

The editor offers a short list of font families.  Each family maps to
candidate font files that are tried in order, first in the configured
``font_dirs`` and then through Pillow's own system font lookup.  When none
of them is installed, Pillow's built-in scalable font is used instead and a
bold request is emulated by stroking the glyphs in their own color.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import NamedTuple

from PIL import ImageFont

logger = logging.getLogger(__name__)

# Family name -> (regular candidates, bold candidates)
FONT_FAMILIES: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "Inter": (
        ("Inter-Regular.ttf", "DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf", "arial.ttf"),
        ("Inter-Bold.ttf", "DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf"),
    ),
    "Serif": (
        ("Georgia.ttf", "georgia.ttf", "DejaVuSerif.ttf", "LiberationSerif-Regular.ttf"),
        ("Georgia Bold.ttf", "georgiab.ttf", "DejaVuSerif-Bold.ttf", "LiberationSerif-Bold.ttf"),
    ),
    "Mono": (
        ("Courier New.ttf", "cour.ttf", "DejaVuSansMono.ttf", "LiberationMono-Regular.ttf"),
        ("Courier New Bold.ttf", "courbd.ttf", "DejaVuSansMono-Bold.ttf", "LiberationMono-Bold.ttf"),
    ),
    "Impact": (
        ("Impact.ttf", "impact.ttf", "Anton-Regular.ttf", "DejaVuSans-Bold.ttf"),
        ("Impact.ttf", "impact.ttf", "Anton-Regular.ttf", "DejaVuSans-Bold.ttf"),
    ),
    "Cursive": (
        ("Comic Sans MS.ttf", "comic.ttf", "URWChanceryL-MediItal.ttf", "DejaVuSans-Oblique.ttf"),
        ("Comic Sans MS Bold.ttf", "comicbd.ttf", "DejaVuSans-BoldOblique.ttf"),
    ),
    "sans-serif": (
        ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf", "arial.ttf"),
        ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf"),
    ),
}

DEFAULT_FAMILY = "Inter"
WATERMARK_FAMILY = "sans-serif"


class ResolvedFont(NamedTuple):
    """A loaded font plus whether bold has to be emulated with a stroke."""

    font: ImageFont.FreeTypeFont | ImageFont.ImageFont
    synthetic_bold: bool

    def stroke_width(self, size: int) -> int:
        """Stroke width that emulates bold at ``size`` pixels, 0 if not needed."""
        if not self.synthetic_bold:
            return 0
        return max(1, round(size / 24))


def _try_truetype(name: str, size: int, search_dirs: tuple[str, ...]):
    for directory in search_dirs:
        candidate = Path(directory) / name
        if candidate.is_file():
            try:
                return ImageFont.truetype(str(candidate), size)
            except OSError:
                logger.debug(f"Could not load font file {candidate}")
    try:
        # Pillow searches the platform font directories for bare filenames.
        return ImageFont.truetype(name, size)
    except OSError:
        return None


@lru_cache(maxsize=128)
def load_font(
    family: str,
    size: int,
    bold: bool = False,
    search_dirs: tuple[str, ...] = (),
) -> ResolvedFont:
    """Load ``family`` at ``size`` pixels.

    Args:
        family: Family name from :data:`FONT_FAMILIES`.  Unknown names fall
            back to :data:`DEFAULT_FAMILY`.
        size: Font size in output pixels.
        bold: Request a bold face.
        search_dirs: Extra directories searched before the system lookup.

    Returns:
        :class:`ResolvedFont` with the loaded font.
    """
    size = max(1, int(size))
    if family not in FONT_FAMILIES:
        logger.debug(f"Unknown font family {family!r}, using {DEFAULT_FAMILY}")
        family = DEFAULT_FAMILY

    regular, bold_names = FONT_FAMILIES[family]
    if bold:
        for name in bold_names:
            font = _try_truetype(name, size, search_dirs)
            if font is not None:
                return ResolvedFont(font, synthetic_bold=False)

    for name in regular:
        font = _try_truetype(name, size, search_dirs)
        if font is not None:
            return ResolvedFont(font, synthetic_bold=bold)

    logger.debug(f"No font file found for {family!r}, using Pillow's default font")
    return ResolvedFont(ImageFont.load_default(size=size), synthetic_bold=bold)
