"""Overlay compositor: text layer and watermark on top of the filtered base.

Two coordinate spaces meet here:

- **Percentages of the output buffer** position every overlay and size a
  watermark whose unit is ``percent``.  They are resolution independent
  and are used as-is.
- **Preview pixels** are what the editor controls produce for font size,
  shadow blur, shadow offsets and pixel-unit watermark sizes.  They are
  multiplied by the scale factor ``output_width / reference_width`` (600 by
  default) so the export keeps the proportions seen in the preview.

Drawing order is fixed: base, then text, then watermark.  Every overlay is
rendered into its own transparent layer and alpha-composited onto a copy of
the base, so neither the base buffer nor the text layer is affected by the
watermark opacity.

Text is rasterized into a tight sprite first; alignment and the vertical
middle anchor are computed from the sprite's inked bounds, which places the
visible glyphs exactly where the preview shows them regardless of font
metrics.
"""

from __future__ import annotations

import logging
import math

from PIL import Image, ImageColor, ImageDraw, ImageFilter

from bannerworks.core.decoding import decode_image
from bannerworks.core.fonts import WATERMARK_FAMILY, ResolvedFont, load_font
from bannerworks.core.models import Alignment, ImageWatermark, TextLayer, TextWatermark

logger = logging.getLogger(__name__)

REFERENCE_PREVIEW_WIDTH = 600

# Fixed soft shadow behind text watermarks: rgba(0, 0, 0, 0.5), blur 2px.
WATERMARK_SHADOW_COLOR = (0, 0, 0, 128)
WATERMARK_SHADOW_BLUR = 2.0

_GLYPH_PADDING = 2


def scale_factor(output_width: int, reference_width: int = REFERENCE_PREVIEW_WIDTH) -> float:
    """Ratio between the output width and the preview width."""
    return output_width / reference_width


def resolve_watermark_width(
    watermark: TextWatermark | ImageWatermark, output_width: int, scale: float
) -> float:
    """Resolve the watermark size to output pixels.

    For a text watermark this is the font size; for an image watermark it is
    the target width.

    Args:
        watermark: Watermark settings.
        output_width: Width of the output buffer.
        scale: Scale factor from :func:`scale_factor`.

    Returns:
        Size in output pixels.
    """
    if watermark.size_unit == "percent":
        return watermark.size / 100.0 * output_width
    return watermark.size * scale


def resolve_image_watermark_size(
    watermark: ImageWatermark,
    output_width: int,
    image_size: tuple[int, int],
    scale: float,
) -> tuple[float, float]:
    """Return the ``(width, height)`` an image watermark is drawn at.

    The height always follows the image's own aspect ratio.
    """
    image_width, image_height = image_size
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Watermark image is empty ({image_width}x{image_height})")
    target_width = resolve_watermark_width(watermark, output_width, scale)
    aspect_ratio = image_width / image_height
    return target_width, target_width / aspect_ratio


def anchor_point(position_x: float, position_y: float, size: tuple[int, int]) -> tuple[float, float]:
    """Convert percentage coordinates to output pixels."""
    width, height = size
    return position_x / 100.0 * width, position_y / 100.0 * height


def _render_glyphs(
    content: str, resolved: ResolvedFont, font_px: int, fill: tuple[int, int, int, int]
) -> Image.Image | None:
    """Rasterize ``content`` into a sprite cropped to its inked pixels.

    Returns ``None`` when nothing visible is drawn (e.g. whitespace).
    """
    stroke = resolved.stroke_width(font_px)
    left, top, right, bottom = resolved.font.getbbox(content, stroke_width=stroke)
    canvas = Image.new(
        "RGBA",
        (max(1, right - left) + 2 * _GLYPH_PADDING, max(1, bottom - top) + 2 * _GLYPH_PADDING),
        (0, 0, 0, 0),
    )
    ImageDraw.Draw(canvas).text(
        (_GLYPH_PADDING - left, _GLYPH_PADDING - top),
        content,
        font=resolved.font,
        fill=fill,
        stroke_width=stroke,
        stroke_fill=fill,
    )
    inked = canvas.getchannel("A").getbbox()
    if inked is None:
        return None
    return canvas.crop(inked)


def _shadow_sprite(
    glyphs: Image.Image, color: tuple[int, int, int, int], blur_radius: float
) -> tuple[Image.Image, int]:
    """Build a blurred shadow from the glyph alpha.

    Returns:
        Tuple of ``(shadow_sprite, margin)`` where ``margin`` is the padding
        added on each side to leave room for the blur.
    """
    margin = int(math.ceil(blur_radius * 3)) if blur_radius > 0 else 0
    width, height = glyphs.size

    mask = Image.new("L", (width + 2 * margin, height + 2 * margin), 0)
    lut = [a * color[3] // 255 for a in range(256)]
    mask.paste(glyphs.getchannel("A").point(lut), (margin, margin))
    if blur_radius > 0:
        mask = mask.filter(ImageFilter.GaussianBlur(blur_radius))

    shadow = Image.new("RGBA", mask.size, color[:3] + (0,))
    shadow.putalpha(mask)
    return shadow, margin


def _composite_at(layer: Image.Image, sprite: Image.Image, origin: tuple[int, int]) -> None:
    """Alpha-composite ``sprite`` onto ``layer`` at ``origin``, clipping to the layer."""
    x, y = origin
    left = max(0, -x)
    top = max(0, -y)
    right = min(sprite.width, layer.width - x)
    bottom = min(sprite.height, layer.height - y)
    if right <= left or bottom <= top:
        return
    layer.alpha_composite(sprite, dest=(x + left, y + top), source=(left, top, right, bottom))


def _aligned_origin(
    anchor: tuple[float, float], sprite_size: tuple[int, int], align: Alignment
) -> tuple[int, int]:
    """Top-left corner for a sprite anchored at its vertical middle."""
    anchor_x, anchor_y = anchor
    width, height = sprite_size
    if align == "left":
        left = anchor_x
    elif align == "right":
        left = anchor_x - width
    else:
        left = anchor_x - width / 2
    return int(round(left)), int(round(anchor_y - height / 2))


def _draw_text(
    layer: Image.Image,
    glyphs: Image.Image,
    origin: tuple[int, int],
    shadow_color: tuple[int, int, int, int],
    shadow_blur: float,
    shadow_offset: tuple[float, float],
) -> None:
    # A canvas-style shadow is only visible when it is colored and blurred or offset.
    has_shadow = shadow_color[3] > 0 and (shadow_blur > 0 or any(shadow_offset))
    if has_shadow:
        shadow, margin = _shadow_sprite(glyphs, shadow_color, shadow_blur / 2)
        _composite_at(
            layer,
            shadow,
            (
                origin[0] + int(round(shadow_offset[0])) - margin,
                origin[1] + int(round(shadow_offset[1])) - margin,
            ),
        )
    _composite_at(layer, glyphs, origin)


def render_text_layer(
    size: tuple[int, int],
    text: TextLayer,
    scale: float,
    font_dirs: tuple[str, ...] = (),
) -> Image.Image:
    """Render the headline text and its drop shadow into a transparent layer.

    Args:
        size: Output buffer ``(width, height)``.
        text: Text layer settings.
        scale: Scale factor applied to font size, shadow blur and offsets.
        font_dirs: Extra font directories.

    Returns:
        RGBA layer of ``size``.
    """
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    font_px = max(1, int(round(text.pixel_size * scale)))
    resolved = load_font(text.font_family, font_px, bold=True, search_dirs=font_dirs)

    glyphs = _render_glyphs(
        text.content, resolved, font_px, ImageColor.getcolor(text.color, "RGBA")
    )
    if glyphs is None:
        logger.debug("Text layer has no visible glyphs, skipping")
        return layer

    anchor = anchor_point(text.position_x, text.position_y, size)
    origin = _aligned_origin(anchor, glyphs.size, text.align)
    _draw_text(
        layer,
        glyphs,
        origin,
        ImageColor.getcolor(text.shadow.color, "RGBA"),
        text.shadow.blur * scale,
        (text.shadow.offset_x * scale, text.shadow.offset_y * scale),
    )
    logger.debug(f"Rendered text layer at {origin} with font size {font_px}px")
    return layer


def _apply_opacity(layer: Image.Image, opacity: float) -> Image.Image:
    """Scale the layer alpha by ``opacity`` (0..1).

    Visible pixels stay visible, so the covered area does not change.  This
    differs from a canvas ``globalAlpha``, which rounds faint anti-aliased
    edge pixels down to 0 at low opacity; here they keep an alpha of 1.
    """
    if opacity >= 1.0:
        return layer
    lut = [0 if a == 0 else max(1, int(round(a * opacity))) for a in range(256)]
    layer.putalpha(layer.getchannel("A").point(lut))
    return layer


def render_watermark_layer(
    size: tuple[int, int],
    watermark: TextWatermark | ImageWatermark,
    scale: float,
    watermark_image: Image.Image | None = None,
    font_dirs: tuple[str, ...] = (),
) -> Image.Image | None:
    """Render a watermark into a transparent layer with its opacity applied.

    Args:
        size: Output buffer ``(width, height)``.
        watermark: Text or image watermark settings.
        scale: Scale factor for pixel-unit sizes and the shadow blur.
        watermark_image: Decoded watermark image.  When omitted for an image
            watermark, ``watermark.image_data`` is decoded here.
        font_dirs: Extra font directories.

    Returns:
        RGBA layer of ``size``, or ``None`` when the watermark is fully
        transparent or draws nothing.
    """
    if watermark.opacity <= 0:
        return None

    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    anchor = anchor_point(watermark.position_x, watermark.position_y, size)

    if isinstance(watermark, TextWatermark):
        font_px = max(1, int(round(resolve_watermark_width(watermark, size[0], scale))))
        resolved = load_font(WATERMARK_FAMILY, font_px, search_dirs=font_dirs)
        glyphs = _render_glyphs(
            watermark.text, resolved, font_px, ImageColor.getcolor(watermark.color, "RGBA")
        )
        if glyphs is None:
            return None
        origin = _aligned_origin(anchor, glyphs.size, "center")
        _draw_text(
            layer,
            glyphs,
            origin,
            WATERMARK_SHADOW_COLOR,
            WATERMARK_SHADOW_BLUR * scale,
            (0.0, 0.0),
        )
    else:
        if watermark_image is None:
            watermark_image = decode_image(watermark.image_data, label="watermark")
        target_width, target_height = resolve_image_watermark_size(
            watermark, size[0], watermark_image.size, scale
        )
        sprite = watermark_image.convert("RGBA").resize(
            (max(1, int(round(target_width))), max(1, int(round(target_height)))),
            Image.Resampling.LANCZOS,
        )
        origin = (
            int(round(anchor[0] - target_width / 2)),
            int(round(anchor[1] - target_height / 2)),
        )
        _composite_at(layer, sprite, origin)

    logger.debug(f"Rendered {watermark.kind} watermark at {anchor} (opacity {watermark.opacity}%)")
    return _apply_opacity(layer, watermark.opacity / 100.0)


def composite(
    base: Image.Image,
    text: TextLayer | None = None,
    watermark: TextWatermark | ImageWatermark | None = None,
    watermark_image: Image.Image | None = None,
    reference_width: int = REFERENCE_PREVIEW_WIDTH,
    font_dirs: tuple[str, ...] = (),
) -> Image.Image:
    """Draw the text layer and the watermark over ``base``.

    Args:
        base: Filtered base buffer; its size is the output size.  It is not
            modified.
        text: Optional text layer.
        watermark: Optional watermark.
        watermark_image: Decoded image for an image watermark.
        reference_width: Preview width used for the scale factor.
        font_dirs: Extra font directories.

    Returns:
        New RGBA image with all layers composited.
    """
    result = base.convert("RGBA") if base.mode != "RGBA" else base.copy()
    scale = scale_factor(result.width, reference_width)

    if text is not None:
        result = Image.alpha_composite(
            result, render_text_layer(result.size, text, scale, font_dirs)
        )

    if watermark is not None:
        layer = render_watermark_layer(result.size, watermark, scale, watermark_image, font_dirs)
        if layer is not None:
            result = Image.alpha_composite(result, layer)

    return result
