"""Editing session state.

:class:`EditorState` is the live parameter object the interactive editor
mutates on every slider move or keystroke.  It is never handed to the
pipeline directly: :meth:`EditorState.snapshot` freezes it into an
:class:`~bannerworks.core.models.EditParams` so an export always renders a
consistent set of values.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from PIL import Image

from bannerworks.core.config import EditorConfig, config as default_config
from bannerworks.core.decoding import decode_image
from bannerworks.core.filters import get_preset
from bannerworks.core.geometry import map_crop
from bannerworks.core.models import (
    ColorAdjustment,
    CropRegion,
    EditParams,
    ExportSpec,
    ImageWatermark,
    PanOffset,
    TextLayer,
    TextShadow,
    TextWatermark,
)

from .validation import (
    FONT_SIZE_RANGE,
    SHADOW_BLUR_RANGE,
    SHADOW_OFFSET_RANGE,
    WATERMARK_PERCENT_SIZE_RANGE,
    WATERMARK_PIXEL_SIZE_RANGE,
    ValidationError,
    clamp_to_range,
    validate_export_quality,
    validate_watermark_upload,
)

logger = logging.getLogger(__name__)

WatermarkKind = Literal["none", "text", "image"]
WATERMARK_KINDS = ("none", "text", "image")

# Font families offered by the editor, in display order
FONT_CHOICES = ["Inter", "Serif", "Mono", "Impact", "Cursive"]


@dataclass
class EditorState:
    """Mutable state of one editing session.

    Both watermark kinds keep their own settings; switching
    ``watermark_kind`` only changes which one is rendered.

    Attributes
    ----------
    source_width, source_height : int
        Size of the image being edited
    pan : PanOffset
        Current pan in preview pixels (always clamped)
    zoom : float
        Current zoom factor
    crop : CropRegion | None
        Crop region derived from pan and zoom
    adjustment : ColorAdjustment
        Current color adjustments
    """

    source_width: int
    source_height: int

    # Crop interaction
    pan: PanOffset = field(default_factory=PanOffset)
    zoom: float = 1.0
    crop: CropRegion | None = None

    # Color filters
    adjustment: ColorAdjustment = field(default_factory=ColorAdjustment)

    # Text overlay
    text: str = ""
    font_family: str = "Inter"
    font_size: float = 48.0
    text_color: str = "#ffffff"
    text_align: Literal["left", "center", "right"] = "center"
    text_x: float = 50.0
    text_y: float = 50.0
    shadow_color: str = "#000000"
    shadow_blur: float = 4.0
    shadow_offset_x: float = 2.0
    shadow_offset_y: float = 2.0

    # Watermark
    watermark_kind: WatermarkKind = "none"
    watermark_text: str = "© Brand"
    watermark_image: bytes | None = field(default=None, repr=False)
    watermark_opacity: float = 80.0
    watermark_size: float = 20.0
    watermark_size_unit: Literal["percent", "pixel"] = "percent"
    watermark_x: float = 90.0
    watermark_y: float = 90.0
    watermark_color: str = "#ffffff"

    # Export settings (None = use config defaults)
    export_format: str | None = None
    export_quality: float | None = None

    config: EditorConfig | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.config = self.config or default_config
        if self.export_format is None:
            self.export_format = self.config.default_export_format
        if self.export_quality is None:
            self.export_quality = self.config.default_export_quality
        self._update_crop(self.pan)

    @classmethod
    def for_image(cls, image: Image.Image, **kwargs: Any) -> "EditorState":
        """Start a session for a decoded source image."""
        width, height = image.size
        return cls(source_width=width, source_height=height, **kwargs)

    @property
    def source_size(self) -> tuple[int, int]:
        return self.source_width, self.source_height

    def _update_crop(self, pan: PanOffset) -> None:
        self.crop, self.pan = map_crop(
            self.source_size,
            pan,
            self.zoom,
            aspect_ratio=self.config.crop_aspect_ratio,
            viewport_size=self.config.preview_viewport_size,
        )

    def set_zoom(self, zoom: float) -> None:
        """Set the zoom (clamped to 1..max_zoom) and re-derive the crop."""
        self.zoom = clamp_to_range(zoom, (1.0, self.config.max_zoom))
        self._update_crop(self.pan)

    def set_pan(self, x: float, y: float) -> None:
        """Set the pan in preview pixels; it is clamped to keep the crop inside the image."""
        self._update_crop(PanOffset(x=x, y=y))

    def set_font_family(self, family: str) -> None:
        """Choose the headline font from FONT_CHOICES.

        Raises:
            ValidationError: If the family is not offered by the editor
        """
        if family not in FONT_CHOICES:
            raise ValidationError(f"Font must be one of {FONT_CHOICES}, got {family!r}")
        self.font_family = family

    def apply_preset(self, name: str) -> None:
        """Replace all five color adjustments with a named preset.

        Raises:
            ValidationError: If the preset does not exist
        """
        try:
            preset = get_preset(name)
        except KeyError as e:
            raise ValidationError(f"Unknown filter preset: {name}") from e

        # One assignment of a frozen object: no partially applied preset is observable.
        self.adjustment = preset.adjustment
        logger.debug(f"Applied preset {preset.name}")

    def set_adjustment(self, **changes: float) -> None:
        """Change individual color adjustments, e.g. ``set_adjustment(brightness=120)``."""
        values = self.adjustment.model_dump()
        values.update(changes)
        self.adjustment = ColorAdjustment(**values)

    def set_watermark_kind(self, kind: str) -> None:
        """Choose which watermark is rendered; settings of both kinds are kept.

        Raises:
            ValidationError: If ``kind`` is not none, text or image
        """
        if kind not in WATERMARK_KINDS:
            raise ValidationError(f"Watermark type must be one of {WATERMARK_KINDS}, got {kind!r}")
        self.watermark_kind = kind

    def set_watermark_image(self, data: bytes) -> None:
        """Store an uploaded watermark image.

        The bytes are size-checked and test-decoded first; on failure the
        previously stored image is kept.

        Raises:
            ValidationError: If the upload is empty or too large
            DecodeError: If the bytes are not a readable image
        """
        validate_watermark_upload(data, self.config.max_watermark_bytes)
        decode_image(data, label="watermark")
        self.watermark_image = data
        logger.info(f"Stored watermark image ({len(data)} bytes)")

    def clear_watermark_image(self) -> None:
        self.watermark_image = None

    def set_export(self, fmt: str, quality: float | None = None) -> None:
        """Choose the export format and, optionally, the lossy quality."""
        if fmt not in ("png", "jpeg", "webp"):
            raise ValidationError(f"Unsupported export format: {fmt}")
        if quality is not None:
            self.export_quality = validate_export_quality(quality)
        self.export_format = fmt

    def _text_layer(self) -> TextLayer | None:
        if not self.text:
            return None
        return TextLayer(
            content=self.text,
            font_family=self.font_family,
            pixel_size=clamp_to_range(self.font_size, FONT_SIZE_RANGE),
            color=self.text_color,
            align=self.text_align,
            position_x=self.text_x,
            position_y=self.text_y,
            shadow=TextShadow(
                color=self.shadow_color,
                blur=clamp_to_range(self.shadow_blur, SHADOW_BLUR_RANGE),
                offset_x=clamp_to_range(self.shadow_offset_x, SHADOW_OFFSET_RANGE),
                offset_y=clamp_to_range(self.shadow_offset_y, SHADOW_OFFSET_RANGE),
            ),
        )

    def _watermark(self) -> TextWatermark | ImageWatermark | None:
        size_range = (
            WATERMARK_PERCENT_SIZE_RANGE
            if self.watermark_size_unit == "percent"
            else WATERMARK_PIXEL_SIZE_RANGE
        )
        common = dict(
            opacity=self.watermark_opacity,
            size=clamp_to_range(self.watermark_size, size_range),
            size_unit=self.watermark_size_unit,
            position_x=self.watermark_x,
            position_y=self.watermark_y,
        )
        if self.watermark_kind == "text" and self.watermark_text:
            return TextWatermark(text=self.watermark_text, color=self.watermark_color, **common)
        if self.watermark_kind == "image" and self.watermark_image:
            return ImageWatermark(image_data=self.watermark_image, **common)
        return None

    def snapshot(self) -> EditParams:
        """Freeze the current settings into an immutable parameter set.

        Empty text yields no text layer.  A text watermark without text or an
        image watermark without an uploaded image yields no watermark.  Font
        size, shadow and watermark size are clamped to the editor control
        ranges.

        Raises:
            pydantic.ValidationError: If a stored value is out of range
        """
        return EditParams(
            crop=self.crop,
            adjustment=self.adjustment,
            text=self._text_layer(),
            watermark=self._watermark(),
            export=ExportSpec(format=self.export_format, quality=self.export_quality),
        )
