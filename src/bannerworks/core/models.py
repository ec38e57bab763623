"""Data models for the compositing pipeline.

Parameter models are frozen Pydantic models so that an export always works
on a consistent snapshot of the editor settings: the interactive session
keeps mutating its own state while a render runs on the snapshot it was
handed.

Models
------
CropRegion
    Axis-aligned source-pixel rectangle produced by the geometry mapper.
PanOffset
    Pan of the source image inside the preview viewport, in preview pixels.
ColorAdjustment
    The five global tone adjustments, as percentages.
Preset
    A named, constant ColorAdjustment.
TextShadow / TextLayer
    The optional headline text drawn above the filtered base.
TextWatermark / ImageWatermark
    The two kinds of watermark, discriminated on ``kind``.  "No watermark"
    is simply ``None``.
ExportSpec
    Output format and lossy quality.
EditParams
    The complete immutable parameter snapshot consumed by the pipeline.
EncodedImage
    The encoder's result: bytes plus a suggested filename.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal, Union

from PIL import ImageColor
from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from bannerworks.core.errors import InvalidCropError

Alignment = Literal["left", "center", "right"]
SizeUnit = Literal["percent", "pixel"]
ExportFormat = Literal["png", "jpeg", "webp"]


def _check_color(value: str) -> str:
    """Reject color strings Pillow cannot parse."""
    try:
        ImageColor.getrgb(value)
    except ValueError as e:
        raise ValueError(f"Unknown color: {value!r}") from e
    return value


ColorString = Annotated[str, AfterValidator(_check_color)]


@dataclass(frozen=True)
class CropRegion:
    """Source-pixel rectangle selected by the crop interaction.

    Coordinates are floats: the geometry mapper works in continuous source
    space and rounding happens once, in :meth:`pixel_box`.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def output_size(self) -> tuple[int, int]:
        """Pixel size of the buffer produced from this region."""
        left, top, right, bottom = self.pixel_box()
        return right - left, bottom - top

    def pixel_box(self, source_size: tuple[int, int] | None = None) -> tuple[int, int, int, int]:
        """Integer ``(left, top, right, bottom)`` box for pixel extraction.

        Args:
            source_size: When given, the box is clipped to the source so that
                rounding never reaches past its last row or column.
        """
        left = int(round(self.x))
        top = int(round(self.y))
        right = int(round(self.x + self.width))
        bottom = int(round(self.y + self.height))
        if source_size is not None:
            source_width, source_height = source_size
            left = min(max(left, 0), source_width - 1)
            top = min(max(top, 0), source_height - 1)
            right = min(right, source_width)
            bottom = min(bottom, source_height)
        return left, top, max(left + 1, right), max(top + 1, bottom)

    def check_within(self, source_size: tuple[int, int]) -> None:
        """Verify the region is usable against a source of ``source_size``.

        Raises:
            InvalidCropError: If the region is degenerate or not fully
                contained in the source bounds.
        """
        source_width, source_height = source_size
        if not (self.width > 0 and self.height > 0):
            raise InvalidCropError(
                f"Crop region must have a positive size, got {self.width}x{self.height}"
            )
        if self.x < 0 or self.y < 0:
            raise InvalidCropError(f"Crop origin ({self.x}, {self.y}) is outside the source")
        # Half a pixel of slack absorbs float drift from the geometry mapper.
        if (
            self.x + self.width > source_width + 0.5
            or self.y + self.height > source_height + 0.5
        ):
            raise InvalidCropError(
                f"Crop region {self} exceeds source bounds {source_width}x{source_height}"
            )


@dataclass(frozen=True)
class PanOffset:
    """Pan of the image inside the preview viewport, in preview pixels."""

    x: float = 0.0
    y: float = 0.0


class ColorAdjustment(BaseModel):
    """Global tone adjustments applied to the cropped region.

    Brightness, contrast and saturation use 100 as the identity; grayscale
    and sepia use 0.  The editor sliders span 0-200 and 0-100 respectively.
    """

    model_config = ConfigDict(frozen=True)

    brightness: float = Field(default=100.0, ge=0.0)
    contrast: float = Field(default=100.0, ge=0.0)
    saturation: float = Field(default=100.0, ge=0.0)
    grayscale: float = Field(default=0.0, ge=0.0, le=100.0)
    sepia: float = Field(default=0.0, ge=0.0, le=100.0)

    def is_identity(self) -> bool:
        """Check whether this adjustment leaves every pixel unchanged."""
        return (
            self.brightness == 100.0
            and self.contrast == 100.0
            and self.saturation == 100.0
            and self.grayscale == 0.0
            and self.sepia == 0.0
        )


class Preset(BaseModel):
    """A named color grade offered as a one-click filter."""

    model_config = ConfigDict(frozen=True)

    name: str
    adjustment: ColorAdjustment


class TextShadow(BaseModel):
    """Drop shadow of the text layer, in preview pixels."""

    model_config = ConfigDict(frozen=True)

    color: ColorString = "#000000"
    blur: float = Field(default=4.0, ge=0.0)
    offset_x: float = 2.0
    offset_y: float = 2.0


class TextLayer(BaseModel):
    """Headline text drawn above the filtered image.

    ``pixel_size`` is expressed in preview pixels and scaled at export;
    positions are percentages of the output buffer.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(..., min_length=1)
    font_family: str = "Inter"
    pixel_size: float = Field(default=48.0, gt=0.0)
    color: ColorString = "#ffffff"
    align: Alignment = "center"
    position_x: float = Field(default=50.0, ge=0.0, le=100.0)
    position_y: float = Field(default=50.0, ge=0.0, le=100.0)
    shadow: TextShadow = Field(default_factory=TextShadow)


class _WatermarkBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    opacity: float = Field(default=80.0, ge=0.0, le=100.0)
    size: float = Field(default=20.0, gt=0.0)
    size_unit: SizeUnit = "percent"
    position_x: float = Field(default=90.0, ge=0.0, le=100.0)
    position_y: float = Field(default=90.0, ge=0.0, le=100.0)


class TextWatermark(_WatermarkBase):
    """Text watermark, centered on its anchor point."""

    kind: Literal["text"] = "text"
    text: str = Field(..., min_length=1)
    color: ColorString = "#ffffff"


class ImageWatermark(_WatermarkBase):
    """Image watermark; ``image_data`` holds the raw uploaded bytes."""

    kind: Literal["image"] = "image"
    image_data: bytes = Field(..., min_length=1, repr=False)


Watermark = Annotated[Union[TextWatermark, ImageWatermark], Field(discriminator="kind")]


class ExportSpec(BaseModel):
    """Output encoding; ``quality`` is ignored for png."""

    model_config = ConfigDict(frozen=True)

    format: ExportFormat = "png"
    quality: float = Field(default=0.92, ge=0.0, le=1.0)


class EditParams(BaseModel):
    """Immutable snapshot of every setting needed for one export."""

    model_config = ConfigDict(frozen=True)

    crop: CropRegion | None = None
    adjustment: ColorAdjustment = Field(default_factory=ColorAdjustment)
    text: TextLayer | None = None
    watermark: Watermark | None = None
    export: ExportSpec = Field(default_factory=ExportSpec)


@dataclass(frozen=True)
class EncodedImage:
    """Encoded export ready to be downloaded or written to disk."""

    data: bytes
    filename: str
    format: str
    mime_type: str
    width: int
    height: int

    @property
    def byte_size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return (
            f"EncodedImage(filename={self.filename!r}, format={self.format!r}, "
            f"size={self.width}x{self.height}, bytes={self.byte_size})"
        )
