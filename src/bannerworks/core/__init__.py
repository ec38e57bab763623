"""Core compositing pipeline for the Bannerworks image editor.

This module provides the components that turn a source image plus a
parameter snapshot into an exported file:

- **EditorConfig / config**: Configuration management using Pydantic Settings
- **Geometry Mapper** (geometry.py): preview pan/zoom to a source crop region
- **Color Filter Stage** (filters.py): brightness, contrast, saturation,
  grayscale and sepia folded into one color matrix; named presets
- **Overlay Compositor** (overlay.py): text layer and watermark, scaled from
  preview pixels to output pixels
- **Encoder** (encoder.py): png / jpeg / webp bytes and atomic file output
- **ExportPipeline** (pipeline.py): runs the stages in order, sync or async

Usage Example
-------------
    from bannerworks.core import ExportPipeline, EditParams, compute_crop_region

    pipeline = ExportPipeline()
    params = EditParams(crop=compute_crop_region(source.size))
    encoded = pipeline.export(source, params)
    pipeline.save(encoded)
"""

from bannerworks.core.config import EditorConfig, config, configure_logging
from bannerworks.core.decoding import decode_image, load_image
from bannerworks.core.encoder import build_filename, encode_image, save_encoded
from bannerworks.core.errors import (
    BannerworksError,
    DecodeError,
    EncodingError,
    InvalidCropError,
)
from bannerworks.core.filters import PRESETS, apply_color_adjustment, get_preset
from bannerworks.core.geometry import clamp_pan, compute_crop_region, map_crop
from bannerworks.core.models import (
    ColorAdjustment,
    CropRegion,
    EditParams,
    EncodedImage,
    ExportSpec,
    ImageWatermark,
    PanOffset,
    Preset,
    TextLayer,
    TextShadow,
    TextWatermark,
)
from bannerworks.core.overlay import composite, scale_factor
from bannerworks.core.pipeline import ExportPipeline

__all__ = [
    "EditorConfig",
    "config",
    "configure_logging",
    "BannerworksError",
    "DecodeError",
    "EncodingError",
    "InvalidCropError",
    "ColorAdjustment",
    "CropRegion",
    "EditParams",
    "EncodedImage",
    "ExportSpec",
    "ImageWatermark",
    "PanOffset",
    "Preset",
    "TextLayer",
    "TextShadow",
    "TextWatermark",
    "PRESETS",
    "get_preset",
    "apply_color_adjustment",
    "compute_crop_region",
    "clamp_pan",
    "map_crop",
    "composite",
    "scale_factor",
    "decode_image",
    "load_image",
    "build_filename",
    "encode_image",
    "save_encoded",
    "ExportPipeline",
]
