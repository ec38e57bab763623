"""Configuration management for the Bannerworks image editor.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the BANNERWORKS_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (BANNERWORKS_* prefix)
2. .env file in the project root
3. Default values defined in EditorConfig

Example .env file:
    BANNERWORKS_REFERENCE_PREVIEW_WIDTH=600
    BANNERWORKS_DEFAULT_EXPORT_FORMAT=webp
    BANNERWORKS_DEFAULT_EXPORT_QUALITY=0.85
    BANNERWORKS_OUTPUTS_DIR=outputs

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from bannerworks.core.config import config

    print(config.reference_preview_width)
    print(config.crop_aspect_ratio)

Preview Coordinate Space
------------------------
The interactive editor shows the image in a preview that is
``reference_preview_width`` pixels wide.  Typographic sizes chosen there
(font size, shadow blur, shadow offsets, pixel-unit watermark sizes) are
multiplied by ``output_width / reference_preview_width`` at export time so
the exported file keeps the proportions the user saw.  Changing this value
changes every exported file, so it should only be overridden together with
the preview itself.
"""

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class EditorConfig(BaseSettings):
    """Main configuration for the Bannerworks image editor.

    This class uses Pydantic Settings to manage all application configuration.
    Values are loaded from environment variables with the BANNERWORKS_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Geometry Settings:
        reference_preview_width : int
            Width in pixels of the interactive preview (scale factor base)
        crop_aspect_width : int
            Horizontal term of the crop viewport aspect ratio
        crop_aspect_height : int
            Vertical term of the crop viewport aspect ratio
        max_zoom : float
            Upper bound of the editor zoom control

    Export Settings:
        default_export_format : Literal["png", "jpeg", "webp"]
            Format preselected for a new editing session
        default_export_quality : float
            Lossy quality preselected for a new editing session (0..1)
        filename_prefix : str
            Prefix of suggested export filenames

    Upload Settings:
        max_watermark_bytes : int
            Largest accepted watermark upload in bytes

    Paths:
        font_dirs : list[Path]
            Extra directories searched for font files
        outputs_dir : Path
            Directory used when saving exported files

    Logging:
        log_level : str
            Level passed to configure_logging()

    Notes
    -----
    - outputs_dir is created automatically if it doesn't exist
    - Configuration is immutable after initialization
    - To modify config, set environment variables and restart the application

    Examples
    --------
    Create a custom configuration:

        >>> custom_config = EditorConfig(
        ...     default_export_format="jpeg",
        ...     default_export_quality=0.8,
        ... )

    Use the global configuration instance:

        >>> from bannerworks.core.config import config
        >>> config.reference_preview_width
        600
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BANNERWORKS_",
        case_sensitive=False,
    )

    # Geometry settings
    reference_preview_width: int = Field(
        default=600,
        description="Width of the interactive preview in pixels (scale factor base)",
        ge=1,
    )
    crop_aspect_width: int = Field(default=4, ge=1)
    crop_aspect_height: int = Field(default=3, ge=1)
    max_zoom: float = Field(
        default=3.0,
        description="Upper bound of the zoom slider",
        ge=1.0,
    )

    # Export settings
    default_export_format: Literal["png", "jpeg", "webp"] = Field(
        default="png",
        description="Export format preselected for a new session",
    )
    default_export_quality: float = Field(
        default=0.92,
        description="Lossy export quality preselected for a new session",
        ge=0.0,
        le=1.0,
    )
    filename_prefix: str = Field(
        default="edited-banner",
        description="Prefix of suggested export filenames",
        min_length=1,
    )

    # Upload settings
    max_watermark_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Largest accepted watermark image upload in bytes",
        ge=1,
    )

    # Paths
    font_dirs: list[Path] = Field(
        default_factory=list,
        description="Extra directories searched for font files",
    )
    outputs_dir: Path = Field(
        default=Path("outputs"),
        description="Directory to save exported images",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level used by configure_logging()",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the outputs directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.outputs_dir.mkdir(parents=True, exist_ok=True)

    @property
    def crop_aspect_ratio(self) -> float:
        """Aspect ratio (width / height) of the crop viewport."""
        return self.crop_aspect_width / self.crop_aspect_height

    @property
    def preview_viewport_size(self) -> tuple[float, float]:
        """Size of the crop viewport in preview pixels."""
        width = float(self.reference_preview_width)
        return width, width / self.crop_aspect_ratio


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging with the package-wide format.

    Args:
        level: Logging level name or number.  Defaults to ``config.log_level``.
    """
    logging.basicConfig(
        level=level if level is not None else config.log_level,
        format=LOG_FORMAT,
    )


# Global configuration instance
# Loads values from environment variables (BANNERWORKS_* prefix) and .env file.
config = EditorConfig()
