"""Tests for bannerworks.core.config — configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the BANNERWORKS_ prefix.
- Automatic outputs directory creation on initialisation.
- Derived crop aspect ratio and preview viewport size.
- Pydantic validation constraints (quality range, format literals, etc.).
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from bannerworks.core.config import LOG_FORMAT, EditorConfig, configure_logging

# The package re-exports the `config` instance under the submodule name.
config_module = importlib.import_module("bannerworks.core.config")


class TestConfigDefaults:
    """Verify that EditorConfig provides the editor's defaults."""

    def test_default_reference_preview_width(self, test_config: EditorConfig):
        """Typographic sizes are scaled against a 600px preview."""
        assert test_config.reference_preview_width == 600

    def test_default_crop_aspect(self, test_config: EditorConfig):
        """The crop viewport is 4:3 by default."""
        assert test_config.crop_aspect_width == 4
        assert test_config.crop_aspect_height == 3
        assert test_config.crop_aspect_ratio == pytest.approx(4 / 3)

    def test_default_export_settings(self, monkeypatch, temp_dir: Path):
        """A new session exports png at quality 0.92."""
        monkeypatch.delenv("BANNERWORKS_DEFAULT_EXPORT_FORMAT", raising=False)
        monkeypatch.delenv("BANNERWORKS_DEFAULT_EXPORT_QUALITY", raising=False)
        cfg = EditorConfig(outputs_dir=temp_dir / "out", _env_file=None)
        assert cfg.default_export_format == "png"
        assert cfg.default_export_quality == 0.92
        assert cfg.filename_prefix == "edited-banner"

    def test_default_max_zoom(self, test_config: EditorConfig):
        assert test_config.max_zoom == 3.0

    def test_default_watermark_upload_limit(self, test_config: EditorConfig):
        """Watermark uploads are limited to 5 MiB."""
        assert test_config.max_watermark_bytes == 5 * 1024 * 1024

    def test_preview_viewport_size(self, test_config: EditorConfig):
        """The viewport is 600 wide at 4:3, so 450 high."""
        assert test_config.preview_viewport_size == pytest.approx((600.0, 450.0))


class TestConfigDirectoryCreation:
    """Verify that EditorConfig creates the outputs directory."""

    def test_outputs_dir_created(self, test_config: EditorConfig):
        assert test_config.outputs_dir.is_dir()

    def test_nested_outputs_dir_created(self, temp_dir: Path):
        nested = temp_dir / "a" / "b" / "exports"
        EditorConfig(outputs_dir=nested, _env_file=None)
        assert nested.is_dir()


class TestConfigEnvironment:
    """Verify BANNERWORKS_ environment variable overrides."""

    def test_env_overrides_export_format(self, monkeypatch, temp_dir: Path):
        monkeypatch.setenv("BANNERWORKS_DEFAULT_EXPORT_FORMAT", "webp")
        cfg = EditorConfig(outputs_dir=temp_dir / "out", _env_file=None)
        assert cfg.default_export_format == "webp"

    def test_env_overrides_reference_width(self, monkeypatch, temp_dir: Path):
        monkeypatch.setenv("BANNERWORKS_REFERENCE_PREVIEW_WIDTH", "800")
        cfg = EditorConfig(outputs_dir=temp_dir / "out", _env_file=None)
        assert cfg.reference_preview_width == 800
        assert cfg.preview_viewport_size == pytest.approx((800.0, 600.0))

    def test_env_is_case_insensitive(self, monkeypatch, temp_dir: Path):
        monkeypatch.setenv("bannerworks_filename_prefix", "promo")
        cfg = EditorConfig(outputs_dir=temp_dir / "out", _env_file=None)
        assert cfg.filename_prefix == "promo"


class TestConfigValidation:
    """Verify Pydantic constraints on configuration values."""

    def test_rejects_unknown_export_format(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            EditorConfig(default_export_format="gif", outputs_dir=temp_dir, _env_file=None)

    def test_rejects_quality_above_one(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            EditorConfig(default_export_quality=1.5, outputs_dir=temp_dir, _env_file=None)

    def test_rejects_zoom_below_one(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            EditorConfig(max_zoom=0.5, outputs_dir=temp_dir, _env_file=None)

    def test_rejects_zero_preview_width(self, temp_dir: Path):
        with pytest.raises(ValidationError):
            EditorConfig(reference_preview_width=0, outputs_dir=temp_dir, _env_file=None)


class TestConfigureLogging:
    """Verify the package-wide logging setup."""

    def test_passes_format_and_level(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        configure_logging("DEBUG")

        assert calls == {"level": "DEBUG", "format": LOG_FORMAT}

    def test_defaults_to_config_level(self, monkeypatch, test_config: EditorConfig):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
        monkeypatch.setattr(config_module, "config", test_config)

        configure_logging()

        assert calls["level"] == test_config.log_level
