"""Bannerworks - edit and export AI-generated banner images."""

__version__ = "0.1.0"

from bannerworks.core import EditParams, ExportPipeline, config
from bannerworks.editor import EditorState

__all__ = [
    "EditParams",
    "EditorState",
    "ExportPipeline",
    "config",
]
