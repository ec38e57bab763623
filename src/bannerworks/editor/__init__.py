"""Editing session state for the Bannerworks image editor.

The interactive editor mutates an :class:`EditorState`; exports work on the
immutable :class:`~bannerworks.core.models.EditParams` snapshot it produces.
"""

from bannerworks.editor.state import FONT_CHOICES, WATERMARK_KINDS, EditorState
from bannerworks.editor.validation import (
    ValidationError,
    validate_export_quality,
    validate_watermark_upload,
)

__all__ = [
    "EditorState",
    "FONT_CHOICES",
    "WATERMARK_KINDS",
    "ValidationError",
    "validate_export_quality",
    "validate_watermark_upload",
]
