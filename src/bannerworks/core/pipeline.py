"""Export pipeline: crop, color filter, overlays, encode."""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from PIL import Image

from .config import EditorConfig, config as default_config
from .decoding import decode_image, load_image
from .encoder import encode_image, save_encoded
from .errors import InvalidCropError
from .filters import apply_color_adjustment
from .models import EditParams, EncodedImage, ImageWatermark
from .overlay import composite

logger = logging.getLogger(__name__)

SourceInput = Union[Image.Image, bytes]


def _check_crop(params: EditParams, source_size: tuple[int, int]) -> None:
    if params.crop is None:
        raise InvalidCropError("No crop region has been selected")
    params.crop.check_within(source_size)


class ExportPipeline:
    """Runs the four export stages on an immutable parameter snapshot.

    The stages run strictly in order: Geometry (crop) -> Color Filter ->
    Overlay Compositor -> Encoder.  Every call works on its own buffers, so
    one pipeline instance can serve overlapping exports.
    """

    def __init__(self, config: Optional[EditorConfig] = None):
        """
        Initialize the export pipeline.

        Args:
            config: Configuration object. If None, uses global default config.
        """
        self.config = config or default_config
        self._font_dirs = tuple(str(d) for d in self.config.font_dirs)

    def render(
        self,
        source: Image.Image,
        params: EditParams,
        watermark_image: Optional[Image.Image] = None,
    ) -> Image.Image:
        """
        Produce the final composited buffer.

        Args:
            source: Decoded source image.  It is never modified.
            params: Parameter snapshot for this export.
            watermark_image: Decoded image for an image watermark.  Decoded
                from the watermark bytes when omitted.

        Returns:
            New RGBA image at the crop region's size.

        Raises:
            InvalidCropError: If the crop is missing or unusable.  Raised
                before any drawing happens.
            DecodeError: If an image watermark cannot be decoded.
        """
        _check_crop(params, source.size)

        box = params.crop.pixel_box(source.size)
        logger.info(
            f"Rendering export: crop={box}, format={params.export.format}, "
            f"text={'yes' if params.text else 'no'}, "
            f"watermark={params.watermark.kind if params.watermark else 'none'}"
        )

        base = apply_color_adjustment(source.crop(box), params.adjustment)
        return composite(
            base,
            text=params.text,
            watermark=params.watermark,
            watermark_image=watermark_image,
            reference_width=self.config.reference_preview_width,
            font_dirs=self._font_dirs,
        )

    def encode(self, image: Image.Image, params: EditParams) -> EncodedImage:
        """Encode ``image`` according to ``params.export``."""
        return encode_image(
            image,
            params.export.format,
            params.export.quality,
            filename_prefix=self.config.filename_prefix,
        )

    def export(
        self,
        source: SourceInput,
        params: EditParams,
        watermark_image: Optional[Image.Image] = None,
    ) -> EncodedImage:
        """
        Render and encode synchronously.

        Args:
            source: Decoded source image, or its encoded bytes.
            params: Parameter snapshot for this export.
            watermark_image: Optional pre-decoded watermark image.

        Returns:
            EncodedImage with the bytes and suggested filename.
        """
        if isinstance(source, bytes):
            source = decode_image(source, label="source")
        _check_crop(params, source.size)
        if isinstance(params.watermark, ImageWatermark) and watermark_image is None:
            watermark_image = decode_image(params.watermark.image_data, label="watermark")

        encoded = self.encode(self.render(source, params, watermark_image), params)
        logger.info(f"Export finished: {encoded.filename} ({encoded.byte_size} bytes)")
        return encoded

    async def export_async(
        self,
        source: SourceInput,
        params: EditParams,
        on_complete: Optional[Callable[[EncodedImage], None]] = None,
    ) -> EncodedImage:
        """
        Export with the image decodes moved off the event loop.

        The coroutine suspends at most twice, once for the source decode
        (only when ``source`` is bytes) and once for an image watermark.
        A missing crop is rejected before anything is decoded; the crop
        bounds are checked as soon as the source size is known, before the
        watermark decode.

        Args:
            source: Decoded source image, or its encoded bytes.
            params: Parameter snapshot for this export.
            on_complete: Called with the result once encoding succeeded.

        Returns:
            EncodedImage with the bytes and suggested filename.
        """
        if params.crop is None:
            raise InvalidCropError("No crop region has been selected")

        if isinstance(source, bytes):
            source = await load_image(source, label="source")
        _check_crop(params, source.size)

        watermark_image = None
        if isinstance(params.watermark, ImageWatermark):
            watermark_image = await load_image(params.watermark.image_data, label="watermark")

        encoded = self.encode(self.render(source, params, watermark_image), params)
        logger.info(f"Export finished: {encoded.filename} ({encoded.byte_size} bytes)")

        if on_complete is not None:
            on_complete(encoded)
        return encoded

    def save(self, encoded: EncodedImage, directory: Optional[Path] = None) -> Path:
        """
        Write an export to disk.

        Args:
            encoded: Result of :meth:`export`.
            directory: Destination directory (default: config.outputs_dir).

        Returns:
            Path of the written file.
        """
        return save_encoded(encoded, directory or self.config.outputs_dir)
