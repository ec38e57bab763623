"""Exception types raised by the compositing pipeline.

Every stage fails fast: nothing is retried and no partial output is left
behind.  Callers catch :class:`BannerworksError` to handle any pipeline
failure, or one of the specific subclasses below.
"""


class BannerworksError(Exception):
    """Base class for all errors raised by Bannerworks."""


class DecodeError(BannerworksError):
    """Source or watermark image bytes could not be decoded."""


class InvalidCropError(BannerworksError):
    """The crop region is missing, degenerate, or outside the source image.

    Raised before any drawing happens.
    """


class EncodingError(BannerworksError):
    """The requested format/quality combination could not be produced."""
