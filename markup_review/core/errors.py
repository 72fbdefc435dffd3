"""
Exception types raised by the markup pipeline.
"""


class MarkupError(Exception):
    """Base class for markup review errors."""

    kind = 'markup_error'


class AnnotationFormatError(MarkupError):
    """A persisted annotation record is malformed."""

    kind = 'format_error'


class ImageDecodeError(MarkupError):
    """Source image bytes could not be decoded."""

    kind = 'decode_failure'


class ImageEncodeError(MarkupError):
    """The composited raster could not be encoded."""

    kind = 'encode_failure'


__all__ = [
    'MarkupError',
    'AnnotationFormatError',
    'ImageDecodeError',
    'ImageEncodeError',
]
