"""
Export Compositor - Burn annotations permanently into the source image

Decodes the original image, rasterizes the annotation set at the image's
natural resolution, alpha-blends the overlay onto the frame and encodes the
result. Returns bytes and nothing else.
"""

import logging
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np
from PyQt6.QtGui import QImage

from ..config import Config, MarkupStyle
from ..core.annotation import AnnotationSet
from ..core.draw_commands import build_draw_commands
from ..core.errors import ImageDecodeError, ImageEncodeError
from ..utils.coordinate_utils import CoordinateMapper
from ..widgets.markup.stroke_painter import render_commands_to_image

logger = logging.getLogger(__name__)

AnnotationsInput = Union[AnnotationSet, Dict[str, Any]]

_FORMAT_EXTENSIONS = {
    'jpeg': '.jpg',
    'jpg': '.jpg',
    'png': '.png',
}


def decode_image(image_bytes: bytes) -> np.ndarray:
    """
    Decode raw image bytes to a BGR frame.

    Raises:
        ImageDecodeError: If the bytes are empty or not a readable image
    """
    if not image_bytes:
        raise ImageDecodeError("Image data is empty")

    buffer = np.frombuffer(image_bytes, dtype=np.uint8)
    try:
        frame = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise ImageDecodeError(f"Could not decode image: {e}") from e

    if frame is None:
        raise ImageDecodeError("Could not decode image: unsupported or corrupt data")
    return frame


def encode_image(frame: np.ndarray, image_format: str = 'jpeg', quality: float = 0.9) -> bytes:
    """
    Encode a BGR frame.

    Args:
        frame: Image to encode
        image_format: 'jpeg' or 'png'
        quality: 0-1, used for JPEG

    Raises:
        ImageEncodeError: If the format is unknown or encoding fails
    """
    extension = _FORMAT_EXTENSIONS.get(image_format.lower())
    if extension is None:
        raise ImageEncodeError(f"Unsupported export format: {image_format}")

    if extension == '.jpg':
        jpeg_quality = int(round(max(0.0, min(1.0, quality)) * 100))
        params = [cv2.IMWRITE_JPEG_QUALITY, jpeg_quality]
    else:
        params = [cv2.IMWRITE_PNG_COMPRESSION, Config.PNG_COMPRESSION]

    try:
        ok, encoded = cv2.imencode(extension, frame, params)
    except cv2.error as e:
        raise ImageEncodeError(f"Could not encode image: {e}") from e

    if not ok:
        raise ImageEncodeError(f"Could not encode image as {image_format}")
    return encoded.tobytes()


def qimage_to_rgba_array(image: QImage) -> np.ndarray:
    """Copy a QImage into an (h, w, 4) RGBA uint8 array."""
    rgba = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = rgba.width(), rgba.height()
    ptr = rgba.constBits()
    ptr.setsize(rgba.sizeInBytes())
    rows = np.frombuffer(ptr, dtype=np.uint8).reshape(height, rgba.bytesPerLine())
    return rows[:, :width * 4].reshape(height, width, 4).copy()


def render_overlay(
    annotations: AnnotationsInput,
    width: int,
    height: int,
    style: Optional[MarkupStyle] = None
) -> QImage:
    """
    Rasterize annotations onto a transparent image of the given size.

    Coordinates are taken as image space; nothing is highlighted.
    """
    style = style or Config.default_style()
    annotation_set = _as_annotation_set(annotations, style)
    commands = build_draw_commands(
        annotation_set, CoordinateMapper.identity(width, height), style
    )
    return render_commands_to_image(commands, width, height)


def composite_frame_with_overlay(frame: np.ndarray, overlay: QImage) -> np.ndarray:
    """
    Composite an annotation overlay onto a frame using alpha blending.

    Args:
        frame: Source frame (BGR, uint8)
        overlay: Overlay with alpha channel, same size as frame

    Returns:
        New composited frame (BGR, uint8)
    """
    rgba = qimage_to_rgba_array(overlay)

    if rgba.shape[:2] != frame.shape[:2]:
        rgba = cv2.resize(rgba, (frame.shape[1], frame.shape[0]), interpolation=cv2.INTER_AREA)

    # Extract alpha channel and normalize to 0-1
    alpha = rgba[:, :, 3:4] / 255.0
    overlay_bgr = rgba[:, :, 2::-1]

    # Alpha blend: result = overlay * alpha + frame * (1 - alpha)
    return (overlay_bgr * alpha + frame * (1 - alpha)).astype(np.uint8)


def composite_annotations(
    image_bytes: bytes,
    annotations: AnnotationsInput,
    style: Optional[MarkupStyle] = None,
    quality: float = Config.EXPORT_QUALITY,
    image_format: str = Config.EXPORT_FORMAT
) -> bytes:
    """
    Burn annotations into a copy of the original image.

    Args:
        image_bytes: Original image, any format OpenCV can decode
        annotations: AnnotationSet or persisted annotation document,
            in image-space coordinates
        style: Shared style constants
        quality: Compression quality 0-1 (JPEG)
        image_format: 'jpeg' or 'png'

    Returns:
        Encoded raster at the image's natural resolution

    Raises:
        ImageDecodeError: Original image could not be decoded
        ImageEncodeError: Result could not be encoded
    """
    style = style or Config.default_style()
    frame = decode_image(image_bytes)
    height, width = frame.shape[:2]

    annotation_set = _as_annotation_set(annotations, style)
    overlay = render_overlay(annotation_set, width, height, style)
    result = composite_frame_with_overlay(frame, overlay)

    encoded = encode_image(result, image_format, quality)
    logger.info(
        f"Composited {len(annotation_set)} annotation(s) onto {width}x{height} image "
        f"({image_format}, {len(encoded)} bytes)"
    )
    return encoded


def _as_annotation_set(annotations: AnnotationsInput, style: MarkupStyle) -> AnnotationSet:
    if isinstance(annotations, AnnotationSet):
        return annotations
    if annotations is None:
        return AnnotationSet()
    return AnnotationSet.from_dict(annotations, strict=False, style=style)


__all__ = [
    'decode_image',
    'encode_image',
    'render_overlay',
    'composite_frame_with_overlay',
    'composite_annotations',
]
