"""
Image Viewport Widget

Displays the submitted image scaled to fit with its aspect ratio kept, and
keeps a MarkupCanvas positioned over the image content area only (never
over the letterbox bars).
"""

import logging
from typing import Optional

from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import Qt, QRect, QSize
from PyQt6.QtGui import QPainter, QPixmap, QColor

from ..config import Config
from .markup_canvas import MarkupCanvas

logger = logging.getLogger(__name__)


class ImageViewport(QWidget):
    """
    Letterboxed image display hosting the markup canvas.

    The canvas is a child widget whose geometry always equals the displayed
    image rect, so canvas-local coordinates map linearly to image pixels.
    """

    BACKGROUND_COLOR = '#1e1e1e'

    def __init__(self, canvas: Optional[MarkupCanvas] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._pixmap: Optional[QPixmap] = None
        self._canvas = canvas or MarkupCanvas()
        self._canvas.setParent(self)
        self._canvas.hide()
        self.setMinimumHeight(Config.VIEWPORT_MIN_HEIGHT)

    @property
    def canvas(self) -> MarkupCanvas:
        return self._canvas

    @property
    def has_image(self) -> bool:
        return self._pixmap is not None and not self._pixmap.isNull()

    def set_image_bytes(self, image_bytes: bytes) -> bool:
        """
        Load an encoded image.

        Returns:
            False if Qt could not decode the data
        """
        pixmap = QPixmap()
        if not pixmap.loadFromData(image_bytes):
            logger.error("Viewport could not decode the image")
            return False
        self.set_pixmap(pixmap)
        return True

    def set_pixmap(self, pixmap: QPixmap):
        """Show a pixmap and size the canvas to its natural resolution."""
        self._pixmap = pixmap
        self._canvas.set_natural_size(pixmap.width(), pixmap.height())
        self._canvas.show()
        self._position_canvas()
        self.update()

    def image_display_rect(self) -> QRect:
        """Rect the image occupies inside the viewport, centered."""
        if not self.has_image:
            return QRect()
        scaled = self._pixmap.size().scaled(self.size(), Qt.AspectRatioMode.KeepAspectRatio)
        x = (self.width() - scaled.width()) // 2
        y = (self.height() - scaled.height()) // 2
        return QRect(x, y, scaled.width(), scaled.height())

    def _position_canvas(self):
        """Cover the image content area with the canvas."""
        rect = self.image_display_rect()
        if rect.isValid():
            self._canvas.setGeometry(rect)
            self._canvas.raise_()

    # ==================== Qt Events ====================

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            painter.fillRect(self.rect(), QColor(self.BACKGROUND_COLOR))
            if self.has_image:
                painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
                painter.drawPixmap(self.image_display_rect(), self._pixmap)
        finally:
            painter.end()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._position_canvas()

    def sizeHint(self) -> QSize:
        return QSize(Config.DEFAULT_WINDOW_WIDTH, Config.VIEWPORT_MIN_HEIGHT)


__all__ = ['ImageViewport']
