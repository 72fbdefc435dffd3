"""
MarkupCanvas - Transparent overlay canvas for image markup

Sits exactly over the displayed image and provides drawing tools for:
- Rectangles
- Circles
- Arrows
- Freehand strokes

Pointer input is mapped from display to image space and handed to an
AuthoringSession; the canvas itself holds no annotation state. Every
repaint rebuilds the draw commands from the session's store.
"""

import logging
from typing import Optional

from PyQt6.QtWidgets import QApplication, QWidget
from PyQt6.QtCore import Qt, pyqtSignal, QPointF
from PyQt6.QtGui import QPainter, QCursor

from ..config import Config, MarkupStyle
from ..core.authoring import AuthoringSession, DrawingTool
from ..core.draw_commands import build_draw_commands
from ..utils.coordinate_utils import CoordinateMapper
from .markup.stroke_painter import paint_commands

logger = logging.getLogger(__name__)


class MarkupCanvas(QWidget):
    """
    Transparent overlay canvas for image annotations.

    Features:
    - Shape and freehand tools
    - Click selection with highlight
    - Resolution independent: annotations stay in image pixels
    - Read-only mode once the submission is finalized
    """

    # Signals
    annotations_changed = pyqtSignal()
    selection_changed = pyqtSignal(str)  # annotation id, '' when nothing is selected
    description_loaded = pyqtSignal(str)  # description of the newly selected annotation
    edit_rejected = pyqtSignal()

    def __init__(
        self,
        session: Optional[AuthoringSession] = None,
        style: Optional[MarkupStyle] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)

        self._style = style or (session.style if session else Config.default_style())
        self._session = session or AuthoringSession(style=self._style)
        self._mapper = CoordinateMapper()

        # Press position in widget coordinates, for click detection
        self._press_pos: Optional[QPointF] = None

        self._setup_widget()

        if self._session.image_size:
            self.set_natural_size(*self._session.image_size)

    def _setup_widget(self):
        """Configure the overlay widget."""
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground)
        self.setAutoFillBackground(False)
        self.setStyleSheet("background: transparent; border: none;")
        self.setMouseTracking(False)
        self.setCursor(QCursor(Qt.CursorShape.CrossCursor))

    # ==================== Properties ====================

    @property
    def session(self) -> AuthoringSession:
        return self._session

    @property
    def mapper(self) -> CoordinateMapper:
        return self._mapper

    @property
    def style(self) -> MarkupStyle:
        return self._style

    @property
    def current_tool(self) -> DrawingTool:
        return self._session.tool

    @property
    def read_only(self) -> bool:
        return self._session.locked

    @read_only.setter
    def read_only(self, value: bool):
        self.set_locked(value)

    # ==================== Session Wiring ====================

    def set_session(self, session: AuthoringSession):
        """Attach a different authoring session and repaint."""
        self._session = session
        self._style = session.style
        self._press_pos = None
        if session.image_size:
            self.set_natural_size(*session.image_size)
        self._update_cursor()
        self.annotations_changed.emit()
        self.selection_changed.emit('')
        self.update()

    def set_natural_size(self, width: int, height: int):
        """Set the natural pixel size of the image under the canvas."""
        self._mapper.set_natural_size(width, height)
        self._mapper.set_display_size(self.width(), self.height())
        self._session.image_size = (int(width), int(height))
        self.update()

    def set_tool(self, tool: DrawingTool) -> bool:
        """Set the current drawing tool."""
        if not self._session.set_tool(tool):
            self.edit_rejected.emit()
            return False
        return True

    def set_locked(self, locked: bool):
        """Lock or unlock editing."""
        self._session.locked = locked
        self._press_pos = None
        self._update_cursor()
        self.update()

    def submit_description(self, text: str) -> bool:
        """Commit description text to the selected annotation."""
        if not self._session.submit_description(text):
            self.edit_rejected.emit()
            return False
        self.annotations_changed.emit()
        self.selection_changed.emit('')
        self.update()
        return True

    def clear(self) -> bool:
        """Remove all annotations."""
        if not self._session.clear():
            self.edit_rejected.emit()
            return False
        self._press_pos = None
        self.annotations_changed.emit()
        self.selection_changed.emit('')
        self.update()
        return True

    def refresh(self):
        """Repaint after the session was changed from outside the canvas."""
        self.update()

    def _update_cursor(self):
        if self._session.locked:
            self.setCursor(QCursor(Qt.CursorShape.ArrowCursor))
        else:
            self.setCursor(QCursor(Qt.CursorShape.CrossCursor))

    # ==================== Coordinate Conversion ====================

    def _to_image(self, pos: QPointF):
        return self._mapper.to_image_space(pos.x(), pos.y())

    # ==================== Mouse Events ====================

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        pos = event.position()
        x, y = self._to_image(pos)
        had_selection = self._session.selected_id is not None

        if not self._session.pointer_down(x, y):
            self._press_pos = None
            if self._session.locked:
                self.edit_rejected.emit()
            event.accept()
            return

        self._press_pos = QPointF(pos)
        if had_selection:
            self.selection_changed.emit('')
        if self._session.tool == DrawingTool.FREEHAND:
            self.annotations_changed.emit()
        self.update()
        event.accept()

    def mouseMoveEvent(self, event):
        if self._press_pos is None:
            super().mouseMoveEvent(event)
            return

        x, y = self._to_image(event.position())
        if self._session.pointer_move(x, y) and self._session.tool == DrawingTool.FREEHAND:
            self.update()
        event.accept()

    def mouseReleaseEvent(self, event):
        if self._press_pos is None or event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return

        pos = event.position()
        press_pos = self._press_pos
        self._press_pos = None
        x, y = self._to_image(pos)

        if self._session.pointer_up(x, y):
            self.annotations_changed.emit()

        # A release without a drag also counts as a click
        drag = (pos - press_pos).manhattanLength()
        if drag < QApplication.startDragDistance():
            self._session.click(x, y)
            if self._session.selected is not None:
                self.description_loaded.emit(self._session.description_draft)

        self.selection_changed.emit(self._session.selected_id or '')
        self.update()
        event.accept()

    # ==================== Painting ====================

    def paintEvent(self, event):
        """Redraw every annotation from the store."""
        if not self._mapper.is_valid:
            return

        commands = build_draw_commands(
            self._session.annotations,
            self._mapper,
            self._style,
            selected_id=self._session.selected_id
        )
        if not commands:
            return

        painter = QPainter(self)
        try:
            paint_commands(painter, commands)
        finally:
            painter.end()

    # ==================== Resize ====================

    def resizeEvent(self, event):
        """Keep the display mapping in step with the widget size."""
        super().resizeEvent(event)
        self._mapper.set_display_size(self.width(), self.height())
        self.update()


__all__ = ['MarkupCanvas', 'DrawingTool']
