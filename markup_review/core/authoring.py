"""
AuthoringSession - Pointer-driven state machine for drawing markup

Interprets pointer input in image-space coordinates against the current
tool and the annotation store. Every transition returns True when applied
and False when rejected (locked session, bad input, wrong state).
"""

import logging
import math
from enum import Enum
from typing import Optional, Tuple

from ..config import Config, MarkupStyle
from .annotation import Annotation, AnnotationSet, Point, ShapeKind
from .store import AnnotationStore

logger = logging.getLogger(__name__)


class DrawingTool(Enum):
    """Available drawing tools."""
    RECTANGLE = ShapeKind.RECTANGLE.value
    CIRCLE = ShapeKind.CIRCLE.value
    ARROW = ShapeKind.ARROW.value
    FREEHAND = ShapeKind.FREEHAND.value

    @property
    def shape_kind(self) -> ShapeKind:
        return ShapeKind(self.value)


class AuthoringState(Enum):
    """Session states."""
    IDLE = 'idle'
    DRAWING = 'drawing'
    HAS_SELECTION = 'has-selection'


class AuthoringSession:
    """
    Authoring state machine over an AnnotationStore.

    Coordinates are image-space pixels. When image bounds are known, points
    are clamped into them; non-finite points are ignored.

    Usage:
        session = AuthoringSession(image_size=(1024, 768))
        session.set_tool(DrawingTool.RECTANGLE)
        session.pointer_down(10, 10)
        session.pointer_up(110, 60)
        session.submit_description("Cavity detected")
    """

    def __init__(
        self,
        annotation_set: Optional[AnnotationSet] = None,
        style: Optional[MarkupStyle] = None,
        image_size: Optional[Tuple[int, int]] = None,
        locked: bool = False
    ):
        self._store = AnnotationStore(annotation_set)
        self._style = style or Config.default_style()
        self._image_size = image_size
        self._locked = locked
        self._tool = DrawingTool.RECTANGLE

        # Drawing state
        self._is_drawing = False
        self._start: Optional[Tuple[float, float]] = None
        self._active_id: Optional[str] = None  # in-progress freehand annotation

        self._description_draft = ''

    # ==================== Properties ====================

    @property
    def store(self) -> AnnotationStore:
        return self._store

    @property
    def annotations(self) -> Tuple[Annotation, ...]:
        return self._store.annotations

    @property
    def style(self) -> MarkupStyle:
        return self._style

    @property
    def tool(self) -> DrawingTool:
        return self._tool

    @property
    def locked(self) -> bool:
        return self._locked

    @locked.setter
    def locked(self, value: bool):
        self._locked = bool(value)
        if self._locked:
            self._reset_gesture()

    @property
    def image_size(self) -> Optional[Tuple[int, int]]:
        return self._image_size

    @image_size.setter
    def image_size(self, value: Optional[Tuple[int, int]]):
        self._image_size = value

    @property
    def state(self) -> AuthoringState:
        if self._is_drawing:
            return AuthoringState.DRAWING
        if self._store.selected is not None:
            return AuthoringState.HAS_SELECTION
        return AuthoringState.IDLE

    @property
    def selected(self) -> Optional[Annotation]:
        return self._store.selected

    @property
    def selected_id(self) -> Optional[str]:
        return self._store.selected_id

    @property
    def description_draft(self) -> str:
        """Description loaded into the editor by the last selection."""
        return self._description_draft

    # ==================== Tools ====================

    def set_tool(self, tool: DrawingTool) -> bool:
        if self._locked or self._is_drawing:
            return False
        self._tool = tool
        return True

    # ==================== Pointer Transitions ====================

    def pointer_down(self, x: float, y: float) -> bool:
        """Start a gesture. Freehand commits its first sample immediately."""
        if self._locked:
            return False
        pos = self._sanitize(x, y)
        if pos is None:
            return False

        self._reset_gesture()
        self._store.clear_selection()
        self._description_draft = ''
        self._is_drawing = True
        self._start = pos

        if self._tool == DrawingTool.FREEHAND:
            annotation = self._new_annotation(
                ShapeKind.FREEHAND, pos[0], pos[1], 0.0, 0.0,
                points=[Point(*pos)]
            )
            self._store.append(annotation)
            self._active_id = annotation.id
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        """Extend the in-progress freehand stroke; other tools ignore moves."""
        if self._locked or not self._is_drawing:
            return False
        pos = self._sanitize(x, y)
        if pos is None:
            return False

        if self._tool != DrawingTool.FREEHAND:
            return True

        annotation = self._store.get(self._active_id) if self._active_id else None
        if annotation is None:
            return False
        annotation.points.append(Point(*pos))
        return True

    def pointer_up(self, x: float, y: float) -> bool:
        """
        Finish a gesture.

        Shape tools append one annotation spanning start to end and select
        it. Freehand appends nothing and clears the selection.
        """
        if self._locked or not self._is_drawing:
            return False
        pos = self._sanitize(x, y)
        if pos is None:
            # Fall back to the start point so the gesture still ends cleanly
            pos = self._start

        if self._tool == DrawingTool.FREEHAND:
            self._store.clear_selection()
        else:
            start_x, start_y = self._start
            annotation = self._new_annotation(
                self._tool.shape_kind,
                start_x, start_y,
                pos[0] - start_x, pos[1] - start_y
            )
            self._store.append(annotation)
            self._store.select(annotation.id)
            self._description_draft = ''

        self._reset_gesture()
        return True

    def click(self, x: float, y: float) -> bool:
        """Select the first annotation under the point, or clear selection."""
        if self._locked or self._is_drawing:
            return False
        pos = self._sanitize(x, y)
        if pos is None:
            return False

        hit = self._store.hit_test(pos[0], pos[1], self._style.hit_test_tolerance_px)
        if hit is not None:
            self._store.select(hit.id)
            self._description_draft = hit.description
        else:
            self._store.clear_selection()
            self._description_draft = ''
        return True

    def submit_description(self, text: str) -> bool:
        """
        Commit text to the selected annotation.

        Non-empty text (after trimming) is written by annotation ID. The
        selection is cleared either way.
        """
        if self._locked:
            return False
        selected = self._store.selected
        if selected is None:
            return False

        trimmed = (text or '').strip()
        if trimmed:
            selected.description = trimmed
        self._store.clear_selection()
        self._description_draft = ''
        return True

    def clear(self) -> bool:
        """Remove every annotation and the selection."""
        if self._locked:
            return False
        self._reset_gesture()
        self._store.clear()
        self._description_draft = ''
        return True

    def load(self, annotation_set: AnnotationSet) -> bool:
        """Replace the store contents with a saved set."""
        if self._locked:
            return False
        self._reset_gesture()
        self._store.replace(annotation_set)
        self._description_draft = ''
        return True

    def snapshot(self) -> AnnotationSet:
        return self._store.snapshot()

    # ==================== Helpers ====================

    def _new_annotation(self, kind, origin_x, origin_y, width, height, points=None) -> Annotation:
        return Annotation(
            kind=kind,
            origin_x=origin_x,
            origin_y=origin_y,
            width=width,
            height=height,
            points=points or [],
            stroke_color=self._style.default_stroke_color,
            stroke_width=self._style.default_stroke_width,
        )

    def _sanitize(self, x, y) -> Optional[Tuple[float, float]]:
        """Drop non-finite input, clamp to image bounds when known."""
        try:
            x = float(x)
            y = float(y)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring non-numeric pointer input ({x!r}, {y!r})")
            return None
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.debug(f"Ignoring non-finite pointer input ({x}, {y})")
            return None

        if self._image_size:
            width, height = self._image_size
            x = max(0.0, min(float(width), x))
            y = max(0.0, min(float(height), y))
        return (x, y)

    def _reset_gesture(self):
        self._is_drawing = False
        self._start = None
        self._active_id = None


__all__ = ['AuthoringSession', 'AuthoringState', 'DrawingTool']
