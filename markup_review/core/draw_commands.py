"""
Draw command builder.

Turns an annotation set into renderer-agnostic draw commands for a given
view mapping. The live canvas and the export compositor both paint these
commands, so they never compute shape geometry separately.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from ..config import MarkupStyle
from ..utils.coordinate_utils import CoordinateMapper
from .annotation import Annotation, ShapeKind
from .geometry import build_arrow_head, circle_geometry, normalized_rect

logger = logging.getLogger(__name__)

Coord = Tuple[float, float]


class DrawOp(Enum):
    """Primitive drawing operations."""
    PATH = 'path'      # one or more open polylines
    RECT = 'rect'      # outlined axis-aligned rectangle
    CIRCLE = 'circle'  # outlined circle


@dataclass(frozen=True)
class DrawCommand:
    """
    One stroke to paint, already in target-surface coordinates.

    Attributes:
        op: Primitive to draw
        color: Stroke color
        width: Stroke width in surface pixels
        subpaths: Polylines for PATH
        rect: (x, y, width, height) with non-negative size for RECT
        center: Circle center for CIRCLE
        radius: Circle radius for CIRCLE
        annotation_id: Source annotation
        highlight: True for the selection overlay pass
    """
    op: DrawOp
    color: str
    width: float
    subpaths: Tuple[Tuple[Coord, ...], ...] = ()
    rect: Optional[Tuple[float, float, float, float]] = None
    center: Optional[Coord] = None
    radius: float = 0.0
    annotation_id: str = ''
    highlight: bool = False


def commands_for_annotation(
    annotation: Annotation,
    mapper: CoordinateMapper,
    style: MarkupStyle,
    color: Optional[str] = None,
    width: Optional[float] = None,
    highlight: bool = False
) -> List[DrawCommand]:
    """
    Build the draw commands for one annotation.

    Args:
        annotation: Shape in image space
        mapper: Image-to-surface mapping
        style: Shared style constants
        color: Override stroke color (highlight pass)
        width: Override stroke width in surface pixels (highlight pass)
        highlight: Mark commands as selection overlay

    Returns:
        Commands for the shape; empty for a single-point freehand stroke
    """
    scale = mapper.stroke_scale
    stroke_color = color or annotation.stroke_color or style.default_stroke_color
    stroke_width = width if width is not None else annotation.stroke_width * scale
    common = dict(
        color=stroke_color,
        width=stroke_width,
        annotation_id=annotation.id,
        highlight=highlight,
    )
    kind = annotation.kind

    if kind == ShapeKind.RECTANGLE:
        box = normalized_rect(annotation.origin_x, annotation.origin_y,
                              annotation.width, annotation.height)
        x1, y1 = mapper.to_display_space(box.min_x, box.min_y)
        x2, y2 = mapper.to_display_space(box.max_x, box.max_y)
        return [DrawCommand(DrawOp.RECT, rect=(x1, y1, x2 - x1, y2 - y1), **common)]

    if kind == ShapeKind.CIRCLE:
        # Radius scales by the smaller axis, so a display rect with unequal
        # axis scales draws the circle inside its per-axis bounding box.
        (cx, cy), radius = circle_geometry(annotation)
        center = mapper.to_display_space(cx, cy)
        return [DrawCommand(DrawOp.CIRCLE, center=center, radius=radius * scale, **common)]

    if kind == ShapeKind.ARROW:
        origin = mapper.to_display_space(annotation.origin_x, annotation.origin_y)
        tip = mapper.to_display_space(annotation.end_x, annotation.end_y)
        subpaths = [(origin, tip)]
        head = build_arrow_head(
            origin, tip,
            style.arrow_head_length_px * scale,
            style.arrow_head_angle_deg
        )
        subpaths.extend(head)
        return [DrawCommand(DrawOp.PATH, subpaths=tuple(subpaths), **common)]

    if kind == ShapeKind.FREEHAND:
        if len(annotation.points) < 2:
            return []
        mapped = tuple(mapper.to_display_space(p.x, p.y) for p in annotation.points)
        return [DrawCommand(DrawOp.PATH, subpaths=(mapped,), **common)]

    logger.warning(f"No renderer for annotation kind {kind!r}, skipping {annotation.id}")
    return []


def build_draw_commands(
    annotations: Iterable[Annotation],
    mapper: CoordinateMapper,
    style: MarkupStyle,
    selected_id: Optional[str] = None
) -> List[DrawCommand]:
    """
    Build commands for a full redraw.

    Annotations are drawn in store order. The selected annotation is drawn a
    second time on top with the highlight stroke.
    """
    commands: List[DrawCommand] = []
    selected: Optional[Annotation] = None

    for annotation in annotations:
        commands.extend(commands_for_annotation(annotation, mapper, style))
        if selected_id is not None and annotation.id == selected_id:
            selected = annotation

    if selected is not None:
        commands.extend(commands_for_annotation(
            selected, mapper, style,
            color=style.highlight_color,
            width=style.highlight_width,
            highlight=True
        ))

    return commands


__all__ = [
    'DrawOp',
    'DrawCommand',
    'commands_for_annotation',
    'build_draw_commands',
]
