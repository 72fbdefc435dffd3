"""
Geometry kernel for annotation shapes.

Pure functions shared by the authoring session, the live canvas and the
export compositor: hit testing, bounds and arrow head construction. No Qt,
no I/O.
"""

import math
from typing import NamedTuple, Sequence, Tuple

from .annotation import Annotation, Point, ShapeKind

Coord = Tuple[float, float]
Segment = Tuple[Coord, Coord]


class BoundingBox(NamedTuple):
    """Axis-aligned bounds in image-space pixels."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def intersects_image(self, image_width: float, image_height: float) -> bool:
        """True if any part of the box lies on the image; the rest clips."""
        return (
            self.max_x >= 0 and self.max_y >= 0 and
            self.min_x <= image_width and self.min_y <= image_height
        )


def normalized_rect(origin_x: float, origin_y: float, width: float, height: float) -> BoundingBox:
    """Normalize a signed drag rectangle to min/max corners."""
    end_x = origin_x + width
    end_y = origin_y + height
    return BoundingBox(
        min(origin_x, end_x), min(origin_y, end_y),
        max(origin_x, end_x), max(origin_y, end_y)
    )


def circle_geometry(annotation: Annotation) -> Tuple[Coord, float]:
    """
    Center and radius of a circle annotation.

    The radius is half the larger drag delta (bounding square), not an
    ellipse fitted to the drag box.
    """
    center = (
        annotation.origin_x + annotation.width / 2,
        annotation.origin_y + annotation.height / 2,
    )
    radius = max(abs(annotation.width), abs(annotation.height)) / 2
    return center, radius


def point_segment_distance(px: float, py: float, start: Coord, end: Coord) -> float:
    """
    Distance from a point to a segment.

    The projection is clamped to the segment. Returns inf for a zero-length
    segment, which has no direction to measure against.
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.inf

    t = ((px - start[0]) * dx + (py - start[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    closest_x = start[0] + t * dx
    closest_y = start[1] + t * dy
    return math.hypot(px - closest_x, py - closest_y)


def _polyline_distance(px: float, py: float, points: Sequence[Point]) -> float:
    best = math.inf
    for p1, p2 in zip(points, points[1:]):
        best = min(best, point_segment_distance(px, py, (p1.x, p1.y), (p2.x, p2.y)))
    return best


def contains_point(annotation: Annotation, x: float, y: float, tolerance: float) -> bool:
    """
    Hit test a point against an annotation.

    Args:
        annotation: Shape to test
        x: Point x in image space
        y: Point y in image space
        tolerance: Stroke proximity tolerance for arrows and freehand

    Returns:
        True if the point falls on/inside the shape. Non-finite input,
        zero-length arrows and single-point strokes never match.
    """
    if not (math.isfinite(x) and math.isfinite(y)):
        return False

    kind = annotation.kind

    if kind == ShapeKind.RECTANGLE:
        box = normalized_rect(annotation.origin_x, annotation.origin_y,
                              annotation.width, annotation.height)
        return box.min_x <= x <= box.max_x and box.min_y <= y <= box.max_y

    if kind == ShapeKind.CIRCLE:
        (cx, cy), radius = circle_geometry(annotation)
        return math.hypot(x - cx, y - cy) <= radius

    if kind == ShapeKind.ARROW:
        distance = point_segment_distance(
            x, y,
            (annotation.origin_x, annotation.origin_y),
            (annotation.end_x, annotation.end_y)
        )
        return distance <= tolerance

    if kind == ShapeKind.FREEHAND:
        if len(annotation.points) < 2:
            return False
        return _polyline_distance(x, y, annotation.points) <= tolerance

    return False


def bounding_box(annotation: Annotation) -> BoundingBox:
    """
    Bounds of an annotation in image space.

    Arrow bounds cover the shaft only. Coordinates outside the image are
    returned as-is.
    """
    if annotation.kind == ShapeKind.CIRCLE:
        (cx, cy), radius = circle_geometry(annotation)
        return BoundingBox(cx - radius, cy - radius, cx + radius, cy + radius)

    if annotation.kind == ShapeKind.FREEHAND:
        if not annotation.points:
            return BoundingBox(annotation.origin_x, annotation.origin_y,
                               annotation.origin_x, annotation.origin_y)
        xs = [p.x for p in annotation.points]
        ys = [p.y for p in annotation.points]
        return BoundingBox(min(xs), min(ys), max(xs), max(ys))

    return normalized_rect(annotation.origin_x, annotation.origin_y,
                           annotation.width, annotation.height)


def build_arrow_head(
    origin: Coord,
    tip: Coord,
    head_length: float,
    head_angle_deg: float = 30.0
) -> Tuple[Segment, ...]:
    """
    Build the two barb segments of an arrow head.

    Barbs leave the tip at +/- head_angle_deg from the reverse shaft
    direction. Their length is fixed, so a short shaft can carry a head
    longer than itself.

    Args:
        origin: Shaft start
        tip: Shaft end, where the head is drawn
        head_length: Barb length in pixels
        head_angle_deg: Angle between each barb and the shaft

    Returns:
        ((tip, barb1), (tip, barb2)), or () for a zero-length shaft
    """
    dx = tip[0] - origin[0]
    dy = tip[1] - origin[1]
    if dx == 0 and dy == 0:
        return ()

    angle = math.atan2(dy, dx)
    spread = math.radians(head_angle_deg)
    barbs = []
    for offset in (-spread, spread):
        barb = (
            tip[0] - head_length * math.cos(angle + offset),
            tip[1] - head_length * math.sin(angle + offset),
        )
        barbs.append((tip, barb))
    return tuple(barbs)


__all__ = [
    'BoundingBox',
    'normalized_rect',
    'circle_geometry',
    'point_segment_distance',
    'contains_point',
    'bounding_box',
    'build_arrow_head',
]
