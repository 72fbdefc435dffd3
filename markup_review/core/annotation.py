"""
Annotation Data Models

Dataclasses for drawn shapes, the ordered annotation set of one reviewed
image, and their persisted document form.
"""
import copy
import json
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from numbers import Real
from typing import Any, Dict, Iterator, List, Optional

from ..config import MarkupStyle
from .errors import AnnotationFormatError

logger = logging.getLogger(__name__)

_DEFAULT_STYLE = MarkupStyle()

# Older records used short keys; map them onto the current names.
_LEGACY_KEYS = {
    'type': 'kind',
    'x': 'originX',
    'y': 'originY',
    'color': 'strokeColor',
}


class ShapeKind(str, Enum):
    """Drawable shape kinds."""
    RECTANGLE = 'rectangle'
    CIRCLE = 'circle'
    ARROW = 'arrow'
    FREEHAND = 'freehand'


def new_annotation_id() -> str:
    """Generate a stable identifier for a new annotation."""
    return f"ann_{uuid.uuid4().hex[:8]}"


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


@dataclass
class Point:
    """2D point in image-space pixels"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Any) -> "Point":
        if isinstance(data, dict):
            x, y = data.get("x"), data.get("y")
        elif isinstance(data, (list, tuple)) and len(data) >= 2:
            x, y = data[0], data[1]
        else:
            raise AnnotationFormatError(f"Invalid point: {data!r}")
        if not (_is_number(x) and _is_number(y)):
            raise AnnotationFormatError(f"Invalid point coordinates: {data!r}")
        return cls(x=float(x), y=float(y))


@dataclass
class Annotation:
    """
    One drawn shape plus its text observation.

    Attributes:
        kind: Shape kind
        origin_x: Anchor x for rectangle/circle/arrow (image space)
        origin_y: Anchor y for rectangle/circle/arrow (image space)
        width: Signed horizontal drag delta
        height: Signed vertical drag delta
        points: Freehand samples, in drawing order
        stroke_color: Stroke color as a hex string
        stroke_width: Stroke width in image pixels
        description: Reviewer observation
        id: Stable identifier used for selection
    """
    kind: ShapeKind
    origin_x: float = 0.0
    origin_y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    points: List[Point] = field(default_factory=list)
    stroke_color: str = _DEFAULT_STYLE.default_stroke_color
    stroke_width: float = _DEFAULT_STYLE.default_stroke_width
    description: str = ''
    id: str = field(default_factory=new_annotation_id)

    def __post_init__(self):
        self.kind = ShapeKind(self.kind)

    @property
    def is_freehand(self) -> bool:
        return self.kind == ShapeKind.FREEHAND

    @property
    def end_x(self) -> float:
        return self.origin_x + self.width

    @property
    def end_y(self) -> float:
        return self.origin_y + self.height

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "kind": self.kind.value,
            "originX": self.origin_x,
            "originY": self.origin_y,
            "width": self.width,
            "height": self.height,
            "strokeColor": self.stroke_color,
            "strokeWidth": self.stroke_width,
            "description": self.description,
        }
        if self.is_freehand:
            data["points"] = [p.to_dict() for p in self.points]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], style: Optional[MarkupStyle] = None) -> "Annotation":
        """
        Build an annotation from a persisted record.

        Missing optional fields fall back to defaults. Raises
        AnnotationFormatError when the kind is unknown or a field the kind
        requires is missing or not a finite number.
        """
        if not isinstance(data, dict):
            raise AnnotationFormatError(f"Annotation record must be an object, got {type(data).__name__}")

        style = style or _DEFAULT_STYLE
        record = dict(data)
        for old_key, new_key in _LEGACY_KEYS.items():
            if old_key in record and new_key not in record:
                record[new_key] = record[old_key]

        try:
            kind = ShapeKind(record.get("kind"))
        except ValueError:
            raise AnnotationFormatError(f"Unknown annotation kind: {record.get('kind')!r}") from None

        stroke_width = record.get("strokeWidth")
        if not _is_number(stroke_width) or stroke_width <= 0:
            stroke_width = style.default_stroke_width
        stroke_color = record.get("strokeColor") or style.default_stroke_color
        description = record.get("description") or ''
        annotation_id = record.get("id") or new_annotation_id()

        if kind == ShapeKind.FREEHAND:
            raw_points = record.get("points")
            if not isinstance(raw_points, list) or not raw_points:
                raise AnnotationFormatError("Freehand annotation requires at least one point")
            points = [Point.from_dict(p) for p in raw_points]
            first = points[0]
            return cls(
                kind=kind,
                origin_x=first.x,
                origin_y=first.y,
                points=points,
                stroke_color=str(stroke_color),
                stroke_width=float(stroke_width),
                description=str(description),
                id=str(annotation_id),
            )

        values = {}
        for key in ("originX", "originY", "width", "height"):
            value = record.get(key)
            if not _is_number(value):
                raise AnnotationFormatError(f"{kind.value} annotation has invalid '{key}': {value!r}")
            values[key] = float(value)

        return cls(
            kind=kind,
            origin_x=values["originX"],
            origin_y=values["originY"],
            width=values["width"],
            height=values["height"],
            stroke_color=str(stroke_color),
            stroke_width=float(stroke_width),
            description=str(description),
            id=str(annotation_id),
        )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str) and value:
        text = value[:-1] + '+00:00' if value.endswith('Z') else value
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            logger.warning(f"Invalid createdAt timestamp {value!r}, using current time")
    return datetime.now(timezone.utc)


@dataclass
class AnnotationSet:
    """
    Ordered annotations for one reviewed image

    Attributes:
        annotations: Annotations in drawing order
        created_at: When the set was created
    """
    annotations: List[Annotation] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __len__(self) -> int:
        return len(self.annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self.annotations)

    def get(self, annotation_id: str) -> Optional[Annotation]:
        """Get an annotation by ID"""
        for annotation in self.annotations:
            if annotation.id == annotation_id:
                return annotation
        return None

    def snapshot(self) -> "AnnotationSet":
        """Deep copy that shares no mutable state with this set."""
        return copy.deepcopy(self)

    def descriptions(self) -> List[str]:
        """Descriptions in store order, empty strings included."""
        return [a.description for a in self.annotations]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "annotations": [a.to_dict() for a in self.annotations],
            "createdAt": self.created_at.isoformat(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string"""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        strict: bool = False,
        style: Optional[MarkupStyle] = None
    ) -> "AnnotationSet":
        """
        Build a set from a persisted document.

        Args:
            data: Document with 'annotations' and 'createdAt'
            strict: Raise on the first malformed record instead of skipping it
            style: Supplies defaults for missing stroke fields

        Returns:
            AnnotationSet containing every valid record
        """
        if not isinstance(data, dict):
            raise AnnotationFormatError("Annotation document must be an object")

        raw_annotations = data.get("annotations") or []
        if not isinstance(raw_annotations, list):
            raise AnnotationFormatError("'annotations' must be a list")

        annotations = []
        for index, record in enumerate(raw_annotations):
            try:
                annotations.append(Annotation.from_dict(record, style))
            except AnnotationFormatError as e:
                if strict:
                    raise
                logger.warning(f"Skipping annotation #{index}: {e}")

        return cls(annotations=annotations, created_at=_parse_timestamp(data.get("createdAt")))

    @classmethod
    def from_json(cls, json_str: str, strict: bool = False) -> "AnnotationSet":
        """Deserialize from JSON string"""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise AnnotationFormatError(f"Invalid annotation JSON: {e}") from e
        return cls.from_dict(data, strict=strict)


__all__ = [
    'ShapeKind',
    'Point',
    'Annotation',
    'AnnotationSet',
    'new_annotation_id',
]
