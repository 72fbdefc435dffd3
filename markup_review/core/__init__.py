"""Annotation model, geometry and authoring logic for Markup Review"""

from .errors import MarkupError, AnnotationFormatError, ImageDecodeError, ImageEncodeError
from .annotation import Annotation, AnnotationSet, Point, ShapeKind, new_annotation_id
from .store import AnnotationStore
from .authoring import AuthoringSession, AuthoringState, DrawingTool
from .draw_commands import DrawCommand, DrawOp, build_draw_commands

__all__ = [
    'MarkupError',
    'AnnotationFormatError',
    'ImageDecodeError',
    'ImageEncodeError',
    'Annotation',
    'AnnotationSet',
    'Point',
    'ShapeKind',
    'new_annotation_id',
    'AnnotationStore',
    'AuthoringSession',
    'AuthoringState',
    'DrawingTool',
    'DrawCommand',
    'DrawOp',
    'build_draw_commands',
]
