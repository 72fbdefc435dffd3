"""
AnnotationStore - Ordered annotations plus the current selection

Owned by one authoring session. Selection is tracked by annotation ID so it
survives list mutation.
"""

from typing import Iterator, Optional, Tuple

from .annotation import Annotation, AnnotationSet
from .geometry import contains_point


class AnnotationStore:
    """
    Append-only annotation sequence with a single selection.

    Usage:
        store = AnnotationStore()
        store.append(annotation)
        store.select(annotation.id)
        hit = store.hit_test(x, y, tolerance=10)
    """

    def __init__(self, annotation_set: Optional[AnnotationSet] = None):
        self._set = annotation_set if annotation_set is not None else AnnotationSet()
        self._selected_id: Optional[str] = None

    def __len__(self) -> int:
        return len(self._set)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._set)

    @property
    def annotations(self) -> Tuple[Annotation, ...]:
        return tuple(self._set.annotations)

    @property
    def annotation_set(self) -> AnnotationSet:
        return self._set

    @property
    def last(self) -> Optional[Annotation]:
        return self._set.annotations[-1] if self._set.annotations else None

    # ==================== Mutation ====================

    def append(self, annotation: Annotation) -> Annotation:
        self._set.annotations.append(annotation)
        return annotation

    def clear(self):
        """Remove every annotation and the selection."""
        self._set.annotations.clear()
        self._selected_id = None

    def replace(self, annotation_set: AnnotationSet):
        """Load another set, e.g. a saved snapshot."""
        self._set = annotation_set
        self._selected_id = None

    # ==================== Selection ====================

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected(self) -> Optional[Annotation]:
        if self._selected_id is None:
            return None
        return self._set.get(self._selected_id)

    def select(self, annotation_id: Optional[str]) -> bool:
        """Select by ID. Unknown IDs clear the selection."""
        if annotation_id is not None and self._set.get(annotation_id) is not None:
            self._selected_id = annotation_id
            return True
        self._selected_id = None
        return False

    def clear_selection(self):
        self._selected_id = None

    def get(self, annotation_id: str) -> Optional[Annotation]:
        return self._set.get(annotation_id)

    # ==================== Hit Testing ====================

    def hit_test(self, x: float, y: float, tolerance: float) -> Optional[Annotation]:
        """First annotation in store order that contains the point."""
        for annotation in self._set:
            if contains_point(annotation, x, y, tolerance):
                return annotation
        return None

    def snapshot(self) -> AnnotationSet:
        """Independent copy of the current set."""
        return self._set.snapshot()


__all__ = ['AnnotationStore']
