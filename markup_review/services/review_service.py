"""
ReviewSession - Authoring, saving and exporting markup for one submission

Ties the authoring session to snapshot storage and the export compositor and
enforces the submission lifecycle: uploaded -> annotated -> reported. A
reported submission is final and its markup can no longer be edited.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from PyQt6.QtCore import QThreadPool

from ..config import Config, MarkupStyle
from ..core.annotation import AnnotationSet
from ..core.authoring import AuthoringSession
from ..core.errors import ImageDecodeError
from .export_compositor import composite_annotations, decode_image
from .export_worker import ExportTask
from .snapshot_storage import SnapshotStorage, get_snapshot_storage

logger = logging.getLogger(__name__)


class SubmissionStatus(str, Enum):
    """Submission lifecycle states."""
    UPLOADED = 'uploaded'
    ANNOTATED = 'annotated'
    REPORTED = 'reported'

    @property
    def is_final(self) -> bool:
        return self == SubmissionStatus.REPORTED


def format_observations(annotation_set: AnnotationSet) -> List[str]:
    """
    Numbered observation lines for the report.

    Numbering follows position in the set, so annotations without a
    description leave gaps.
    """
    lines = []
    for index, annotation in enumerate(annotation_set, start=1):
        text = annotation.description.strip()
        if not text:
            continue
        if text[-1] not in '.!?':
            text += '.'
        lines.append(f"{index}. {text}")
    return lines


class ReviewSession:
    """
    Markup review of one submitted image.

    Usage:
        review = ReviewSession("sub_42", image_bytes)
        review.session.pointer_down(10, 10)
        review.session.pointer_up(110, 60)
        review.save()
        jpeg = review.export()
        review.finalize()
    """

    def __init__(
        self,
        submission_id: str,
        image_bytes: bytes,
        natural_size: Optional[Tuple[int, int]] = None,
        status: SubmissionStatus = SubmissionStatus.UPLOADED,
        storage: Optional[SnapshotStorage] = None,
        style: Optional[MarkupStyle] = None
    ):
        self.submission_id = submission_id
        self._image_bytes = bytes(image_bytes)
        self._status = SubmissionStatus(status)
        self._storage = storage or get_snapshot_storage()
        self._style = style or Config.default_style()

        if natural_size is None:
            natural_size = self._probe_size()
        self._natural_size = natural_size

        annotation_set = self._storage.load_snapshot(submission_id) or AnnotationSet()
        self.session = AuthoringSession(
            annotation_set,
            style=self._style,
            image_size=natural_size,
            locked=self._status.is_final
        )
        logger.info(
            f"Opened review {submission_id} ({self._status.value}, "
            f"{len(annotation_set)} saved annotation(s))"
        )

    # ==================== Properties ====================

    @property
    def status(self) -> SubmissionStatus:
        return self._status

    @property
    def locked(self) -> bool:
        return self.session.locked

    @property
    def natural_size(self) -> Optional[Tuple[int, int]]:
        return self._natural_size

    @property
    def image_bytes(self) -> bytes:
        return self._image_bytes

    @property
    def style(self) -> MarkupStyle:
        return self._style

    # ==================== Lifecycle ====================

    def save(self) -> Optional[AnnotationSet]:
        """
        Persist a snapshot of the current markup.

        Returns:
            The saved snapshot, or None if the submission is final or the
            write failed
        """
        if self.locked:
            logger.warning(f"Save rejected: submission {self.submission_id} is finalized")
            return None

        snapshot = self.session.snapshot()
        if not self._storage.save_snapshot(self.submission_id, snapshot):
            return None

        if self._status == SubmissionStatus.UPLOADED:
            self._status = SubmissionStatus.ANNOTATED
        logger.info(f"Saved {len(snapshot)} annotation(s) for {self.submission_id}")
        return snapshot

    def finalize(self) -> bool:
        """
        Persist the current markup, move an annotated submission to its
        final state and lock editing.

        Returns:
            False unless the submission was annotated (saved at least once)
            and the final snapshot was written
        """
        if self._status != SubmissionStatus.ANNOTATED:
            logger.warning(
                f"Finalize rejected for {self.submission_id}: status is {self._status.value}"
            )
            return False

        if not self._storage.save_snapshot(self.submission_id, self.session.snapshot()):
            logger.error(f"Finalize aborted for {self.submission_id}: snapshot could not be written")
            return False

        self._status = SubmissionStatus.REPORTED
        self.session.locked = True
        logger.info(f"Submission {self.submission_id} finalized")
        return True

    # ==================== Export ====================

    def export(
        self,
        quality: float = Config.EXPORT_QUALITY,
        image_format: str = Config.EXPORT_FORMAT
    ) -> bytes:
        """Composite the current markup onto the original image, synchronously."""
        return composite_annotations(
            self._image_bytes,
            self.session.snapshot(),
            style=self._style,
            quality=quality,
            image_format=image_format
        )

    def create_export_task(
        self,
        quality: float = Config.EXPORT_QUALITY,
        image_format: str = Config.EXPORT_FORMAT
    ) -> ExportTask:
        """Build a background export task over a snapshot of the markup."""
        return ExportTask(
            self.submission_id,
            self._image_bytes,
            self.session.snapshot(),
            style=self._style,
            quality=quality,
            image_format=image_format
        )

    def start_export(self, thread_pool: Optional[QThreadPool] = None, **kwargs) -> ExportTask:
        """Start a background export; connect to task.signals for the result."""
        task = self.create_export_task(**kwargs)
        (thread_pool or QThreadPool.globalInstance()).start(task)
        return task

    def observations(self) -> List[str]:
        """Observation lines for the document generator."""
        return format_observations(self.session.snapshot())

    # ==================== Helpers ====================

    def _probe_size(self) -> Optional[Tuple[int, int]]:
        try:
            frame = decode_image(self._image_bytes)
        except ImageDecodeError as e:
            logger.warning(f"Could not read image size for {self.submission_id}: {e}")
            return None
        height, width = frame.shape[:2]
        return (width, height)


__all__ = ['ReviewSession', 'SubmissionStatus', 'format_observations']
