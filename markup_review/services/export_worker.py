"""
ExportTask - Background export of annotated images with QThreadPool

Pattern: Background work with QRunnable workers
"""

import logging
import time
from typing import Optional

from PyQt6.QtCore import QObject, QRunnable, pyqtSignal

from ..config import Config, MarkupStyle
from ..core.annotation import AnnotationSet
from ..core.errors import MarkupError
from .export_compositor import composite_annotations

logger = logging.getLogger(__name__)


class ExportSignals(QObject):
    """Signals for ExportTask"""

    export_complete = pyqtSignal(str, bytes, float)  # submission_id, image_bytes, elapsed_ms
    export_failed = pyqtSignal(str, str, str)  # submission_id, error_kind, error_message


class ExportTask(QRunnable):
    """
    Background task that composites a snapshot onto the original image.

    The task owns a private deep copy of the annotation set, so authoring
    can continue while it runs. A failed task changes nothing and can be
    started again with the same inputs.

    Usage:
        task = ExportTask(submission_id, image_bytes, annotation_set)
        task.signals.export_complete.connect(on_done)
        QThreadPool.globalInstance().start(task)
    """

    def __init__(
        self,
        submission_id: str,
        image_bytes: bytes,
        annotation_set: AnnotationSet,
        style: Optional[MarkupStyle] = None,
        quality: float = Config.EXPORT_QUALITY,
        image_format: str = Config.EXPORT_FORMAT
    ):
        super().__init__()
        self.submission_id = submission_id
        self.image_bytes = bytes(image_bytes)
        self.annotation_set = annotation_set.snapshot()
        self.style = style or Config.default_style()
        self.quality = quality
        self.image_format = image_format
        self.signals = ExportSignals()

    def run(self):
        """Execute export task"""
        start_time = time.time()
        try:
            result = composite_annotations(
                self.image_bytes,
                self.annotation_set,
                style=self.style,
                quality=self.quality,
                image_format=self.image_format
            )
        except MarkupError as e:
            logger.error(f"Export failed for {self.submission_id}: {e}")
            self.signals.export_failed.emit(self.submission_id, e.kind, str(e))
            return
        except Exception as e:
            logger.exception(f"Unexpected export error for {self.submission_id}")
            self.signals.export_failed.emit(self.submission_id, 'unexpected_error', f"Export failed: {e}")
            return

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(f"Export for {self.submission_id} finished in {elapsed_ms:.0f} ms")
        self.signals.export_complete.emit(self.submission_id, result, elapsed_ms)


__all__ = ['ExportSignals', 'ExportTask']
