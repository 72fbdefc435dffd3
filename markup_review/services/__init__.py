"""Services for Markup Review"""

from .export_compositor import composite_annotations, render_overlay
from .export_worker import ExportSignals, ExportTask
from .snapshot_storage import SnapshotStorage, get_snapshot_storage
from .review_service import ReviewSession, SubmissionStatus

__all__ = [
    'composite_annotations',
    'render_overlay',
    'ExportSignals',
    'ExportTask',
    'SnapshotStorage',
    'get_snapshot_storage',
    'ReviewSession',
    'SubmissionStatus',
]
