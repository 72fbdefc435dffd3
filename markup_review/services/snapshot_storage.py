"""
SnapshotStorage - File storage for saved annotation sets

Handles saving/loading annotation snapshots as JSON documents, one file per
reviewed submission.
"""

import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from ..config import Config, MarkupStyle
from ..core.annotation import AnnotationSet
from ..core.errors import AnnotationFormatError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9_.-]')


class SnapshotStorage:
    """
    Manages annotation snapshot files on disk.

    File structure:
        .meta/annotations/
        ├── {submission_id}.json     # Snapshot document
        └── ...

    Each document wraps the annotation set in its persisted form:
        {"version", "submission_id", "saved_at", "annotationData": {...}}
    """

    JSON_VERSION = "1.0"

    def __init__(self, base_path: Optional[Path] = None, style: Optional[MarkupStyle] = None):
        if base_path is None:
            base_path = Config.get_snapshot_folder()
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)
        self._style = style or Config.default_style()

    @property
    def base_path(self) -> Path:
        return self._base

    def get_snapshot_path(self, submission_id: str) -> Path:
        """Get path for a submission's snapshot JSON."""
        safe_id = _UNSAFE_CHARS.sub('_', submission_id) or '_'
        return self._base / f'{safe_id}.json'

    # ==================== Save/Load ====================

    def save_snapshot(self, submission_id: str, annotation_set: AnnotationSet) -> bool:
        """
        Save an annotation set for a submission.

        The file is written to a temporary path and moved into place, so a
        failed write never leaves a truncated snapshot behind.

        Returns:
            True if saved successfully
        """
        path = self.get_snapshot_path(submission_id)
        document = {
            'version': self.JSON_VERSION,
            'submission_id': submission_id,
            'saved_at': datetime.now(timezone.utc).isoformat(),
            'annotationData': annotation_set.to_dict(),
        }

        tmp_path = path.with_suffix('.json.tmp')
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Error saving snapshot for {submission_id}: {e}")
            if tmp_path.exists():
                tmp_path.unlink()
            return False

        logger.debug(f"Saved {len(annotation_set)} annotation(s) for {submission_id} to {path}")
        return True

    def load_document(self, submission_id: str) -> Optional[Dict]:
        """Load the raw snapshot document for a submission."""
        path = self.get_snapshot_path(submission_id)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading snapshot for {submission_id}: {e}")
            return None

        if not isinstance(document, dict):
            logger.error(f"Snapshot for {submission_id} is not a JSON object")
            return None
        return document

    def load_snapshot(self, submission_id: str) -> Optional[AnnotationSet]:
        """
        Load a submission's annotation set.

        Malformed annotation records are skipped with a warning.

        Returns:
            AnnotationSet, or None if no readable snapshot exists
        """
        document = self.load_document(submission_id)
        if document is None:
            return None

        data = document.get('annotationData', document)
        try:
            return AnnotationSet.from_dict(data, strict=False, style=self._style)
        except AnnotationFormatError as e:
            logger.error(f"Invalid snapshot for {submission_id}: {e}")
            return None

    def has_snapshot(self, submission_id: str) -> bool:
        """Check if a submission has a saved snapshot."""
        return self.get_snapshot_path(submission_id).exists()

    def delete_snapshot(self, submission_id: str) -> bool:
        """Delete a submission's snapshot file."""
        path = self.get_snapshot_path(submission_id)
        try:
            if path.exists():
                path.unlink()
            return True
        except OSError as e:
            logger.error(f"Error deleting snapshot for {submission_id}: {e}")
            return False


# ==================== Singleton ====================

_storage_instance: Optional[SnapshotStorage] = None


def get_snapshot_storage() -> SnapshotStorage:
    """Get singleton SnapshotStorage instance."""
    global _storage_instance
    if _storage_instance is None:
        _storage_instance = SnapshotStorage()
    return _storage_instance


__all__ = [
    'SnapshotStorage',
    'get_snapshot_storage',
]
