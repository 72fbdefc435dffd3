"""
Global configuration for Markup Review

Application metadata, storage locations and the shared markup style used by
the authoring canvas and the export compositor.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final


@dataclass(frozen=True)
class MarkupStyle:
    """
    Stroke and hit-test constants shared by every renderer.

    One instance is passed explicitly to the authoring session, the live
    canvas and the export compositor so both renderers paint with identical
    values.
    """

    default_stroke_color: str = '#556B2F'
    default_stroke_width: float = 3.0
    hit_test_tolerance_px: float = 10.0
    arrow_head_length_px: float = 15.0
    arrow_head_angle_deg: float = 30.0
    highlight_color: str = '#FF0000'
    highlight_width: float = 4.0


class Config:
    """Central configuration class for all application settings"""

    # Application metadata
    APP_NAME: Final[str] = "Markup Review"
    APP_VERSION: Final[str] = "1.0.0"
    APP_AUTHOR: Final[str] = "CGstuff"

    # Paths
    APP_ROOT: Final[Path] = Path(__file__).parent

    # Storage structure
    META_FOLDER_NAME: Final[str] = ".meta"
    SNAPSHOTS_FOLDER_NAME: Final[str] = "annotations"
    EXPORTS_FOLDER_NAME: Final[str] = "exports"
    LOGS_FOLDER_NAME: Final[str] = "logs"

    # Export settings
    EXPORT_FORMAT: Final[str] = "jpeg"  # "jpeg" or "png"
    EXPORT_QUALITY: Final[float] = 0.9  # 0-1, mapped to JPEG quality 0-100
    PNG_COMPRESSION: Final[int] = 3

    # Window settings
    DEFAULT_WINDOW_WIDTH: Final[int] = 1200
    DEFAULT_WINDOW_HEIGHT: Final[int] = 850
    VIEWPORT_MIN_HEIGHT: Final[int] = 400

    @classmethod
    def default_style(cls) -> MarkupStyle:
        """Build the markup style used when none is supplied."""
        return MarkupStyle()

    @classmethod
    def get_user_data_dir(cls) -> Path:
        """
        Get user data directory.

        Uses system AppData/Local (Windows) or .local/share (Linux).
        The MARKUP_REVIEW_HOME environment variable overrides both.
        """
        override = os.environ.get('MARKUP_REVIEW_HOME')
        if override:
            user_dir = Path(override)
        elif sys.platform == 'win32':
            base_path = Path(os.environ.get('LOCALAPPDATA', os.path.expanduser('~')))
            user_dir = base_path / 'MarkupReview'
        elif sys.platform == 'darwin':
            user_dir = Path.home() / 'Library' / 'Application Support' / 'MarkupReview'
        else:
            # Linux / Unix
            user_dir = Path.home() / '.local' / 'share' / 'MarkupReview'

        user_dir.mkdir(parents=True, exist_ok=True)
        return user_dir

    @classmethod
    def get_meta_folder(cls) -> Path:
        """Get the .meta folder holding snapshots and logs."""
        meta_folder = cls.get_user_data_dir() / cls.META_FOLDER_NAME
        meta_folder.mkdir(parents=True, exist_ok=True)
        return meta_folder

    @classmethod
    def get_snapshot_folder(cls) -> Path:
        """Get the folder where annotation snapshots are saved."""
        folder = cls.get_meta_folder() / cls.SNAPSHOTS_FOLDER_NAME
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    @classmethod
    def get_exports_folder(cls) -> Path:
        """Get the folder where flattened export rasters are written."""
        folder = cls.get_user_data_dir() / cls.EXPORTS_FOLDER_NAME
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    @classmethod
    def get_log_folder(cls) -> Path:
        """Get the log folder."""
        return cls.get_meta_folder() / cls.LOGS_FOLDER_NAME


__all__ = ['Config', 'MarkupStyle']
