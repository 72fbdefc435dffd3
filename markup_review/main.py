"""
Markup Review - Main Entry Point

Opens a submitted image for markup.

Usage:
    python -m markup_review.main IMAGE [--submission-id ID] [--status STATUS]
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from .config import Config
from .utils.logging_config import LoggingConfig


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(prog='markup_review', description=f"{Config.APP_NAME}")
    parser.add_argument('image', type=Path, help="Submitted image to review")
    parser.add_argument(
        '--submission-id',
        help="Submission identifier; defaults to the image file name"
    )
    parser.add_argument(
        '--status',
        choices=['uploaded', 'annotated', 'reported'],
        default='uploaded',
        help="Current submission status"
    )
    return parser.parse_args(argv)


def setup_application() -> QApplication:
    """
    Initialize and configure the Qt application

    Returns:
        Configured QApplication instance
    """
    app = QApplication(sys.argv)

    app.setApplicationName(Config.APP_NAME)
    app.setApplicationVersion(Config.APP_VERSION)
    app.setOrganizationName(Config.APP_AUTHOR)

    return app


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for Markup Review

    Creates the application, opens the review window, and runs the event loop.
    """
    args = parse_args(argv)

    # Setup logging first
    LoggingConfig.setup_logging(Config.get_log_folder())

    logger = LoggingConfig.get_logger(__name__)
    logger.info(f"Starting {Config.APP_NAME} {Config.APP_VERSION}...")
    logger.info(f"Snapshots: {Config.get_snapshot_folder()}")

    try:
        image_bytes = args.image.read_bytes()
    except OSError as e:
        logger.error(f"Could not read {args.image}: {e}")
        sys.exit(1)

    app = setup_application()

    from .services.review_service import ReviewSession, SubmissionStatus
    from .widgets.review_window import ReviewWindow

    review = ReviewSession(
        args.submission_id or args.image.stem,
        image_bytes,
        status=SubmissionStatus(args.status),
        style=Config.default_style()
    )
    window = ReviewWindow(review)
    window.show()

    logger.info("Application started successfully!")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
