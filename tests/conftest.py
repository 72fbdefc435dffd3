"""
Shared pytest fixtures for markup review tests
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import cv2
import numpy as np
import pytest
from PyQt6.QtWidgets import QApplication

from markup_review.config import MarkupStyle
from markup_review.core.annotation import Annotation, AnnotationSet, Point, ShapeKind
from markup_review.services.snapshot_storage import SnapshotStorage


IMAGE_WIDTH = 200
IMAGE_HEIGHT = 120


@pytest.fixture(scope="session")
def qapp():
    """Single QApplication for every Qt test"""
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def isolated_user_dir(tmp_path, monkeypatch):
    """Keep default storage locations inside the test's temp dir"""
    monkeypatch.setenv("MARKUP_REVIEW_HOME", str(tmp_path / "home"))


@pytest.fixture
def style():
    """Default markup style"""
    return MarkupStyle()


@pytest.fixture
def rect_annotation():
    """Rectangle from (20, 20) to (120, 70)"""
    return Annotation(
        kind=ShapeKind.RECTANGLE,
        origin_x=20, origin_y=20, width=100, height=50,
        description="Cavity detected",
        id="ann_rect0001",
    )


@pytest.fixture
def sample_set(rect_annotation):
    """One annotation of every kind, the arrow without a description"""
    return AnnotationSet(annotations=[
        rect_annotation,
        Annotation(
            kind=ShapeKind.CIRCLE,
            origin_x=140, origin_y=30, width=40, height=40,
            description="Plaque buildup",
            id="ann_circ0001",
        ),
        Annotation(
            kind=ShapeKind.ARROW,
            origin_x=10, origin_y=110, width=60, height=-20,
            id="ann_arrw0001",
        ),
        Annotation(
            kind=ShapeKind.FREEHAND,
            origin_x=150, origin_y=100,
            points=[Point(150, 100), Point(160, 105), Point(170, 100)],
            description="Gum recession",
            id="ann_free0001",
        ),
    ])


def _encode(extension, frame):
    ok, encoded = cv2.imencode(extension, frame)
    assert ok
    return encoded.tobytes()


@pytest.fixture
def white_frame():
    """Plain white BGR frame"""
    return np.full((IMAGE_HEIGHT, IMAGE_WIDTH, 3), 255, dtype=np.uint8)


@pytest.fixture
def png_bytes(white_frame):
    """White PNG image"""
    return _encode(".png", white_frame)


@pytest.fixture
def jpeg_bytes(white_frame):
    """White JPEG image"""
    return _encode(".jpg", white_frame)


@pytest.fixture
def temp_storage(tmp_path):
    """Snapshot storage in a temp dir"""
    return SnapshotStorage(base_path=tmp_path / "annotations")
