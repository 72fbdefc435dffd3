"""
Tests for ReviewSession lifecycle, persistence and export
"""
import cv2
import numpy as np
import pytest

from markup_review.core.authoring import DrawingTool
from markup_review.core.errors import ImageDecodeError
from markup_review.services.review_service import ReviewSession, SubmissionStatus, format_observations


def _draw_rect(review, start=(10, 10), end=(110, 60)):
    review.session.set_tool(DrawingTool.RECTANGLE)
    review.session.pointer_down(*start)
    review.session.pointer_up(*end)


class TestReviewSessionOpen:

    def test_natural_size_read_from_image(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)

        assert review.natural_size == (200, 120)
        assert review.session.image_size == (200, 120)
        assert review.status == SubmissionStatus.UPLOADED
        assert not review.locked

    def test_saved_annotations_are_restored(self, png_bytes, temp_storage, sample_set):
        temp_storage.save_snapshot("sub_1", sample_set)

        review = ReviewSession("sub_1", png_bytes, status="annotated", storage=temp_storage)

        assert [a.id for a in review.session.annotations] == [a.id for a in sample_set]
        assert review.status == SubmissionStatus.ANNOTATED

    def test_reported_submission_opens_locked(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, status=SubmissionStatus.REPORTED, storage=temp_storage)

        assert review.locked
        assert not review.session.pointer_down(10, 10)

    def test_undecodable_image_has_no_size(self, temp_storage):
        review = ReviewSession("sub_1", b"garbage", storage=temp_storage)
        assert review.natural_size is None


class TestReviewSessionLifecycle:

    def test_save_persists_and_marks_annotated(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)
        _draw_rect(review)

        saved = review.save()

        assert saved is not None
        assert len(saved) == 1
        assert review.status == SubmissionStatus.ANNOTATED
        assert len(temp_storage.load_snapshot("sub_1")) == 1

    def test_saved_snapshot_is_independent(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)
        _draw_rect(review)
        saved = review.save()

        review.session.clear()

        assert len(saved) == 1

    def test_finalize_requires_save(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)

        assert not review.finalize()
        assert review.status == SubmissionStatus.UPLOADED

    def test_finalize_locks_editing(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)
        _draw_rect(review)
        review.save()

        assert review.finalize()

        assert review.status == SubmissionStatus.REPORTED
        assert review.locked
        assert review.save() is None
        assert not review.session.clear()
        assert len(review.session.annotations) == 1
        assert not review.finalize()

    def test_finalize_persists_unsaved_edits(self, qapp, png_bytes, temp_storage):
        """Test reopening a finalized submission loads the markup it locked"""
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)
        _draw_rect(review)
        review.save()
        review.session.set_tool(DrawingTool.CIRCLE)
        review.session.pointer_down(150, 50)
        review.session.pointer_up(170, 70)

        assert review.finalize()

        reopened = ReviewSession("sub_1", png_bytes, status=SubmissionStatus.REPORTED, storage=temp_storage)
        assert len(reopened.session.annotations) == len(review.session.annotations) == 2
        assert reopened.export() == review.export()

    def test_finalize_fails_when_snapshot_cannot_be_written(self, png_bytes, temp_storage, monkeypatch):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)
        _draw_rect(review)
        review.save()
        monkeypatch.setattr(temp_storage, "save_snapshot", lambda *args: False)

        assert not review.finalize()

        assert review.status == SubmissionStatus.ANNOTATED
        assert not review.locked

    def test_status_is_final_only_when_reported(self):
        assert SubmissionStatus.REPORTED.is_final
        assert not SubmissionStatus.ANNOTATED.is_final


@pytest.mark.usefixtures("qapp")
class TestReviewSessionExport:

    def test_export_returns_image(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)
        _draw_rect(review)

        data = review.export()
        frame = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)

        assert frame.shape == (120, 200, 3)

    def test_export_bad_image_raises(self, temp_storage):
        review = ReviewSession("sub_1", b"garbage", storage=temp_storage)

        with pytest.raises(ImageDecodeError):
            review.export()

    def test_export_task_uses_current_markup(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)
        _draw_rect(review)
        task = review.create_export_task(image_format="png")

        assert task.submission_id == "sub_1"
        assert len(task.annotation_set) == 1


class TestObservations:

    def test_numbered_by_position_with_gaps(self, sample_set):
        assert format_observations(sample_set) == [
            "1. Cavity detected.",
            "2. Plaque buildup.",
            "4. Gum recession.",
        ]

    def test_existing_punctuation_kept(self, png_bytes, temp_storage):
        review = ReviewSession("sub_1", png_bytes, storage=temp_storage)
        _draw_rect(review)
        review.session.submit_description("  Fracture?  ")

        assert review.observations() == ["1. Fracture?"]
