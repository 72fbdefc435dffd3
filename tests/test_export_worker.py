"""
Tests for the background export task
"""
import pytest

from markup_review.services.export_compositor import composite_annotations
from markup_review.services.export_worker import ExportTask


@pytest.mark.usefixtures("qapp")
class TestExportTask:

    def _run(self, task):
        completed, failed = [], []
        task.signals.export_complete.connect(lambda *args: completed.append(args))
        task.signals.export_failed.connect(lambda *args: failed.append(args))
        task.run()
        return completed, failed

    def test_success_emits_complete_once(self, png_bytes, sample_set):
        task = ExportTask("sub_1", png_bytes, sample_set, image_format="png")

        completed, failed = self._run(task)

        assert failed == []
        assert len(completed) == 1
        submission_id, data, elapsed_ms = completed[0]
        assert submission_id == "sub_1"
        assert data == composite_annotations(png_bytes, sample_set, image_format="png")
        assert elapsed_ms >= 0

    def test_task_works_on_a_snapshot(self, png_bytes, sample_set):
        """Test edits after the task is created do not reach the export"""
        task = ExportTask("sub_1", png_bytes, sample_set, image_format="png")
        expected = composite_annotations(png_bytes, sample_set, image_format="png")

        sample_set.annotations.clear()
        completed, _ = self._run(task)

        assert completed[0][1] == expected

    def test_decode_failure_emits_failed_once(self, sample_set):
        task = ExportTask("sub_2", b"garbage", sample_set)
        before = sample_set.to_dict()

        completed, failed = self._run(task)

        assert completed == []
        assert len(failed) == 1
        assert failed[0][:2] == ("sub_2", "decode_failure")
        assert sample_set.to_dict() == before

    def test_failed_task_can_be_retried(self, sample_set):
        task = ExportTask("sub_3", b"garbage", sample_set)

        _, first = self._run(task)
        assert len(first) == 1

        retry = ExportTask(task.submission_id, task.image_bytes, task.annotation_set)
        _, second = self._run(retry)
        assert len(second) == 1

    def test_unknown_format_reports_encode_failure(self, png_bytes, sample_set):
        task = ExportTask("sub_4", png_bytes, sample_set, image_format="bmp")

        completed, failed = self._run(task)

        assert completed == []
        assert failed[0][1] == "encode_failure"
