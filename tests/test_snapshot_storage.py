"""
Tests for SnapshotStorage
"""
import json

from markup_review.core.annotation import AnnotationSet
from markup_review.services.snapshot_storage import SnapshotStorage


class TestSnapshotStorageInit:

    def test_storage_creates_directory(self, tmp_path):
        base_path = tmp_path / "new_storage"
        SnapshotStorage(base_path=base_path)

        assert base_path.exists()

    def test_default_path_under_user_dir(self, tmp_path):
        storage = SnapshotStorage()
        assert storage.base_path == tmp_path / "home" / ".meta" / "annotations"


class TestSnapshotStorageSaveLoad:

    def test_save_and_load(self, temp_storage, sample_set):
        assert temp_storage.save_snapshot("sub_1", sample_set)

        loaded = temp_storage.load_snapshot("sub_1")

        assert loaded is not None
        assert loaded.annotations == sample_set.annotations
        assert loaded.created_at == sample_set.created_at

    def test_document_wraps_annotation_data(self, temp_storage, sample_set):
        temp_storage.save_snapshot("sub_1", sample_set)

        with open(temp_storage.get_snapshot_path("sub_1"), encoding="utf-8") as f:
            document = json.load(f)

        assert document["version"] == SnapshotStorage.JSON_VERSION
        assert document["submission_id"] == "sub_1"
        assert document["annotationData"] == sample_set.to_dict()

    def test_no_temp_file_left_behind(self, temp_storage, sample_set):
        temp_storage.save_snapshot("sub_1", sample_set)
        assert [p.name for p in temp_storage.base_path.iterdir()] == ["sub_1.json"]

    def test_load_missing(self, temp_storage):
        assert temp_storage.load_snapshot("nonexistent") is None

    def test_load_bare_annotation_document(self, temp_storage, sample_set):
        """Test a file holding just the annotation set also loads"""
        temp_storage.get_snapshot_path("sub_1").write_text(sample_set.to_json(), encoding="utf-8")

        loaded = temp_storage.load_snapshot("sub_1")

        assert len(loaded) == len(sample_set)

    def test_load_corrupt_json(self, temp_storage):
        temp_storage.get_snapshot_path("sub_1").write_text("{broken", encoding="utf-8")
        assert temp_storage.load_snapshot("sub_1") is None

    def test_load_non_object_json(self, temp_storage):
        temp_storage.get_snapshot_path("sub_1").write_text("[1, 2]", encoding="utf-8")
        assert temp_storage.load_snapshot("sub_1") is None

    def test_load_skips_malformed_records(self, temp_storage, sample_set):
        data = sample_set.to_dict()
        data["annotations"].append({"kind": "hexagon"})
        temp_storage.get_snapshot_path("sub_1").write_text(json.dumps(data), encoding="utf-8")

        assert len(temp_storage.load_snapshot("sub_1")) == len(sample_set)

    def test_save_empty_set(self, temp_storage):
        temp_storage.save_snapshot("sub_1", AnnotationSet())
        assert len(temp_storage.load_snapshot("sub_1")) == 0


class TestSnapshotStorageFiles:

    def test_has_and_delete(self, temp_storage, sample_set):
        assert not temp_storage.has_snapshot("sub_1")

        temp_storage.save_snapshot("sub_1", sample_set)
        assert temp_storage.has_snapshot("sub_1")

        assert temp_storage.delete_snapshot("sub_1")
        assert not temp_storage.has_snapshot("sub_1")

    def test_delete_missing_is_ok(self, temp_storage):
        assert temp_storage.delete_snapshot("nonexistent")

    def test_ids_cannot_escape_base_path(self, temp_storage):
        path = temp_storage.get_snapshot_path("../../etc/passwd")

        assert path.parent == temp_storage.base_path
        assert "/" not in path.name
