"""
Tests for annotation data models and their persisted form
"""
import json
from datetime import datetime, timezone

import pytest

from markup_review.config import MarkupStyle
from markup_review.core.annotation import Annotation, AnnotationSet, Point, ShapeKind
from markup_review.core.errors import AnnotationFormatError


class TestAnnotationSerialization:
    """Tests for Annotation.to_dict / from_dict"""

    def test_to_dict_uses_camel_case_keys(self, rect_annotation):
        data = rect_annotation.to_dict()

        assert data == {
            "id": "ann_rect0001",
            "kind": "rectangle",
            "originX": 20,
            "originY": 20,
            "width": 100,
            "height": 50,
            "strokeColor": "#556B2F",
            "strokeWidth": 3.0,
            "description": "Cavity detected",
        }

    def test_freehand_includes_points(self, sample_set):
        freehand = sample_set.get("ann_free0001")
        data = freehand.to_dict()

        assert data["points"] == [
            {"x": 150, "y": 100}, {"x": 160, "y": 105}, {"x": 170, "y": 100}
        ]

    def test_from_dict_restores_fields(self, sample_set):
        for annotation in sample_set:
            restored = Annotation.from_dict(annotation.to_dict())
            assert restored == annotation

    def test_missing_optional_fields_take_defaults(self):
        style = MarkupStyle(default_stroke_color="#112233", default_stroke_width=5.0)
        annotation = Annotation.from_dict(
            {"kind": "circle", "originX": 1, "originY": 2, "width": 3, "height": 4},
            style=style,
        )

        assert annotation.description == ""
        assert annotation.stroke_color == "#112233"
        assert annotation.stroke_width == 5.0
        assert annotation.id.startswith("ann_")

    def test_legacy_keys_are_migrated(self):
        """Test older records with type/x/y/color keys load"""
        annotation = Annotation.from_dict({
            "type": "rectangle", "x": 5, "y": 6, "width": 10, "height": 20,
            "color": "#FF00FF", "description": "Old",
        })

        assert annotation.kind == ShapeKind.RECTANGLE
        assert (annotation.origin_x, annotation.origin_y) == (5, 6)
        assert annotation.stroke_color == "#FF00FF"

    @pytest.mark.parametrize("record", [
        {"kind": "polygon", "originX": 0, "originY": 0, "width": 1, "height": 1},
        {"kind": "rectangle", "originX": 0, "originY": 0, "width": 1},
        {"kind": "arrow", "originX": "a", "originY": 0, "width": 1, "height": 1},
        {"kind": "circle", "originX": float("nan"), "originY": 0, "width": 1, "height": 1},
        {"kind": "freehand", "points": []},
        {"kind": "freehand", "points": [{"x": 1}]},
        "not a record",
    ])
    def test_malformed_records_raise(self, record):
        with pytest.raises(AnnotationFormatError):
            Annotation.from_dict(record)

    def test_plain_string_kind_is_coerced(self):
        annotation = Annotation(kind="rectangle", width=10, height=5)

        assert annotation.kind is ShapeKind.RECTANGLE
        assert annotation.to_dict()["kind"] == "rectangle"

    def test_unknown_kind_rejected_on_construction(self):
        with pytest.raises(ValueError):
            Annotation(kind="hexagon")

    def test_freehand_origin_is_first_point(self):
        annotation = Annotation.from_dict({
            "kind": "freehand", "points": [[3, 4], [5, 6]],
        })

        assert annotation.points == [Point(3, 4), Point(5, 6)]
        assert (annotation.origin_x, annotation.origin_y) == (3, 4)


class TestAnnotationSet:
    """Tests for the ordered annotation set"""

    def test_document_shape(self, sample_set):
        data = sample_set.to_dict()

        assert set(data) == {"annotations", "createdAt"}
        assert [a["id"] for a in data["annotations"]] == [a.id for a in sample_set]

    def test_json_round_trip(self, sample_set):
        restored = AnnotationSet.from_json(sample_set.to_json())

        assert restored.annotations == sample_set.annotations
        assert restored.created_at == sample_set.created_at

    def test_created_at_accepts_trailing_z(self):
        restored = AnnotationSet.from_dict({"annotations": [], "createdAt": "2024-03-01T12:00:00Z"})
        assert restored.created_at == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_lenient_parse_skips_bad_records(self, sample_set, caplog):
        data = sample_set.to_dict()
        data["annotations"].insert(1, {"kind": "hexagon"})

        restored = AnnotationSet.from_dict(data)

        assert len(restored) == len(sample_set)
        assert "Skipping annotation #1" in caplog.text

    def test_strict_parse_raises(self, sample_set):
        data = sample_set.to_dict()
        data["annotations"].append({"kind": "hexagon"})

        with pytest.raises(AnnotationFormatError):
            AnnotationSet.from_dict(data, strict=True)

    def test_invalid_json_raises(self):
        with pytest.raises(AnnotationFormatError):
            AnnotationSet.from_json("{not json")

    def test_snapshot_is_independent(self, sample_set):
        snapshot = sample_set.snapshot()
        snapshot.annotations[0].description = "Changed"
        snapshot.get("ann_free0001").points.append(Point(0, 0))

        assert sample_set.annotations[0].description == "Cavity detected"
        assert len(sample_set.get("ann_free0001").points) == 3

    def test_descriptions_keep_store_order(self, sample_set):
        assert sample_set.descriptions() == [
            "Cavity detected", "Plaque buildup", "", "Gum recession"
        ]

    def test_json_is_plain_data(self, sample_set):
        assert json.loads(sample_set.to_json())["annotations"][2]["kind"] == "arrow"
