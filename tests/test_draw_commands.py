"""
Tests for draw command building
"""
import pytest

from markup_review.core.annotation import Annotation, AnnotationSet, Point, ShapeKind
from markup_review.core.draw_commands import DrawOp, build_draw_commands, commands_for_annotation
from markup_review.utils.coordinate_utils import CoordinateMapper


class TestDrawCommands:

    def test_live_commands_at_scale_one_match_export(self, sample_set, style):
        """Test a canvas shown at natural size paints exactly the export strokes"""
        live = CoordinateMapper((200, 120))
        live.set_display_size(200, 120)
        export = CoordinateMapper.identity(200, 120)

        assert build_draw_commands(sample_set, live, style) == build_draw_commands(sample_set, export, style)

    def test_one_command_per_shape_in_store_order(self, sample_set, style):
        commands = build_draw_commands(sample_set, CoordinateMapper.identity(200, 120), style)

        assert [c.annotation_id for c in commands] == [a.id for a in sample_set]
        assert [c.op for c in commands] == [DrawOp.RECT, DrawOp.CIRCLE, DrawOp.PATH, DrawOp.PATH]
        assert not any(c.highlight for c in commands)

    def test_selected_annotation_redrawn_on_top(self, sample_set, style):
        commands = build_draw_commands(
            sample_set, CoordinateMapper.identity(200, 120), style, selected_id="ann_circ0001"
        )

        assert len(commands) == len(sample_set) + 1
        top = commands[-1]
        assert top.annotation_id == "ann_circ0001"
        assert top.highlight
        assert top.color == style.highlight_color
        assert top.width == style.highlight_width

    def test_display_scaling(self, rect_annotation, style):
        mapper = CoordinateMapper((200, 120), (0, 0, 400, 240))
        command, = commands_for_annotation(rect_annotation, mapper, style)

        assert command.rect == (40, 40, 200, 100)
        assert command.width == rect_annotation.stroke_width * 2

    def test_negative_rect_is_normalized(self, style):
        rect = Annotation(kind=ShapeKind.RECTANGLE, origin_x=110, origin_y=60, width=-100, height=-50)
        command, = commands_for_annotation(rect, CoordinateMapper.identity(200, 120), style)

        assert command.rect == (10, 10, 100, 50)

    def test_circle_radius(self, style):
        circle = Annotation(kind=ShapeKind.CIRCLE, origin_x=0, origin_y=0, width=40, height=-10)
        command, = commands_for_annotation(circle, CoordinateMapper.identity(200, 120), style)

        assert command.center == (20, -5)
        assert command.radius == 20

    def test_circle_radius_uses_smaller_axis_scale(self, style):
        circle = Annotation(kind=ShapeKind.CIRCLE, origin_x=0, origin_y=0, width=40, height=40)
        mapper = CoordinateMapper((200, 120), (0, 0, 400, 236))
        command, = commands_for_annotation(circle, mapper, style)

        assert command.center == pytest.approx((40, 20 * 236 / 120))
        assert command.radius == pytest.approx(20 * mapper.stroke_scale)
        assert command.radius <= 20 * mapper.scale_x

    def test_arrow_has_shaft_and_two_barbs(self, style):
        arrow = Annotation(kind=ShapeKind.ARROW, origin_x=0, origin_y=0, width=100, height=0)
        command, = commands_for_annotation(arrow, CoordinateMapper.identity(200, 120), style)

        assert len(command.subpaths) == 3
        assert command.subpaths[0] == ((0, 0), (100, 0))

    def test_zero_length_arrow_draws_shaft_only(self, style):
        arrow = Annotation(kind=ShapeKind.ARROW, origin_x=5, origin_y=5)
        command, = commands_for_annotation(arrow, CoordinateMapper.identity(200, 120), style)

        assert command.subpaths == (((5, 5), (5, 5)),)

    def test_arrow_head_scales_with_display(self, style):
        arrow = Annotation(kind=ShapeKind.ARROW, origin_x=0, origin_y=0, width=100, height=0)
        command, = commands_for_annotation(arrow, CoordinateMapper((200, 120), (0, 0, 100, 60)), style)

        tip, barb = command.subpaths[1]
        assert tip == (50, 0)
        assert 50 - barb[0] == pytest.approx(style.arrow_head_length_px * 0.5 * 3 ** 0.5 / 2)

    def test_single_point_freehand_draws_nothing(self, style):
        stroke = Annotation(kind=ShapeKind.FREEHAND, points=[Point(3, 3)])
        assert commands_for_annotation(stroke, CoordinateMapper.identity(200, 120), style) == []

    def test_empty_set(self, style):
        assert build_draw_commands(AnnotationSet(), CoordinateMapper.identity(10, 10), style) == []
