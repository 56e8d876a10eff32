"""카메라 변환 테스트"""

import pytest

from src.core.dialogue_editor.camera import Bounds, Camera, Point, content_bounds
from src.core.dialogue_editor.options import EditorOptions
from src.core.dialogue_graph.models import Position


class TestTransforms:
    def test_round_trip(self):
        cam = Camera(zoom=1.5, pan_x=30, pan_y=-20)
        world = cam.screen_to_world(Point(330, 130))
        assert world == Point(200, 100)
        assert cam.world_to_screen(world) == Point(330, 130)

    def test_identity_by_default(self):
        assert Camera().screen_to_world(Point(12, 34)) == Point(12, 34)


class TestZoomAt:
    @pytest.mark.parametrize("zoom", [0.25, 0.9, 1.1, 2.0])
    def test_world_point_under_cursor_is_fixed(self, zoom):
        cam = Camera(zoom=1.2, pan_x=40, pan_y=15)
        cursor = Point(300, 200)
        before = cam.screen_to_world(cursor)
        cam.zoom_at(cursor, zoom)
        after = cam.screen_to_world(cursor)
        assert cam.zoom == zoom
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)


class TestFit:
    def test_small_content_capped_at_one_and_centered(self):
        cam = Camera(zoom=0.5)
        cam.fit(Bounds(0, 0, 200, 80), 1200, 800, padding=50)
        assert cam.zoom == 1.0
        center = cam.world_to_screen(Point(100, 40))
        assert center.x == pytest.approx(600)
        assert center.y == pytest.approx(400)

    def test_large_content_zooms_out(self):
        cam = Camera()
        cam.fit(Bounds(0, 0, 2900, 400), 1200, 800, padding=50)
        assert cam.zoom == pytest.approx(1200 / 3000)

    def test_reset(self):
        cam = Camera(zoom=2, pan_x=10, pan_y=10)
        cam.reset()
        assert (cam.zoom, cam.pan_x, cam.pan_y) == (1.0, 0.0, 0.0)
        assert cam.pan == Position(0, 0)


class TestContentBounds:
    def test_includes_node_size(self):
        b = content_bounds([Position(0, 0), Position(300, -40)], 200, 80)
        assert b == Bounds(0, -40, 500, 80)
        assert (b.width, b.height) == (500, 120)

    def test_empty(self):
        assert content_bounds([], 200, 80) is None


class TestEditorOptions:
    def test_snap(self):
        opts = EditorOptions()
        assert opts.snap(29) == 20
        assert opts.snap(31) == 40
        assert opts.snap(-9) == 0

    def test_clamp_zoom(self):
        opts = EditorOptions()
        assert opts.clamp_zoom(5) == 2.0
        assert opts.clamp_zoom(0.1) == 0.25
        assert opts.clamp_zoom(1.3) == 1.3

    def test_socket_hit_radius(self):
        assert EditorOptions().socket_hit_radius == 12
