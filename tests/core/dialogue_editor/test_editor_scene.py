"""씬 기술 / 히트 테스트"""

import pytest

from src.core.dialogue_editor.camera import Camera, Point
from src.core.dialogue_editor.hit_test import hit_input_socket, hit_node, hit_output_socket
from src.core.dialogue_editor.options import EditorOptions
from src.core.dialogue_editor.scene import (
    MIN_CONTROL_OFFSET,
    bezier_controls,
    build_scene,
    node_preview,
    output_socket_position,
    output_sockets,
)
from src.core.dialogue_graph.enums import ConnectionKind
from src.core.dialogue_graph.models import create_dialogue
from src.core.dialogue_graph.mutations import connect_nodes, insert_node

OPTS = EditorOptions()


def _make_pair():
    """(0,0) speech -(R1)-> (400,0) end"""
    d = create_dialogue()
    speech = insert_node(d, {"type": "npc_speech", "text": "Hi", "position": {"x": 0, "y": 0}})
    end = insert_node(d, {"type": "end", "position": {"x": 400, "y": 0}})
    connect_nodes(d, speech.id, end.id, ConnectionKind.RESPONSE, {"text": "Bye"})
    return d, speech, end


class TestOutputSockets:
    def test_speech(self):
        _, speech, _ = _make_pair()
        sockets = output_sockets(speech)
        assert [s.label for s in sockets] == ["R1", "+", "Auto"]
        assert sockets[0].response_id == speech.responses[0].id
        assert sockets[2].kind == ConnectionKind.NEXT

    def test_per_node_type(self):
        d = create_dialogue()
        cases = {
            "player_choice": ["+"],
            "skill_check": ["Pass", "Fail", "Crit", "Fumble"],
            "quest_offer": ["Accept", "Decline"],
            "quest_turnin": ["Done", "Incomplete"],
            "branch": ["+", "Default"],
            "end": [],
            "shop": [""],
        }
        for node_type, labels in cases.items():
            node = insert_node(d, {"type": node_type})
            assert [s.label for s in output_sockets(node)] == labels, node_type

    def test_connect_options(self):
        _, speech, _ = _make_pair()
        existing, new, _ = output_sockets(speech)
        assert existing.connect_options("New Response") == {"response_id": speech.responses[0].id}
        assert new.connect_options("New Response") == {"text": "New Response"}


class TestGeometry:
    def test_output_sockets_evenly_spaced(self):
        _, speech, _ = _make_pair()
        ys = [output_socket_position(speech, i, 3, OPTS).y for i in range(3)]
        assert ys == [20, 40, 60]
        assert output_socket_position(speech, 0, 3, OPTS).x == 200

    def test_bezier_controls(self):
        c1, c2 = bezier_controls(Point(200, 20), Point(400, 40))
        assert c1 == Point(300, 20)
        assert c2 == Point(300, 40)

    def test_bezier_minimum_offset(self):
        c1, c2 = bezier_controls(Point(0, 0), Point(10, 0))
        assert c1.x == MIN_CONTROL_OFFSET
        assert c2.x == 10 - MIN_CONTROL_OFFSET

    def test_preview_text(self):
        d = create_dialogue()
        assert node_preview(insert_node(d, {"type": "npc_speech"})) == "No text"
        assert node_preview(insert_node(d, {"type": "branch"})) == "0 branches"
        assert node_preview(insert_node(d, {"type": "quest_offer"})) == "No quest selected"


class TestBuildScene:
    def test_boxes_and_connections(self):
        d, speech, end = _make_pair()
        scene = build_scene(d, Camera(), OPTS, selected_id=end.id)
        assert [b.node_id for b in scene.boxes] == [speech.id, end.id]
        assert scene.boxes[0].is_start
        assert scene.boxes[1].selected
        assert len(scene.connections) == 1
        curve = scene.connections[0]
        assert curve.start == Point(200, 20)
        assert curve.end == Point(400, 40)
        assert curve.to_node_id == end.id

    def test_dangling_edges_not_drawn(self):
        d, speech, _ = _make_pair()
        speech.responses[0].next_node_id = "ghost"
        assert build_scene(d, Camera(), OPTS).connections == []

    def test_sockets_listed(self):
        d, _, _ = _make_pair()
        scene = build_scene(d, Camera(), OPTS)
        inputs = [s for s in scene.sockets if s.is_input]
        outputs = [s for s in scene.sockets if not s.is_input]
        assert len(inputs) == 2
        assert len(outputs) == 3  # end 노드는 출력 없음

    def test_grid_follows_camera(self):
        d, _, _ = _make_pair()
        scene = build_scene(d, Camera(zoom=2, pan_x=50, pan_y=-10), OPTS)
        assert scene.grid_spacing == 40
        assert scene.grid_offset == Point(10, 30)

    def test_preview_curve(self):
        d, speech, _ = _make_pair()
        scene = build_scene(
            d, Camera(), OPTS, preview_from=(speech.id, 1), pointer_world=Point(320, 200)
        )
        assert scene.preview.start == Point(200, 40)
        assert scene.preview.end == Point(320, 200)
        assert scene.preview.to_node_id is None


class TestHitTest:
    def test_node_body(self):
        d, speech, end = _make_pair()
        assert hit_node(d, Point(100, 40), OPTS) == speech.id
        assert hit_node(d, Point(450, 10), OPTS) == end.id
        assert hit_node(d, Point(300, 40), OPTS) is None

    def test_topmost_node_wins(self):
        d, speech, _ = _make_pair()
        top = insert_node(d, {"type": "shop", "position": {"x": 100, "y": 20}})
        assert hit_node(d, Point(150, 50), OPTS) == top.id
        assert hit_node(d, Point(50, 10), OPTS) == speech.id

    @pytest.mark.parametrize("zoom", [0.5, 1.0, 2.0])
    def test_socket_radius_in_screen_pixels(self, zoom):
        d, speech, _ = _make_pair()
        cam = Camera(zoom=zoom)
        socket = cam.world_to_screen(Point(200, 20))
        near = hit_output_socket(d, Point(socket.x + 11, socket.y), cam, OPTS)
        far = hit_output_socket(d, Point(socket.x + 13, socket.y), cam, OPTS)
        assert near is not None and near.node_id == speech.id
        assert near.socket.label == "R1"
        assert far is None

    def test_nearest_socket_wins_when_radii_overlap(self):
        d, speech, _ = _make_pair()
        cam = Camera(zoom=0.5)
        # R1(20), +(40), Auto(60) → 화면 간격 10px, 히트 반지름 12px
        plus = cam.world_to_screen(Point(200, 40))
        assert hit_output_socket(d, plus, cam, OPTS).socket.label == "+"
        near_r1 = Point(plus.x, plus.y - 6)
        assert hit_output_socket(d, near_r1, cam, OPTS).socket.label == "R1"

    def test_input_socket(self):
        d, _, end = _make_pair()
        hit = hit_input_socket(d, Point(402, 38), Camera(), OPTS)
        assert hit.node_id == end.id
        assert hit.is_input
        assert hit_output_socket(d, Point(402, 38), Camera(), OPTS) is None
