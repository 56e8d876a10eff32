"""순수 씬 기술 (렌더러 입력)

그래프 + 카메라 + 에디터 상태로부터 노드 박스, 소켓 위치, 베지어 연결선,
미리보기 연결선, 그리드 간격을 계산한다. 그리지 않는다.
히트 테스트도 같은 소켓 배치 함수를 쓴다.

좌표: 박스/소켓/연결선은 월드 좌표. 그리드만 화면 좌표.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from src.core.dialogue_editor.camera import Camera, Point
from src.core.dialogue_editor.options import EditorOptions
from src.core.dialogue_graph.enums import ConnectionKind, NodeType
from src.core.dialogue_graph.models import (
    BranchNode,
    Dialogue,
    EndNode,
    Node,
    PlayerChoiceNode,
    QuestOfferNode,
    QuestTurnInNode,
    SkillCheckNode,
    SpeechNode,
)

MIN_CONTROL_OFFSET = 50  # 베지어 제어점 최소 수평 거리

HEADER_COLORS: dict[NodeType, str] = {
    NodeType.NPC_SPEECH: "#3498db",
    NodeType.PLAYER_CHOICE: "#9b59b6",
    NodeType.SKILL_CHECK: "#e67e22",
    NodeType.SHOP: "#2ecc71",
    NodeType.QUEST_OFFER: "#f1c40f",
    NodeType.QUEST_TURNIN: "#f39c12",
    NodeType.BRANCH: "#95a5a6",
    NodeType.END: "#e74c3c",
}
PREVIEW_COLOR = "#ffffff88"
INPUT_SOCKET_COLOR = "#3498db"


@dataclass(frozen=True)
class OutputSocket:
    """출력 소켓 하나 = 연결 종류 하나

    target_id가 없는 "+" 소켓은 새 응답/분기 항목을 만든다.
    response_id/branch_id가 있으면 그 항목을 재연결한다.
    """

    node_id: str
    index: int
    kind: ConnectionKind
    label: str
    color: str
    target_id: Optional[str] = None
    response_id: Optional[str] = None
    branch_id: Optional[str] = None

    def connect_options(self, new_response_text: str) -> dict:
        if self.response_id:
            return {"response_id": self.response_id}
        if self.branch_id:
            return {"branch_id": self.branch_id}
        if self.kind == ConnectionKind.RESPONSE:
            return {"text": new_response_text}
        return {}


def output_sockets(node: Node) -> list[OutputSocket]:
    """노드 타입별 출력 소켓 목록 (위에서 아래 순서)"""
    nid = node.id
    specs: list[tuple] = []

    if isinstance(node, (SpeechNode, PlayerChoiceNode)):
        color = "#2ecc71" if isinstance(node, SpeechNode) else "#9b59b6"
        for i, resp in enumerate(node.responses):
            specs.append(
                (ConnectionKind.RESPONSE, f"R{i + 1}", color, resp.next_node_id, resp.id, None)
            )
        specs.append((ConnectionKind.RESPONSE, "+", color, None, None, None))
        if isinstance(node, SpeechNode):
            auto = node.auto_advance.next_node_id if node.auto_advance else None
            specs.append((ConnectionKind.NEXT, "Auto", "#1abc9c", auto, None, None))
    elif isinstance(node, SkillCheckNode):
        sc = node.skill_check
        specs = [
            (ConnectionKind.SUCCESS, "Pass", "#2ecc71", sc.success_node_id, None, None),
            (ConnectionKind.FAILURE, "Fail", "#e74c3c", sc.failure_node_id, None, None),
            (ConnectionKind.CRIT_SUCCESS, "Crit", "#f1c40f", sc.crit_success_node_id, None, None),
            (ConnectionKind.CRIT_FAILURE, "Fumble", "#8e44ad", sc.crit_failure_node_id, None, None),
        ]
    elif isinstance(node, QuestOfferNode):
        specs = [
            (ConnectionKind.ACCEPT, "Accept", "#2ecc71", node.accept_node_id, None, None),
            (ConnectionKind.DECLINE, "Decline", "#e74c3c", node.decline_node_id, None, None),
        ]
    elif isinstance(node, QuestTurnInNode):
        specs = [
            (ConnectionKind.SUCCESS, "Done", "#2ecc71", node.success_node_id, None, None),
            (ConnectionKind.FAILURE, "Incomplete", "#f39c12", node.incomplete_node_id, None, None),
        ]
    elif isinstance(node, BranchNode):
        for i, entry in enumerate(node.branches):
            specs.append(
                (ConnectionKind.BRANCH, f"B{i + 1}", "#95a5a6", entry.next_node_id, None, entry.id)
            )
        specs.append((ConnectionKind.BRANCH, "+", "#95a5a6", None, None, None))
        specs.append((ConnectionKind.DEFAULT, "Default", "#7f8c8d", node.default_node_id, None, None))
    elif isinstance(node, EndNode):
        specs = []
    else:
        specs = [(ConnectionKind.NEXT, "", "#2ecc71", getattr(node, "next_node_id", None), None, None)]

    return [
        OutputSocket(nid, i, kind, label, color, target, resp_id, branch_id)
        for i, (kind, label, color, target, resp_id, branch_id) in enumerate(specs)
    ]


def input_socket_position(node: Node, options: EditorOptions) -> Point:
    """입력 소켓: 왼쪽 변 중앙 (월드)"""
    return Point(node.position.x, node.position.y + options.node_height / 2)


def output_socket_position(node: Node, index: int, count: int, options: EditorOptions) -> Point:
    """출력 소켓: 오른쪽 변에 균등 배치 (월드)"""
    spacing = options.node_height / (count + 1)
    return Point(node.position.x + options.node_width, node.position.y + spacing * (index + 1))


def bezier_controls(start: Point, end: Point) -> tuple[Point, Point]:
    cp = max(abs(end.x - start.x) * 0.5, MIN_CONTROL_OFFSET)
    return Point(start.x + cp, start.y), Point(end.x - cp, end.y)


def node_preview(node: Node) -> str:
    if isinstance(node, (SpeechNode, SkillCheckNode, EndNode)):
        return node.text or "No text"
    if isinstance(node, PlayerChoiceNode):
        return f"{len(node.responses)} responses"
    if isinstance(node, (QuestOfferNode, QuestTurnInNode)):
        return node.quest_id or "No quest selected"
    if isinstance(node, BranchNode):
        return f"{len(node.branches)} branches"
    return node.label or ""


# ── 씬 구조 ──────────────────────────────────────────


@dataclass(frozen=True)
class NodeBox:
    node_id: str
    node_type: NodeType
    label: str
    preview: str
    x: float
    y: float
    width: float
    height: float
    header_color: str
    selected: bool = False
    hovered: bool = False
    is_start: bool = False


@dataclass(frozen=True)
class SocketView:
    node_id: str
    position: Point
    color: str
    is_input: bool
    index: int = 0
    label: str = ""


@dataclass(frozen=True)
class Curve:
    start: Point
    control1: Point
    control2: Point
    end: Point
    color: str
    from_node_id: str
    to_node_id: Optional[str] = None


@dataclass
class Scene:
    zoom: float
    pan: Point
    grid_spacing: float  # 화면 픽셀
    grid_offset: Point  # 화면 픽셀
    boxes: list[NodeBox] = field(default_factory=list)
    sockets: list[SocketView] = field(default_factory=list)
    connections: list[Curve] = field(default_factory=list)
    preview: Optional[Curve] = None


def _curve(start: Point, end: Point, color: str, from_id: str, to_id: Optional[str]) -> Curve:
    c1, c2 = bezier_controls(start, end)
    return Curve(start, c1, c2, end, color, from_id, to_id)


def build_scene(
    dialogue: Dialogue,
    camera: Camera,
    options: EditorOptions,
    selected_id: Optional[str] = None,
    hovered_id: Optional[str] = None,
    preview_from: Optional[tuple[str, int]] = None,
    pointer_world: Optional[Point] = None,
) -> Scene:
    """현재 그래프 상태로 씬 기술 생성 (드래그 중 위치 포함)

    preview_from: 연결 중인 (노드 ID, 소켓 인덱스)
    """
    spacing = options.grid_size * camera.zoom
    scene = Scene(
        zoom=camera.zoom,
        pan=Point(camera.pan_x, camera.pan_y),
        grid_spacing=spacing,
        grid_offset=Point(camera.pan_x % spacing, camera.pan_y % spacing),
    )
    nodes = dialogue.nodes

    # 연결선 (노드보다 먼저 그린다)
    for node in nodes.values():
        sockets = output_sockets(node)
        for sock in sockets:
            target = nodes.get(sock.target_id) if sock.target_id else None
            if target is None:
                continue
            start = output_socket_position(node, sock.index, len(sockets), options)
            end = input_socket_position(target, options)
            scene.connections.append(_curve(start, end, sock.color, node.id, target.id))

    if preview_from is not None and pointer_world is not None:
        node = nodes.get(preview_from[0])
        if node is not None:
            count = len(output_sockets(node))
            start = output_socket_position(node, preview_from[1], count, options)
            scene.preview = _curve(start, pointer_world, PREVIEW_COLOR, node.id, None)

    for node in nodes.values():
        scene.boxes.append(
            NodeBox(
                node_id=node.id,
                node_type=node.type,
                label=node.label or node.type.value,
                preview=node_preview(node),
                x=node.position.x,
                y=node.position.y,
                width=options.node_width,
                height=options.node_height,
                header_color=HEADER_COLORS.get(node.type, HEADER_COLORS[NodeType.NPC_SPEECH]),
                selected=node.id == selected_id,
                hovered=node.id == hovered_id,
                is_start=node.id == dialogue.start_node_id,
            )
        )
        scene.sockets.append(
            SocketView(node.id, input_socket_position(node, options), INPUT_SOCKET_COLOR, True)
        )
        sockets = output_sockets(node)
        for sock in sockets:
            scene.sockets.append(
                SocketView(
                    node.id,
                    output_socket_position(node, sock.index, len(sockets), options),
                    sock.color,
                    False,
                    sock.index,
                    sock.label,
                )
            )
    return scene
