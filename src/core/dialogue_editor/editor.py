"""대화 그래프 에디터 상호작용 상태 머신

상태: idle → panning / dragging_node / drawing_connection → idle

입력(포인터/휠/키보드)을 카메라 변환으로 해석하고, 구조 변경은 모두
그래프 뮤테이터에 위임한다. 구조 변경 직전에는 항상 언두 체크포인트.

에디터는 전달받은 Dialogue의 복사본(작업본)만 수정한다.
저장은 save() 호출 시에만 DialogueStore로 나간다.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Optional

from src.core.dialogue_editor.camera import Camera, Point, content_bounds
from src.core.dialogue_editor.events import (
    ContextMenu,
    DialogueStore,
    KeyEvent,
    MenuAction,
    MenuItem,
    PointerButton,
    PointerEvent,
    PropertyEditor,
    WheelEvent,
)
from src.core.dialogue_editor.hit_test import (
    SocketHit,
    hit_input_socket,
    hit_node,
    hit_output_socket,
)
from src.core.dialogue_editor.options import EditorOptions
from src.core.dialogue_editor.scene import Scene, build_scene
from src.core.dialogue_graph.enums import NodeType
from src.core.dialogue_graph.history import UndoRedoManager
from src.core.dialogue_graph.models import (
    Dialogue,
    Node,
    Position,
    clone_dialogue,
    create_dialogue,
)
from src.core.dialogue_graph.mutations import (
    connect_nodes,
    duplicate_node,
    insert_node,
    remove_node,
    set_start_node,
)
from src.core.dialogue_graph.serialization import dialogue_from_json, dialogue_to_json
from src.core.dialogue_graph.validation import ValidationReport, validate_dialogue
from src.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_VIEWPORT = (1200, 800)


class EditorState(str, Enum):
    IDLE = "idle"
    PANNING = "panning"
    DRAGGING_NODE = "dragging_node"
    DRAWING_CONNECTION = "drawing_connection"


class DialogueEditor:
    """대화 그래프 에디터 세션 (작업본 하나를 독점)"""

    def __init__(
        self,
        dialogue: Optional[Dialogue] = None,
        options: Optional[EditorOptions] = None,
        property_editor: Optional[PropertyEditor] = None,
        store: Optional[DialogueStore] = None,
        viewport: tuple[float, float] = DEFAULT_VIEWPORT,
    ) -> None:
        self.options = options or EditorOptions()
        self.is_new = dialogue is None
        self._dialogue = clone_dialogue(dialogue) if dialogue is not None else create_dialogue()
        self._property_editor = property_editor
        self._store = store
        self.viewport_w, self.viewport_h = viewport

        self.camera = Camera(
            self._dialogue.editor_zoom or 1.0,
            self._dialogue.editor_pan.x,
            self._dialogue.editor_pan.y,
        )
        self.history = UndoRedoManager(self.options.undo_depth)

        self.state = EditorState.IDLE
        self.selected_node_id: Optional[str] = None
        self.hovered_node_id: Optional[str] = None

        self._pan_offset = Point(0, 0)  # panning: 포인터 - pan
        self._drag_offset = Point(0, 0)  # dragging: 잡은 점 - 노드 위치 (월드)
        self._drag_snapshot: Optional[Dialogue] = None
        self._drag_start: Optional[Position] = None
        self._connection: Optional[SocketHit] = None
        self._pointer_world: Optional[Point] = None

    # === 조회 ===

    @property
    def dialogue(self) -> Dialogue:
        return self._dialogue

    @property
    def pending_connection(self) -> Optional[SocketHit]:
        return self._connection

    def scene(self) -> Scene:
        """현재 (커밋 전 드래그 포함) 그래프 상태의 씬 기술"""
        preview = None
        if self._connection is not None and self._connection.socket is not None:
            preview = (self._connection.node_id, self._connection.socket.index)
        return build_scene(
            self._dialogue,
            self.camera,
            self.options,
            self.selected_node_id,
            self.hovered_node_id,
            preview,
            self._pointer_world,
        )

    def resize(self, width: float, height: float) -> None:
        self.viewport_w, self.viewport_h = width, height

    # === 포인터 ===

    def pointer_down(self, event: PointerEvent) -> EditorState:
        if self.state != EditorState.IDLE:
            return self.state
        screen = event.point
        world = self.camera.screen_to_world(screen)

        if event.button == PointerButton.MIDDLE or (
            event.button == PointerButton.PRIMARY and event.shift
        ):
            self._pan_offset = Point(screen.x - self.camera.pan_x, screen.y - self.camera.pan_y)
            self.state = EditorState.PANNING
            return self.state

        if event.button != PointerButton.PRIMARY:
            return self.state

        socket = hit_output_socket(self._dialogue, screen, self.camera, self.options)
        if socket is not None:
            self._connection = socket
            self._pointer_world = world
            self.state = EditorState.DRAWING_CONNECTION
            return self.state

        node_id = hit_node(self._dialogue, world, self.options)
        if node_id is None:
            self.selected_node_id = None
            return self.state

        node = self._dialogue.nodes[node_id]
        self.selected_node_id = node_id
        self._drag_offset = Point(world.x - node.position.x, world.y - node.position.y)
        self._drag_snapshot = clone_dialogue(self._dialogue)
        self._drag_start = Position(node.position.x, node.position.y)
        self.state = EditorState.DRAGGING_NODE
        return self.state

    def pointer_move(self, event: PointerEvent) -> EditorState:
        screen = event.point
        world = self.camera.screen_to_world(screen)
        self._pointer_world = world

        if self.state == EditorState.PANNING:
            self.camera.pan_to(screen.x - self._pan_offset.x, screen.y - self._pan_offset.y)
        elif self.state == EditorState.DRAGGING_NODE:
            node = self._dialogue.get_node(self.selected_node_id)
            if node is not None:
                node.position = Position(
                    self.options.snap(world.x - self._drag_offset.x),
                    self.options.snap(world.y - self._drag_offset.y),
                )
        elif self.state == EditorState.IDLE:
            self.hovered_node_id = hit_node(self._dialogue, world, self.options)
        return self.state

    def pointer_up(self, event: PointerEvent) -> EditorState:
        if self.state == EditorState.DRAWING_CONNECTION:
            target = hit_input_socket(self._dialogue, event.point, self.camera, self.options)
            if target is not None and target.node_id != self._connection.node_id:
                self._complete_connection(target.node_id)
            else:
                logger.debug("Connection cancelled")
            self._connection = None

        elif self.state == EditorState.DRAGGING_NODE:
            node = self._dialogue.get_node(self.selected_node_id)
            if node is not None and self._drag_start is not None and (
                node.position.x != self._drag_start.x or node.position.y != self._drag_start.y
            ):
                self.history.record(self._drag_snapshot)
                self._dialogue.touch()
            self._drag_snapshot = None
            self._drag_start = None

        self.state = EditorState.IDLE
        return self.state

    def wheel(self, event: WheelEvent) -> float:
        """포인터 아래 월드 점을 고정한 채 줌. 변경 후 줌 반환.

        세로 변화량이 0이면 (가로 스크롤) 줌 유지.
        """
        if event.delta_y == 0:
            return self.camera.zoom
        factor = self.options.wheel_zoom_out if event.delta_y > 0 else self.options.wheel_zoom_in
        zoom = self.options.clamp_zoom(self.camera.zoom * factor)
        self.camera.zoom_at(event.point, zoom)
        return zoom

    def double_click(self, event: PointerEvent) -> Optional[Node]:
        """노드 위: 속성 편집기. 빈 캔버스: 기본 타입 노드 생성 (생성된 노드 반환)."""
        world = self.camera.screen_to_world(event.point)
        node_id = hit_node(self._dialogue, world, self.options)
        if node_id is not None:
            self.edit_node(node_id)
            return None
        return self.create_node(self.options.default_node_type, world)

    def context_menu(self, event: PointerEvent) -> ContextMenu:
        world = self.camera.screen_to_world(event.point)
        node_id = hit_node(self._dialogue, world, self.options)
        if node_id is not None:
            return ContextMenu(
                world,
                node_id,
                [
                    MenuItem(MenuAction.EDIT, "Edit Node"),
                    MenuItem(MenuAction.DUPLICATE, "Duplicate Node"),
                    MenuItem(MenuAction.SET_START, "Set as Start"),
                    MenuItem(MenuAction.DELETE, "Delete Node"),
                ],
            )
        types = list(NodeType)[: self.options.context_menu_type_count]
        return ContextMenu(
            world,
            None,
            [MenuItem(MenuAction.CREATE, f"Create {t.value}", t) for t in types],
        )

    def choose_menu_item(self, menu: ContextMenu, item: MenuItem) -> Any:
        if item.action == MenuAction.CREATE:
            return self.create_node(item.node_type or self.options.default_node_type, menu.world)
        if menu.node_id is None:
            return None
        if item.action == MenuAction.EDIT:
            return self.edit_node(menu.node_id)
        if item.action == MenuAction.DUPLICATE:
            return self.duplicate_node(menu.node_id)
        if item.action == MenuAction.SET_START:
            return self.set_start_node(menu.node_id)
        if item.action == MenuAction.DELETE:
            return self.delete_node(menu.node_id)
        return None

    # === 키보드 ===

    def key_down(self, event: KeyEvent) -> bool:
        """단축키 처리. 처리했으면 True."""
        key = event.key.lower() if len(event.key) == 1 else event.key

        if event.ctrl and key == "z" and not event.shift:
            self.undo()
            return True
        if event.ctrl and ((event.shift and key == "z") or key == "y"):
            self.redo()
            return True
        if event.key in ("Delete", "Backspace") and self.selected_node_id:
            self.delete_node(self.selected_node_id)
            return True
        if event.ctrl and key == "d" and self.selected_node_id:
            self.duplicate_node(self.selected_node_id)
            return True
        if event.ctrl and key == "s":
            self.save()
            return True
        if event.key == "Escape":
            if self.state != EditorState.IDLE:
                self.cancel_gesture()
            else:
                self.selected_node_id = None
            return True
        return False

    def cancel_gesture(self) -> EditorState:
        """진행 중인 제스처 취소 (pointer-up 유실 대비). 드래그는 시작 위치로 복원."""
        if self.state == EditorState.DRAGGING_NODE:
            node = self._dialogue.get_node(self.selected_node_id)
            if node is not None and self._drag_start is not None:
                node.position = Position(self._drag_start.x, self._drag_start.y)
            self._drag_snapshot = None
            self._drag_start = None
        self._connection = None
        logger.debug("Gesture cancelled: %s", self.state.value)
        self.state = EditorState.IDLE
        return self.state

    # === 구조 변경 (모두 체크포인트 선행) ===

    def create_node(self, node_type: NodeType | str, world: Point) -> Node:
        self.history.checkpoint(self._dialogue)
        node_type = NodeType(node_type)
        node = insert_node(
            self._dialogue,
            {
                "type": node_type.value,
                "position": {"x": self.options.snap(world.x), "y": self.options.snap(world.y)},
                "label": node_type.value,
            },
        )
        self.selected_node_id = node.id
        return node

    def create_node_at_center(self, node_type: NodeType | str) -> Node:
        """툴바 추가 버튼: 뷰포트 중앙"""
        center = self.camera.screen_to_world(Point(self.viewport_w / 2, self.viewport_h / 2))
        return self.create_node(node_type, center)

    def delete_node(self, node_id: str) -> bool:
        if node_id not in self._dialogue.nodes:
            return False
        self.history.checkpoint(self._dialogue)
        remove_node(self._dialogue, node_id)
        if self.selected_node_id == node_id:
            self.selected_node_id = None
        if self.hovered_node_id == node_id:
            self.hovered_node_id = None
        return True

    def duplicate_node(self, node_id: str) -> Optional[Node]:
        if node_id not in self._dialogue.nodes:
            return None
        self.history.checkpoint(self._dialogue)
        node = duplicate_node(self._dialogue, node_id)
        self.selected_node_id = node.id
        return node

    def set_start_node(self, node_id: str) -> bool:
        if node_id not in self._dialogue.nodes:
            return False
        self.history.checkpoint(self._dialogue)
        return set_start_node(self._dialogue, node_id)

    def edit_node(self, node_id: str) -> bool:
        """속성 편집기 열기. 제출 시 체크포인트 후 병합."""
        node = self._dialogue.get_node(node_id)
        if node is None:
            return False
        if self._property_editor is None:
            logger.debug("No property editor attached; edit of %s ignored", node_id)
            return False

        def on_submit(updated: Node) -> None:
            self.apply_node_update(node_id, updated)

        self._property_editor.open(copy.deepcopy(node), self._dialogue, on_submit)
        return True

    def apply_node_update(self, node_id: str, updated: Node) -> None:
        if node_id not in self._dialogue.nodes:
            logger.warning("Node update for removed node %s dropped", node_id)
            return
        self.history.checkpoint(self._dialogue)
        updated.id = node_id
        self._dialogue.nodes[node_id] = updated
        self._dialogue.touch()

    def _complete_connection(self, target_id: str) -> None:
        socket = self._connection.socket
        self.history.checkpoint(self._dialogue)
        applied = connect_nodes(
            self._dialogue,
            self._connection.node_id,
            target_id,
            socket.kind,
            socket.connect_options(self.options.new_response_text),
        )
        if not applied:
            self.history.discard_last()

    # === 언두/리두 ===

    def undo(self) -> bool:
        restored = self.history.undo(self._dialogue)
        if restored is None:
            return False
        self._replace(restored)
        return True

    def redo(self) -> bool:
        restored = self.history.redo(self._dialogue)
        if restored is None:
            return False
        self._replace(restored)
        return True

    def _replace(self, dialogue: Dialogue) -> None:
        self._dialogue = dialogue
        self.selected_node_id = None
        self.hovered_node_id = None
        self._connection = None
        self.state = EditorState.IDLE

    # === 카메라 툴바 ===

    def zoom_in(self) -> float:
        self.camera.zoom = min(self.options.max_zoom, self.camera.zoom * self.options.button_zoom_step)
        return self.camera.zoom

    def zoom_out(self) -> float:
        self.camera.zoom = max(self.options.min_zoom, self.camera.zoom / self.options.button_zoom_step)
        return self.camera.zoom

    def zoom_fit(self) -> bool:
        bounds = content_bounds(
            (n.position for n in self._dialogue.nodes.values()),
            self.options.node_width,
            self.options.node_height,
        )
        if bounds is None:
            return False
        self.camera.fit(bounds, self.viewport_w, self.viewport_h, self.options.fit_padding)
        return True

    def zoom_reset(self) -> None:
        self.camera.reset()

    # === 검증 / 저장 / 입출력 ===

    def validate(self) -> ValidationReport:
        return validate_dialogue(self._dialogue)

    def save(self) -> ValidationReport:
        """검증 후 에러가 없으면 카메라를 기록하고 복사본을 저장소로 보낸다"""
        report = self.validate()
        if not report.valid:
            logger.info(
                "Save refused for %s: %d validation errors",
                self._dialogue.id,
                len(report.errors),
            )
            return report

        self._dialogue.editor_zoom = self.camera.zoom
        self._dialogue.editor_pan = self.camera.pan
        self._dialogue.touch()
        if self._store is None:
            logger.warning("No dialogue store attached; %s not persisted", self._dialogue.id)
            return report
        self._store.save(clone_dialogue(self._dialogue))
        self.is_new = False
        logger.info("Dialogue saved from editor: %s", self._dialogue.id)
        return report

    def export_json(self) -> str:
        return dialogue_to_json(self._dialogue)

    def import_json(self, text: str) -> Dialogue:
        """외부 문서로 작업본 교체. 형식 오류면 DialogueFormatError, 작업본 유지."""
        imported = dialogue_from_json(text)
        self.history.checkpoint(self._dialogue)
        self._replace(imported)
        logger.info("Dialogue imported into editor: %s", imported.id)
        return imported
