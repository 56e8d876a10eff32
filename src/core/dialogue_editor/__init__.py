"""대화 그래프 에디터 Core 패키지

카메라, 씬 기술, 히트 테스트, 입력 이벤트, 상호작용 상태 머신.
그리기 표면 없이 동작한다 (렌더러는 Scene만 소비).
"""

from src.core.dialogue_editor.camera import Bounds, Camera, Point
from src.core.dialogue_editor.editor import DialogueEditor, EditorState
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
from src.core.dialogue_editor.scene import (
    Curve,
    NodeBox,
    OutputSocket,
    Scene,
    SocketView,
    build_scene,
    output_sockets,
)

__all__ = [
    "Camera",
    "Point",
    "Bounds",
    "EditorOptions",
    "DialogueEditor",
    "EditorState",
    "PointerButton",
    "PointerEvent",
    "WheelEvent",
    "KeyEvent",
    "MenuAction",
    "MenuItem",
    "ContextMenu",
    "PropertyEditor",
    "DialogueStore",
    "SocketHit",
    "hit_node",
    "hit_input_socket",
    "hit_output_socket",
    "Scene",
    "NodeBox",
    "SocketView",
    "Curve",
    "OutputSocket",
    "build_scene",
    "output_sockets",
]
