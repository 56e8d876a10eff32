"""에디터 입력 이벤트 / 메뉴 / 외부 협력자 인터페이스

좌표는 모두 캔버스 기준 화면 픽셀.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Optional

from src.core.dialogue_editor.camera import Point
from src.core.dialogue_graph.enums import NodeType
from src.core.dialogue_graph.models import Dialogue, Node


class PointerButton(IntEnum):
    PRIMARY = 0
    MIDDLE = 1
    SECONDARY = 2


@dataclass(frozen=True)
class PointerEvent:
    x: float
    y: float
    button: PointerButton = PointerButton.PRIMARY
    shift: bool = False
    ctrl: bool = False

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class WheelEvent:
    x: float
    y: float
    delta_y: float  # 양수 = 축소

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class KeyEvent:
    key: str  # "z", "Delete", "Escape" ...
    ctrl: bool = False  # Ctrl 또는 Meta
    shift: bool = False


class MenuAction(str, Enum):
    EDIT = "edit"
    DUPLICATE = "duplicate"
    SET_START = "set_start"
    DELETE = "delete"
    CREATE = "create"


@dataclass(frozen=True)
class MenuItem:
    action: MenuAction
    label: str
    node_type: Optional[NodeType] = None


@dataclass
class ContextMenu:
    """우클릭 메뉴. node_id가 있으면 노드 메뉴, 없으면 캔버스 메뉴."""

    world: Point
    node_id: Optional[str] = None
    items: list[MenuItem] = field(default_factory=list)


# ── 외부 협력자 ──────────────────────────────────────────


class PropertyEditor(ABC):
    """노드 속성 편집기. 편집이 끝나면 on_submit(updated_node) 호출."""

    @abstractmethod
    def open(self, node: Node, dialogue: Dialogue, on_submit: Callable[[Node], None]) -> None: ...


class DialogueStore(ABC):
    """저장 협력자. 에디터 작업본의 복사본을 받는다."""

    @abstractmethod
    def save(self, dialogue: Dialogue) -> None: ...
