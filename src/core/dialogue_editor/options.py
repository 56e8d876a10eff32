"""에디터 수치 설정

Core는 settings를 import하지 않는다. 서비스 계층이 Settings에서 만들어 주입.
"""

from dataclasses import dataclass

from src.core.dialogue_graph.enums import NodeType


@dataclass(frozen=True)
class EditorOptions:
    # 노드 박스 (월드 단위)
    node_width: float = 200
    node_height: float = 80
    # 소켓 반지름 (화면 픽셀). 히트 판정은 hit_scale 배
    socket_radius: float = 8
    socket_hit_scale: float = 1.5

    grid_size: float = 20

    min_zoom: float = 0.25
    max_zoom: float = 2.0
    wheel_zoom_in: float = 1.1
    wheel_zoom_out: float = 0.9
    button_zoom_step: float = 1.2
    fit_padding: float = 50

    undo_depth: int = 50

    default_node_type: NodeType = NodeType.NPC_SPEECH
    context_menu_type_count: int = 6  # 캔버스 메뉴에 노출할 노드 타입 수 (선언 순서)
    new_response_text: str = "New Response"

    @property
    def socket_hit_radius(self) -> float:
        return self.socket_radius * self.socket_hit_scale

    def snap(self, value: float) -> float:
        return round(value / self.grid_size) * self.grid_size

    def clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, zoom))
