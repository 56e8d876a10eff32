"""대화 그래프 도메인 모델 (DB 무관)

Dialogue 집합체 + 13종 노드 합 타입 + 응답/분기 항목.
노드의 `*_node_id` 필드가 출력 엣지다. 엣지가 존재하지 않는 노드를
가리키는 상태도 생성 단계에서는 허용한다 (편집 중 일시적 불완전 상태).
검출은 validation.validate_dialogue 담당.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from src.core.dialogue_graph.conditions import Condition
from src.core.dialogue_graph.effects import Effect
from src.core.dialogue_graph.enums import NodeType
from src.core.dialogue_graph.identifiers import generate_id, now_ms

DEFAULT_DIALOGUE_NAME = "New Dialogue"


@dataclass
class Position:
    """에디터 월드 좌표"""

    x: float = 0
    y: float = 0


# ── 노드 부속 구조 ──────────────────────────────────────────


@dataclass
class Portrait:
    type: str = "token"  # "token"|"actor"|"custom"
    custom_path: Optional[str] = None


@dataclass
class VoiceLine:
    type: Optional[str] = None  # "file"|"url"|None
    path: Optional[str] = None
    url: Optional[str] = None


@dataclass
class AutoAdvance:
    """응답 없이 delay초 후 다음 노드로 진행"""

    delay: float = 3.0
    next_node_id: Optional[str] = None


@dataclass
class InlineSkillCheck:
    """응답에 붙는 인라인 판정. 엣지 없음."""

    skill: str = "per"
    dc: int = 15


@dataclass
class SkillCheck:
    skill: str = "per"
    dc: int = 15
    success_node_id: Optional[str] = None
    failure_node_id: Optional[str] = None
    crit_success_node_id: Optional[str] = None
    crit_failure_node_id: Optional[str] = None
    can_retry: bool = False
    retry_dc: Optional[int] = None  # None = 같은 DC
    max_retries: int = 1


@dataclass
class Response:
    """speech/player_choice 노드의 선택지

    hidden=True이면 조건 실패 시 목록에서 제거.
    hidden=False이면 조건 실패 시에도 표시 (선택 불가).
    """

    id: str = field(default_factory=generate_id)
    text: str = ""
    next_node_id: Optional[str] = None
    conditions: list[Condition] = field(default_factory=list)
    effects: list[Effect] = field(default_factory=list)
    skill_check: Optional[InlineSkillCheck] = None
    hidden: bool = False
    order: int = 0


@dataclass
class BranchEntry:
    id: str = field(default_factory=generate_id)
    conditions: list[Condition] = field(default_factory=list)
    next_node_id: Optional[str] = None
    priority: int = 0


@dataclass
class RewardItem:
    item_id: str = ""
    quantity: int = 1


@dataclass
class ReputationReward:
    faction_id: str = ""
    amount: int = 0


@dataclass
class RewardBundle:
    gold: int = 0
    xp: int = 0
    items: list[RewardItem] = field(default_factory=list)
    reputation: list[ReputationReward] = field(default_factory=list)
    relationship: float = 0


# ── 노드 합 타입 ──────────────────────────────────────────


@dataclass
class _NodeBase:
    type: ClassVar[NodeType]

    id: str = field(default_factory=generate_id)
    position: Position = field(default_factory=Position)
    conditions: list[Condition] = field(default_factory=list)  # 진입 조건
    effects: list[Effect] = field(default_factory=list)  # 진입 효과
    label: str = ""


@dataclass
class SpeechNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.NPC_SPEECH

    text: str = ""
    speaker: str = "self"  # "self" 또는 캐릭터 ID
    portrait: Portrait = field(default_factory=Portrait)
    voice_line: VoiceLine = field(default_factory=VoiceLine)
    responses: list[Response] = field(default_factory=list)
    auto_advance: Optional[AutoAdvance] = None
    typewriter_override: Optional[bool] = None


@dataclass
class PlayerChoiceNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.PLAYER_CHOICE

    prompt: str = ""
    responses: list[Response] = field(default_factory=list)
    time_limit: Optional[int] = None  # 초. None = 무제한


@dataclass
class SkillCheckNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.SKILL_CHECK

    text: str = ""
    skill_check: SkillCheck = field(default_factory=SkillCheck)


@dataclass
class ShopNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.SHOP

    text: str = ""
    shop_type: str = "merchant"  # "merchant"|"fence"|"stable"
    next_node_id: Optional[str] = None  # 상점 닫힌 후


@dataclass
class QuestOfferNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.QUEST_OFFER

    text: str = ""
    quest_id: str = ""
    accept_node_id: Optional[str] = None
    decline_node_id: Optional[str] = None


@dataclass
class QuestTurnInNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.QUEST_TURNIN

    text: str = ""
    quest_id: str = ""
    success_node_id: Optional[str] = None
    incomplete_node_id: Optional[str] = None  # 목표 미완료


@dataclass
class RewardNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.REWARD

    text: str = ""
    rewards: RewardBundle = field(default_factory=RewardBundle)
    next_node_id: Optional[str] = None


@dataclass
class ServiceNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.SERVICE

    text: str = ""
    service_type: str = "repair"  # "repair"|"training"|"enchanting"|...
    next_node_id: Optional[str] = None


@dataclass
class BankNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.BANK

    text: str = ""
    next_node_id: Optional[str] = None


@dataclass
class HireNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.HIRE

    text: str = ""
    next_node_id: Optional[str] = None


@dataclass
class StableNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.STABLE

    text: str = ""
    next_node_id: Optional[str] = None


@dataclass
class BranchNode(_NodeBase):
    """조건을 평가해 첫 번째로 일치하는 분기로 진행. 없으면 default."""

    type: ClassVar[NodeType] = NodeType.BRANCH

    branches: list[BranchEntry] = field(default_factory=list)
    default_node_id: Optional[str] = None


@dataclass
class EndNode(_NodeBase):
    type: ClassVar[NodeType] = NodeType.END

    text: str = ""  # 마무리 대사 (선택)
    end_type: str = "normal"  # "normal"|"hostile"|"trade"|...


Node = Union[
    SpeechNode,
    PlayerChoiceNode,
    SkillCheckNode,
    ShopNode,
    QuestOfferNode,
    QuestTurnInNode,
    RewardNode,
    ServiceNode,
    BankNode,
    HireNode,
    StableNode,
    BranchNode,
    EndNode,
]

NODE_CLASSES: dict[NodeType, type] = {
    cls.type: cls
    for cls in (
        SpeechNode,
        PlayerChoiceNode,
        SkillCheckNode,
        ShopNode,
        QuestOfferNode,
        QuestTurnInNode,
        RewardNode,
        ServiceNode,
        BankNode,
        HireNode,
        StableNode,
        BranchNode,
        EndNode,
    )
}

# 응답 목록을 가진 노드
RESPONSE_NODE_TYPES = (SpeechNode, PlayerChoiceNode)


# ── 집합체 ──────────────────────────────────────────


@dataclass
class Dialogue:
    """대화 그래프 집합체. 노드/응답/분기를 배타적으로 소유한다."""

    id: str = field(default_factory=generate_id)
    actor_id: Optional[str] = None  # 소유 캐릭터
    name: str = DEFAULT_DIALOGUE_NAME
    description: str = ""

    start_node_id: Optional[str] = None
    alternative_start_node_id: Optional[str] = None  # 예상 외 장소에서 시작할 때
    expected_scenes: list[str] = field(default_factory=list)

    nodes: dict[str, Node] = field(default_factory=dict)

    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    # 에디터 카메라
    editor_zoom: float = 1.0
    editor_pan: Position = field(default_factory=Position)

    def touch(self) -> None:
        self.updated_at = now_ms()

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)


def create_dialogue(
    name: str = DEFAULT_DIALOGUE_NAME, actor_id: Optional[str] = None
) -> Dialogue:
    """빈 대화 그래프 생성. 첫 노드 추가 시 start_node_id가 자동 설정된다."""
    return Dialogue(name=name, actor_id=actor_id)


def clone_dialogue(dialogue: Dialogue) -> Dialogue:
    """구조적 깊은 복사 (직렬화 경유 없음). 언두 스냅샷/에디터 작업본용."""
    return copy.deepcopy(dialogue)
