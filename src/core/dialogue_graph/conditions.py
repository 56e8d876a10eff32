"""조건(Condition) 합 타입

조건 종류마다 필요한 필드만 가진 dataclass 하나씩.
`type` 클래스 속성이 직렬화 태그가 된다. inverted는 평가 후 적용.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

from src.core.dialogue_graph.enums import Comparison, ConditionType, FlagScope
from src.core.dialogue_graph.identifiers import generate_id


@dataclass
class _ConditionBase:
    type: ClassVar[ConditionType]

    id: str = field(default_factory=generate_id)
    inverted: bool = False


@dataclass
class _ComparisonMixin:
    """비교 연산자를 가진 조건의 문자열 → Comparison 보정"""

    def __post_init__(self) -> None:
        self.comparison = Comparison(self.comparison)


@dataclass
class QuestStatusCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.QUEST_STATUS

    quest_id: str = ""
    status: str = "completed"  # "not_started"|"active"|"completed"|"failed"


@dataclass
class QuestObjectiveCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.QUEST_OBJECTIVE

    quest_id: str = ""
    objective_id: str = ""
    completed: bool = True


@dataclass
class FactionRankCondition(_ComparisonMixin, _ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.FACTION_RANK

    faction_id: str = ""
    rank: str = ""  # 랭크 ID. 순서는 FactionLedger가 결정
    comparison: Comparison = Comparison.GREATER_THAN_OR_EQUAL


@dataclass
class FactionReputationCondition(_ComparisonMixin, _ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.FACTION_REPUTATION

    faction_id: str = ""
    value: int = 0
    comparison: Comparison = Comparison.GREATER_THAN_OR_EQUAL


@dataclass
class RelationshipCondition(_ComparisonMixin, _ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.RELATIONSHIP

    value: float = 0
    comparison: Comparison = Comparison.GREATER_THAN_OR_EQUAL
    npc_id: Optional[str] = None  # None이면 대화 상대


@dataclass
class PlayerLevelCondition(_ComparisonMixin, _ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.PLAYER_LEVEL

    value: int = 1
    comparison: Comparison = Comparison.GREATER_THAN_OR_EQUAL


@dataclass
class PlayerClassCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.PLAYER_CLASS

    classes: list[str] = field(default_factory=list)


@dataclass
class PlayerRaceCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.PLAYER_RACE

    races: list[str] = field(default_factory=list)


@dataclass
class HasItemCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.HAS_ITEM

    item_id: str = ""
    quantity: int = 1


@dataclass
class HasGoldCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.HAS_GOLD

    amount: int = 0


@dataclass
class FlagCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.FLAG

    scope: FlagScope = FlagScope.WORLD
    key: str = ""
    value: Any = True

    def __post_init__(self) -> None:
        self.scope = FlagScope(self.scope)


@dataclass
class TimeCondition(_ConditionBase):
    """게임 내 시각 창. from_hour > to_hour이면 자정을 넘는 창."""

    type: ClassVar[ConditionType] = ConditionType.TIME

    from_hour: int = 6  # 0~23
    to_hour: int = 18


@dataclass
class PreviousChoiceCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.PREVIOUS_CHOICE

    dialogue_id: str = ""  # 빈 문자열이면 현재 대화
    choice_id: str = ""  # Response ID


@dataclass
class RandomCondition(_ConditionBase):
    type: ClassVar[ConditionType] = ConditionType.RANDOM

    chance: float = 0.5  # 0~1


Condition = Union[
    QuestStatusCondition,
    QuestObjectiveCondition,
    FactionRankCondition,
    FactionReputationCondition,
    RelationshipCondition,
    PlayerLevelCondition,
    PlayerClassCondition,
    PlayerRaceCondition,
    HasItemCondition,
    HasGoldCondition,
    FlagCondition,
    TimeCondition,
    PreviousChoiceCondition,
    RandomCondition,
]

CONDITION_CLASSES: dict[ConditionType, type] = {
    cls.type: cls
    for cls in (
        QuestStatusCondition,
        QuestObjectiveCondition,
        FactionRankCondition,
        FactionReputationCondition,
        RelationshipCondition,
        PlayerLevelCondition,
        PlayerClassCondition,
        PlayerRaceCondition,
        HasItemCondition,
        HasGoldCondition,
        FlagCondition,
        TimeCondition,
        PreviousChoiceCondition,
        RandomCondition,
    )
}
