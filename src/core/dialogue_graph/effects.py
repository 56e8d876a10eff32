"""효과(Effect) 합 타입

노드 진입 또는 응답 선택 시 적용되는 월드 상태 변경.
종류마다 필요한 필드만 가진다 (공용 payload dict 없음).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

from src.core.dialogue_graph.enums import EffectType, FlagScope
from src.core.dialogue_graph.identifiers import generate_id


@dataclass
class _EffectBase:
    type: ClassVar[EffectType]

    id: str = field(default_factory=generate_id)


@dataclass
class ModifyRelationshipEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.MODIFY_RELATIONSHIP

    amount: float = 0  # 음수 허용
    npc_id: Optional[str] = None  # None이면 대화 상대


@dataclass
class ModifyFactionReputationEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.MODIFY_FACTION_REP

    faction_id: str = ""
    amount: int = 0


@dataclass
class SetFlagEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.SET_FLAG

    scope: FlagScope = FlagScope.WORLD
    key: str = ""
    value: Any = True

    def __post_init__(self) -> None:
        self.scope = FlagScope(self.scope)


@dataclass
class GiveItemEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.GIVE_ITEM

    item_id: str = ""
    quantity: int = 1


@dataclass
class TakeItemEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.TAKE_ITEM

    item_id: str = ""
    quantity: int = 1


@dataclass
class GiveGoldEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.GIVE_GOLD

    amount: int = 0


@dataclass
class TakeGoldEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.TAKE_GOLD

    amount: int = 0


@dataclass
class GiveXpEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.GIVE_XP

    amount: int = 0


@dataclass
class StartQuestEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.START_QUEST

    quest_id: str = ""


@dataclass
class CompleteQuestEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.COMPLETE_QUEST

    quest_id: str = ""


@dataclass
class FailQuestEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.FAIL_QUEST

    quest_id: str = ""
    reason: str = ""


@dataclass
class CompleteObjectiveEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.COMPLETE_OBJECTIVE

    quest_id: str = ""
    objective_id: str = ""


@dataclass
class AddBountyEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.ADD_BOUNTY

    amount: int = 0
    region: str = ""


@dataclass
class ChatMessageEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.CHAT_MESSAGE

    content: str = ""
    whisper: bool = False
    speaker: str = "npc"  # "npc"|"narrator"|"system"


@dataclass
class UnlockAreaEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.UNLOCK_AREA

    scene_id: str = ""


@dataclass
class PlaySoundEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.PLAY_SOUND

    path: str = ""
    volume: float = 0.8


@dataclass
class PlayAnimationEffect(_EffectBase):
    type: ClassVar[EffectType] = EffectType.PLAY_ANIMATION

    animation_id: str = ""


Effect = Union[
    ModifyRelationshipEffect,
    ModifyFactionReputationEffect,
    SetFlagEffect,
    GiveItemEffect,
    TakeItemEffect,
    GiveGoldEffect,
    TakeGoldEffect,
    GiveXpEffect,
    StartQuestEffect,
    CompleteQuestEffect,
    FailQuestEffect,
    CompleteObjectiveEffect,
    AddBountyEffect,
    ChatMessageEffect,
    UnlockAreaEffect,
    PlaySoundEffect,
    PlayAnimationEffect,
]

EFFECT_CLASSES: dict[EffectType, type] = {
    cls.type: cls
    for cls in (
        ModifyRelationshipEffect,
        ModifyFactionReputationEffect,
        SetFlagEffect,
        GiveItemEffect,
        TakeItemEffect,
        GiveGoldEffect,
        TakeGoldEffect,
        GiveXpEffect,
        StartQuestEffect,
        CompleteQuestEffect,
        FailQuestEffect,
        CompleteObjectiveEffect,
        AddBountyEffect,
        ChatMessageEffect,
        UnlockAreaEffect,
        PlaySoundEffect,
        PlayAnimationEffect,
    )
}
