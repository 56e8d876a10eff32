"""대화 실행 컨텍스트와 외부 협력자 인터페이스

평가기/실행기는 전역 상태를 읽지 않는다. 필요한 모든 외부 상태는
DialogueContext로 명시적으로 주입된다.

필수: actor (행동 캐릭터), flags, rng
선택: npc (대화 상대), quests, factions, relationships, clock, choices,
      bounties, messages, areas, presentation

선택 협력자가 없으면 해당 조건은 참(fail-open), 해당 효과는 실패 결과.
조회 메서드는 동기, 월드 상태를 바꾸는 메서드는 async.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Optional

from src.core.dialogue_graph.enums import FlagScope


class CharacterHandle(ABC):
    """캐릭터 (플레이어 또는 NPC) 핸들"""

    @property
    @abstractmethod
    def id(self) -> str: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def level(self) -> int: ...

    @property
    @abstractmethod
    def class_name(self) -> str: ...

    @property
    @abstractmethod
    def race(self) -> str: ...

    @property
    @abstractmethod
    def gold(self) -> int: ...

    @abstractmethod
    def item_quantity(self, item_id: str) -> int: ...

    @abstractmethod
    async def set_gold(self, amount: int) -> None: ...

    @abstractmethod
    async def give_item(self, item_id: str, quantity: int) -> None: ...

    @abstractmethod
    async def take_item(self, item_id: str, quantity: int) -> int:
        """실제로 제거한 수량 반환"""
        ...

    @abstractmethod
    async def give_xp(self, amount: int) -> int:
        """변경 후 경험치 반환"""
        ...


class FlagStore(ABC):
    """3범위 키-값 플래그 저장소. owner_id는 world 범위에서 None."""

    @abstractmethod
    def get(self, scope: FlagScope, owner_id: Optional[str], key: str) -> Any: ...

    @abstractmethod
    def set(self, scope: FlagScope, owner_id: Optional[str], key: str, value: Any) -> None: ...


class QuestTracker(ABC):
    @abstractmethod
    def status(self, actor_id: str, quest_id: str) -> str:
        """not_started / active / completed / failed"""
        ...

    @abstractmethod
    def objective_completed(self, actor_id: str, quest_id: str, objective_id: str) -> bool: ...

    @abstractmethod
    def ready_to_turn_in(self, actor_id: str, quest_id: str) -> bool:
        """진행 중이고 모든 필수 목표 완료"""
        ...

    @abstractmethod
    async def start(self, actor_id: str, quest_id: str) -> None: ...

    @abstractmethod
    async def complete(self, actor_id: str, quest_id: str) -> None: ...

    @abstractmethod
    async def fail(self, actor_id: str, quest_id: str, reason: str) -> None: ...

    @abstractmethod
    async def complete_objective(self, actor_id: str, quest_id: str, objective_id: str) -> None: ...


class FactionLedger(ABC):
    @abstractmethod
    def reputation(self, actor_id: str, faction_id: str) -> int: ...

    @abstractmethod
    def rank_position(self, faction_id: str, rank_id: str) -> Optional[int]:
        """랭크 서열 (낮을수록 하위). 모르는 랭크면 None."""
        ...

    @abstractmethod
    def actor_rank_position(self, actor_id: str, faction_id: str) -> Optional[int]:
        """캐릭터의 현재 랭크 서열. 비소속이면 None."""
        ...

    @abstractmethod
    async def modify_reputation(self, actor_id: str, faction_id: str, amount: int) -> int:
        """변경 후 평판 반환"""
        ...


class RelationshipLedger(ABC):
    @abstractmethod
    def value(self, actor_id: str, npc_id: str) -> float: ...

    @abstractmethod
    async def modify(self, actor_id: str, npc_id: str, amount: float) -> float:
        """변경 후 관계값 반환"""
        ...


class GameClock(ABC):
    @abstractmethod
    def hour(self) -> int:
        """게임 내 현재 시각 (0~23)"""
        ...


class ChoiceLog(ABC):
    """과거 선택 기록 (previous_choice 조건용)"""

    @abstractmethod
    def was_chosen(self, actor_id: str, dialogue_id: str, response_id: str) -> bool: ...

    @abstractmethod
    def record(self, actor_id: str, dialogue_id: str, response_id: str) -> None: ...


class BountyLedger(ABC):
    @abstractmethod
    async def add_bounty(self, actor_id: str, region: str, amount: int) -> int:
        """변경 후 해당 지역 현상금 반환"""
        ...


class MessageSink(ABC):
    @abstractmethod
    async def post(
        self, content: str, speaker: Optional[str], whisper_to: Optional[str] = None
    ) -> None: ...


class AreaRegistry(ABC):
    @abstractmethod
    async def unlock(self, actor_id: str, scene_id: str) -> None: ...


class Presentation(ABC):
    """연출 (사운드/애니메이션). 재생 자체는 외부 책임."""

    @abstractmethod
    async def play_sound(self, path: str, volume: float) -> None: ...

    @abstractmethod
    async def play_animation(self, animation_id: str, target_id: Optional[str]) -> None: ...


@dataclass
class DialogueContext:
    """평가/실행 컨텍스트

    dialogue_id: 현재 대화 ID. previous_choice 조건의 기본 대상.
    """

    actor: Optional[CharacterHandle] = None
    npc: Optional[CharacterHandle] = None
    flags: Optional[FlagStore] = None
    rng: Optional[random.Random] = None

    quests: Optional[QuestTracker] = None
    factions: Optional[FactionLedger] = None
    relationships: Optional[RelationshipLedger] = None
    clock: Optional[GameClock] = None
    choices: Optional[ChoiceLog] = None
    bounties: Optional[BountyLedger] = None
    messages: Optional[MessageSink] = None
    areas: Optional[AreaRegistry] = None
    presentation: Optional[Presentation] = None

    dialogue_id: Optional[str] = None

    def flag_owner(self, scope: FlagScope) -> tuple[bool, Optional[str]]:
        """범위별 플래그 소유자 ID. (해석 가능 여부, owner_id)"""
        if scope == FlagScope.WORLD:
            return True, None
        handle = self.actor if scope == FlagScope.ACTOR else self.npc
        if handle is None:
            return False, None
        return True, handle.id


# ── 기본 구현 ──────────────────────────────────────────


class InMemoryFlagStore(FlagStore):
    def __init__(self) -> None:
        self._flags: dict[tuple[str, Optional[str]], dict[str, Any]] = defaultdict(dict)

    def get(self, scope: FlagScope, owner_id: Optional[str], key: str) -> Any:
        return self._flags.get((FlagScope(scope).value, owner_id), {}).get(key)

    def set(self, scope: FlagScope, owner_id: Optional[str], key: str, value: Any) -> None:
        self._flags[(FlagScope(scope).value, owner_id)][key] = value


class InMemoryChoiceLog(ChoiceLog):
    def __init__(self) -> None:
        self._chosen: set[tuple[str, str, str]] = set()

    def was_chosen(self, actor_id: str, dialogue_id: str, response_id: str) -> bool:
        return (actor_id, dialogue_id, response_id) in self._chosen

    def record(self, actor_id: str, dialogue_id: str, response_id: str) -> None:
        self._chosen.add((actor_id, dialogue_id, response_id))
