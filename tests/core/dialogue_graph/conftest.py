"""대화 진행 테스트용 가짜 협력자"""

import random
from typing import Optional

import pytest

from src.core.dialogue_graph.context import (
    AreaRegistry,
    BountyLedger,
    CharacterHandle,
    DialogueContext,
    FactionLedger,
    GameClock,
    InMemoryChoiceLog,
    InMemoryFlagStore,
    MessageSink,
    Presentation,
    QuestTracker,
    RelationshipLedger,
)


class FakeCharacter(CharacterHandle):
    def __init__(
        self,
        char_id: str = "pc_1",
        name: str = "Aria",
        level: int = 5,
        class_name: str = "Fighter",
        race: str = "Half-Elf",
        gold: int = 100,
    ):
        self._id = char_id
        self._name = name
        self._level = level
        self._class_name = class_name
        self._race = race
        self._gold = gold
        self.items: dict[str, int] = {}
        self.xp = 0

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def level(self) -> int:
        return self._level

    @property
    def class_name(self) -> str:
        return self._class_name

    @property
    def race(self) -> str:
        return self._race

    @property
    def gold(self) -> int:
        return self._gold

    def item_quantity(self, item_id: str) -> int:
        return self.items.get(item_id, 0)

    async def set_gold(self, amount: int) -> None:
        self._gold = amount

    async def give_item(self, item_id: str, quantity: int) -> None:
        self.items[item_id] = self.items.get(item_id, 0) + quantity

    async def take_item(self, item_id: str, quantity: int) -> int:
        taken = min(quantity, self.items.get(item_id, 0))
        self.items[item_id] -= taken
        return taken

    async def give_xp(self, amount: int) -> int:
        self.xp += amount
        return self.xp


class FakeQuests(QuestTracker):
    def __init__(self):
        self.statuses: dict[str, str] = {}
        self.objectives: set[tuple[str, str]] = set()
        self.ready: set[str] = set()

    def status(self, actor_id: str, quest_id: str) -> str:
        return self.statuses.get(quest_id, "not_started")

    def objective_completed(self, actor_id: str, quest_id: str, objective_id: str) -> bool:
        return (quest_id, objective_id) in self.objectives

    def ready_to_turn_in(self, actor_id: str, quest_id: str) -> bool:
        return quest_id in self.ready

    async def start(self, actor_id: str, quest_id: str) -> None:
        self.statuses[quest_id] = "active"

    async def complete(self, actor_id: str, quest_id: str) -> None:
        self.statuses[quest_id] = "completed"

    async def fail(self, actor_id: str, quest_id: str, reason: str) -> None:
        self.statuses[quest_id] = "failed"

    async def complete_objective(self, actor_id: str, quest_id: str, objective_id: str) -> None:
        self.objectives.add((quest_id, objective_id))


class FakeFactions(FactionLedger):
    RANKS = {"initiate": 0, "member": 1, "officer": 2}

    def __init__(self):
        self.reps: dict[str, int] = {}
        self.ranks: dict[str, str] = {}

    def reputation(self, actor_id: str, faction_id: str) -> int:
        return self.reps.get(faction_id, 0)

    def rank_position(self, faction_id: str, rank_id: str) -> Optional[int]:
        return self.RANKS.get(rank_id)

    def actor_rank_position(self, actor_id: str, faction_id: str) -> Optional[int]:
        rank = self.ranks.get(faction_id)
        return None if rank is None else self.RANKS[rank]

    async def modify_reputation(self, actor_id: str, faction_id: str, amount: int) -> int:
        self.reps[faction_id] = self.reps.get(faction_id, 0) + amount
        return self.reps[faction_id]


class FakeRelationships(RelationshipLedger):
    def __init__(self):
        self.values: dict[str, float] = {}

    def value(self, actor_id: str, npc_id: str) -> float:
        return self.values.get(npc_id, 0)

    async def modify(self, actor_id: str, npc_id: str, amount: float) -> float:
        self.values[npc_id] = self.values.get(npc_id, 0) + amount
        return self.values[npc_id]


class FakeClock(GameClock):
    def __init__(self, hour: int = 12):
        self.current = hour

    def hour(self) -> int:
        return self.current


class FakeBounties(BountyLedger):
    def __init__(self):
        self.totals: dict[str, int] = {}

    async def add_bounty(self, actor_id: str, region: str, amount: int) -> int:
        self.totals[region] = self.totals.get(region, 0) + amount
        return self.totals[region]


class FakeMessages(MessageSink):
    def __init__(self):
        self.posted: list[tuple[str, Optional[str], Optional[str]]] = []

    async def post(self, content, speaker, whisper_to=None) -> None:
        self.posted.append((content, speaker, whisper_to))


class FakeAreas(AreaRegistry):
    def __init__(self):
        self.unlocked: list[str] = []

    async def unlock(self, actor_id: str, scene_id: str) -> None:
        self.unlocked.append(scene_id)


class FakePresentation(Presentation):
    def __init__(self):
        self.sounds: list[str] = []
        self.animations: list[tuple[str, Optional[str]]] = []

    async def play_sound(self, path: str, volume: float) -> None:
        self.sounds.append(path)

    async def play_animation(self, animation_id: str, target_id: Optional[str]) -> None:
        self.animations.append((animation_id, target_id))


@pytest.fixture()
def full_context() -> DialogueContext:
    """모든 협력자가 연결된 컨텍스트"""
    return DialogueContext(
        actor=FakeCharacter(),
        npc=FakeCharacter("npc_smith", "Borin", class_name="Merchant", race="Dwarf"),
        flags=InMemoryFlagStore(),
        rng=random.Random(7),
        quests=FakeQuests(),
        factions=FakeFactions(),
        relationships=FakeRelationships(),
        clock=FakeClock(),
        choices=InMemoryChoiceLog(),
        bounties=FakeBounties(),
        messages=FakeMessages(),
        areas=FakeAreas(),
        presentation=FakePresentation(),
        dialogue_id="dlg_test",
    )


@pytest.fixture()
def bare_context() -> DialogueContext:
    """행동 캐릭터와 플래그만 있는 컨텍스트"""
    return DialogueContext(actor=FakeCharacter(), flags=InMemoryFlagStore())
