"""효과 실행기 테스트"""

import pytest

from src.core.dialogue_graph.context import DialogueContext
from src.core.dialogue_graph.effects import EFFECT_CLASSES
from src.core.dialogue_graph.enums import FlagScope
from src.core.dialogue_graph.executor import (
    apply_effect,
    apply_effects,
    registered_effect_types,
)
from src.core.dialogue_graph.serialization import create_effect


def _effect(**data):
    return create_effect(data)


class TestRegistry:
    def test_every_effect_kind_has_a_handler(self):
        assert registered_effect_types() == set(EFFECT_CLASSES.values())


class TestCharacterEffects:
    @pytest.mark.asyncio
    async def test_gold(self, full_context):
        outcome = await apply_effect(_effect(type="give_gold", amount=25), full_context)
        assert outcome.success
        assert full_context.actor.gold == 125

        outcome = await apply_effect(_effect(type="take_gold", amount=500), full_context)
        assert outcome.success
        assert full_context.actor.gold == 0  # 음수로 내려가지 않음

    @pytest.mark.asyncio
    async def test_items(self, full_context):
        await apply_effect(_effect(type="give_item", itemId="rope", quantity=3), full_context)
        outcome = await apply_effect(
            _effect(type="take_item", itemId="rope", quantity=2), full_context
        )
        assert outcome.success
        assert outcome.result == {"item_id": "rope", "quantity": 2}
        assert full_context.actor.item_quantity("rope") == 1

    @pytest.mark.asyncio
    async def test_take_missing_item_fails(self, full_context):
        outcome = await apply_effect(_effect(type="take_item", itemId="gem"), full_context)
        assert outcome.success is False
        assert "gem" in outcome.error

    @pytest.mark.asyncio
    async def test_xp(self, full_context):
        outcome = await apply_effect(_effect(type="give_xp", amount=40), full_context)
        assert outcome.result == {"xp": 40}


class TestWorldEffects:
    @pytest.mark.asyncio
    async def test_flag_scopes(self, full_context):
        await apply_effect(_effect(type="set_flag", scope="npc", key="met", value=1), full_context)
        assert full_context.flags.get(FlagScope.NPC, "npc_smith", "met") == 1
        assert full_context.flags.get(FlagScope.WORLD, None, "met") is None

    @pytest.mark.asyncio
    async def test_quest_lifecycle(self, full_context):
        quests = full_context.quests
        await apply_effect(_effect(type="start_quest", questId="q1"), full_context)
        assert quests.statuses["q1"] == "active"
        await apply_effect(
            _effect(type="complete_objective", questId="q1", objectiveId="o1"), full_context
        )
        assert ("q1", "o1") in quests.objectives
        await apply_effect(_effect(type="complete_quest", questId="q1"), full_context)
        assert quests.statuses["q1"] == "completed"
        await apply_effect(_effect(type="fail_quest", questId="q2"), full_context)
        assert quests.statuses["q2"] == "failed"

    @pytest.mark.asyncio
    async def test_reputation_and_relationship(self, full_context):
        await apply_effect(
            _effect(type="modify_faction_reputation", factionId="guild", amount=-5), full_context
        )
        outcome = await apply_effect(_effect(type="modify_relationship", amount=10), full_context)
        assert full_context.factions.reps["guild"] == -5
        assert outcome.result == {"npc_id": "npc_smith", "value": 10}

    @pytest.mark.asyncio
    async def test_bounty_and_area(self, full_context):
        await apply_effect(_effect(type="add_bounty", region="north", amount=50), full_context)
        await apply_effect(_effect(type="unlock_area", sceneId="vault"), full_context)
        assert full_context.bounties.totals == {"north": 50}
        assert full_context.areas.unlocked == ["vault"]

    @pytest.mark.asyncio
    async def test_chat_message(self, full_context):
        await apply_effect(_effect(type="chat_message", content="Hello"), full_context)
        await apply_effect(
            _effect(type="chat_message", content="Psst", whisper=True, speaker="narrator"),
            full_context,
        )
        assert full_context.messages.posted == [
            ("Hello", "Borin", None),
            ("Psst", None, "pc_1"),
        ]

    @pytest.mark.asyncio
    async def test_presentation(self, full_context):
        await apply_effect(_effect(type="play_sound", path="sfx/bell.ogg"), full_context)
        await apply_effect(_effect(type="play_animation", animationId="bow"), full_context)
        assert full_context.presentation.sounds == ["sfx/bell.ogg"]
        assert full_context.presentation.animations == [("bow", "npc_smith")]

    @pytest.mark.asyncio
    async def test_empty_sound_path_is_noop(self, bare_context):
        outcome = await apply_effect(_effect(type="play_sound"), bare_context)
        assert outcome.success


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_missing_collaborator_fails_that_effect_only(self, bare_context):
        outcomes = await apply_effects(
            [
                _effect(type="give_gold", amount=5),
                _effect(type="start_quest", questId="q1"),
                _effect(type="give_gold", amount=5),
            ],
            bare_context,
        )
        assert [o.success for o in outcomes] == [True, False, True]
        assert "Quest tracker" in outcomes[1].error
        assert bare_context.actor.gold == 110

    @pytest.mark.asyncio
    async def test_no_context_fails_all(self):
        outcomes = await apply_effects([_effect(type="give_xp", amount=1)], None)
        assert outcomes[0].success is False

    @pytest.mark.asyncio
    async def test_flag_without_store(self):
        ctx = DialogueContext(flags=None)
        outcome = await apply_effect(_effect(type="set_flag", key="x"), ctx)
        assert outcome.success is False

    @pytest.mark.asyncio
    async def test_sequential_order(self, full_context):
        """앞 효과의 결과를 다음 효과가 본다"""
        outcomes = await apply_effects(
            [_effect(type="take_gold", amount=60), _effect(type="take_gold", amount=60)],
            full_context,
        )
        assert [o.result for o in outcomes] == [{"gold": 40}, {"gold": 0}]
