"""효과 실행기

효과는 목록 순서대로 하나씩 await 한다 (병렬 실행 없음).
같은 캐릭터 기록을 건드리는 효과가 서로의 결과를 보아야 하기 때문.

효과 하나가 실패해도 (협력자 예외, 협력자 부재, 대상 없음) 나머지는
계속 실행된다. 호출 측은 효과별 EffectOutcome 목록을 받는다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

from src.core.dialogue_graph.context import CharacterHandle, DialogueContext
from src.core.dialogue_graph.effects import (
    AddBountyEffect,
    ChatMessageEffect,
    CompleteObjectiveEffect,
    CompleteQuestEffect,
    Effect,
    FailQuestEffect,
    GiveGoldEffect,
    GiveItemEffect,
    GiveXpEffect,
    ModifyFactionReputationEffect,
    ModifyRelationshipEffect,
    PlayAnimationEffect,
    PlaySoundEffect,
    SetFlagEffect,
    StartQuestEffect,
    TakeGoldEffect,
    TakeItemEffect,
    UnlockAreaEffect,
)
from src.core.dialogue_graph.errors import EffectUnavailableError
from src.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class EffectOutcome:
    effect: Effect
    success: bool
    result: Any = None
    error: Optional[str] = None


EffectHandler = Callable[[Any, DialogueContext], Awaitable[Any]]

_HANDLERS: dict[type, EffectHandler] = {}


def _handles(cls: type) -> Callable[[EffectHandler], EffectHandler]:
    def register(func: EffectHandler) -> EffectHandler:
        _HANDLERS[cls] = func
        return func

    return register


def _require(value: Any, what: str) -> Any:
    if value is None:
        raise EffectUnavailableError(f"{what} not available")
    return value


def _actor(ctx: DialogueContext) -> CharacterHandle:
    return _require(ctx.actor, "Acting character")


# ── 종류별 처리 ──────────────────────────────────────────


@_handles(ModifyRelationshipEffect)
async def _modify_relationship(e: ModifyRelationshipEffect, ctx: DialogueContext) -> Any:
    ledger = _require(ctx.relationships, "Relationship ledger")
    npc_id = e.npc_id or (ctx.npc.id if ctx.npc else None)
    _require(npc_id, "Counterpart character")
    value = await ledger.modify(_actor(ctx).id, npc_id, e.amount)
    return {"npc_id": npc_id, "value": value}


@_handles(ModifyFactionReputationEffect)
async def _modify_faction_rep(e: ModifyFactionReputationEffect, ctx: DialogueContext) -> Any:
    ledger = _require(ctx.factions, "Faction ledger")
    value = await ledger.modify_reputation(_actor(ctx).id, e.faction_id, e.amount)
    return {"faction_id": e.faction_id, "reputation": value}


@_handles(SetFlagEffect)
async def _set_flag(e: SetFlagEffect, ctx: DialogueContext) -> Any:
    store = _require(ctx.flags, "Flag store")
    resolved, owner_id = ctx.flag_owner(e.scope)
    if not resolved:
        raise EffectUnavailableError(f"No {e.scope.value} character for flag {e.key!r}")
    store.set(e.scope, owner_id, e.key, e.value)
    return {"scope": e.scope.value, "key": e.key, "value": e.value}


@_handles(GiveItemEffect)
async def _give_item(e: GiveItemEffect, ctx: DialogueContext) -> Any:
    await _actor(ctx).give_item(e.item_id, e.quantity)
    return {"item_id": e.item_id, "quantity": e.quantity}


@_handles(TakeItemEffect)
async def _take_item(e: TakeItemEffect, ctx: DialogueContext) -> Any:
    actor = _actor(ctx)
    if actor.item_quantity(e.item_id) <= 0:
        raise LookupError(f"Actor {actor.id} has no item {e.item_id!r}")
    taken = await actor.take_item(e.item_id, e.quantity)
    return {"item_id": e.item_id, "quantity": taken}


@_handles(GiveGoldEffect)
async def _give_gold(e: GiveGoldEffect, ctx: DialogueContext) -> Any:
    actor = _actor(ctx)
    total = (actor.gold or 0) + e.amount
    await actor.set_gold(total)
    return {"gold": total}


@_handles(TakeGoldEffect)
async def _take_gold(e: TakeGoldEffect, ctx: DialogueContext) -> Any:
    actor = _actor(ctx)
    total = max(0, (actor.gold or 0) - e.amount)
    await actor.set_gold(total)
    return {"gold": total}


@_handles(GiveXpEffect)
async def _give_xp(e: GiveXpEffect, ctx: DialogueContext) -> Any:
    xp = await _actor(ctx).give_xp(e.amount)
    return {"xp": xp}


@_handles(StartQuestEffect)
async def _start_quest(e: StartQuestEffect, ctx: DialogueContext) -> Any:
    await _require(ctx.quests, "Quest tracker").start(_actor(ctx).id, e.quest_id)
    return {"quest_id": e.quest_id, "status": "active"}


@_handles(CompleteQuestEffect)
async def _complete_quest(e: CompleteQuestEffect, ctx: DialogueContext) -> Any:
    await _require(ctx.quests, "Quest tracker").complete(_actor(ctx).id, e.quest_id)
    return {"quest_id": e.quest_id, "status": "completed"}


@_handles(FailQuestEffect)
async def _fail_quest(e: FailQuestEffect, ctx: DialogueContext) -> Any:
    await _require(ctx.quests, "Quest tracker").fail(_actor(ctx).id, e.quest_id, e.reason)
    return {"quest_id": e.quest_id, "status": "failed"}


@_handles(CompleteObjectiveEffect)
async def _complete_objective(e: CompleteObjectiveEffect, ctx: DialogueContext) -> Any:
    tracker = _require(ctx.quests, "Quest tracker")
    await tracker.complete_objective(_actor(ctx).id, e.quest_id, e.objective_id)
    return {"quest_id": e.quest_id, "objective_id": e.objective_id}


@_handles(AddBountyEffect)
async def _add_bounty(e: AddBountyEffect, ctx: DialogueContext) -> Any:
    ledger = _require(ctx.bounties, "Bounty ledger")
    total = await ledger.add_bounty(_actor(ctx).id, e.region, e.amount)
    return {"region": e.region, "bounty": total}


@_handles(ChatMessageEffect)
async def _chat_message(e: ChatMessageEffect, ctx: DialogueContext) -> Any:
    sink = _require(ctx.messages, "Message sink")
    speaker = ctx.npc.name if (e.speaker == "npc" and ctx.npc) else None
    whisper_to = ctx.actor.id if (e.whisper and ctx.actor) else None
    await sink.post(e.content, speaker, whisper_to)
    return {"message": e.content}


@_handles(UnlockAreaEffect)
async def _unlock_area(e: UnlockAreaEffect, ctx: DialogueContext) -> Any:
    await _require(ctx.areas, "Area registry").unlock(_actor(ctx).id, e.scene_id)
    return {"scene_id": e.scene_id}


@_handles(PlaySoundEffect)
async def _play_sound(e: PlaySoundEffect, ctx: DialogueContext) -> Any:
    if not e.path:
        return {"path": None}
    await _require(ctx.presentation, "Presentation").play_sound(e.path, e.volume)
    return {"path": e.path}


@_handles(PlayAnimationEffect)
async def _play_animation(e: PlayAnimationEffect, ctx: DialogueContext) -> Any:
    target_id = ctx.npc.id if ctx.npc else None
    await _require(ctx.presentation, "Presentation").play_animation(e.animation_id, target_id)
    return {"animation_id": e.animation_id}


def registered_effect_types() -> set[type]:
    return set(_HANDLERS)


# ── 공개 API ──────────────────────────────────────────


async def apply_effect(effect: Effect, context: Optional[DialogueContext]) -> EffectOutcome:
    """효과 하나 실행. 예외는 실패 결과로 변환."""
    try:
        if context is None:
            raise EffectUnavailableError("No dialogue context")
        result = await _HANDLERS[type(effect)](effect, context)
        return EffectOutcome(effect, True, result=result)
    except Exception as e:
        logger.warning(
            "Effect %s (%s) failed: %s", effect.id, effect.type.value, e
        )
        return EffectOutcome(effect, False, error=str(e))


async def apply_effects(
    effects: Iterable[Effect], context: Optional[DialogueContext]
) -> list[EffectOutcome]:
    outcomes: list[EffectOutcome] = []
    for effect in effects:
        outcomes.append(await apply_effect(effect, context))
    return outcomes
