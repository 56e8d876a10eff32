"""조건 평가기

- 빈 목록은 참 (vacuous truth)
- 모든 조건이 참이어야 참 (AND만 지원)
- inverted는 개별 평가 후 적용
- 조건 종류에 필요한 컨텍스트/협력자가 없으면 참 (fail-open)
- 협력자 예외는 거짓 (로그 후 계속)

평가기는 상태를 가지지 않는다. random 조건만 비결정적이다 (주입된 RNG 사용).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from src.core.dialogue_graph.conditions import (
    Condition,
    FactionRankCondition,
    FactionReputationCondition,
    FlagCondition,
    HasGoldCondition,
    HasItemCondition,
    PlayerClassCondition,
    PlayerLevelCondition,
    PlayerRaceCondition,
    PreviousChoiceCondition,
    QuestObjectiveCondition,
    QuestStatusCondition,
    RandomCondition,
    RelationshipCondition,
    TimeCondition,
)
from src.core.dialogue_graph.context import DialogueContext
from src.core.dialogue_graph.enums import Comparison
from src.core.dialogue_graph.models import Response
from src.core.logging import get_logger

logger = get_logger(__name__)

# 평가 함수: 판정 불가(컨텍스트 부족)면 None
ConditionCheck = Callable[[Any, DialogueContext], Optional[bool]]

_CHECKS: dict[type, ConditionCheck] = {}


def _check(cls: type) -> Callable[[ConditionCheck], ConditionCheck]:
    def register(func: ConditionCheck) -> ConditionCheck:
        _CHECKS[cls] = func
        return func

    return register


def compare_values(a: Any, b: Any, comparison: Comparison | str) -> bool:
    """비교 연산. 알 수 없는 연산자는 gte로 취급."""
    try:
        op = Comparison(comparison)
    except ValueError:
        op = Comparison.GREATER_THAN_OR_EQUAL
    if op == Comparison.EQUALS:
        return a == b
    if op == Comparison.NOT_EQUALS:
        return a != b
    if op == Comparison.GREATER_THAN:
        return a > b
    if op == Comparison.LESS_THAN:
        return a < b
    if op == Comparison.LESS_THAN_OR_EQUAL:
        return a <= b
    return a >= b


# ── 종류별 평가 ──────────────────────────────────────────


@_check(QuestStatusCondition)
def _quest_status(c: QuestStatusCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.quests is None or ctx.actor is None:
        return None
    return ctx.quests.status(ctx.actor.id, c.quest_id) == c.status


@_check(QuestObjectiveCondition)
def _quest_objective(c: QuestObjectiveCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.quests is None or ctx.actor is None:
        return None
    done = ctx.quests.objective_completed(ctx.actor.id, c.quest_id, c.objective_id)
    return done == c.completed


@_check(FactionRankCondition)
def _faction_rank(c: FactionRankCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.factions is None or ctx.actor is None:
        return None
    required = ctx.factions.rank_position(c.faction_id, c.rank)
    if required is None:
        return None
    current = ctx.factions.actor_rank_position(ctx.actor.id, c.faction_id)
    # 비소속은 모든 랭크보다 아래
    return compare_values(-1 if current is None else current, required, c.comparison)


@_check(FactionReputationCondition)
def _faction_reputation(c: FactionReputationCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.factions is None or ctx.actor is None:
        return None
    rep = ctx.factions.reputation(ctx.actor.id, c.faction_id)
    return compare_values(rep, c.value, c.comparison)


@_check(RelationshipCondition)
def _relationship(c: RelationshipCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.relationships is None or ctx.actor is None:
        return None
    npc_id = c.npc_id or (ctx.npc.id if ctx.npc else None)
    if npc_id is None:
        return None
    return compare_values(
        ctx.relationships.value(ctx.actor.id, npc_id), c.value, c.comparison
    )


@_check(PlayerLevelCondition)
def _player_level(c: PlayerLevelCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.actor is None:
        return None
    return compare_values(ctx.actor.level or 0, c.value, c.comparison)


@_check(PlayerClassCondition)
def _player_class(c: PlayerClassCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.actor is None:
        return None
    actual = (ctx.actor.class_name or "").lower()
    return any(name.lower() in actual for name in c.classes)


@_check(PlayerRaceCondition)
def _player_race(c: PlayerRaceCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.actor is None:
        return None
    actual = (ctx.actor.race or "").lower()
    return any(name.lower() in actual for name in c.races)


@_check(HasItemCondition)
def _has_item(c: HasItemCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.actor is None:
        return None
    return ctx.actor.item_quantity(c.item_id) >= c.quantity


@_check(HasGoldCondition)
def _has_gold(c: HasGoldCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.actor is None:
        return None
    return (ctx.actor.gold or 0) >= c.amount


@_check(FlagCondition)
def _flag(c: FlagCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.flags is None:
        return None
    resolved, owner_id = ctx.flag_owner(c.scope)
    if not resolved:
        return None
    return ctx.flags.get(c.scope, owner_id, c.key) == c.value


@_check(TimeCondition)
def _time(c: TimeCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.clock is None:
        return None
    return hour_in_window(ctx.clock.hour(), c.from_hour, c.to_hour)


@_check(PreviousChoiceCondition)
def _previous_choice(c: PreviousChoiceCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.choices is None or ctx.actor is None:
        return None
    dialogue_id = c.dialogue_id or ctx.dialogue_id
    if not dialogue_id:
        return None
    return ctx.choices.was_chosen(ctx.actor.id, dialogue_id, c.choice_id)


@_check(RandomCondition)
def _random(c: RandomCondition, ctx: DialogueContext) -> Optional[bool]:
    if ctx.rng is None:
        return None
    return ctx.rng.random() < c.chance


def hour_in_window(hour: int, from_hour: int, to_hour: int) -> bool:
    """[from, to) 시각 창. from > to면 자정을 넘는다. from == to면 하루 전체."""
    if from_hour == to_hour:
        return True
    if from_hour < to_hour:
        return from_hour <= hour < to_hour
    return hour >= from_hour or hour < to_hour


def registered_condition_types() -> set[type]:
    return set(_CHECKS)


# ── 공개 API ──────────────────────────────────────────


def evaluate_condition(condition: Condition, context: Optional[DialogueContext]) -> bool:
    """단일 조건 평가 (inverted 적용)

    협력자가 예외를 던지면 inverted와 무관하게 거짓.
    """
    result: Optional[bool] = None
    if context is not None:
        try:
            result = _CHECKS[type(condition)](condition, context)
        except Exception as e:
            logger.warning(
                "Condition %s (%s) evaluation failed: %s",
                condition.id,
                condition.type.value,
                e,
            )
            return False
    if result is None:
        logger.debug(
            "Condition %s (%s) fail-open: context unavailable",
            condition.id,
            condition.type.value,
        )
        result = True
    return not result if condition.inverted else result


def evaluate_conditions(
    conditions: Iterable[Condition], context: Optional[DialogueContext]
) -> bool:
    return all(evaluate_condition(c, context) for c in conditions)


@dataclass
class ResponseView:
    """표시용 응답. available=False면 보이지만 선택 불가."""

    response: Response
    available: bool


def filter_visible_responses(
    responses: Iterable[Response], context: Optional[DialogueContext]
) -> list[ResponseView]:
    """숨김 정책 적용 + order 정렬

    hidden이고 조건 실패 → 목록에서 제거
    hidden 아니고 조건 실패 → 표시, 선택 불가
    """
    views: list[ResponseView] = []
    for resp in sorted(responses, key=lambda r: r.order):
        ok = evaluate_conditions(resp.conditions, context)
        if not ok and resp.hidden:
            continue
        views.append(ResponseView(resp, ok))
    return views
