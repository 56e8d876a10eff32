"""대화 진행기 (ConversationRunner)

한 Dialogue를 한 컨텍스트로 진행한다.
- 노드 진입 시 진입 조건 평가, 진입 효과 적용
- branch / quest_turnin 노드는 자동 해석
- reward 노드의 보상 묶음은 효과로 변환해 적용
- 선택 기록은 ChoiceLog 협력자에 남긴다

모든 공개 async 연산은 하나의 asyncio.Lock을 잡는다.
이전 효과 목록이 끝나기 전에 다음 노드를 평가하지 않는다.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from src.core.dialogue_graph.context import DialogueContext
from src.core.dialogue_graph.effects import (
    Effect,
    GiveGoldEffect,
    GiveItemEffect,
    GiveXpEffect,
    ModifyFactionReputationEffect,
    ModifyRelationshipEffect,
    StartQuestEffect,
)
from src.core.dialogue_graph.errors import ConversationStateError
from src.core.dialogue_graph.evaluator import (
    ResponseView,
    evaluate_conditions,
    filter_visible_responses,
)
from src.core.dialogue_graph.executor import EffectOutcome, apply_effects
from src.core.dialogue_graph.models import (
    BranchNode,
    Dialogue,
    EndNode,
    Node,
    PlayerChoiceNode,
    QuestOfferNode,
    QuestTurnInNode,
    RewardBundle,
    RewardNode,
    SkillCheckNode,
    SpeechNode,
)
from src.core.event_bus import EventBus, GraphEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_AUTO_STEPS = 100  # branch/turn-in 자동 해석 연쇄 상한 (순환 방지)

NATURAL_CRIT_SUCCESS = 20
NATURAL_CRIT_FAILURE = 1


class RunnerState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    AWAITING_CHECK = "awaiting_check"
    AWAITING_OFFER = "awaiting_offer"
    AWAITING_PROCEED = "awaiting_proceed"  # shop/service/reward 등 또는 자동 진행 대사
    ENDED = "ended"


@dataclass
class RunnerStep:
    """연산 결과: 현재 노드, 상태, 이번 연산에서 적용된 효과 결과"""

    node: Optional[Node]
    state: RunnerState
    outcomes: list[EffectOutcome] = field(default_factory=list)
    check_passed: Optional[bool] = None

    @property
    def failed_outcomes(self) -> list[EffectOutcome]:
        return [o for o in self.outcomes if not o.success]


def reward_effects(rewards: RewardBundle) -> list[Effect]:
    """보상 묶음 → 효과 목록 (gold, xp, items, reputation, relationship 순)"""
    effects: list[Effect] = []
    if rewards.gold:
        effects.append(GiveGoldEffect(amount=rewards.gold))
    if rewards.xp:
        effects.append(GiveXpEffect(amount=rewards.xp))
    for item in rewards.items:
        effects.append(GiveItemEffect(item_id=item.item_id, quantity=item.quantity))
    for rep in rewards.reputation:
        effects.append(
            ModifyFactionReputationEffect(faction_id=rep.faction_id, amount=rep.amount)
        )
    if rewards.relationship:
        effects.append(ModifyRelationshipEffect(amount=rewards.relationship))
    return effects


class ConversationRunner:
    """대화 한 회차 진행"""

    def __init__(
        self,
        dialogue: Dialogue,
        context: DialogueContext,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._dialogue = dialogue
        self._context = context
        if context.dialogue_id is None:
            context.dialogue_id = dialogue.id
        self._bus = event_bus
        self._lock = asyncio.Lock()

        self._state = RunnerState.IDLE
        self._current: Optional[Node] = None
        self._visited: list[str] = []
        self._check_attempts = 0

    # === 조회 ===

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def current_node(self) -> Optional[Node]:
        return self._current

    @property
    def visited(self) -> list[str]:
        return list(self._visited)

    def available_responses(self) -> list[ResponseView]:
        if self._state != RunnerState.AWAITING_RESPONSE:
            return []
        return filter_visible_responses(self._current.responses, self._context)

    # === 진행 ===

    async def start(self, scene_id: Optional[str] = None, alternative: bool = False) -> RunnerStep:
        """시작 노드로 진입

        alternative=True 이거나 scene_id가 expected_scenes 밖이면 대체 시작 노드 사용
        (대체 시작 노드가 있을 때만).
        """
        async with self._lock:
            if self._state != RunnerState.IDLE:
                raise ConversationStateError("Conversation already started")

            d = self._dialogue
            unexpected = (
                scene_id is not None and bool(d.expected_scenes) and scene_id not in d.expected_scenes
            )
            start_id = d.start_node_id
            if (alternative or unexpected) and d.alternative_start_node_id:
                start_id = d.alternative_start_node_id

            logger.info("Conversation started: dialogue=%s start=%s", d.id, start_id)
            self._emit(EventTypes.DIALOGUE_STARTED, {"start_node_id": start_id})
            outcomes: list[EffectOutcome] = []
            await self._enter(start_id, outcomes)
            return self._step(outcomes)

    async def choose(self, response_id: str, check_total: Optional[int] = None) -> RunnerStep:
        """응답 선택

        인라인 판정이 있는 응답은 check_total이 필요하다. 판정 실패 시
        효과 없이 현재 노드에 머문다.
        """
        async with self._lock:
            self._require_state(RunnerState.AWAITING_RESPONSE)
            view = next(
                (
                    v
                    for v in filter_visible_responses(self._current.responses, self._context)
                    if v.response.id == response_id
                ),
                None,
            )
            if view is None:
                raise ConversationStateError(f"Response not offered: {response_id}")
            if not view.available:
                raise ConversationStateError(f"Response not available: {response_id}")

            response = view.response
            if response.skill_check is not None:
                if check_total is None:
                    raise ConversationStateError(
                        f"Response {response_id} requires a {response.skill_check.skill} check"
                    )
                if check_total < response.skill_check.dc:
                    logger.info(
                        "Inline check failed: %s %d < DC %d",
                        response.skill_check.skill,
                        check_total,
                        response.skill_check.dc,
                    )
                    return self._step([], check_passed=False)

            outcomes = await self._apply(response.effects)
            self._record_choice(response_id)
            self._emit(
                EventTypes.DIALOGUE_RESPONSE_SELECTED,
                {
                    "node_id": self._current.id,
                    "response_id": response_id,
                    "next_node_id": response.next_node_id,
                },
            )
            await self._enter(response.next_node_id, outcomes)
            return self._step(outcomes, check_passed=True if response.skill_check else None)

    async def resolve_check(self, total: int, natural: Optional[int] = None) -> RunnerStep:
        """판정 노드 결과 입력

        natural 20/1은 치명 경로가 연결되어 있을 때만 치명으로 처리.
        재시도 가능하면 실패 시 같은 노드에서 retry_dc로 다시 판정한다.
        """
        async with self._lock:
            self._require_state(RunnerState.AWAITING_CHECK)
            check = self._current.skill_check
            dc = check.dc
            if self._check_attempts > 0 and check.retry_dc is not None:
                dc = check.retry_dc
            self._check_attempts += 1

            passed = total >= dc
            if natural == NATURAL_CRIT_SUCCESS and check.crit_success_node_id:
                target, passed = check.crit_success_node_id, True
            elif natural == NATURAL_CRIT_FAILURE and check.crit_failure_node_id:
                target, passed = check.crit_failure_node_id, False
            elif passed:
                target = check.success_node_id
            else:
                if check.can_retry and self._check_attempts <= check.max_retries:
                    logger.info(
                        "Check failed (%d < %d), retry %d/%d",
                        total,
                        dc,
                        self._check_attempts,
                        check.max_retries,
                    )
                    return self._step([], check_passed=False)
                target = check.failure_node_id

            outcomes: list[EffectOutcome] = []
            await self._enter(target, outcomes)
            return self._step(outcomes, check_passed=passed)

    async def answer_offer(self, accepted: bool) -> RunnerStep:
        """퀘스트 제안 수락/거절. 수락 시 퀘스트 시작 효과 적용."""
        async with self._lock:
            self._require_state(RunnerState.AWAITING_OFFER)
            node: QuestOfferNode = self._current
            outcomes: list[EffectOutcome] = []
            if accepted:
                outcomes = await self._apply([StartQuestEffect(quest_id=node.quest_id)])
            target = node.accept_node_id if accepted else node.decline_node_id
            await self._enter(target, outcomes)
            return self._step(outcomes)

    async def proceed(self) -> RunnerStep:
        """단일 next 노드 또는 자동 진행 대사에서 다음으로"""
        async with self._lock:
            self._require_state(RunnerState.AWAITING_PROCEED)
            node = self._current
            if isinstance(node, SpeechNode):
                target = node.auto_advance.next_node_id if node.auto_advance else None
            else:
                target = getattr(node, "next_node_id", None)
            outcomes: list[EffectOutcome] = []
            await self._enter(target, outcomes)
            return self._step(outcomes)

    async def end(self, reason: str = "closed") -> None:
        async with self._lock:
            if self._state != RunnerState.ENDED:
                self._finish(reason)

    # === 내부 ===

    def _require_state(self, expected: RunnerState) -> None:
        if self._state != expected:
            raise ConversationStateError(
                f"Runner is {self._state.value}, expected {expected.value}"
            )

    def _step(self, outcomes: list[EffectOutcome], check_passed: Optional[bool] = None) -> RunnerStep:
        return RunnerStep(self._current, self._state, outcomes, check_passed)

    async def _enter(self, node_id: Optional[str], outcomes: list[EffectOutcome]) -> None:
        """노드 진입. 자동 해석 노드는 다음 대기 노드까지 이어서 진입한다.

        한 번의 진입 연쇄에서 같은 자동 해석 노드를 다시 만나면 효과 적용 전에
        대화를 종료하고 ConversationStateError를 던진다.
        """
        resolved: set[str] = set()
        for _ in range(MAX_AUTO_STEPS):
            node = self._dialogue.get_node(node_id)
            if node is None:
                if node_id is not None:
                    logger.warning("Conversation target node missing: %s", node_id)
                self._finish("no_next_node")
                return

            if node.id in resolved:
                logger.warning("Automatic resolution cycle at node %s", node.id)
                self._finish("cycle")
                raise ConversationStateError(f"Automatic node resolution cycle at {node.id}")

            if not evaluate_conditions(node.conditions, self._context):
                logger.info("Entry conditions failed for node %s", node.id)
                self._finish("entry_conditions_failed")
                return

            self._current = node
            self._visited.append(node.id)
            self._check_attempts = 0
            self._emit(
                EventTypes.DIALOGUE_NODE_ENTERED,
                {"node_id": node.id, "node_type": node.type.value},
            )
            outcomes.extend(await self._apply(node.effects))

            if isinstance(node, BranchNode):
                resolved.add(node.id)
                node_id = self._pick_branch(node)
                continue
            if isinstance(node, QuestTurnInNode):
                resolved.add(node.id)
                node_id = self._resolve_turn_in(node)
                continue
            if isinstance(node, RewardNode):
                outcomes.extend(await self._apply(reward_effects(node.rewards)))

            self._state = self._waiting_state(node)
            if self._state == RunnerState.ENDED:
                self._finish(getattr(node, "end_type", "normal"))
            return

        self._finish("auto_step_limit")
        raise ConversationStateError(
            f"Automatic node resolution exceeded {MAX_AUTO_STEPS} steps"
        )

    def _waiting_state(self, node: Node) -> RunnerState:
        if isinstance(node, EndNode):
            return RunnerState.ENDED
        if isinstance(node, (SpeechNode, PlayerChoiceNode)):
            if node.responses:
                return RunnerState.AWAITING_RESPONSE
            return RunnerState.AWAITING_PROCEED
        if isinstance(node, SkillCheckNode):
            return RunnerState.AWAITING_CHECK
        if isinstance(node, QuestOfferNode):
            return RunnerState.AWAITING_OFFER
        return RunnerState.AWAITING_PROCEED

    def _pick_branch(self, node: BranchNode) -> Optional[str]:
        """priority 오름차순 (동률은 목록 순서), 첫 일치 분기. 없으면 default."""
        for entry in sorted(node.branches, key=lambda b: b.priority):
            if evaluate_conditions(entry.conditions, self._context):
                return entry.next_node_id
        return node.default_node_id

    def _resolve_turn_in(self, node: QuestTurnInNode) -> Optional[str]:
        ctx = self._context
        if ctx.quests is None or ctx.actor is None:
            logger.debug("Quest turn-in %s fail-open: no quest tracker", node.id)
            return node.success_node_id
        if ctx.quests.ready_to_turn_in(ctx.actor.id, node.quest_id):
            return node.success_node_id
        return node.incomplete_node_id

    async def _apply(self, effects: list[Effect]) -> list[EffectOutcome]:
        if not effects:
            return []
        outcomes = await apply_effects(effects, self._context)
        for outcome in outcomes:
            if not outcome.success:
                self._emit(
                    EventTypes.DIALOGUE_EFFECT_FAILED,
                    {
                        "effect_id": outcome.effect.id,
                        "effect_type": outcome.effect.type.value,
                        "error": outcome.error,
                    },
                )
        return outcomes

    def _record_choice(self, response_id: str) -> None:
        ctx = self._context
        if ctx.choices is not None and ctx.actor is not None:
            ctx.choices.record(ctx.actor.id, self._dialogue.id, response_id)

    def _finish(self, reason: str) -> None:
        self._state = RunnerState.ENDED
        logger.info("Conversation ended: dialogue=%s reason=%s", self._dialogue.id, reason)
        self._emit(
            EventTypes.DIALOGUE_ENDED,
            {"reason": reason, "last_node_id": self._current.id if self._current else None},
        )

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        if self._bus is None:
            return
        payload = {"dialogue_id": self._dialogue.id, **data}
        if self._context.actor is not None:
            payload["actor_id"] = self._context.actor.id
        self._bus.emit(GraphEvent(event_type, payload, "conversation_runner"))
