"""노드 출력 엣지 열거

노드 종류별 엣지 필드 위치를 한 곳에 모은다.
검증기(댕글링/도달성), 씬 빌더(연결선), 뮤테이터(참조 정리)가 공유.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Iterator, Optional

from src.core.dialogue_graph.enums import ConnectionKind
from src.core.dialogue_graph.models import (
    BranchNode,
    Node,
    PlayerChoiceNode,
    QuestOfferNode,
    QuestTurnInNode,
    SkillCheckNode,
    SpeechNode,
)


@dataclass(frozen=True)
class EdgeRef:
    """출력 엣지 하나

    slot: 사람이 읽는 위치 이름 (예: "response[0]", "skill_check.success")
    entry_id: 응답/분기 항목 엣지일 때 그 항목 ID
    """

    source_id: str
    slot: str
    kind: ConnectionKind
    target_id: Optional[str]
    entry_id: Optional[str] = None


def iter_edges(node: Node, include_empty: bool = False) -> Iterator[EdgeRef]:
    """노드의 출력 엣지를 순서대로 열거. 기본은 채워진 엣지만."""
    for edge in _iter_all_edges(node):
        if include_empty or edge.target_id is not None:
            yield edge


def _iter_all_edges(node: Node) -> Iterator[EdgeRef]:
    nid = node.id

    if isinstance(node, (SpeechNode, PlayerChoiceNode)):
        for i, resp in enumerate(node.responses):
            yield EdgeRef(
                nid, f"response[{i}]", ConnectionKind.RESPONSE, resp.next_node_id, resp.id
            )
        if isinstance(node, SpeechNode) and node.auto_advance is not None:
            yield EdgeRef(
                nid, "auto_advance", ConnectionKind.NEXT, node.auto_advance.next_node_id
            )
        return

    if isinstance(node, SkillCheckNode):
        sc = node.skill_check
        yield EdgeRef(nid, "skill_check.success", ConnectionKind.SUCCESS, sc.success_node_id)
        yield EdgeRef(nid, "skill_check.failure", ConnectionKind.FAILURE, sc.failure_node_id)
        yield EdgeRef(
            nid, "skill_check.crit_success", ConnectionKind.CRIT_SUCCESS, sc.crit_success_node_id
        )
        yield EdgeRef(
            nid, "skill_check.crit_failure", ConnectionKind.CRIT_FAILURE, sc.crit_failure_node_id
        )
        return

    if isinstance(node, QuestOfferNode):
        yield EdgeRef(nid, "accept", ConnectionKind.ACCEPT, node.accept_node_id)
        yield EdgeRef(nid, "decline", ConnectionKind.DECLINE, node.decline_node_id)
        return

    if isinstance(node, QuestTurnInNode):
        yield EdgeRef(nid, "success", ConnectionKind.SUCCESS, node.success_node_id)
        yield EdgeRef(nid, "incomplete", ConnectionKind.FAILURE, node.incomplete_node_id)
        return

    if isinstance(node, BranchNode):
        for i, entry in enumerate(node.branches):
            yield EdgeRef(
                nid, f"branch[{i}]", ConnectionKind.BRANCH, entry.next_node_id, entry.id
            )
        yield EdgeRef(nid, "default", ConnectionKind.DEFAULT, node.default_node_id)
        return

    # shop/reward/service/bank/hire/stable: next 하나. end: 없음
    if hasattr(node, "next_node_id"):
        yield EdgeRef(nid, "next", ConnectionKind.NEXT, node.next_node_id)


def referenced_targets(nodes: dict[str, Node]) -> set[str]:
    """그래프 전체에서 엣지 대상이 된 노드 ID 집합"""
    targets: set[str] = set()
    for node in nodes.values():
        for edge in iter_edges(node):
            targets.add(edge.target_id)
    return targets


def clear_edges_to(obj: Any, target_id: str) -> int:
    """dataclass 트리를 훑어 `*_node_id` 필드가 target_id이면 None으로.

    응답 목록/자동 진행/판정 설정 등 중첩 구조까지 재귀. 분기 항목은
    호출 측에서 목록째 제거한다. 반환값은 정리한 필드 수.
    """
    cleared = 0
    for f in fields(obj):
        value = getattr(obj, f.name)
        if f.name.endswith("_node_id"):
            if value == target_id:
                setattr(obj, f.name, None)
                cleared += 1
        elif is_dataclass(value):
            cleared += clear_edges_to(value, target_id)
        elif isinstance(value, list):
            for item in value:
                if is_dataclass(item):
                    cleared += clear_edges_to(item, target_id)
    return cleared
