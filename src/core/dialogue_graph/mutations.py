"""그래프 뮤테이터 - 노드 추가/삭제/연결

노드는 insert_node로만 생성되고 remove_node로만 삭제된다.
remove_node는 남은 모든 노드의 출력 엣지에서 삭제된 ID를 정리한다.
connect_nodes는 대상 노드 존재 여부를 확인하지 않는다 (검증기 담당).
"""

from __future__ import annotations

import copy
from typing import Any, Mapping, Optional

from src.core.dialogue_graph.edges import clear_edges_to
from src.core.dialogue_graph.enums import ConnectionKind
from src.core.dialogue_graph.identifiers import generate_id
from src.core.dialogue_graph.models import (
    RESPONSE_NODE_TYPES,
    AutoAdvance,
    BranchEntry,
    BranchNode,
    Dialogue,
    Node,
    Position,
    QuestOfferNode,
    QuestTurnInNode,
    SkillCheckNode,
    SpeechNode,
)
from src.core.dialogue_graph.serialization import (
    create_condition,
    create_node,
    create_response,
)
from src.core.logging import get_logger

logger = get_logger(__name__)

DUPLICATE_OFFSET = 40  # 복제 노드 위치 오프셋 (월드 단위)


def insert_node(dialogue: Dialogue, data: Any = None) -> Node:
    """노드 추가. 그래프의 첫 노드면 시작 노드로 지정.

    Args:
        data: 부분 노드 dict (camelCase, `type` 태그) 또는 노드 객체
    """
    node = create_node(data)
    dialogue.nodes[node.id] = node
    dialogue.touch()

    if len(dialogue.nodes) == 1:
        dialogue.start_node_id = node.id

    logger.debug("Node inserted: %s (%s) into %s", node.id, node.type.value, dialogue.id)
    return node


def remove_node(dialogue: Dialogue, node_id: str) -> None:
    """노드 삭제 + 참조 정리. 없는 ID면 아무것도 하지 않는다."""
    if node_id not in dialogue.nodes:
        return

    del dialogue.nodes[node_id]

    cleared = 0
    for node in dialogue.nodes.values():
        if isinstance(node, BranchNode):
            before = len(node.branches)
            node.branches = [b for b in node.branches if b.next_node_id != node_id]
            cleared += before - len(node.branches)
        cleared += clear_edges_to(node, node_id)

    if dialogue.start_node_id == node_id:
        dialogue.start_node_id = next(iter(dialogue.nodes), None)
    if dialogue.alternative_start_node_id == node_id:
        dialogue.alternative_start_node_id = None

    dialogue.touch()
    logger.debug(
        "Node removed: %s from %s (%d references cleared)", node_id, dialogue.id, cleared
    )


def connect_nodes(
    dialogue: Dialogue,
    from_id: str,
    to_id: Optional[str],
    kind: ConnectionKind | str = ConnectionKind.NEXT,
    options: Optional[Mapping[str, Any]] = None,
) -> bool:
    """출력 엣지 설정

    response/branch는 새 항목을 추가한다. options에 response_id/branch_id가
    있고 그 항목이 존재하면 새로 만들지 않고 대상만 바꾼다.

    Returns:
        적용 여부. 출발 노드가 없거나 종류가 노드 타입에 맞지 않으면 False.
    """
    kind = ConnectionKind(kind)
    options = options or {}
    node = dialogue.nodes.get(from_id)
    if node is None:
        logger.warning("connect_nodes: source node not found: %s", from_id)
        return False

    applied = _apply_connection(node, to_id, kind, options)
    if not applied:
        logger.warning(
            "connect_nodes: %s not applicable to %s node %s",
            kind.value,
            node.type.value,
            from_id,
        )
        return False

    dialogue.touch()
    logger.debug("Connected %s -[%s]-> %s", from_id, kind.value, to_id)
    return True


def _apply_connection(
    node: Node, to_id: Optional[str], kind: ConnectionKind, options: Mapping[str, Any]
) -> bool:
    if kind == ConnectionKind.RESPONSE:
        if not isinstance(node, RESPONSE_NODE_TYPES):
            return False
        existing_id = options.get("response_id") or options.get("responseId")
        for resp in node.responses:
            if existing_id and resp.id == existing_id:
                resp.next_node_id = to_id
                return True
        payload = {
            k: v for k, v in options.items() if k not in ("response_id", "responseId")
        }
        payload.setdefault("order", len(node.responses))
        response = create_response({**payload, "nextNodeId": to_id})
        node.responses.append(response)
        return True

    if kind == ConnectionKind.BRANCH:
        if not isinstance(node, BranchNode):
            return False
        existing_id = options.get("branch_id") or options.get("branchId")
        for entry in node.branches:
            if existing_id and entry.id == existing_id:
                entry.next_node_id = to_id
                return True
        node.branches.append(
            BranchEntry(
                conditions=[create_condition(c) for c in options.get("conditions", [])],
                next_node_id=to_id,
                priority=options.get("priority", len(node.branches)),
            )
        )
        return True

    if kind == ConnectionKind.DEFAULT:
        if not isinstance(node, BranchNode):
            return False
        node.default_node_id = to_id
        return True

    if kind in (ConnectionKind.ACCEPT, ConnectionKind.DECLINE):
        if not isinstance(node, QuestOfferNode):
            return False
        if kind == ConnectionKind.ACCEPT:
            node.accept_node_id = to_id
        else:
            node.decline_node_id = to_id
        return True

    if isinstance(node, SkillCheckNode):
        slot = {
            ConnectionKind.SUCCESS: "success_node_id",
            ConnectionKind.FAILURE: "failure_node_id",
            ConnectionKind.CRIT_SUCCESS: "crit_success_node_id",
            ConnectionKind.CRIT_FAILURE: "crit_failure_node_id",
        }.get(kind)
        if slot is None:
            return False
        setattr(node.skill_check, slot, to_id)
        return True

    if isinstance(node, QuestTurnInNode):
        if kind == ConnectionKind.SUCCESS:
            node.success_node_id = to_id
        elif kind == ConnectionKind.FAILURE:
            node.incomplete_node_id = to_id
        else:
            return False
        return True

    if kind != ConnectionKind.NEXT:
        return False

    if isinstance(node, SpeechNode):
        if node.auto_advance is None:
            node.auto_advance = AutoAdvance()
        node.auto_advance.next_node_id = to_id
        return True

    if hasattr(node, "next_node_id"):
        node.next_node_id = to_id
        return True
    return False


def duplicate_node(dialogue: Dialogue, node_id: str) -> Optional[Node]:
    """노드 복제. 노드/응답/분기/조건/효과 ID를 새로 발급하고 위치를 옮긴다.

    출력 엣지는 원본과 같은 대상을 유지한다.
    """
    source = dialogue.nodes.get(node_id)
    if source is None:
        return None

    clone = copy.deepcopy(source)
    _regenerate_ids(clone)
    clone.position = Position(
        source.position.x + DUPLICATE_OFFSET, source.position.y + DUPLICATE_OFFSET
    )
    clone.label = f"{source.label} (Copy)".strip()
    return insert_node(dialogue, clone)


def _regenerate_ids(node: Node) -> None:
    node.id = generate_id()
    for item in (*node.conditions, *node.effects):
        item.id = generate_id()
    if isinstance(node, RESPONSE_NODE_TYPES):
        for resp in node.responses:
            resp.id = generate_id()
            for item in (*resp.conditions, *resp.effects):
                item.id = generate_id()
    if isinstance(node, BranchNode):
        for entry in node.branches:
            entry.id = generate_id()
            for cond in entry.conditions:
                cond.id = generate_id()


def set_start_node(dialogue: Dialogue, node_id: str) -> bool:
    if node_id not in dialogue.nodes:
        return False
    dialogue.start_node_id = node_id
    dialogue.touch()
    return True


def move_node(dialogue: Dialogue, node_id: str, x: float, y: float) -> bool:
    node = dialogue.nodes.get(node_id)
    if node is None:
        return False
    node.position = Position(x, y)
    dialogue.touch()
    return True
