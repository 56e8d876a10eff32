"""대화 그래프 JSON 직렬화

문서 형태는 camelCase 키 (id, actorId, name, startNodeId, nodes, editorZoom ...).
노드/조건/효과 본문은 `type` 태그로 구분한다.
create_* 팩토리는 부분 dict를 받아 기본값이 채워진 객체를 만든다.
"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from src.core.dialogue_graph.conditions import CONDITION_CLASSES, Condition, TimeCondition
from src.core.dialogue_graph.effects import EFFECT_CLASSES, Effect
from src.core.dialogue_graph.enums import ConditionType, EffectType, NodeType
from src.core.dialogue_graph.errors import DialogueFormatError
from src.core.dialogue_graph.identifiers import generate_id, now_ms
from src.core.dialogue_graph.models import (
    NODE_CLASSES,
    AutoAdvance,
    BranchEntry,
    Dialogue,
    InlineSkillCheck,
    Node,
    Portrait,
    Position,
    ReputationReward,
    Response,
    RewardBundle,
    RewardItem,
    SkillCheck,
    SkillCheckNode,
    VoiceLine,
)
from src.core.logging import get_logger

logger = get_logger(__name__)

# 입력 dict에서 허용하는 별칭 키 (원본 데이터 호환)
_ALIASES: dict[type, dict[str, str]] = {
    TimeCondition: {"from": "from_hour", "to": "to_hour"},
}


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# ── 직렬화 (객체 → dict) ──────────────────────────────────────────


def to_plain(obj: Any) -> Any:
    """dataclass 트리를 JSON 호환 값으로. 태그 클래스는 type 키를 먼저 쓴다."""
    if is_dataclass(obj):
        out: dict[str, Any] = {}
        tag = getattr(type(obj), "type", None)
        if isinstance(tag, Enum):
            out["type"] = tag.value
        for f in fields(obj):
            out[to_camel(f.name)] = to_plain(getattr(obj, f.name))
        return out
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, list):
        return [to_plain(v) for v in obj]
    if isinstance(obj, dict):
        return {k: to_plain(v) for k, v in obj.items()}
    return obj


def dialogue_to_dict(dialogue: Dialogue) -> dict[str, Any]:
    """Dialogue → 직렬화 문서 (dict)"""
    return to_plain(dialogue)


def dialogue_to_json(dialogue: Dialogue, indent: Optional[int] = 2) -> str:
    return json.dumps(dialogue_to_dict(dialogue), indent=indent, ensure_ascii=False)


# ── 역직렬화 (dict → 객체) ──────────────────────────────────────────


def _list_of(factory: Callable[[Any], Any]) -> Callable[[Any], list]:
    def parse(value: Any) -> list:
        if value is None:
            return []
        if not isinstance(value, list):
            raise DialogueFormatError(f"Expected list, got {type(value).__name__}")
        return [factory(v) for v in value]

    return parse


def _optional(factory: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def parse(value: Any) -> Any:
        return None if value is None else factory(value)

    return parse


def _plain(cls: type) -> Callable[[Any], Any]:
    def parse(value: Any) -> Any:
        if isinstance(value, cls):
            return value
        return _build(cls, value)

    return parse


def _nested_parsers(cls: type) -> dict[str, Callable[[Any], Any]]:
    """필드명 → 중첩 값 파서. 나머지 필드는 값 그대로."""
    parsers: dict[str, Callable[[Any], Any]] = {
        "conditions": _list_of(create_condition),
        "effects": _list_of(create_effect),
        "position": _plain(Position),
        "editor_pan": _plain(Position),
        "portrait": _plain(Portrait),
        "voice_line": _plain(VoiceLine),
        "auto_advance": _optional(_plain(AutoAdvance)),
        "responses": _list_of(create_response),
        "branches": _list_of(_plain(BranchEntry)),
        "rewards": _plain(RewardBundle),
        "items": _list_of(_plain(RewardItem)),
        "reputation": _list_of(_plain(ReputationReward)),
    }
    if cls is SkillCheckNode:
        parsers["skill_check"] = _plain(SkillCheck)
    elif cls is Response:
        parsers["skill_check"] = _optional(_plain(InlineSkillCheck))
    return parsers


def _build(cls: type, data: Any) -> Any:
    """camelCase(또는 snake_case) dict에서 dataclass 생성. 모르는 키는 무시."""
    if not isinstance(data, Mapping):
        raise DialogueFormatError(
            f"{cls.__name__} must be an object, got {type(data).__name__}"
        )
    aliases = _ALIASES.get(cls, {})
    parsers = _nested_parsers(cls)
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        camel = to_camel(f.name)
        if camel in data:
            value = data[camel]
        elif f.name in data:
            value = data[f.name]
        else:
            alias = next((a for a, target in aliases.items() if target == f.name), None)
            if alias is None or alias not in data:
                continue
            value = data[alias]
        parser = parsers.get(f.name)
        kwargs[f.name] = parser(value) if parser else value
    try:
        return cls(**kwargs)
    except ValueError as e:
        raise DialogueFormatError(f"Invalid {cls.__name__}: {e}") from e


def _tag_of(data: Mapping, enum_cls: type[Enum], default: Optional[Enum] = None) -> Enum:
    raw = data.get("type", default)
    try:
        return enum_cls(raw)
    except ValueError as e:
        raise DialogueFormatError(f"Unknown {enum_cls.__name__} tag: {raw!r}") from e


def create_condition(data: Any) -> Condition:
    """조건 생성. 이미 조건 객체면 그대로 반환."""
    if isinstance(data, tuple(CONDITION_CLASSES.values())):
        return data
    if not isinstance(data, Mapping):
        raise DialogueFormatError("Condition must be an object")
    tag = _tag_of(data, ConditionType)
    return _build(CONDITION_CLASSES[tag], data)


def create_effect(data: Any) -> Effect:
    """효과 생성. 이미 효과 객체면 그대로 반환."""
    if isinstance(data, tuple(EFFECT_CLASSES.values())):
        return data
    if not isinstance(data, Mapping):
        raise DialogueFormatError("Effect must be an object")
    tag = _tag_of(data, EffectType)
    return _build(EFFECT_CLASSES[tag], data)


def create_response(data: Any = None) -> Response:
    if isinstance(data, Response):
        return data
    return _build(Response, data or {})


def create_node(data: Any = None) -> Node:
    """노드 생성. type 누락 시 npc_speech, id 누락 시 새 ID."""
    if isinstance(data, tuple(NODE_CLASSES.values())):
        return data
    data = data or {}
    if not isinstance(data, Mapping):
        raise DialogueFormatError("Node must be an object")
    tag = _tag_of(data, NodeType, NodeType.NPC_SPEECH)
    node = _build(NODE_CLASSES[tag], data)
    if not node.id:
        node.id = generate_id()
    return node


def dialogue_from_dict(data: Any) -> Dialogue:
    """직렬화 문서 → Dialogue

    Raises:
        DialogueFormatError: 객체가 아님, name/nodes 누락, nodes가 객체가 아님,
            알 수 없는 노드/조건/효과 태그
    """
    if not isinstance(data, Mapping):
        raise DialogueFormatError("Dialogue document must be an object")
    if "nodes" not in data or "name" not in data:
        raise DialogueFormatError("Invalid dialogue format: missing nodes or name")
    raw_nodes = data["nodes"]
    if not isinstance(raw_nodes, Mapping):
        raise DialogueFormatError("Invalid dialogue format: nodes must be an object")

    nodes: dict[str, Node] = {}
    for key, raw in raw_nodes.items():
        if not isinstance(raw, Mapping):
            raise DialogueFormatError(f"Node {key!r} must be an object")
        node = create_node({"id": key, **raw})
        nodes[node.id] = node

    header = {k: v for k, v in data.items() if k != "nodes"}
    dialogue = _build(Dialogue, header)
    dialogue.nodes = nodes
    if not dialogue.id:
        dialogue.id = generate_id()
    if dialogue.created_at is None:
        dialogue.created_at = now_ms()
    if dialogue.updated_at is None:
        dialogue.updated_at = dialogue.created_at
    logger.debug("Parsed dialogue %s (%d nodes)", dialogue.id, len(nodes))
    return dialogue


def dialogue_from_json(text: str) -> Dialogue:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DialogueFormatError(f"Invalid JSON: {e}") from e
    return dialogue_from_dict(data)
