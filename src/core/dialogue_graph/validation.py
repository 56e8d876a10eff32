"""대화 그래프 정적 검증

검사 순서:
1. 필수 필드 (ID, 이름, 시작 노드) - 에러
2. 댕글링 엣지 - 엣지마다 에러
3. 노드 타입별 의미 검사 - 경고
4. 도달 불가 노드 - 경고

그래프를 변경하지 않는다. 같은 입력이면 같은 결과.
에러가 있으면 저장 불가, 경고는 저장을 막지 않는다.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from src.core.dialogue_graph.edges import iter_edges, referenced_targets
from src.core.dialogue_graph.models import Dialogue, Node, SkillCheckNode, SpeechNode


class IssueCode:
    """검증 이슈 코드 상수"""

    # errors
    MISSING_ID = "missing_id"
    MISSING_NAME = "missing_name"
    MISSING_START_NODE = "missing_start_node"
    START_NODE_NOT_FOUND = "start_node_not_found"
    ALTERNATIVE_START_NOT_FOUND = "alternative_start_not_found"
    DANGLING_REFERENCE = "dangling_reference"

    # warnings
    EMPTY_SPEECH_TEXT = "empty_speech_text"
    MISSING_SUCCESS_PATH = "missing_success_path"
    MISSING_FAILURE_PATH = "missing_failure_path"
    UNREACHABLE_NODE = "unreachable_node"


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    node_id: Optional[str] = None
    target_id: Optional[str] = None


@dataclass
class ValidationReport:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [asdict(e) for e in self.errors],
            "warnings": [asdict(w) for w in self.warnings],
        }


def _display(node: Node) -> str:
    return node.label or node.id


def validate_dialogue(dialogue: Dialogue) -> ValidationReport:
    report = ValidationReport()
    nodes = dialogue.nodes

    # 1. 필수 필드
    if not dialogue.id:
        report.errors.append(
            ValidationIssue(IssueCode.MISSING_ID, "Dialogue ID is required")
        )
    if not (dialogue.name or "").strip():
        report.errors.append(
            ValidationIssue(IssueCode.MISSING_NAME, "Dialogue name is required")
        )
    if not dialogue.start_node_id:
        report.errors.append(
            ValidationIssue(IssueCode.MISSING_START_NODE, "No start node defined")
        )
    elif dialogue.start_node_id not in nodes:
        report.errors.append(
            ValidationIssue(
                IssueCode.START_NODE_NOT_FOUND,
                "Start node does not exist",
                target_id=dialogue.start_node_id,
            )
        )
    alt = dialogue.alternative_start_node_id
    if alt and alt not in nodes:
        report.errors.append(
            ValidationIssue(
                IssueCode.ALTERNATIVE_START_NOT_FOUND,
                "Alternative start node does not exist",
                target_id=alt,
            )
        )

    # 2. 댕글링 엣지
    for node in nodes.values():
        for edge in iter_edges(node):
            if edge.target_id not in nodes:
                report.errors.append(
                    ValidationIssue(
                        IssueCode.DANGLING_REFERENCE,
                        f'Node "{_display(node)}" {edge.slot} references '
                        f'non-existent node "{edge.target_id}"',
                        node_id=node.id,
                        target_id=edge.target_id,
                    )
                )

    # 3. 타입별 의미 검사
    for node in nodes.values():
        if isinstance(node, SpeechNode) and not (node.text or "").strip():
            report.warnings.append(
                ValidationIssue(
                    IssueCode.EMPTY_SPEECH_TEXT,
                    f'NPC speech node "{_display(node)}" has no text',
                    node_id=node.id,
                )
            )
        if isinstance(node, SkillCheckNode):
            if not node.skill_check.success_node_id:
                report.warnings.append(
                    ValidationIssue(
                        IssueCode.MISSING_SUCCESS_PATH,
                        f'Skill check node "{_display(node)}" has no success path',
                        node_id=node.id,
                    )
                )
            if not node.skill_check.failure_node_id:
                report.warnings.append(
                    ValidationIssue(
                        IssueCode.MISSING_FAILURE_PATH,
                        f'Skill check node "{_display(node)}" has no failure path',
                        node_id=node.id,
                    )
                )

    # 4. 도달성 (한 번이라도 엣지 대상이 되었는지만 본다)
    targets = referenced_targets(nodes)
    for node_id, node in nodes.items():
        if node_id in (dialogue.start_node_id, alt) or node_id in targets:
            continue
        report.warnings.append(
            ValidationIssue(
                IssueCode.UNREACHABLE_NODE,
                f'Node "{_display(node)}" is unreachable',
                node_id=node_id,
            )
        )

    return report
