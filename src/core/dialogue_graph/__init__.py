"""대화 그래프 Core 패키지

노드/조건/효과 모델, 뮤테이터, 검증기, 직렬화, 평가기/실행기, 언두 이력, 진행기.
DB/웹 무관 순수 Python 로직.
"""

from src.core.dialogue_graph.context import (
    DialogueContext,
    InMemoryChoiceLog,
    InMemoryFlagStore,
)
from src.core.dialogue_graph.edges import EdgeRef, iter_edges
from src.core.dialogue_graph.enums import (
    Comparison,
    ConditionType,
    ConnectionKind,
    EffectType,
    FlagScope,
    NodeType,
)
from src.core.dialogue_graph.errors import (
    ConversationStateError,
    DialogueFormatError,
    DialogueGraphError,
    DialogueValidationError,
    EffectUnavailableError,
)
from src.core.dialogue_graph.evaluator import (
    ResponseView,
    compare_values,
    evaluate_condition,
    evaluate_conditions,
    filter_visible_responses,
)
from src.core.dialogue_graph.executor import EffectOutcome, apply_effect, apply_effects
from src.core.dialogue_graph.history import UndoRedoManager
from src.core.dialogue_graph.models import (
    Dialogue,
    Node,
    Position,
    Response,
    clone_dialogue,
    create_dialogue,
)
from src.core.dialogue_graph.mutations import (
    connect_nodes,
    duplicate_node,
    insert_node,
    move_node,
    remove_node,
    set_start_node,
)
from src.core.dialogue_graph.runner import ConversationRunner, RunnerState, RunnerStep
from src.core.dialogue_graph.serialization import (
    create_condition,
    create_effect,
    create_node,
    create_response,
    dialogue_from_dict,
    dialogue_from_json,
    dialogue_to_dict,
    dialogue_to_json,
)
from src.core.dialogue_graph.validation import (
    IssueCode,
    ValidationIssue,
    ValidationReport,
    validate_dialogue,
)

__all__ = [
    # models
    "Dialogue",
    "Node",
    "Position",
    "Response",
    "create_dialogue",
    "clone_dialogue",
    # enums
    "NodeType",
    "ConditionType",
    "EffectType",
    "Comparison",
    "FlagScope",
    "ConnectionKind",
    # errors
    "DialogueGraphError",
    "DialogueFormatError",
    "DialogueValidationError",
    "EffectUnavailableError",
    "ConversationStateError",
    # edges
    "EdgeRef",
    "iter_edges",
    # mutations
    "insert_node",
    "remove_node",
    "connect_nodes",
    "duplicate_node",
    "set_start_node",
    "move_node",
    # serialization
    "create_node",
    "create_response",
    "create_condition",
    "create_effect",
    "dialogue_to_dict",
    "dialogue_from_dict",
    "dialogue_to_json",
    "dialogue_from_json",
    # validation
    "IssueCode",
    "ValidationIssue",
    "ValidationReport",
    "validate_dialogue",
    # runtime
    "DialogueContext",
    "InMemoryFlagStore",
    "InMemoryChoiceLog",
    "compare_values",
    "evaluate_condition",
    "evaluate_conditions",
    "filter_visible_responses",
    "ResponseView",
    "EffectOutcome",
    "apply_effect",
    "apply_effects",
    "ConversationRunner",
    "RunnerState",
    "RunnerStep",
    "UndoRedoManager",
]
