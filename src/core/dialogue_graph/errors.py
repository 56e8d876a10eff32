"""대화 그래프 도메인 예외"""


class DialogueGraphError(Exception):
    """대화 그래프 관련 예외의 공통 기반"""


class DialogueFormatError(DialogueGraphError, ValueError):
    """직렬화 문서 형식 오류. import 시 기존 그래프를 교체하기 전에 발생."""


class EffectUnavailableError(DialogueGraphError):
    """효과 실행에 필요한 협력자(collaborator) 또는 대상이 없음"""


class ConversationStateError(DialogueGraphError, RuntimeError):
    """현재 대화 진행 상태에서 허용되지 않는 조작"""


class DialogueValidationError(DialogueGraphError):
    """검증 에러가 있는 그래프의 저장 시도. report에 ValidationReport를 담는다."""

    def __init__(self, dialogue_id: str, report) -> None:
        super().__init__(
            f"Dialogue {dialogue_id} has {len(report.errors)} validation errors"
        )
        self.dialogue_id = dialogue_id
        self.report = report
