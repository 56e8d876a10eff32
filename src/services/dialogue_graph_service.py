"""대화 그래프 Service — Core↔DB 연결, EventBus 통신

저장 정본은 직렬화 문서(JSON 컬럼). 요약 컬럼은 목록 조회용.
에디터 세션의 DialogueStore 구현체를 겸한다.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.config import settings
from src.core.dialogue_editor.editor import DialogueEditor
from src.core.dialogue_editor.events import DialogueStore, PropertyEditor
from src.core.dialogue_editor.options import EditorOptions
from src.core.dialogue_graph.errors import DialogueValidationError
from src.core.dialogue_graph.models import Dialogue, create_dialogue
from src.core.dialogue_graph.serialization import (
    dialogue_from_dict,
    dialogue_from_json,
    dialogue_to_dict,
)
from src.core.dialogue_graph.validation import ValidationReport, validate_dialogue
from src.core.event_bus import EventBus, GraphEvent
from src.core.event_types import EventTypes
from src.db.models import DialogueGraphModel

logger = logging.getLogger(__name__)


@dataclass
class DialogueSummary:
    """목록 조회용 요약 (문서 본문 제외)"""

    id: str
    name: str
    actor_id: Optional[str]
    start_node_id: Optional[str]
    node_count: int
    created_at: datetime
    updated_at: datetime


def _to_datetime(ms: Optional[int]) -> datetime:
    if ms is None:
        return datetime.now(timezone.utc)
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def editor_options_from_settings() -> EditorOptions:
    return EditorOptions(
        grid_size=settings.EDITOR_GRID_SIZE,
        min_zoom=settings.EDITOR_MIN_ZOOM,
        max_zoom=settings.EDITOR_MAX_ZOOM,
        undo_depth=settings.EDITOR_UNDO_DEPTH,
    )


class DialogueGraphService(DialogueStore):
    """대화 그래프 CRUD + 검증 + 에디터 세션 생성"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        options: Optional[EditorOptions] = None,
    ):
        self._db = db
        self._bus = event_bus
        self._options = options or editor_options_from_settings()

    # === 저장 / 조회 ===

    def save(self, dialogue: Dialogue) -> ValidationReport:
        """검증 후 upsert. 경고는 report로 돌려주고 저장은 진행한다.

        Raises:
            DialogueValidationError: 검증 에러가 하나라도 있으면 저장하지 않는다
        """
        report = validate_dialogue(dialogue)
        if not report.valid:
            logger.info(
                "Dialogue save rejected: id=%s, errors=%d",
                dialogue.id,
                len(report.errors),
            )
            raise DialogueValidationError(dialogue.id, report)

        orm = self._db.get(DialogueGraphModel, dialogue.id)
        created = orm is None
        if orm is None:
            orm = DialogueGraphModel(id=dialogue.id)
            self._db.add(orm)

        orm.actor_id = dialogue.actor_id
        orm.name = dialogue.name
        orm.start_node_id = dialogue.start_node_id
        orm.node_count = len(dialogue.nodes)
        orm.document = dialogue_to_dict(dialogue)
        orm.created_at = _to_datetime(dialogue.created_at)
        orm.updated_at = _to_datetime(dialogue.updated_at)
        self._db.commit()

        self._bus.emit(
            GraphEvent(
                event_type=EventTypes.DIALOGUE_SAVED,
                data={
                    "dialogue_id": dialogue.id,
                    "actor_id": dialogue.actor_id,
                    "node_count": len(dialogue.nodes),
                    "created": created,
                },
                source="dialogue_graph_service",
            )
        )
        logger.info(
            "Dialogue saved: id=%s, nodes=%d, warnings=%d",
            dialogue.id,
            len(dialogue.nodes),
            len(report.warnings),
        )
        return report

    def get(self, dialogue_id: str) -> Optional[Dialogue]:
        orm = self._db.get(DialogueGraphModel, dialogue_id)
        if orm is None:
            return None
        return dialogue_from_dict(orm.document)

    def list_dialogues(self, actor_id: Optional[str] = None) -> list[DialogueSummary]:
        """최근 수정 순. actor_id를 주면 해당 NPC 소유만."""
        stmt = select(DialogueGraphModel)
        if actor_id is not None:
            stmt = stmt.where(DialogueGraphModel.actor_id == actor_id)
        stmt = stmt.order_by(DialogueGraphModel.updated_at.desc())
        return [
            DialogueSummary(
                id=row.id,
                name=row.name,
                actor_id=row.actor_id,
                start_node_id=row.start_node_id,
                node_count=row.node_count,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )
            for row in self._db.scalars(stmt)
        ]

    def delete(self, dialogue_id: str) -> bool:
        orm = self._db.get(DialogueGraphModel, dialogue_id)
        if orm is None:
            logger.warning("Dialogue not found for delete: %s", dialogue_id)
            return False
        actor_id = orm.actor_id
        self._db.delete(orm)
        self._db.commit()

        self._bus.emit(
            GraphEvent(
                event_type=EventTypes.DIALOGUE_DELETED,
                data={"dialogue_id": dialogue_id, "actor_id": actor_id},
                source="dialogue_graph_service",
            )
        )
        logger.info("Dialogue deleted: %s", dialogue_id)
        return True

    # === 입출력 ===

    def import_document(
        self,
        document: Mapping[str, Any] | str,
        dialogue_id: Optional[str] = None,
    ) -> tuple[Dialogue, ValidationReport]:
        """외부 문서를 파싱해 저장. dialogue_id를 주면 해당 ID로 덮어쓴다.

        Raises:
            DialogueFormatError: 문서 형식 오류 (DB 변경 없음)
            DialogueValidationError: 검증 에러 (DB 변경 없음)
        """
        if isinstance(document, str):
            dialogue = dialogue_from_json(document)
        else:
            dialogue = dialogue_from_dict(document)
        if dialogue_id is not None:
            dialogue.id = dialogue_id
        report = self.save(dialogue)
        return dialogue, report

    def export_document(self, dialogue_id: str) -> Optional[dict[str, Any]]:
        dialogue = self.get(dialogue_id)
        if dialogue is None:
            return None
        return dialogue_to_dict(dialogue)

    # === 검증 ===

    def validate(self, dialogue_id: str) -> Optional[ValidationReport]:
        dialogue = self.get(dialogue_id)
        if dialogue is None:
            return None
        return validate_dialogue(dialogue)

    def validate_document(self, document: Mapping[str, Any]) -> ValidationReport:
        """저장하지 않고 문서만 검증. 형식 오류는 DialogueFormatError."""
        return validate_dialogue(dialogue_from_dict(document))

    # === 에디터 ===

    def open_editor(
        self,
        dialogue_id: Optional[str] = None,
        property_editor: Optional[PropertyEditor] = None,
        viewport: tuple[float, float] = (1200, 800),
    ) -> Optional[DialogueEditor]:
        """에디터 세션 생성. 저장 시 이 서비스로 기록된다.

        dialogue_id가 없으면 새 그래프, 있는데 DB에 없으면 None.
        """
        if dialogue_id is None:
            dialogue = create_dialogue(settings.DEFAULT_DIALOGUE_NAME)
        else:
            dialogue = self.get(dialogue_id)
            if dialogue is None:
                logger.warning("Dialogue not found for editor: %s", dialogue_id)
                return None

        editor = DialogueEditor(
            dialogue,
            options=self._options,
            property_editor=property_editor,
            store=self,
            viewport=viewport,
        )
        editor.is_new = dialogue_id is None
        return editor
