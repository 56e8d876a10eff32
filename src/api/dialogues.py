"""Dialogue graph API endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    DialogueDocumentRequest,
    DialogueSavedResponse,
    DialogueSummaryResponse,
    ErrorResponse,
    ValidationReportSchema,
)
from src.core.dialogue_graph.errors import DialogueFormatError, DialogueValidationError
from src.core.dialogue_graph.models import Dialogue
from src.core.dialogue_graph.validation import ValidationReport
from src.core.logging import get_logger
from src.services.dialogue_graph_service import DialogueGraphService

logger = get_logger(__name__)

router = APIRouter(prefix="/dialogues", tags=["dialogues"])


def get_dialogue_graph_service(request: Request) -> DialogueGraphService:
    """DialogueGraphService 인스턴스 반환 (의존성 주입)"""
    service: DialogueGraphService = request.app.state.dialogue_graph_service
    return service


def _saved(dialogue: Dialogue, report: ValidationReport) -> DialogueSavedResponse:
    return DialogueSavedResponse(
        id=dialogue.id,
        name=dialogue.name,
        node_count=len(dialogue.nodes),
        report=ValidationReportSchema(**report.to_dict()),
    )


def _import(
    service: DialogueGraphService,
    document: dict[str, Any],
    dialogue_id: Optional[str] = None,
) -> DialogueSavedResponse:
    """형식 오류와 검증 에러를 모두 422로 변환"""
    try:
        dialogue, report = service.import_document(document, dialogue_id)
    except DialogueFormatError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DialogueValidationError as e:
        raise HTTPException(status_code=422, detail=e.report.to_dict())
    return _saved(dialogue, report)


@router.get("", response_model=list[DialogueSummaryResponse])
def list_dialogues(
    actor_id: Optional[str] = None,
    service: DialogueGraphService = Depends(get_dialogue_graph_service),
) -> list[DialogueSummaryResponse]:
    """저장된 대화 그래프 목록 (최근 수정 순)"""
    return [
        DialogueSummaryResponse.model_validate(s)
        for s in service.list_dialogues(actor_id)
    ]


@router.post(
    "",
    response_model=DialogueSavedResponse,
    status_code=201,
    responses={422: {"model": ErrorResponse}},
)
def create_dialogue(
    request: DialogueDocumentRequest,
    service: DialogueGraphService = Depends(get_dialogue_graph_service),
) -> DialogueSavedResponse:
    """문서 가져오기 (import). 문서에 id가 있으면 그 ID로 저장."""
    result = _import(service, request.document)
    logger.info("Dialogue created via API: %s", result.id)
    return result


@router.post("/validate", response_model=ValidationReportSchema)
def validate_document(
    request: DialogueDocumentRequest,
    service: DialogueGraphService = Depends(get_dialogue_graph_service),
) -> ValidationReportSchema:
    """저장 없이 문서만 검증"""
    try:
        report = service.validate_document(request.document)
    except DialogueFormatError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ValidationReportSchema(**report.to_dict())


@router.get(
    "/{dialogue_id}",
    response_model=dict[str, Any],
    responses={404: {"model": ErrorResponse}},
)
def export_dialogue(
    dialogue_id: str,
    service: DialogueGraphService = Depends(get_dialogue_graph_service),
) -> dict[str, Any]:
    """직렬화 문서 내보내기 (export)"""
    document = service.export_document(dialogue_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Dialogue not found: {dialogue_id}")
    return document


@router.put(
    "/{dialogue_id}",
    response_model=DialogueSavedResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def replace_dialogue(
    dialogue_id: str,
    request: DialogueDocumentRequest,
    service: DialogueGraphService = Depends(get_dialogue_graph_service),
) -> DialogueSavedResponse:
    """기존 그래프를 문서로 교체. 문서의 id는 경로 ID로 덮어쓴다."""
    if service.get(dialogue_id) is None:
        raise HTTPException(status_code=404, detail=f"Dialogue not found: {dialogue_id}")
    return _import(service, request.document, dialogue_id)


@router.delete(
    "/{dialogue_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
)
def delete_dialogue(
    dialogue_id: str,
    service: DialogueGraphService = Depends(get_dialogue_graph_service),
) -> None:
    if not service.delete(dialogue_id):
        raise HTTPException(status_code=404, detail=f"Dialogue not found: {dialogue_id}")


@router.post(
    "/{dialogue_id}/validate",
    response_model=ValidationReportSchema,
    responses={404: {"model": ErrorResponse}},
)
def validate_dialogue(
    dialogue_id: str,
    service: DialogueGraphService = Depends(get_dialogue_graph_service),
) -> ValidationReportSchema:
    """저장된 그래프 검증"""
    report = service.validate(dialogue_id)
    if report is None:
        raise HTTPException(status_code=404, detail=f"Dialogue not found: {dialogue_id}")
    return ValidationReportSchema(**report.to_dict())
