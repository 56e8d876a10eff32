"""API request/response schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# === Request Schemas ===


class DialogueDocumentRequest(BaseModel):
    """직렬화 대화 문서 (camelCase 키 그대로)"""

    document: dict[str, Any] = Field(..., description="Dialogue 직렬화 문서")


# === Response Schemas ===


class DialogueSummaryResponse(BaseModel):
    """대화 그래프 목록 항목"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    actor_id: Optional[str] = None
    start_node_id: Optional[str] = None
    node_count: int = 0
    created_at: datetime
    updated_at: datetime


class ValidationIssueSchema(BaseModel):
    """검증 이슈 하나"""

    code: str
    message: str
    node_id: Optional[str] = None
    target_id: Optional[str] = None


class ValidationReportSchema(BaseModel):
    """검증 결과. errors가 비어 있으면 valid."""

    valid: bool
    errors: list[ValidationIssueSchema] = []
    warnings: list[ValidationIssueSchema] = []


class DialogueSavedResponse(BaseModel):
    """저장 결과 (경고 포함)"""

    id: str
    name: str
    node_count: int
    report: ValidationReportSchema


class ErrorResponse(BaseModel):
    """에러 응답"""

    error: str
    detail: Optional[str] = None
