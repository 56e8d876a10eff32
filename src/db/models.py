"""SQLAlchemy declarative base and dialogue graph ORM model."""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class DialogueGraphModel(Base):
    """저장된 대화 그래프 한 건.

    document 컬럼이 정본(직렬화 문서 전체)이고,
    나머지 컬럼은 목록 조회용 요약이다.
    """

    __tablename__ = "dialogue_graphs"
    __table_args__ = (Index("idx_dialogue_graphs_actor", "actor_id"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    actor_id: Mapped[str | None] = mapped_column(String, nullable=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    start_node_id: Mapped[str | None] = mapped_column(String, nullable=True)
    node_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
