"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core import __version__
from src.db.database import get_db
from src.db.models import DialogueGraphModel

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> dict[str, object]:
    """앱/DB 상태와 저장된 대화 그래프 수"""
    try:
        count = db.scalar(select(func.count()).select_from(DialogueGraphModel))
    except SQLAlchemyError as e:
        logger.error("Health check failed: %s", e)
        return {"status": "error", "database": "disconnected", "version": __version__}
    return {
        "status": "ok",
        "database": "connected",
        "dialogues": count or 0,
        "version": __version__,
    }
