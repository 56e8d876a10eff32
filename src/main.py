"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.dialogues import router as dialogues_router
from src.api.health import router as health_router
from src.config import settings
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import SessionLocal, engine as db_engine
from src.db.models import Base
from src.services.dialogue_graph_service import DialogueGraphService

setup_logging(settings.LOG_LEVEL, sql_echo=settings.DEBUG)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    # DialogueGraphService 초기화
    logger.info("Initializing DialogueGraphService...")
    event_bus = EventBus()
    db_session = SessionLocal()
    app.state.event_bus = event_bus
    app.state.dialogue_graph_service = DialogueGraphService(db_session, event_bus)
    logger.info("DialogueGraphService initialized.")

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    db_session.close()


app = FastAPI(title="Conversation Graph", lifespan=lifespan)

app.include_router(health_router)
app.include_router(dialogues_router)
