"""Shared test fixtures."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.dialogues import router as dialogues_router
from src.api.health import router as health_router
from src.core.event_bus import EventBus
from src.db.database import get_db
from src.db.models import Base
from src.services.dialogue_graph_service import DialogueGraphService

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def db_session() -> Session:
    """테이블이 준비된 인메모리 세션. 테스트마다 초기화."""
    Base.metadata.drop_all(TEST_ENGINE)
    Base.metadata.create_all(TEST_ENGINE)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def service(db_session: Session, event_bus: EventBus) -> DialogueGraphService:
    return DialogueGraphService(db_session, event_bus)


@pytest.fixture()
def client(service: DialogueGraphService) -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database."""
    app = FastAPI()
    app.include_router(health_router)
    app.include_router(dialogues_router)
    app.state.dialogue_graph_service = service
    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)
