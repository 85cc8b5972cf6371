"""
Test configuration and fixtures.

Provides:
- In-memory SQLite session (foreign keys on), fresh per test
- LeadStore bound to that session
- FakeTransport recording every send instead of calling the Graph API
- FastAPI TestClient with the DB, settings and transport overridden
"""
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lead_router.config import Settings, get_settings
from lead_router.db import build_engine, get_db
from lead_router.deps import get_transport
from lead_router.main import app
from lead_router.models import Base
from lead_router.services.router import LeadRouter
from lead_router.services.whatsapp import SendResult
from lead_router.store import LeadStore


class FakeTransport:
    """Stands in for WhatsAppClient; returns a preset result."""

    def __init__(self, result: SendResult = None):
        self.result = result or SendResult(success=True, data={"messages": [{"id": "wamid.TEST"}]})
        self.calls = []

    def send_text(self, to, body, phone_number_id):
        self.calls.append(("text", to, body, phone_number_id))
        return self.result

    def send_template(self, to, template_name, language_code, body_parameters, phone_number_id):
        self.calls.append(
            ("template", to, template_name, language_code, list(body_parameters), phone_number_id)
        )
        return self.result


# =============================================================================
# Database
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    engine = build_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def store(db) -> LeadStore:
    return LeadStore(db)


# =============================================================================
# Engine
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        phone_number_id="1000000001",
        access_token="test-token",
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def lead_router(store, transport, settings) -> LeadRouter:
    return LeadRouter(store, transport, settings)


@pytest.fixture
def make_agent(store):
    def _make(name, wa_number, phone_number_id=None, active=True):
        agent = store.create_agent(name, wa_number, phone_number_id)
        if not active:
            store.set_agent_active(agent.id, False)
            store.db.refresh(agent)
        return agent

    return _make


# =============================================================================
# HTTP
# =============================================================================

@pytest.fixture
def client(db, settings, transport) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_transport] = lambda: transport

    yield TestClient(app)

    app.dependency_overrides.clear()
