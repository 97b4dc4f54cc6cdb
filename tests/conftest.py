"""Pytest configuration and fixtures."""

import os
from unittest.mock import AsyncMock

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("GOOGLE_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123:test-token")
os.environ.setdefault("ADMIN_UIDS", "admin-uid")

from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from injaz.db.models import Organization, User  # noqa: E402
from injaz.db.session import build_engine, init_db  # noqa: E402
from injaz.services import parties  # noqa: E402

ORG_ID = "org-test"
USER_ID = "user-1"


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=True, bind=engine)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def org(session):
    organization = Organization(id=ORG_ID, name="Test Org", currency="EGP")
    session.add(organization)
    session.commit()
    return organization


@pytest.fixture
def user(session, org):
    member = User(
        id=USER_ID,
        email="sara@example.com",
        name="Sara Adel",
        role="Admin",
        approval_status="approved",
        organization_id=org.id,
    )
    session.add(member)
    session.commit()
    return member


@pytest.fixture
def client_party(session, org):
    party = parties.create_party(
        session,
        org.id,
        {"name": "Acme Holdings", "type": "CLIENT", "has_vat": True, "vat_rate": 0.14},
    )
    session.commit()
    return party


@pytest.fixture
def vendor_party(session, org):
    party = parties.create_party(session, org.id, {"name": "Nile Supplies", "type": "VENDOR"})
    session.commit()
    return party


@pytest.fixture
def mock_llm():
    """Mock LLM client exposing ``generate`` and ``transcribe``."""
    llm = AsyncMock()
    llm.generate = AsyncMock()
    llm.transcribe = AsyncMock(return_value="")
    return llm
