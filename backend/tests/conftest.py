"""
NoteWise Backend - Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

No test needs a real database or a real Gemini key:
    - the async engine is created at import but never connects
    - sessions are AsyncMocks
    - Gemini clients are fakes passed to GeminiService(client_factory=...)

Function-scoped fixtures:
    ├── mock_db_session:   Mock AsyncSession
    ├── user_id:           Owner id for the request
    ├── sample_note:       Active Note ORM instance owned by user_id
    ├── make_gemini_client: Builds fake genai clients with scripted replies
    └── test_client:       HTTPX AsyncClient bound to the app, DB overridden
"""

import os

# Set before any notewise import so Settings() picks them up.
os.environ.setdefault("GEMINI_API_KEY", "test-key-not-real")
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from notewise.models.note import Note


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value = result_with(note)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


@pytest.fixture
def user_id():
    return uuid.uuid4()


def build_note(owner_id, title="Weekly plan", content="Buy milk.\nCall Sam.", deleted=False, age_minutes=0):
    created = datetime.now(timezone.utc) - timedelta(minutes=age_minutes)
    return Note(
        id=uuid.uuid4(),
        user_id=owner_id,
        title=title,
        content=content,
        created_at=created,
        updated_at=created,
        deleted_at=created if deleted else None,
    )


@pytest.fixture
def sample_note(user_id):
    return build_note(user_id)


def result_with(value=None, values=None):
    """A mocked SQLAlchemy Result for scalar_one_or_none() and scalars().all()."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.all.return_value = list(values or [])
    return result


def gemini_response(text):
    return SimpleNamespace(text=text)


@pytest.fixture
def make_gemini_client():
    """
    Build a fake genai.Client whose generate_content follows `side_effect`.

    Each item is either an exception (raised) or a string (returned as the
    response text).
    """

    def factory(*outcomes):
        effects = [o if isinstance(o, BaseException) else gemini_response(o) for o in outcomes]
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(side_effect=effects)
        return client

    return factory


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient configured to talk to the FastAPI app.

    The database session dependency yields `mock_db_session`; tests patch the
    service singletons they exercise.
    """
    from notewise.database import get_db_session
    from notewise.main import app

    async def override_db_session():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
