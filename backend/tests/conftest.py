"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- Test database engine and sessions (SQLite file by default, or
  DATABASE_TEST_URL for PostgreSQL)
- Seeded identities (patient, second patient, admin)
- HTTP client for API testing with auth and analysis overrides
- Mocked OpenAI client and upstream error factories
"""

import copy
import json
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.auth import verify_bearer_token
from app.database import Base, get_db, get_session_maker
from app.main import app
from app.models.auth import AuthUser
from app.models.profile import Profile, ProfileRole
from app.routes.analysis import get_analysis_service
from app.services.analysis import SymptomAnalysisService

TEST_USER_ID = "test-user"
OTHER_USER_ID = "other-user"
ADMIN_USER_ID = "admin-user"

GATEWAY_URL = "https://gateway.test/v1"

VALID_ANALYSIS = {
    "conditions": [
        {"name": "Common cold", "probability": 70, "explanation": "Cough with mild fever"},
        {"name": "Influenza", "probability": 45, "explanation": "Fever and body aches"},
    ],
    "riskLevel": "low",
    "recommendations": ["Rest", "Drink fluids"],
    "disclaimer": "This is not a medical diagnosis.",
}


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create test database engine with automatic schema management.

    Uses DATABASE_TEST_URL if set (for PostgreSQL in CI), otherwise a
    throwaway SQLite file so independent sessions share one database.
    """
    db_url = os.environ.get("DATABASE_TEST_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(db_url, echo=False)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncSession:
    """Test database session, rolled back on completion."""
    async with session_maker() as session:
        yield session
        await session.rollback()


async def _create_user(session_maker, user_id: str, role: ProfileRole | None = None) -> None:
    now = datetime.now(timezone.utc)
    async with session_maker() as session:
        session.add(
            AuthUser(
                id=user_id,
                name=user_id.replace("-", " ").title(),
                email=f"{user_id}@example.com",
                emailVerified=True,
                createdAt=now,
                updatedAt=now,
            )
        )
        await session.flush()
        if role is not None:
            session.add(Profile(id=user_id, role=role, full_name=user_id))
        await session.commit()


@pytest_asyncio.fixture
async def users(session_maker) -> dict[str, str]:
    """Seed a patient (no profile yet), a second patient, and an admin."""
    await _create_user(session_maker, TEST_USER_ID)
    await _create_user(session_maker, OTHER_USER_ID, ProfileRole.PATIENT)
    await _create_user(session_maker, ADMIN_USER_ID, ProfileRole.ADMIN)
    return {"patient": TEST_USER_ID, "other": OTHER_USER_ID, "admin": ADMIN_USER_ID}


# =============================================================================
# OpenAI Mocks
# =============================================================================


def make_completion(content: str | None) -> MagicMock:
    """Build a chat completion response with a single assistant message."""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    completion = MagicMock()
    completion.choices = [choice]
    return completion


def make_status_error(status_code: int) -> openai.APIStatusError:
    """Build the exception the OpenAI client raises for an HTTP error status."""
    request = httpx.Request("POST", f"{GATEWAY_URL}/chat/completions")
    response = httpx.Response(status_code, request=request, json={"error": "upstream"})
    error_cls = {
        402: openai.APIStatusError,
        429: openai.RateLimitError,
        500: openai.InternalServerError,
    }.get(status_code, openai.APIStatusError)
    return error_cls(f"Error code: {status_code}", response=response, body=None)


def create_mock_openai_client(content: str | None = None, error: Exception | None = None) -> AsyncMock:
    """Create a mock AsyncOpenAI client returning content or raising error."""
    client = AsyncMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        client.chat.completions.create = AsyncMock(return_value=make_completion(content))
    return client


@pytest.fixture
def valid_analysis() -> dict:
    """A well-formed analysis payload as the model would return it."""
    return copy.deepcopy(VALID_ANALYSIS)


@pytest.fixture
def openai_client_factory():
    """Factory for mock OpenAI clients (content=... or error=...)."""
    return create_mock_openai_client


@pytest.fixture
def status_error():
    """Factory for OpenAI HTTP status exceptions."""
    return make_status_error


@pytest.fixture
def mock_openai_client() -> AsyncMock:
    """Mock client replying with a valid analysis wrapped in prose."""
    return create_mock_openai_client(
        "Here is the assessment:\n```json\n" + json.dumps(VALID_ANALYSIS) + "\n```"
    )


@pytest.fixture
def analyzer(mock_openai_client) -> SymptomAnalysisService:
    """Analysis service wired to the mock OpenAI client."""
    return SymptomAnalysisService(api_key="test-key", base_url=GATEWAY_URL, client=mock_openai_client)


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


class AuthState:
    """Which user the stubbed bearer token resolves to."""

    def __init__(self, user_id: str = TEST_USER_ID):
        self.user_id = user_id


@pytest.fixture
def auth_state() -> AuthState:
    return AuthState()


@pytest.fixture
def login_as(auth_state):
    """Switch the authenticated user for subsequent requests."""

    def _login(user_id: str) -> None:
        auth_state.user_id = user_id

    return _login


def _override_get_db(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return override_get_db


@pytest_asyncio.fixture
async def client(session_maker, users, auth_state, analyzer):
    """Async test client for the FastAPI app with the test database.

    Overrides the database, session factory, auth, and analysis service
    dependencies. The authenticated user defaults to TEST_USER_ID.
    """

    async def stub_verify_bearer_token() -> str:
        return auth_state.user_id

    async def override_analysis_service():
        yield analyzer

    app.dependency_overrides[get_db] = _override_get_db(session_maker)
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    app.dependency_overrides[verify_bearer_token] = stub_verify_bearer_token
    app.dependency_overrides[get_analysis_service] = override_analysis_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anon_client(session_maker):
    """Test client with real bearer-token validation (no auth override)."""
    app.dependency_overrides[get_db] = _override_get_db(session_maker)
    app.dependency_overrides[get_session_maker] = lambda: session_maker

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authentication headers for API requests."""
    return {"Authorization": "Bearer test-token"}
