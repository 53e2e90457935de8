"""Test fixtures — a fresh in-memory database and app per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine (aiosqlite). StaticPool
   keeps a single connection open, so every session sees the same database.
2. The app is built with create_app(TEST_SETTINGS) and get_db is
   overridden to hand out sessions from the test engine.
3. Google is never called: the OAuth client's HTTP client runs on a
   MockTransport that replays queued responses and records requests.

Tokens are minted with the app's own TokenService, so the access guard
runs for real in every API test.
"""

import uuid
from datetime import datetime
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from notekeeper.auth.google import GoogleOAuthClient
from notekeeper.auth.jwt import SessionClaims
from notekeeper.config import Settings
from notekeeper.db.engine import get_db, make_session_factory
from notekeeper.db.models import Base, Note, User
from notekeeper.main import create_app

TEST_DB_URL = "sqlite+aiosqlite://"

TEST_SETTINGS = Settings(
    environment="test",
    database_url=TEST_DB_URL,
    jwt_secret="test-secret-do-not-use-anywhere-else",
    google_client_id="test-client-id.apps.googleusercontent.com",
    google_client_secret="test-client-secret",
    google_callback_url="http://localhost:5173/auth/callback",
)

USER_ID = "00000000-0000-0000-0000-000000000001"
OTHER_USER_ID = "00000000-0000-0000-0000-000000000002"
ADMIN_ID = "00000000-0000-0000-0000-0000000000a1"


class MockTransport(httpx.AsyncBaseTransport):
    """Mock HTTP transport that returns preconfigured responses.

    Usage:
        transport = MockTransport(responses=[
            httpx.Response(200, json={"access_token": "ya29.x"}),
            httpx.Response(200, json={"email": "a@example.com", ...}),
        ])

    Each request pops the next entry. An exception instance is raised
    instead of answered. If the list is exhausted, returns a 500 error.
    """

    def __init__(self, responses: Optional[list] = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            response.stream = httpx.ByteStream(response.content)
            return response
        return httpx.Response(500, json={"error": "No more mock responses"})


def google_profile(**overrides) -> dict:
    profile = {
        "id": "109876543210",
        "email": "alice@example.com",
        "verified_email": True,
        "name": "Alice Example",
        "picture": "https://lh3.googleusercontent.com/a/alice",
    }
    profile.update(overrides)
    return profile


# ─── Database ───────────────────────────────────────────


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def create_user(session_factory):
    """Insert a user row directly, bypassing Google."""

    async def _create(
        email: str = "alice@example.com",
        role: str = "user",
        name: str = "Alice Example",
        user_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> User:
        user = User(
            email=email,
            name=name,
            role=role,
            external_id=f"google-{email}",
        )
        if user_id is not None:
            user.id = uuid.UUID(user_id)
        if created_at is not None:
            user.created_at = created_at
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _create


@pytest.fixture()
def create_note(session_factory):
    """Insert a note row directly, e.g. to control created_at."""

    async def _create(
        owner_id: str = USER_ID,
        title: str = "Title",
        content: str = "Body",
        tags: Optional[list[str]] = None,
        category: str = "general",
        created_at: Optional[datetime] = None,
    ) -> Note:
        note = Note(
            owner_id=uuid.UUID(owner_id),
            title=title,
            content=content,
            category=category,
        )
        note.tags = list(tags or [])
        if created_at is not None:
            note.created_at = created_at
            note.updated_at = created_at
        async with session_factory() as session:
            session.add(note)
            await session.commit()
        return note

    return _create


# ─── App + client ───────────────────────────────────────


@pytest.fixture()
def google_transport():
    return MockTransport()


@pytest_asyncio.fixture()
async def app(session_factory, google_transport):
    app = create_app(TEST_SETTINGS)
    await app.state.google.aclose()
    app.state.google = GoogleOAuthClient.from_settings(
        TEST_SETTINGS, http=httpx.AsyncClient(transport=google_transport)
    )

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()
    await app.state.google.aclose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ─── Tokens ─────────────────────────────────────────────


@pytest.fixture()
def make_token(app):
    def _make(
        user_id: str = USER_ID,
        email: str = "alice@example.com",
        role: str = "user",
        now: Optional[datetime] = None,
    ) -> str:
        return app.state.tokens.issue(
            SessionClaims(user_id=user_id, email=email, role=role), now=now
        )

    return _make


@pytest.fixture()
def auth_headers(make_token):
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture()
def other_headers(make_token):
    token = make_token(user_id=OTHER_USER_ID, email="bob@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_headers(make_token):
    token = make_token(user_id=ADMIN_ID, email="root@example.com", role="admin")
    return {"Authorization": f"Bearer {token}"}
