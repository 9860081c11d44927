"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool)
with the badge catalog seeded. Redis is left uninitialised, so rate limiting
passes through and reward events are not published.
"""

from __future__ import annotations

import os

os.environ["INTERVUE_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["INTERVUE_LOG_FORMAT"] = "console"
os.environ["INTERVUE_GEMINI_API_KEY"] = ""
os.environ["INTERVUE_JWT_SECRET"] = "test-secret-with-enough-length-for-hs256"

from collections.abc import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from intervue.ai.client import BaseCompletionProvider, CompletionClient  # noqa: E402
from intervue.config import get_settings  # noqa: E402
from intervue.database import close_db, create_all, get_session, init_db  # noqa: E402
from intervue.db.models import User  # noqa: E402
from intervue.dependencies import get_completion  # noqa: E402
from intervue.gamification.seed import seed_badges  # noqa: E402
from intervue.main import create_app  # noqa: E402
from intervue.redis_client import close_redis  # noqa: E402

get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """A session on a freshly created schema with badges seeded."""
    await init_db(get_settings().database_url)
    await create_all()
    async for session in get_session():
        await seed_badges(session)
        yield session
        await session.close()
        break
    await close_db()


@pytest.fixture
def mock_provider() -> AsyncMock:
    """Completion provider double. Set ``complete.return_value`` / ``side_effect`` per test."""
    provider = AsyncMock(spec=BaseCompletionProvider)
    provider.complete.return_value = "[]"
    return provider


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, mock_provider: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over the app, sharing the test database."""
    await close_redis()
    app = create_app()
    completion = CompletionClient(provider=mock_provider)
    app.dependency_overrides[get_completion] = lambda: completion

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _make_user(db: AsyncSession, name: str = "Ada Lovelace", email: str | None = None) -> User:
    """Insert a user directly (no password hashing) and commit."""
    user = User(
        name=name,
        email=email or f"{name.split()[0].lower()}@example.com",
        password_hash="not-a-real-hash",
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    return await _make_user(db_session)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, name="Grace Hopper")


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for extra users: ``await make_user("Name")``."""

    async def factory(name: str, email: str | None = None) -> User:
        return await _make_user(db_session, name=name, email=email)

    return factory
