"""Application startup and shutdown."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intervue.config import get_settings
from intervue.database import close_db, create_all, get_engine, init_db
from intervue.gamification.badge_service import list_badges
from intervue.gamification.seed import BADGE_SEED_DATA
from intervue.main import create_app, lifespan


@pytest.fixture
def app_settings(tmp_path, monkeypatch):
    """Point the app at a file database and leave Redis unconfigured."""
    settings = get_settings()
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setattr(settings, "redis_url", "")
    return settings


@pytest.mark.asyncio
async def test_startup_seeds_badge_catalog(app_settings) -> None:
    """The badge catalog is present once the app has started."""
    await init_db(app_settings.database_url)
    await create_all()
    await close_db()

    async with lifespan(create_app()):
        session_factory = async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
        async with session_factory() as db:
            badges = await list_badges(db)

    assert [badge.id for badge in badges] == [row["id"] for row in BADGE_SEED_DATA]


@pytest.mark.asyncio
async def test_startup_survives_seeding_failure(app_settings) -> None:
    """A schema that is not migrated yet only logs a warning."""
    async with lifespan(create_app()):
        assert get_engine() is not None
