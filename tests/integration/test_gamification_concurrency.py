"""Token and badge writes racing from separate sessions on a file-backed database.

The shared in-memory fixture runs every session over one connection, so
these tests open their own engine with a real connection pool.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from intervue.db.base import Base
from intervue.db.models import User, UserBadge
from intervue.gamification.badge_service import grant_badge
from intervue.gamification.ledger import award_tokens, get_balance
from intervue.gamification.seed import seed_badges
from intervue.gamification.streak_service import as_utc


@pytest_asyncio.fixture
async def sessions(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'race.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db:
        await seed_badges(db)
    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def user_id(sessions) -> str:
    async with sessions() as db:
        user = User(name="Ada Lovelace", email="ada@example.com", password_hash="not-a-real-hash")
        db.add(user)
        await db.commit()
        return user.id


class _PlainInsert:
    """Dialect insert without the ON CONFLICT clause, so a duplicate hits the constraint."""

    def __init__(self, model):
        self.stmt = insert(model)

    def values(self, **kwargs):
        self.stmt = self.stmt.values(**kwargs)
        return self

    def on_conflict_do_nothing(self, **kwargs):
        return self

    def returning(self, *cols):
        return self.stmt.returning(*cols)


class TestConcurrentTokens:
    @pytest.mark.asyncio
    async def test_parallel_awards_lose_no_increment(self, sessions, user_id):
        amounts = list(range(1, 11))

        async def award(amount: int) -> int:
            async with sessions() as db:
                return await award_tokens(db, user_id, amount)

        totals = await asyncio.gather(*(award(amount) for amount in amounts))

        assert max(totals) == sum(amounts)
        assert len(set(totals)) == len(amounts)
        async with sessions() as db:
            assert await get_balance(db, user_id) == sum(amounts)


class TestConcurrentBadges:
    @pytest.mark.asyncio
    async def test_parallel_grants_store_one_row(self, sessions, user_id):
        async def grant():
            async with sessions() as db:
                result = await grant_badge(db, user_id, "badge_7_day_streak")
                return result.created, as_utc(result.user_badge.awarded_at)

        results = await asyncio.gather(*(grant() for _ in range(4)))

        assert sorted(created for created, _ in results) == [False, False, False, True]
        assert len({awarded_at for _, awarded_at in results}) == 1
        async with sessions() as db:
            count = await db.scalar(select(func.count()).select_from(UserBadge).where(UserBadge.user_id == user_id))
        assert count == 1

    @pytest.mark.asyncio
    async def test_constraint_violation_returns_existing_award(self, sessions, user_id, monkeypatch):
        original = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        async with sessions() as other:
            other.add(UserBadge(user_id=user_id, badge_id="badge_7_day_streak", awarded_at=original))
            await other.commit()

        monkeypatch.setattr(
            "intervue.gamification.badge_service.insert_for",
            lambda db, model: _PlainInsert(model),
        )
        async with sessions() as db:
            result = await grant_badge(db, user_id, "badge_7_day_streak")

            assert result.created is False
            assert as_utc(result.user_badge.awarded_at) == original
            count = await db.scalar(select(func.count()).select_from(UserBadge))
        assert count == 1
