"""Leaderboard ranking, tie-breaks and the period window."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from intervue.db.models import TokenBalance
from intervue.gamification.leaderboard_service import period_cutoff, subtract_month, top_n

NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)


async def _balance(db, user, amount: int, updated_at: datetime) -> None:
    db.add(TokenBalance(user_id=user.id, amount=amount, updated_at=updated_at))
    await db.commit()


class TestPeriodCutoff:
    def test_week(self):
        assert period_cutoff("week", NOW) == NOW - timedelta(days=7)

    def test_month(self):
        assert period_cutoff("month", NOW) == datetime(2026, 2, 28, 12, 0, tzinfo=timezone.utc)

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            period_cutoff("year", NOW)


class TestSubtractMonth:
    @pytest.mark.parametrize(
        "moment,expected",
        [
            (datetime(2026, 5, 15), datetime(2026, 4, 15)),
            (datetime(2026, 1, 20), datetime(2025, 12, 20)),
            (datetime(2026, 3, 31), datetime(2026, 2, 28)),
            (datetime(2024, 3, 30), datetime(2024, 2, 29)),
            (datetime(2026, 7, 31), datetime(2026, 6, 30)),
        ],
    )
    def test_clamps_to_month_end(self, moment, expected):
        assert subtract_month(moment) == expected


class TestTopN:
    @pytest.mark.asyncio
    async def test_orders_by_amount(self, db_session, make_user):
        low = await make_user("Low Scorer")
        high = await make_user("High Scorer")
        mid = await make_user("Mid Scorer")
        await _balance(db_session, low, 5, NOW - timedelta(hours=1))
        await _balance(db_session, high, 40, NOW - timedelta(days=2))
        await _balance(db_session, mid, 20, NOW - timedelta(days=1))

        entries = await top_n(db_session, "week", 10, now=NOW)
        assert [e.amount for e in entries] == [40, 20, 5]
        assert [e.name for e in entries] == ["High Scorer", "Mid Scorer", "Low Scorer"]

    @pytest.mark.asyncio
    async def test_ties_broken_by_user_id(self, db_session, make_user):
        users = [await make_user(name) for name in ("Avery Tie", "Blake Tie", "Casey Tie")]
        for u in users:
            await _balance(db_session, u, 15, NOW - timedelta(hours=2))

        entries = await top_n(db_session, "week", 10, now=NOW)
        assert [e.user_id for e in entries] == sorted(u.id for u in users)

    @pytest.mark.asyncio
    async def test_stale_balances_excluded(self, db_session, make_user):
        fresh = await make_user("Fresh Face")
        stale = await make_user("Stale Face")
        await _balance(db_session, fresh, 3, NOW - timedelta(days=6))
        await _balance(db_session, stale, 300, NOW - timedelta(days=8))

        week = await top_n(db_session, "week", 10, now=NOW)
        assert [e.user_id for e in week] == [fresh.id]

        month = await top_n(db_session, "month", 10, now=NOW)
        assert [e.user_id for e in month] == [stale.id, fresh.id]

    @pytest.mark.asyncio
    async def test_limit(self, db_session, make_user):
        for i in range(5):
            u = await make_user(f"Player{i} X")
            await _balance(db_session, u, i + 1, NOW - timedelta(hours=1))

        entries = await top_n(db_session, "week", 3, now=NOW)
        assert [e.amount for e in entries] == [5, 4, 3]

    @pytest.mark.asyncio
    async def test_zero_limit(self, db_session, user):
        await _balance(db_session, user, 10, NOW)
        assert await top_n(db_session, "week", 0, now=NOW) == []

    @pytest.mark.asyncio
    async def test_unknown_period_raises(self, db_session):
        with pytest.raises(ValueError):
            await top_n(db_session, "decade", 10, now=NOW)

    @pytest.mark.asyncio
    async def test_updated_at_is_aware(self, db_session, user):
        await _balance(db_session, user, 10, NOW - timedelta(minutes=5))
        (entry,) = await top_n(db_session, "week", 10, now=NOW)
        assert entry.updated_at == NOW - timedelta(minutes=5)
