"""Streak tracker in caller-flag and date-derived modes."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from intervue.gamification.streak_service import (
    as_utc,
    get_streak,
    get_streak_state,
    next_count,
    record_activity,
    to_utc,
)

DAY1 = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


class TestAsUtc:
    def test_none(self):
        assert as_utc(None) is None

    def test_naive_is_treated_as_utc(self):
        assert as_utc(datetime(2026, 1, 1, 12)) == datetime(2026, 1, 1, 12, tzinfo=timezone.utc)

    def test_date_becomes_midnight(self):
        assert as_utc(date(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_other_zone_converted(self):
        plus_two = timezone(timedelta(hours=2))
        assert as_utc(datetime(2026, 1, 1, 2, tzinfo=plus_two)) == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_to_utc_matches_as_utc(self):
        assert to_utc(date(2026, 1, 1)) == as_utc(date(2026, 1, 1))
        assert to_utc(datetime(2026, 1, 1, 12)).tzinfo is timezone.utc


class TestNextCount:
    def test_first_activity(self):
        assert next_count(0, None, DAY1) == 1

    def test_same_day_unchanged(self):
        assert next_count(4, DAY1, DAY1 + timedelta(hours=8)) == 4

    def test_same_day_never_below_one(self):
        assert next_count(0, DAY1, DAY1) == 1

    def test_next_day_increments(self):
        assert next_count(4, DAY1, DAY1 + timedelta(days=1)) == 5

    def test_next_day_just_after_midnight(self):
        late = datetime(2026, 3, 2, 23, 59, tzinfo=timezone.utc)
        early = datetime(2026, 3, 3, 0, 1, tzinfo=timezone.utc)
        assert next_count(2, late, early) == 3

    def test_gap_restarts(self):
        assert next_count(9, DAY1, DAY1 + timedelta(days=2)) == 1


class TestCallerFlag:
    @pytest.mark.asyncio
    async def test_first_record_is_one_whatever_the_flag(self, db_session, user):
        state = await record_activity(db_session, user.id, DAY1, increment=False)
        assert state.count == 1
        assert state.last_date == DAY1

    @pytest.mark.asyncio
    async def test_increment_adds_one(self, db_session, user):
        await record_activity(db_session, user.id, DAY1, increment=True)
        state = await record_activity(db_session, user.id, DAY1 + timedelta(days=1), increment=True)
        assert state.count == 2

    @pytest.mark.asyncio
    async def test_flag_is_trusted_even_on_same_day(self, db_session, user):
        await record_activity(db_session, user.id, DAY1, increment=True)
        state = await record_activity(db_session, user.id, DAY1, increment=True)
        assert state.count == 2

    @pytest.mark.asyncio
    async def test_reset_goes_to_zero(self, db_session, user):
        await record_activity(db_session, user.id, DAY1, increment=True)
        await record_activity(db_session, user.id, DAY1 + timedelta(days=1), increment=True)
        state = await record_activity(db_session, user.id, DAY1 + timedelta(days=5), increment=False)
        assert state.count == 0
        assert await get_streak(db_session, user.id) == 0

    @pytest.mark.asyncio
    async def test_last_date_always_overwritten(self, db_session, user):
        await record_activity(db_session, user.id, DAY1, increment=True)
        earlier = DAY1 - timedelta(days=3)
        await record_activity(db_session, user.id, earlier, increment=True)
        assert (await get_streak_state(db_session, user.id)).last_date == earlier


class TestDerivedMode:
    @pytest.mark.asyncio
    async def test_no_streak_reads_zero(self, db_session, user):
        state = await get_streak_state(db_session, user.id)
        assert state.count == 0
        assert state.last_date is None

    @pytest.mark.asyncio
    async def test_consecutive_days(self, db_session, user):
        for offset in range(7):
            state = await record_activity(db_session, user.id, DAY1 + timedelta(days=offset))
        assert state.count == 7
        assert await get_streak(db_session, user.id) == 7

    @pytest.mark.asyncio
    async def test_twice_in_one_day_counts_once(self, db_session, user):
        await record_activity(db_session, user.id, DAY1)
        state = await record_activity(db_session, user.id, DAY1 + timedelta(hours=3))
        assert state.count == 1

    @pytest.mark.asyncio
    async def test_gap_restarts_at_one(self, db_session, user):
        await record_activity(db_session, user.id, DAY1)
        await record_activity(db_session, user.id, DAY1 + timedelta(days=1))
        state = await record_activity(db_session, user.id, DAY1 + timedelta(days=4))
        assert state.count == 1

    @pytest.mark.asyncio
    async def test_out_of_order_activity_is_ignored(self, db_session, user):
        await record_activity(db_session, user.id, DAY1)
        await record_activity(db_session, user.id, DAY1 + timedelta(days=1))
        state = await record_activity(db_session, user.id, DAY1 - timedelta(days=3))
        assert state.count == 2
        assert state.last_date == DAY1 + timedelta(days=1)
