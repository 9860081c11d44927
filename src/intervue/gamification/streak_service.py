"""Streak tracking: consecutive-day activity counts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.db.models import Streak
from intervue.db.upsert import insert_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakState:
    """Current streak count and the timestamp of the last recorded activity."""

    count: int
    last_date: datetime | None


def to_utc(value: datetime | date) -> datetime:
    """Normalize a date or (possibly naive) datetime to an aware UTC datetime."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def as_utc(value: datetime | date | None) -> datetime | None:
    """Like :func:`to_utc`, passing ``None`` through (nullable columns)."""
    return None if value is None else to_utc(value)


def next_count(current: int, last_date: datetime | None, activity_date: datetime) -> int:
    """Derive the streak count for a new activity from the calendar-day gap.

    Same UTC day: unchanged. Exactly one day later: +1. Anything else
    (a gap, or an activity older than the last one): a new streak of 1.
    """
    if last_date is None:
        return 1
    gap = (activity_date.date() - last_date.date()).days
    if gap == 0:
        return max(current, 1)
    if gap == 1:
        return current + 1
    return 1


async def get_streak_state(db: AsyncSession, user_id: str) -> StreakState:
    """Streak count and last activity. A user without a row has a zero streak."""
    result = await db.execute(select(Streak.count, Streak.last_date).where(Streak.user_id == user_id))
    row = result.one_or_none()
    if row is None:
        return StreakState(count=0, last_date=None)
    count, last_date = row
    return StreakState(count=count, last_date=as_utc(last_date))


async def get_streak(db: AsyncSession, user_id: str) -> int:
    """Current streak count, 0 when the user has no streak row."""
    return (await get_streak_state(db, user_id)).count


async def record_activity(
    db: AsyncSession,
    user_id: str,
    activity_date: datetime | date,
    increment: bool | None = None,
) -> StreakState:
    """Record a qualifying activity and return the updated streak.

    The first activity always starts a streak of 1. After that, an explicit
    ``increment`` flag is trusted as given (``True`` adds one, ``False``
    resets to 0). With ``increment=None`` continuation is derived from the
    gap between ``activity_date`` and the stored last activity.
    """
    activity_at = to_utc(activity_date)

    if increment is not None:
        stmt = insert_for(db, Streak).values(user_id=user_id, count=1, last_date=activity_at)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id"],
            set_={
                "count": Streak.count + 1 if increment else 0,
                "last_date": stmt.excluded.last_date,
            },
        ).returning(Streak.count, Streak.last_date)
        count, last_date = (await db.execute(stmt)).one()
        await db.commit()
        state = StreakState(count=count, last_date=as_utc(last_date))
        logger.info("Streak for %s set to %d (increment=%s)", user_id, state.count, increment)
        return state

    current = await get_streak_state(db, user_id)
    if current.last_date is not None and activity_at < current.last_date:
        # Out-of-order activity never rewinds the streak.
        return current

    count = next_count(current.count, current.last_date, activity_at)
    stmt = insert_for(db, Streak).values(user_id=user_id, count=count, last_date=activity_at)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={"count": stmt.excluded.count, "last_date": stmt.excluded.last_date},
    )
    await db.execute(stmt)
    await db.commit()

    logger.info("Streak for %s is now %d", user_id, count)
    return StreakState(count=count, last_date=activity_at)
