"""Leaderboard service: token ranking over a rolling window.

Reads straight from the token ledger; the ranking never mutates state and
tolerates concurrent awards (eventually-consistent order is acceptable).
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.db.models import TokenBalance, User
from intervue.gamification.streak_service import as_utc

logger = logging.getLogger(__name__)

PERIODS = ("week", "month")


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    name: str
    amount: int
    updated_at: datetime


def subtract_month(dt: datetime) -> datetime:
    """Same wall-clock time one calendar month earlier, clamped to the month's last day."""
    year, month = (dt.year - 1, 12) if dt.month == 1 else (dt.year, dt.month - 1)
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def period_cutoff(period: str, now: datetime | None = None) -> datetime:
    """Earliest ``updated_at`` that still counts for ``period``."""
    if now is None:
        now = datetime.now(timezone.utc)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return subtract_month(now)
    raise ValueError(f"Unknown period: {period}")


async def top_n(
    db: AsyncSession,
    period: str,
    n: int,
    now: datetime | None = None,
) -> list[LeaderboardEntry]:
    """Top ``n`` users by token amount among balances updated within ``period``.

    Ties on amount are broken by user id ascending so the order is stable.
    """
    cutoff = period_cutoff(period, now)
    if n <= 0:
        return []

    result = await db.execute(
        select(TokenBalance.user_id, User.name, TokenBalance.amount, TokenBalance.updated_at)
        .join(User, TokenBalance.user_id == User.id)
        .where(TokenBalance.updated_at >= cutoff)
        .order_by(TokenBalance.amount.desc(), TokenBalance.user_id.asc())
        .limit(n)
    )

    entries = [
        LeaderboardEntry(
            user_id=user_id,
            name=name,
            amount=amount,
            updated_at=as_utc(updated_at),  # type: ignore[arg-type]
        )
        for user_id, name, amount, updated_at in result
    ]
    logger.debug("Leaderboard %s: %d entries since %s", period, len(entries), cutoff.isoformat())
    return entries
