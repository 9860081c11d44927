"""Badge threshold rules and the evaluator that applies them."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.db.models import Interview
from intervue.gamification.badge_service import grant_badge, held_badge_ids
from intervue.gamification.ledger import get_balance
from intervue.gamification.streak_service import get_streak

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleContext:
    """Signals the badge rules are evaluated against."""

    tokens: int
    streak: int
    interview_count: int


@dataclass(frozen=True)
class BadgeRule:
    name: str
    badge_id: str
    condition: Callable[[RuleContext], bool]


BADGE_RULES: tuple[BadgeRule, ...] = (
    BadgeRule(
        "First Interview",
        "badge_first_interview",
        lambda ctx: ctx.interview_count == 1 and ctx.tokens >= 10,
    ),
    BadgeRule("Ten Tokens", "badge_10_tokens", lambda ctx: ctx.tokens >= 10),
    BadgeRule("Fifty Tokens", "badge_50_tokens", lambda ctx: ctx.tokens >= 50),
    BadgeRule("Week Streak", "badge_7_day_streak", lambda ctx: ctx.streak >= 7),
)

TOKEN_RULES: tuple[BadgeRule, ...] = tuple(
    r for r in BADGE_RULES if r.badge_id in {"badge_10_tokens", "badge_50_tokens"}
)


def qualifying_badges(context: RuleContext, rules: tuple[BadgeRule, ...] = BADGE_RULES) -> list[str]:
    """Badge ids whose rule holds for ``context``. Rules are independent, not gates."""
    return [rule.badge_id for rule in rules if rule.condition(context)]


async def count_interviews(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(Interview).where(Interview.user_id == user_id)
    )
    return result.scalar_one()


async def build_context(db: AsyncSession, user_id: str) -> RuleContext:
    """Read the user's current token, streak and interview-count signals."""
    return RuleContext(
        tokens=await get_balance(db, user_id),
        streak=await get_streak(db, user_id),
        interview_count=await count_interviews(db, user_id),
    )


async def evaluate_and_award(
    db: AsyncSession,
    user_id: str,
    context: RuleContext,
    redis: object = None,
    rules: tuple[BadgeRule, ...] = BADGE_RULES,
) -> list[str]:
    """Grant every badge whose rule holds and return the ids newly granted.

    All rules are re-checked on every call; badges already held are skipped
    before any write. Each grant commits on its own, and a failing grant is
    logged without stopping the remaining rules.
    """
    held = await held_badge_ids(db, user_id)
    awarded: list[str] = []

    for badge_id in qualifying_badges(context, rules):
        if badge_id in held:
            continue
        try:
            result = await grant_badge(db, user_id, badge_id, redis)
        except Exception:
            logger.exception("Failed to grant %s to %s", badge_id, user_id)
            await db.rollback()
            continue
        if result.created:
            awarded.append(badge_id)

    return awarded
