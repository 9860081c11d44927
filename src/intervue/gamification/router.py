"""Gamification API endpoints: tokens, streaks, badges, leaderboard.

userId is caller-supplied on every route; these endpoints do not enforce
authentication.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.auth.service import get_user_by_id
from intervue.config import get_settings
from intervue.database import get_session
from intervue.db.models import UserBadge
from intervue.dependencies import get_optional_redis
from intervue.gamification.badge_rules import TOKEN_RULES, RuleContext, evaluate_and_award
from intervue.gamification.badge_service import (
    BadgeNotFoundError,
    grant_badge,
    list_badges,
    list_user_badges,
)
from intervue.gamification.leaderboard_service import top_n
from intervue.gamification.ledger import award_tokens, get_balance
from intervue.gamification.schemas import (
    BadgeCatalogEntry,
    BadgeGrantRequest,
    BadgeGrantResponse,
    GamificationProfileResponse,
    LeaderboardEntryResponse,
    StreakResponse,
    StreakUpdateRequest,
    TokenAwardRequest,
    TokenBalanceResponse,
    UserBadgeResponse,
)
from intervue.gamification.streak_service import as_utc, get_streak_state, record_activity
from intervue.schemas import NON_BLANK

logger = structlog.get_logger()

router = APIRouter(prefix="/api/gamification", tags=["Gamification"])


async def _require_user(db: AsyncSession, user_id: str) -> None:
    if await get_user_by_id(db, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")


def _user_badge_response(ub: UserBadge) -> UserBadgeResponse:
    return UserBadgeResponse(
        badge_id=ub.badge_id,
        name=ub.badge.name,
        image_url=ub.badge.image_url,
        description=ub.badge.description,
        awarded_at=as_utc(ub.awarded_at),
    )


# ── Tokens ──


@router.get("/tokens", response_model=TokenBalanceResponse)
async def get_tokens(
    user_id: str = Query(..., alias="userId", min_length=1, pattern=NON_BLANK),
    db: AsyncSession = Depends(get_session),
):
    """Current token balance (0 when the user has never been awarded)."""
    return TokenBalanceResponse(amount=await get_balance(db, user_id))


@router.post("/tokens", response_model=TokenBalanceResponse)
async def add_tokens(
    body: TokenAwardRequest,
    db: AsyncSession = Depends(get_session),
    redis: Redis | None = Depends(get_optional_redis),
):
    """Add tokens to a user, then re-check the token badges."""
    await _require_user(db, body.user_id)
    total = await award_tokens(db, body.user_id, body.amount)

    context = RuleContext(tokens=total, streak=0, interview_count=0)
    awarded = await evaluate_and_award(db, body.user_id, context, redis, rules=TOKEN_RULES)
    if awarded:
        logger.info("token_badges_awarded", user_id=body.user_id, badges=awarded)

    return TokenBalanceResponse(amount=total)


# ── Streaks ──


@router.get("/streaks", response_model=StreakResponse)
async def get_streak(
    user_id: str = Query(..., alias="userId", min_length=1, pattern=NON_BLANK),
    db: AsyncSession = Depends(get_session),
):
    """Current streak count and last activity date."""
    state = await get_streak_state(db, user_id)
    return StreakResponse(count=state.count, last_date=state.last_date)


@router.post("/streaks", response_model=StreakResponse)
async def update_streak(
    body: StreakUpdateRequest,
    db: AsyncSession = Depends(get_session),
):
    """Increment or reset a streak as instructed by the caller."""
    await _require_user(db, body.user_id)
    last_date = body.last_date or datetime.now(timezone.utc)
    state = await record_activity(db, body.user_id, last_date, increment=body.increment)
    return StreakResponse(count=state.count, last_date=state.last_date)


# ── Badges ──


@router.get("/badges", response_model=list[UserBadgeResponse])
async def get_user_badges(
    user_id: str = Query(..., alias="userId", min_length=1, pattern=NON_BLANK),
    db: AsyncSession = Depends(get_session),
):
    """Badges a user has earned, oldest first."""
    return [_user_badge_response(ub) for ub in await list_user_badges(db, user_id)]


@router.post("/badges", response_model=BadgeGrantResponse)
async def award_badge(
    body: BadgeGrantRequest,
    db: AsyncSession = Depends(get_session),
    redis: Redis | None = Depends(get_optional_redis),
):
    """Grant a badge. Repeating the call returns the original award."""
    await _require_user(db, body.user_id)
    try:
        result = await grant_badge(db, body.user_id, body.badge_id, redis)
    except BadgeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return BadgeGrantResponse(
        badge_id=result.user_badge.badge_id,
        awarded_at=as_utc(result.user_badge.awarded_at),
    )


@router.get("/catalog", response_model=list[BadgeCatalogEntry])
async def get_catalog(db: AsyncSession = Depends(get_session)):
    """Every badge that can be earned."""
    return [
        BadgeCatalogEntry(
            badge_id=b.id,
            name=b.name,
            image_url=b.image_url,
            description=b.description,
        )
        for b in await list_badges(db)
    ]


# ── Leaderboard ──


@router.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
async def get_leaderboard(
    period: Literal["week", "month"] = Query("week"),
    db: AsyncSession = Depends(get_session),
):
    """Top users by tokens among balances updated in the last week or month."""
    entries = await top_n(db, period, get_settings().leaderboard_size)
    return [
        LeaderboardEntryResponse(
            user_id=e.user_id,
            name=e.name,
            amount=e.amount,
            updated_at=e.updated_at,
        )
        for e in entries
    ]


# ── Profile ──


@router.get("/profile", response_model=GamificationProfileResponse)
async def get_profile(
    user_id: str = Query(..., alias="userId", min_length=1, pattern=NON_BLANK),
    db: AsyncSession = Depends(get_session),
):
    """Tokens, streak and badges in one read (profile page)."""
    state = await get_streak_state(db, user_id)
    return GamificationProfileResponse(
        tokens=await get_balance(db, user_id),
        streak=StreakResponse(count=state.count, last_date=state.last_date),
        badges=[_user_badge_response(ub) for ub in await list_user_badges(db, user_id)],
    )
