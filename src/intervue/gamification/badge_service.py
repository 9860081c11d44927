"""Badge award service with duplicate prevention and notification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.db.models import Badge, UserBadge
from intervue.db.upsert import insert_for
from intervue.redis_client import BADGE_EARNED_CHANNEL, publish_event

logger = logging.getLogger(__name__)


class BadgeNotFoundError(LookupError):
    """Raised when granting a badge id that is not in the catalog."""


@dataclass(frozen=True)
class GrantResult:
    """Outcome of a grant: the (first) award row and whether this call created it."""

    user_badge: UserBadge
    created: bool


async def get_badge(db: AsyncSession, badge_id: str) -> Badge | None:
    """Fetch a badge definition by its slug id."""
    result = await db.execute(select(Badge).where(Badge.id == badge_id))
    return result.scalar_one_or_none()


async def list_badges(db: AsyncSession) -> list[Badge]:
    """The full badge catalog in display order."""
    result = await db.execute(select(Badge).order_by(Badge.sort_order, Badge.id))
    return list(result.scalars())


async def get_user_badge(db: AsyncSession, user_id: str, badge_id: str) -> UserBadge | None:
    """The award row for (user, badge), if any."""
    result = await db.execute(
        select(UserBadge).where(
            UserBadge.user_id == user_id,
            UserBadge.badge_id == badge_id,
        )
    )
    return result.scalar_one_or_none()


async def held_badge_ids(db: AsyncSession, user_id: str) -> set[str]:
    """Ids of every badge the user holds."""
    result = await db.execute(select(UserBadge.badge_id).where(UserBadge.user_id == user_id))
    return set(result.scalars())


async def list_user_badges(db: AsyncSession, user_id: str) -> list[UserBadge]:
    """A user's earned badges, oldest award first."""
    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.awarded_at, UserBadge.id)
    )
    return list(result.scalars().unique())


async def grant_badge(
    db: AsyncSession,
    user_id: str,
    badge_id: str,
    redis: object = None,
) -> GrantResult:
    """Award a badge to a user exactly once.

    The insert is ``ON CONFLICT (user_id, badge_id) DO NOTHING``: a repeat
    grant (sequential or concurrent) leaves the original row and its
    ``awarded_at`` untouched and emits no second notification.

    Raises:
        BadgeNotFoundError: If ``badge_id`` is not in the catalog.
    """
    badge = await get_badge(db, badge_id)
    if badge is None:
        msg = f"Badge not found: {badge_id}"
        raise BadgeNotFoundError(msg)

    stmt = (
        insert_for(db, UserBadge)
        .values(user_id=user_id, badge_id=badge_id, awarded_at=datetime.now(timezone.utc))
        .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
        .returning(UserBadge.id)
    )
    try:
        created = (await db.execute(stmt)).scalar_one_or_none() is not None
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await get_user_badge(db, user_id, badge_id)
        if existing is None:
            raise
        return GrantResult(user_badge=existing, created=False)  # Race condition: badge already awarded

    user_badge = await get_user_badge(db, user_id, badge_id)
    if user_badge is None:
        msg = f"Badge award {badge_id} for {user_id} missing after insert"
        raise LookupError(msg)

    if created:
        logger.info("Badge %s awarded to %s", badge_id, user_id)
        await publish_event(
            redis,
            BADGE_EARNED_CHANNEL,
            {
                "user_id": user_id,
                "badge_id": badge.id,
                "badge_name": badge.name,
                "image_url": badge.image_url,
            },
        )

    return GrantResult(user_badge=user_badge, created=created)

