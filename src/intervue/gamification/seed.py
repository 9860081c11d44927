"""Badge catalog seed data: ids are the stable slugs the badge rules award."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from intervue.db.models import Badge
from intervue.db.upsert import insert_for

logger = logging.getLogger(__name__)

BADGE_SEED_DATA: list[dict] = [
    {
        "id": "badge_first_interview",
        "name": "First Interview",
        "image_url": "/badges/first-interview.svg",
        "description": "Complete your first mock interview and earn 10 tokens",
        "sort_order": 1,
    },
    {
        "id": "badge_10_tokens",
        "name": "10 Tokens",
        "image_url": "/badges/10-tokens.svg",
        "description": "Collect 10 tokens",
        "sort_order": 2,
    },
    {
        "id": "badge_50_tokens",
        "name": "50 Tokens",
        "image_url": "/badges/50-tokens.svg",
        "description": "Collect 50 tokens",
        "sort_order": 3,
    },
    {
        "id": "badge_7_day_streak",
        "name": "7-Day Streak",
        "image_url": "/badges/7-day-streak.svg",
        "description": "Practice seven days in a row",
        "sort_order": 4,
    },
]


async def seed_badges(db: AsyncSession) -> int:
    """Upsert all badge definitions. Returns number of badges seeded."""
    seeded = 0
    for badge_data in BADGE_SEED_DATA:
        stmt = insert_for(db, Badge).values(**badge_data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "name": stmt.excluded.name,
                "image_url": stmt.excluded.image_url,
                "description": stmt.excluded.description,
                "sort_order": stmt.excluded.sort_order,
            },
        )
        await db.execute(stmt)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d badge definitions", seeded)
    return seeded
