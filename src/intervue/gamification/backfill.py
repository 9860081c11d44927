"""Badge backfill and status report.

Re-runs the badge rules for every user (for badges added after users already
qualified), or reports which badges one user holds.

Usage:
    python -m intervue.gamification.backfill
    python -m intervue.gamification.backfill --status student@example.com
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intervue.auth.service import get_user_by_email, list_user_ids
from intervue.config import get_settings
from intervue.database import close_db, get_engine, init_db
from intervue.gamification.badge_rules import build_context, evaluate_and_award
from intervue.gamification.badge_service import held_badge_ids, list_badges

logger = logging.getLogger(__name__)


@dataclass
class BadgeStatus:
    email: str
    user_id: str | None = None
    held: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


async def backfill_badges(db: AsyncSession, redis: object = None) -> dict[str, list[str]]:
    """Evaluate the badge rules for every user. Returns newly granted badges per user."""
    granted: dict[str, list[str]] = {}
    for user_id in await list_user_ids(db):
        context = await build_context(db, user_id)
        awarded = await evaluate_and_award(db, user_id, context, redis)
        if awarded:
            granted[user_id] = awarded
            logger.info("Backfilled %s for user %s", awarded, user_id)
    return granted


async def badge_status(db: AsyncSession, email: str) -> BadgeStatus:
    """Which catalog badges the user with ``email`` holds and which they lack."""
    status = BadgeStatus(email=email)
    user = await get_user_by_email(db, email)
    if user is None:
        return status

    status.user_id = user.id
    held = await held_badge_ids(db, user.id)
    for badge in await list_badges(db):
        (status.held if badge.id in held else status.missing).append(badge.id)
    return status


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m intervue.gamification.backfill",
        description="Re-evaluate badge rules for all users, or show one user's badges.",
    )
    parser.add_argument(
        "--status",
        metavar="EMAIL",
        help="print the badge status of this user instead of backfilling",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    await init_db(settings.database_url)
    session_factory = async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)

    try:
        async with session_factory() as db:
            if args.status:
                status = await badge_status(db, args.status)
                if status.user_id is None:
                    print(f"User {args.status} does not exist.")
                    return 1
                print(f"User {status.email} ({status.user_id})")
                print(f"  held:    {', '.join(status.held) or '-'}")
                print(f"  missing: {', '.join(status.missing) or '-'}")
                return 0

            granted = await backfill_badges(db)
            total = sum(len(badges) for badges in granted.values())
            print(f"Granted {total} badge(s) to {len(granted)} user(s).")
            return 0
    finally:
        await close_db()


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
