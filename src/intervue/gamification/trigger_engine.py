"""Reward trigger: token, streak and badge updates after a qualifying action."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.config import get_settings
from intervue.db.models import RewardEvent
from intervue.db.upsert import insert_for
from intervue.gamification.badge_rules import build_context, evaluate_and_award
from intervue.gamification.ledger import award_tokens
from intervue.gamification.streak_service import record_activity
from intervue.redis_client import REWARD_APPLIED_CHANNEL, publish_event

logger = structlog.get_logger()

REWARD_INTERVIEW_FEEDBACK = "interview_feedback"
REWARD_QUIZ_COMPLETION = "quiz_completion"


@dataclass
class RewardOutcome:
    """What a trigger run changed. ``errors`` names the steps that failed."""

    duplicate: bool = False
    balance: int | None = None
    streak: int | None = None
    badges: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class RewardTrigger:
    """Runs the reward saga for one qualifying event.

    The claim and the token increment commit as one unit; streak and badges
    then commit on their own. A failing step is logged and recorded in the
    outcome. A failed claim or token step ends the run with nothing kept.
    Later failures never roll back earlier steps.
    """

    def __init__(self, db: AsyncSession, redis: object = None) -> None:
        self.db = db
        self.redis = redis

    async def on_feedback_completed(self, user_id: str, interview_id: str) -> RewardOutcome:
        """Reward the first feedback generated for an interview."""
        amount = get_settings().feedback_reward_tokens
        return await self.fire(user_id, REWARD_INTERVIEW_FEEDBACK, interview_id, amount)

    async def on_quiz_completed(self, user_id: str, attempt_id: str) -> RewardOutcome:
        """Reward a completed quiz attempt."""
        amount = get_settings().quiz_reward_tokens
        return await self.fire(user_id, REWARD_QUIZ_COMPLETION, attempt_id, amount)

    async def fire(
        self,
        user_id: str,
        reward_type: str,
        source_id: str,
        amount: int,
        now: datetime | None = None,
    ) -> RewardOutcome:
        """Run the full sequence unless this (user, reward type, source) was already rewarded.

        The claim row and the token increment commit together. If either
        fails nothing is kept, so the same reward can be fired again later.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        log = logger.bind(user_id=user_id, reward_type=reward_type, source_id=source_id)
        outcome = RewardOutcome()

        try:
            claimed = await self._claim(user_id, reward_type, source_id, amount, now)
        except Exception:
            log.exception("reward_claim_failed")
            await self.db.rollback()
            outcome.errors.append("claim")
            return outcome

        if not claimed:
            log.info("reward_already_applied")
            outcome.duplicate = True
            return outcome

        try:
            balance = await award_tokens(self.db, user_id, amount, commit=False)
            await self.db.commit()
        except Exception:
            log.exception("reward_tokens_failed", amount=amount)
            await self.db.rollback()
            outcome.errors.append("tokens")
            return outcome
        outcome.balance = balance

        try:
            state = await record_activity(self.db, user_id, now)
            outcome.streak = state.count
        except Exception:
            log.exception("reward_streak_failed")
            await self.db.rollback()
            outcome.errors.append("streak")

        try:
            context = await build_context(self.db, user_id)
            outcome.badges = await evaluate_and_award(self.db, user_id, context, self.redis)
        except Exception:
            log.exception("reward_badges_failed")
            await self.db.rollback()
            outcome.errors.append("badges")

        await publish_event(
            self.redis,
            REWARD_APPLIED_CHANNEL,
            {
                "user_id": user_id,
                "reward_type": reward_type,
                "source_id": source_id,
                "amount": amount,
                "balance": outcome.balance,
                "streak": outcome.streak,
                "badges": outcome.badges,
            },
        )
        log.info(
            "reward_applied",
            balance=outcome.balance,
            streak=outcome.streak,
            badges=outcome.badges,
            errors=outcome.errors,
        )
        return outcome

    async def _claim(
        self,
        user_id: str,
        reward_type: str,
        source_id: str,
        amount: int,
        now: datetime,
    ) -> bool:
        """Insert the idempotency row, left uncommitted. False when it already existed."""
        stmt = (
            insert_for(self.db, RewardEvent)
            .values(
                user_id=user_id,
                reward_type=reward_type,
                source_id=source_id,
                amount=amount,
                created_at=now,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "reward_type", "source_id"])
            .returning(RewardEvent.id)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none() is not None
