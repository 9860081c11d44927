"""Token ledger: per-user cumulative reward balance."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.db.models import TokenBalance
from intervue.db.upsert import insert_for

logger = logging.getLogger(__name__)


class InvalidAmountError(ValueError):
    """Raised when a token award is not a positive integer."""


def validate_amount(amount: object) -> int:
    """Return ``amount`` if it is a positive int. Bools and floats are rejected."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        msg = "Token amount must be an integer"
        raise InvalidAmountError(msg)
    if amount <= 0:
        msg = "Token amount must be positive"
        raise InvalidAmountError(msg)
    return amount


async def award_tokens(db: AsyncSession, user_id: str, amount: int, *, commit: bool = True) -> int:
    """Add ``amount`` tokens to the user's balance and return the new total.

    The row is created on first award and incremented in the same statement
    (``INSERT ... ON CONFLICT DO UPDATE SET amount = amount + excluded.amount``),
    so concurrent awards for one user never lose an increment. With
    ``commit=False`` the increment joins the caller's open transaction.
    """
    amount = validate_amount(amount)
    now = datetime.now(timezone.utc)

    stmt = insert_for(db, TokenBalance).values(user_id=user_id, amount=amount, updated_at=now)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={
            "amount": TokenBalance.amount + stmt.excluded.amount,
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(TokenBalance.amount)

    result = await db.execute(stmt)
    total = result.scalar_one()
    if commit:
        await db.commit()

    logger.info("Awarded %d tokens to %s (balance=%d)", amount, user_id, total)
    return total


async def get_balance(db: AsyncSession, user_id: str) -> int:
    """Current token balance. A user without a ledger row has 0 tokens."""
    result = await db.execute(select(TokenBalance.amount).where(TokenBalance.user_id == user_id))
    return result.scalar_one_or_none() or 0
