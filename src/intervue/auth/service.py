"""
Authentication business logic.

Handles account creation and email + password sign-in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from intervue.auth.password import hash_password, validate_password_strength, verify_password
from intervue.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class EmailAlreadyRegisteredError(ValueError):
    """Raised on sign-up with an email that already has an account."""


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def list_user_ids(db: AsyncSession) -> list[str]:
    """Every user id, oldest account first."""
    result = await db.execute(select(User.id).order_by(User.created_at, User.id))
    return list(result.scalars())


# ---------------------------------------------------------------------------
# Sign-up / sign-in
# ---------------------------------------------------------------------------


async def register_user(db: AsyncSession, name: str, email: str, password: str) -> User:
    """
    Create a user with email + password.

    Raises:
        EmailAlreadyRegisteredError: If the email already has an account.
        PasswordStrengthError: If the password is unacceptable.
    """
    validate_password_strength(password)

    if await get_user_by_email(db, email) is not None:
        msg = "User already exists. Please sign in."
        raise EmailAlreadyRegisteredError(msg)

    user = User(name=name.strip(), email=email.lower(), password_hash=hash_password(password))
    db.add(user)
    await db.commit()
    logger.info("user_registered", user_id=user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    """Return the user when the credentials match, otherwise None."""
    user = await get_user_by_email(db, email)
    if user is None:
        logger.info("sign_in_unknown_email")
        return None
    if not verify_password(password, user.password_hash):
        logger.info("sign_in_bad_password", user_id=user.id)
        return None
    return user
