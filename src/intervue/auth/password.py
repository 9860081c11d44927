"""Password hashing and validation using argon2id."""

from __future__ import annotations

import argon2

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)


class PasswordStrengthError(ValueError):
    """Raised when a password does not meet the minimum requirements."""


def hash_password(password: str) -> str:
    """Hash a password using argon2id. Returns the full hash string."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against its hash. Never raises on mismatch."""
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def validate_password_strength(password: str) -> None:
    """
    Reject blank passwords and those outside 6..128 characters.

    Raises PasswordStrengthError if the password is unacceptable.
    """
    if not password or not password.strip():
        msg = "Password cannot be empty"
        raise PasswordStrengthError(msg)
    if len(password) < 6:
        msg = "Password must be at least 6 characters"
        raise PasswordStrengthError(msg)
    if len(password) > 128:
        msg = "Password must not exceed 128 characters"
        raise PasswordStrengthError(msg)
