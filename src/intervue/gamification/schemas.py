"""Pydantic request/response models for gamification endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import Field

from intervue.schemas import ApiModel, NonBlankStr

if TYPE_CHECKING:
    from intervue.gamification.trigger_engine import RewardOutcome


# --- Tokens ---


class TokenAwardRequest(ApiModel):
    user_id: NonBlankStr
    amount: int = Field(gt=0, strict=True)


class TokenBalanceResponse(ApiModel):
    amount: int


# --- Streak ---


class StreakUpdateRequest(ApiModel):
    user_id: NonBlankStr
    increment: bool = False
    last_date: datetime | None = None


class StreakResponse(ApiModel):
    count: int
    last_date: datetime | None = None


# --- Badges ---


class BadgeGrantRequest(ApiModel):
    user_id: NonBlankStr
    badge_id: NonBlankStr


class BadgeGrantResponse(ApiModel):
    badge_id: str
    awarded_at: datetime


class UserBadgeResponse(ApiModel):
    badge_id: str
    name: str
    image_url: str
    description: str
    awarded_at: datetime


class BadgeCatalogEntry(ApiModel):
    badge_id: str
    name: str
    image_url: str
    description: str


# --- Leaderboard ---


class LeaderboardEntryResponse(ApiModel):
    user_id: str
    name: str
    amount: int
    updated_at: datetime


# --- Profile summary ---


class GamificationProfileResponse(ApiModel):
    tokens: int
    streak: StreakResponse
    badges: list[UserBadgeResponse]


# --- Reward trigger ---


class RewardSummary(ApiModel):
    duplicate: bool
    balance: int | None = None
    streak: int | None = None
    badges: list[str] = []

    @classmethod
    def from_outcome(cls, outcome: RewardOutcome) -> RewardSummary:
        """Public view of a trigger run; failed step names stay in the logs."""
        return cls(
            duplicate=outcome.duplicate,
            balance=outcome.balance,
            streak=outcome.streak,
            badges=list(outcome.badges),
        )
