"""Pydantic request/response models for interview endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from intervue.gamification.schemas import RewardSummary
from intervue.schemas import ApiModel, NonBlankStr


# --- Generation ---


class GenerateInterviewRequest(ApiModel):
    type: NonBlankStr
    role: NonBlankStr
    level: NonBlankStr
    techstack: str | list[str]
    amount: int = Field(ge=1, le=20)
    userid: NonBlankStr


class GenerateInterviewResponse(ApiModel):
    success: bool
    interview_id: str
    message: str
    status: str


class InterviewResponse(ApiModel):
    id: str
    user_id: str
    role: str
    level: str
    type: str
    techstack: list[str]
    questions: list[str]
    cover_image: str | None = None
    finalized: bool
    created_at: datetime


# --- Feedback ---


class TranscriptLine(ApiModel):
    role: str
    content: str


class CreateFeedbackRequest(ApiModel):
    user_id: NonBlankStr
    transcript: list[TranscriptLine] = Field(min_length=1)
    feedback_id: str | None = None


class CategoryScore(ApiModel):
    name: str
    score: int = Field(ge=0, le=100)
    comment: str = ""


class FeedbackAssessment(ApiModel):
    """Shape the oracle must return when scoring a transcript."""

    total_score: int = Field(ge=0, le=100)
    category_scores: list[CategoryScore]
    strengths: list[str] = []
    areas_for_improvement: list[str] = []
    final_assessment: str


class FeedbackResponse(ApiModel):
    id: str
    interview_id: str
    user_id: str
    total_score: int
    category_scores: list[CategoryScore]
    strengths: list[str]
    areas_for_improvement: list[str]
    final_assessment: str
    created_at: datetime


class CreateFeedbackResponse(ApiModel):
    success: bool
    feedback_id: str
    reward: RewardSummary
