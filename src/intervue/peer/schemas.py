"""Pydantic request/response models for peer interview endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from intervue.schemas import ApiModel, NonBlankStr


class PeerUser(ApiModel):
    id: str
    name: str


class PeerSessionResponse(ApiModel):
    id: str
    participant_a: str
    participant_b: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class DemoSessionResponse(PeerSessionResponse):
    feedbacks: list[Any] = []
    questions: list[Any] = []
    user_a: PeerUser
    user_b: PeerUser | None = None


class PeerQuestionRequest(ApiModel):
    session_id: NonBlankStr
    question: NonBlankStr
    asked_by: NonBlankStr


class PeerQuestionResponse(ApiModel):
    id: str
    session_id: str
    question: str
    asked_by: str
    created_at: datetime


class PeerFeedbackRequest(ApiModel):
    session_id: NonBlankStr
    reviewer_id: NonBlankStr
    reviewee_id: NonBlankStr
    score: int = Field(ge=0, le=100)
    comments: str = ""


class PeerFeedbackResponse(ApiModel):
    id: str
    session_id: str
    reviewer_id: str
    reviewee_id: str
    score: int
    comments: str
    created_at: datetime


class SessionEnvelope(ApiModel):
    success: bool
    session: DemoSessionResponse


class SessionListEnvelope(ApiModel):
    success: bool
    sessions: list[PeerSessionResponse]


class QuestionEnvelope(ApiModel):
    success: bool
    question: PeerQuestionResponse


class QuestionListEnvelope(ApiModel):
    success: bool
    questions: list[PeerQuestionResponse]


class FeedbackEnvelope(ApiModel):
    success: bool
    feedback: PeerFeedbackResponse


class FeedbackListEnvelope(ApiModel):
    success: bool
    feedbacks: list[PeerFeedbackResponse]
