"""Pydantic request/response models for quiz endpoints."""

from __future__ import annotations

from pydantic import Field

from intervue.schemas import ApiModel, NonBlankStr


class GenerateQuizRequest(ApiModel):
    topic: NonBlankStr
    num_questions: int = Field(5, ge=1, le=20)
    difficulty: str = "easy"


class QuizQuestion(ApiModel):
    id: str
    question: NonBlankStr
    options: list[str] = Field(min_length=2)
    correct_index: int = Field(ge=0)
    explanation: str = ""


class GenerateQuizResponse(ApiModel):
    questions: list[QuizQuestion]


class QuizCompleteRequest(ApiModel):
    user_id: NonBlankStr
    attempt_id: NonBlankStr = Field(max_length=64)
    score: int | None = Field(None, ge=0)
