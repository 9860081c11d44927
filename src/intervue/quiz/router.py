"""Quiz endpoints: AI quiz generation and completion rewards."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.ai.client import CompletionClient
from intervue.auth.service import get_user_by_id
from intervue.database import get_session
from intervue.dependencies import get_completion, get_optional_redis
from intervue.gamification.schemas import RewardSummary
from intervue.gamification.trigger_engine import RewardTrigger
from intervue.quiz.schemas import GenerateQuizRequest, GenerateQuizResponse, QuizCompleteRequest
from intervue.quiz.service import generate_quiz

router = APIRouter(prefix="/api", tags=["Quiz"])


@router.post("/generate-quiz", response_model=GenerateQuizResponse)
async def create_quiz(
    body: GenerateQuizRequest,
    completion: CompletionClient = Depends(get_completion),
):
    """Multiple-choice questions on a topic."""
    questions = await generate_quiz(completion, body.topic, body.num_questions, body.difficulty)
    return GenerateQuizResponse(questions=questions)


@router.post("/quiz/complete", response_model=RewardSummary)
async def complete_quiz(
    body: QuizCompleteRequest,
    db: AsyncSession = Depends(get_session),
    redis: Redis | None = Depends(get_optional_redis),
):
    """Reward a finished quiz attempt. Reposting the same attempt changes nothing."""
    if await get_user_by_id(db, body.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    outcome = await RewardTrigger(db, redis).on_quiz_completed(body.user_id, body.attempt_id)
    return RewardSummary.from_outcome(outcome)
