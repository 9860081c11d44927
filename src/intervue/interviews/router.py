"""Interview endpoints: question generation, listing, AI feedback."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.ai.client import CompletionClient, CompletionError
from intervue.auth.service import get_user_by_id
from intervue.database import get_session
from intervue.dependencies import get_completion, get_optional_redis
from intervue.gamification.schemas import RewardSummary
from intervue.gamification.trigger_engine import RewardTrigger
from intervue.interviews.schemas import (
    CreateFeedbackRequest,
    CreateFeedbackResponse,
    FeedbackResponse,
    GenerateInterviewRequest,
    GenerateInterviewResponse,
    InterviewResponse,
)
from intervue.interviews.service import (
    assess_transcript,
    create_interview,
    get_feedback,
    get_interview,
    latest_interviews,
    list_user_interviews,
    save_feedback,
)
from intervue.schemas import NON_BLANK

logger = structlog.get_logger()

generate_router = APIRouter(prefix="/api/vapi", tags=["Interviews"])
router = APIRouter(prefix="/api/interviews", tags=["Interviews"])


@generate_router.post("/generate", response_model=GenerateInterviewResponse)
async def generate_interview(
    body: GenerateInterviewRequest,
    db: AsyncSession = Depends(get_session),
    completion: CompletionClient = Depends(get_completion),
):
    """Generate interview questions and store the interview."""
    if await get_user_by_id(db, body.userid) is None:
        raise HTTPException(status_code=404, detail="User not found")

    interview = await create_interview(
        db,
        completion,
        user_id=body.userid,
        interview_type=body.type,
        role=body.role,
        level=body.level,
        techstack=body.techstack,
        amount=body.amount,
    )
    return GenerateInterviewResponse(
        success=True,
        interview_id=interview.id,
        message=(
            f"Interview created successfully! Your {interview.role} interview with "
            f"{len(interview.questions)} questions is ready."
        ),
        status="completed",
    )


@generate_router.get("/generate")
async def generate_liveness() -> dict[str, object]:
    return {"success": True, "data": "Interview generation API is working"}


@router.get("", response_model=list[InterviewResponse])
async def get_user_interviews(
    user_id: str = Query(..., alias="userId", min_length=1, pattern=NON_BLANK),
    db: AsyncSession = Depends(get_session),
):
    """The user's own interviews, newest first."""
    return await list_user_interviews(db, user_id)


@router.get("/latest", response_model=list[InterviewResponse])
async def get_latest_interviews(
    user_id: str = Query(..., alias="userId", min_length=1, pattern=NON_BLANK),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
):
    """Finalized interviews created by other users."""
    return await latest_interviews(db, user_id, limit)


@router.get("/{interview_id}", response_model=InterviewResponse)
async def get_interview_by_id(
    interview_id: str,
    db: AsyncSession = Depends(get_session),
):
    interview = await get_interview(db, interview_id)
    if interview is None:
        raise HTTPException(status_code=404, detail="Interview not found")
    return interview


@router.post("/{interview_id}/feedback", response_model=CreateFeedbackResponse)
async def create_feedback(
    interview_id: str,
    body: CreateFeedbackRequest,
    db: AsyncSession = Depends(get_session),
    completion: CompletionClient = Depends(get_completion),
    redis: Redis | None = Depends(get_optional_redis),
):
    """Score the transcript, store the feedback, then reward the user."""
    if await get_interview(db, interview_id) is None:
        raise HTTPException(status_code=404, detail="Interview not found")
    if await get_user_by_id(db, body.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    try:
        assessment = await assess_transcript(completion, body.transcript)
    except CompletionError as e:
        logger.warning("feedback_generation_failed", interview_id=interview_id, error=str(e))
        raise HTTPException(status_code=502, detail="Failed to generate feedback") from e

    feedback = await save_feedback(db, interview_id, body.user_id, assessment, body.feedback_id)
    # A failed reward step rolls the session back and expires loaded rows
    feedback_id = feedback.id
    outcome = await RewardTrigger(db, redis).on_feedback_completed(body.user_id, interview_id)

    return CreateFeedbackResponse(
        success=True,
        feedback_id=feedback_id,
        reward=RewardSummary.from_outcome(outcome),
    )


@router.get("/{interview_id}/feedback", response_model=FeedbackResponse)
async def get_interview_feedback(
    interview_id: str,
    user_id: str = Query(..., alias="userId", min_length=1, pattern=NON_BLANK),
    db: AsyncSession = Depends(get_session),
):
    feedback = await get_feedback(db, interview_id, user_id)
    if feedback is None:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return feedback
