"""Peer interview endpoints: /api/peer-interview/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.database import get_session
from intervue.peer.schemas import (
    DemoSessionResponse,
    FeedbackEnvelope,
    FeedbackListEnvelope,
    PeerFeedbackRequest,
    PeerQuestionRequest,
    QuestionEnvelope,
    QuestionListEnvelope,
    SessionEnvelope,
    SessionListEnvelope,
)
from intervue.peer.service import (
    SessionNotFoundError,
    add_feedback,
    add_question,
    demo_session,
    list_feedback,
    list_questions,
    list_sessions,
)

router = APIRouter(prefix="/api/peer-interview", tags=["Peer Interviews"])


def _missing(param: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": f"Missing {param}"})


# ── Sessions ──


@router.post("/session", response_model=SessionEnvelope)
async def create_peer_session():
    """Hand out the demo session (no matchmaking yet)."""
    return SessionEnvelope(success=True, session=DemoSessionResponse.model_validate(demo_session()))


@router.get("/session", response_model=SessionListEnvelope)
async def get_peer_sessions(
    user_id: str | None = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_session),
):
    if not user_id or not user_id.strip():
        return _missing("userId")
    return SessionListEnvelope(success=True, sessions=await list_sessions(db, user_id))


# ── Questions ──


@router.post("/question", response_model=QuestionEnvelope)
async def post_peer_question(
    body: PeerQuestionRequest,
    db: AsyncSession = Depends(get_session),
):
    try:
        row = await add_question(db, body.session_id, body.question, body.asked_by)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return QuestionEnvelope(success=True, question=row)


@router.get("/question", response_model=QuestionListEnvelope)
async def get_peer_questions(
    session_id: str | None = Query(None, alias="sessionId"),
    db: AsyncSession = Depends(get_session),
):
    if not session_id or not session_id.strip():
        return _missing("sessionId")
    return QuestionListEnvelope(success=True, questions=await list_questions(db, session_id))


# ── Feedback ──


@router.post("/feedback", response_model=FeedbackEnvelope)
async def post_peer_feedback(
    body: PeerFeedbackRequest,
    db: AsyncSession = Depends(get_session),
):
    try:
        row = await add_feedback(
            db,
            body.session_id,
            body.reviewer_id,
            body.reviewee_id,
            body.score,
            body.comments,
        )
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return FeedbackEnvelope(success=True, feedback=row)


@router.get("/feedback", response_model=FeedbackListEnvelope)
async def get_peer_feedback(
    session_id: str | None = Query(None, alias="sessionId"),
    db: AsyncSession = Depends(get_session),
):
    if not session_id or not session_id.strip():
        return _missing("sessionId")
    return FeedbackListEnvelope(success=True, feedbacks=await list_feedback(db, session_id))
