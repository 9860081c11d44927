"""Peer interview records: sessions, questions asked, and peer feedback."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import or_, select

from intervue.db.models import PeerInterviewFeedback, PeerInterviewQuestion, PeerInterviewSession

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

DEMO_SESSION_ID = "demo-session-123"
DEMO_USER_ID = "demo-user-a"


class SessionNotFoundError(LookupError):
    """Raised when a peer session id does not exist."""


def demo_session(now: datetime | None = None) -> dict:
    """The placeholder session handed out while matchmaking does not exist."""
    if now is None:
        now = datetime.now(timezone.utc)
    return {
        "id": DEMO_SESSION_ID,
        "created_at": now,
        "updated_at": now,
        "participant_a": DEMO_USER_ID,
        "participant_b": None,
        "status": "pending",
        "feedbacks": [],
        "questions": [],
        "user_a": {"id": DEMO_USER_ID, "name": "Demo User A"},
        "user_b": None,
    }


async def list_sessions(db: AsyncSession, user_id: str) -> list[PeerInterviewSession]:
    """Sessions the user takes part in on either side, newest first."""
    result = await db.execute(
        select(PeerInterviewSession)
        .where(or_(PeerInterviewSession.participant_a == user_id, PeerInterviewSession.participant_b == user_id))
        .order_by(PeerInterviewSession.created_at.desc(), PeerInterviewSession.id)
    )
    return list(result.scalars())


async def _require_session(db: AsyncSession, session_id: str) -> None:
    if await db.get(PeerInterviewSession, session_id) is None:
        msg = f"Peer session not found: {session_id}"
        raise SessionNotFoundError(msg)


async def add_question(db: AsyncSession, session_id: str, question: str, asked_by: str) -> PeerInterviewQuestion:
    """
    Record a question asked during a session.

    Raises:
        SessionNotFoundError: If the session does not exist.
    """
    await _require_session(db, session_id)
    row = PeerInterviewQuestion(session_id=session_id, question=question, asked_by=asked_by)
    db.add(row)
    await db.commit()
    return row


async def list_questions(db: AsyncSession, session_id: str) -> list[PeerInterviewQuestion]:
    result = await db.execute(
        select(PeerInterviewQuestion)
        .where(PeerInterviewQuestion.session_id == session_id)
        .order_by(PeerInterviewQuestion.created_at, PeerInterviewQuestion.id)
    )
    return list(result.scalars())


async def add_feedback(
    db: AsyncSession,
    session_id: str,
    reviewer_id: str,
    reviewee_id: str,
    score: int,
    comments: str = "",
) -> PeerInterviewFeedback:
    """
    Record one participant's feedback on the other.

    Raises:
        SessionNotFoundError: If the session does not exist.
    """
    await _require_session(db, session_id)
    row = PeerInterviewFeedback(
        session_id=session_id,
        reviewer_id=reviewer_id,
        reviewee_id=reviewee_id,
        score=score,
        comments=comments,
    )
    db.add(row)
    await db.commit()
    return row


async def list_feedback(db: AsyncSession, session_id: str) -> list[PeerInterviewFeedback]:
    result = await db.execute(
        select(PeerInterviewFeedback)
        .where(PeerInterviewFeedback.session_id == session_id)
        .order_by(PeerInterviewFeedback.created_at, PeerInterviewFeedback.id)
    )
    return list(result.scalars())
