"""
Interview business logic.

Question generation, interview listing, and transcript scoring. Question
generation never fails on oracle problems: canned questions are stored
instead. Transcript scoring surfaces ``CompletionError`` to the caller.
"""

from __future__ import annotations

import json
import random
import re
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError
from sqlalchemy import select

from intervue.ai.client import CompletionClient, CompletionError
from intervue.db.models import Feedback, Interview
from intervue.interviews.schemas import FeedbackAssessment

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

INTERVIEW_COVERS = [
    "/covers/adobe.png",
    "/covers/amazon.png",
    "/covers/facebook.png",
    "/covers/hostinger.png",
    "/covers/pinterest.png",
    "/covers/quora.png",
    "/covers/reddit.png",
    "/covers/skype.png",
    "/covers/spotify.png",
    "/covers/telegram.png",
    "/covers/tiktok.png",
    "/covers/yahoo.png",
]

FEEDBACK_SYSTEM_PROMPT = (
    "You are a professional interviewer analyzing a mock interview. "
    "Your task is to evaluate the candidate based on structured categories."
)

FEEDBACK_CATEGORIES = (
    ("Communication Skills", "Clarity, articulation, structured responses."),
    ("Technical Knowledge", "Understanding of key concepts for the role."),
    ("Problem-Solving", "Ability to analyze problems and propose solutions."),
    ("Cultural & Role Fit", "Alignment with company values and job role."),
    ("Confidence & Clarity", "Confidence in responses, engagement, and clarity."),
)

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


# ---------------------------------------------------------------------------
# Question generation
# ---------------------------------------------------------------------------


def random_cover() -> str:
    return random.choice(INTERVIEW_COVERS)  # noqa: S311


def normalize_techstack(techstack: str | Iterable[Any]) -> list[str]:
    """Comma-separated string or list → trimmed, non-empty entries."""
    items = techstack.split(",") if isinstance(techstack, str) else techstack
    return [str(item).strip() for item in items if str(item).strip()]


def fallback_questions(role: str, amount: int) -> list[str]:
    """Canned questions used when the oracle gives nothing usable."""
    return [
        f"Tell me about your experience with {role} development",
        f"How do you approach problem-solving in {role} projects?",
        f"Describe a challenging {role} project you've worked on recently",
        f"What interests you most about {role} development?",
        f"How do you stay updated with the latest {role} technologies?",
    ][:amount]


def parse_questions(text: str) -> list[str]:
    """Extract the first JSON array of strings from oracle text. Empty list when there is none."""
    match = _JSON_ARRAY_RE.search(text.strip())
    if match is None:
        return []
    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        return []
    if not isinstance(parsed, list):
        return []
    return [q.strip() for q in parsed if isinstance(q, str) and q.strip()]


def build_question_prompt(role: str, level: str, techstack: list[str], focus: str, amount: int) -> str:
    return (
        f"Generate {amount} interview questions for a {role} position.\n"
        f"Experience level: {level}\n"
        f"Tech stack: {', '.join(techstack)}\n"
        f"Focus: {focus}\n\n"
        "IMPORTANT: Return ONLY a valid JSON array of strings. No additional text, "
        "no markdown, no explanations.\n"
        'Format: ["Question 1", "Question 2", "Question 3"]\n\n'
        "Questions should be clear, professional, and avoid special characters that "
        "might break voice assistants. Do not use /, *, or other special characters."
    )


async def generate_questions(
    completion: CompletionClient,
    role: str,
    level: str,
    techstack: list[str],
    focus: str,
    amount: int,
) -> list[str]:
    """Ask the oracle for questions; fall back to canned ones on any problem."""
    try:
        text = await completion.generate_text(build_question_prompt(role, level, techstack, focus, amount))
    except CompletionError:
        logger.warning("question_generation_failed", role=role)
        return fallback_questions(role, amount)

    questions = parse_questions(text)[:amount]
    if not questions:
        logger.warning("question_generation_unparseable", role=role, preview=text[:200])
        return fallback_questions(role, amount)
    return questions


async def create_interview(
    db: AsyncSession,
    completion: CompletionClient,
    *,
    user_id: str,
    interview_type: str,
    role: str,
    level: str,
    techstack: str | list[str],
    amount: int,
) -> Interview:
    """Generate questions and store a finalized interview."""
    stack = normalize_techstack(techstack)
    questions = await generate_questions(completion, role.strip(), level.strip(), stack, interview_type.strip(), amount)

    interview = Interview(
        user_id=user_id,
        role=role.strip(),
        type=interview_type.strip(),
        level=level.strip(),
        techstack=stack,
        questions=questions,
        finalized=True,
        cover_image=random_cover(),
    )
    db.add(interview)
    await db.commit()
    logger.info("interview_created", interview_id=interview.id, user_id=user_id, questions=len(questions))
    return interview


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_interview(db: AsyncSession, interview_id: str) -> Interview | None:
    result = await db.execute(select(Interview).where(Interview.id == interview_id))
    return result.scalar_one_or_none()


async def list_user_interviews(db: AsyncSession, user_id: str) -> list[Interview]:
    """A user's interviews, newest first."""
    result = await db.execute(
        select(Interview)
        .where(Interview.user_id == user_id)
        .order_by(Interview.created_at.desc(), Interview.id)
    )
    return list(result.scalars())


async def latest_interviews(db: AsyncSession, user_id: str, limit: int = 20) -> list[Interview]:
    """Finalized interviews by other users, newest first."""
    result = await db.execute(
        select(Interview)
        .where(Interview.finalized.is_(True), Interview.user_id != user_id)
        .order_by(Interview.created_at.desc(), Interview.id)
        .limit(limit)
    )
    return list(result.scalars())


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------


def format_transcript(transcript: Iterable[Any]) -> str:
    return "".join(f"- {line.role}: {line.content}\n" for line in transcript)


def build_feedback_prompt(transcript: str) -> str:
    categories = "\n".join(f"- **{name}**: {hint}" for name, hint in FEEDBACK_CATEGORIES)
    return (
        "You are an AI interviewer analyzing a mock interview. Your task is to evaluate the "
        "candidate based on structured categories. Be thorough and detailed in your analysis. "
        "Don't be lenient with the candidate. If there are mistakes or areas for improvement, "
        "point them out.\n"
        f"Transcript:\n{transcript}\n"
        "Please score the candidate from 0 to 100 in the following areas. Do not add "
        f"categories other than the ones provided:\n{categories}\n\n"
        "Return ONLY a JSON object with the keys totalScore, categoryScores "
        "(a list of {name, score, comment}), strengths, areasForImprovement and "
        "finalAssessment."
    )


async def assess_transcript(completion: CompletionClient, transcript: Iterable[Any]) -> FeedbackAssessment:
    """
    Score a transcript with the oracle.

    Raises:
        CompletionError: If the oracle fails or its answer does not fit the feedback shape.
    """
    raw = await completion.generate_json(build_feedback_prompt(format_transcript(transcript)), FEEDBACK_SYSTEM_PROMPT)
    try:
        return FeedbackAssessment.model_validate(raw)
    except ValidationError as e:
        logger.warning("feedback_shape_invalid", errors=e.error_count())
        msg = "Oracle feedback did not match the expected shape"
        raise CompletionError(msg) from e


async def get_feedback(db: AsyncSession, interview_id: str, user_id: str) -> Feedback | None:
    result = await db.execute(
        select(Feedback).where(Feedback.interview_id == interview_id, Feedback.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def save_feedback(
    db: AsyncSession,
    interview_id: str,
    user_id: str,
    assessment: FeedbackAssessment,
    feedback_id: str | None = None,
) -> Feedback:
    """
    Store an assessment for (interview, user).

    Updates the row named by ``feedback_id`` or the existing row for the
    pair; creates one otherwise.
    """
    feedback = None
    if feedback_id:
        feedback = await db.get(Feedback, feedback_id)
        if feedback is not None and (feedback.interview_id, feedback.user_id) != (interview_id, user_id):
            feedback = None
    if feedback is None:
        feedback = await get_feedback(db, interview_id, user_id)
    if feedback is None:
        feedback = Feedback(interview_id=interview_id, user_id=user_id)
        db.add(feedback)

    feedback.total_score = assessment.total_score
    feedback.category_scores = [c.model_dump() for c in assessment.category_scores]
    feedback.strengths = list(assessment.strengths)
    feedback.areas_for_improvement = list(assessment.areas_for_improvement)
    feedback.final_assessment = assessment.final_assessment

    await db.commit()
    logger.info("feedback_saved", feedback_id=feedback.id, interview_id=interview_id, user_id=user_id)
    return feedback
