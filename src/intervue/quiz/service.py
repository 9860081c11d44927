"""
Quiz generation.

The oracle is asked for a strict JSON object; anything else degrades to a
line-based parse, and an oracle failure degrades to canned questions.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from intervue.ai.client import CompletionClient, CompletionError, safe_json_loads
from intervue.quiz.schemas import QuizQuestion

logger = logging.getLogger(__name__)

LOOSE_OPTIONS = ["True", "False", "Option C", "Option D"]


def build_quiz_prompt(topic: str, num: int, difficulty: str) -> str:
    return (
        "You are an expert quiz generator. Produce a strict JSON object ONLY, with the "
        "following shape:\n\n"
        "{\n"
        '  "questions": [\n'
        "    {\n"
        '      "question": "...",\n'
        '      "options": ["opt A","opt B","opt C","opt D"],\n'
        '      "correctIndex": 0,\n'
        '      "explanation": "short explanation (optional)"\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        f'Generate {num} multiple-choice questions on the topic: "{topic}". '
        f"Difficulty: {difficulty}.\n"
        "- Provide exactly 4 options per question.\n"
        "- Randomize correct option positions.\n"
        "- Keep questions concise (one or two sentences).\n"
        "- Provide brief explanations (1-2 sentences) where possible.\n"
        "- Output only valid JSON (no extra commentary)."
    )


def questions_from_json(parsed: Any) -> list[QuizQuestion] | None:
    """
    Questions from a ``{"questions": [...]}`` object, renumbered ``q_1..q_n``.

    Returns None when the object does not have that shape. Entries that do
    not validate, or whose ``correctIndex`` is outside the options, are dropped.
    """
    if not isinstance(parsed, dict) or not isinstance(parsed.get("questions"), list):
        return None

    questions: list[QuizQuestion] = []
    for item in parsed["questions"]:
        if not isinstance(item, dict):
            continue
        data = {k: v for k, v in item.items() if k != "id"}
        data["id"] = f"q_{len(questions) + 1}"
        if data.get("explanation") is None:
            data.pop("explanation", None)
        try:
            question = QuizQuestion.model_validate(data)
        except ValidationError:
            logger.debug("Dropping malformed quiz question: %r", item)
            continue
        if question.correct_index >= len(question.options):
            continue
        questions.append(question)
    return questions


def parse_loose_questions(text: str, num: int) -> list[QuizQuestion]:
    """Last resort: one question per non-empty line."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return [
        QuizQuestion(
            id=f"q_{i + 1}",
            question=line,
            options=list(LOOSE_OPTIONS),
            correct_index=0,
            explanation="",
        )
        for i, line in enumerate(lines[:num])
    ]


def fallback_quiz(topic: str, num: int) -> list[QuizQuestion]:
    """Canned questions used when the oracle is unavailable."""
    templates = [
        (
            f"Which of these best describes why {topic} matters in practice?",
            ["It solves a recurring real-world problem", "It is purely theoretical", "It is deprecated", "It has no use"],
            "Practical relevance is the main reason a topic is worth studying.",
        ),
        (
            f"What is the best first step when learning {topic}?",
            ["Understand the core concepts", "Memorize edge cases", "Skip the fundamentals", "Avoid examples"],
            "Core concepts make the details easier to learn.",
        ),
        (
            f"How should you check your understanding of {topic}?",
            ["Apply it to a small project", "Read about it once", "Never test it", "Only watch videos"],
            "Applying knowledge exposes gaps quickly.",
        ),
        (
            f"Which habit helps most when practicing {topic} for interviews?",
            ["Explaining your reasoning out loud", "Answering as fast as possible", "Guessing", "Staying silent"],
            "Interviewers evaluate how you think, not only the final answer.",
        ),
        (
            f"What should you do after getting a {topic} question wrong?",
            ["Review the explanation and retry", "Ignore it", "Change topics", "Memorize the letter"],
            "Reviewing mistakes is how practice turns into progress.",
        ),
    ]
    return [
        QuizQuestion(id=f"q_{i + 1}", question=q, options=opts, correct_index=0, explanation=why)
        for i, (q, opts, why) in enumerate(templates[:num])
    ]


async def generate_quiz(
    completion: CompletionClient,
    topic: str,
    num: int = 5,
    difficulty: str = "easy",
) -> list[QuizQuestion]:
    """Generate up to ``num`` multiple-choice questions on ``topic``."""
    try:
        raw = await completion.generate_text(build_quiz_prompt(topic, num, difficulty))
    except CompletionError as e:
        logger.warning("Quiz generation failed for %r, using canned questions: %s", topic, e)
        return fallback_quiz(topic, num)

    questions = questions_from_json(safe_json_loads(raw))
    if questions:
        return questions[:num]

    logger.info("Quiz output for %r was not the expected JSON, parsing line by line", topic)
    return parse_loose_questions(raw, num)
