"""Quiz endpoints over HTTP."""

from __future__ import annotations

import json

import pytest

from intervue.ai.client import CompletionError


class TestGenerateQuiz:
    @pytest.mark.asyncio
    async def test_json_quiz(self, client, mock_provider):
        mock_provider.complete.return_value = json.dumps({
            "questions": [
                {"question": "What does HTTP 404 mean?", "options": ["OK", "Not Found", "Moved", "Error"], "correctIndex": 1},
                {"question": "Which verb is idempotent?", "options": ["POST", "PUT"], "correctIndex": 1, "explanation": "PUT replaces."},
            ]
        })

        resp = await client.post("/api/generate-quiz", json={"topic": "HTTP", "numQuestions": 2})
        assert resp.status_code == 200
        questions = resp.json()["questions"]
        assert [q["id"] for q in questions] == ["q_1", "q_2"]
        assert questions[0]["correctIndex"] == 1
        assert questions[1]["explanation"] == "PUT replaces."

        prompt = mock_provider.complete.await_args.args[0]
        assert 'topic: "HTTP"' in prompt
        assert "Difficulty: easy" in prompt

    @pytest.mark.asyncio
    async def test_oracle_down(self, client, mock_provider):
        mock_provider.complete.side_effect = CompletionError("down")
        resp = await client.post("/api/generate-quiz", json={"topic": "Redis", "numQuestions": 3})
        assert resp.status_code == 200
        assert len(resp.json()["questions"]) == 3

    @pytest.mark.asyncio
    async def test_topic_required(self, client):
        resp = await client.post("/api/generate-quiz", json={"numQuestions": 3})
        assert resp.status_code == 400


class TestCompleteQuiz:
    @pytest.mark.asyncio
    async def test_reward(self, client, user):
        resp = await client.post("/api/quiz/complete", json={"userId": user.id, "attemptId": "a-1", "score": 4})
        assert resp.status_code == 200
        assert resp.json() == {"duplicate": False, "balance": 5, "streak": 1, "badges": []}

    @pytest.mark.asyncio
    async def test_repost_is_duplicate(self, client, user):
        body = {"userId": user.id, "attemptId": "a-1"}
        await client.post("/api/quiz/complete", json=body)
        resp = await client.post("/api/quiz/complete", json=body)
        assert resp.json()["duplicate"] is True

        tokens = await client.get("/api/gamification/tokens", params={"userId": user.id})
        assert tokens.json()["amount"] == 5

    @pytest.mark.asyncio
    async def test_unknown_user(self, client):
        resp = await client.post("/api/quiz/complete", json={"userId": "nobody", "attemptId": "a-1"})
        assert resp.status_code == 404
