"""Shared FastAPI dependencies."""

from redis.asyncio import Redis

from intervue.ai.client import CompletionClient, get_completion_client
from intervue.redis_client import get_redis


def get_optional_redis() -> Redis | None:
    """The Redis client, or None when Redis is not initialized."""
    try:
        return get_redis()
    except RuntimeError:
        return None


def get_completion() -> CompletionClient:
    """Completion oracle dependency (overridden in tests)."""
    return get_completion_client()
