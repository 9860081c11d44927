"""Redis client: rate-limit counters and pub/sub fan-out of reward events.

Redis is optional. Callers that can run without it catch the
``RuntimeError`` from ``get_redis()`` or pass ``None`` to ``publish_event``.
"""

import json
from typing import Any

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

logger = structlog.get_logger()

BADGE_EARNED_CHANNEL = "pubsub:badge_earned"
REWARD_APPLIED_CHANNEL = "pubsub:reward_applied"

_pool: redis.Redis | None = None


async def init_redis(url: str) -> None:
    """Create the client. Connections are opened lazily on first command."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
        socket_connect_timeout=2,
    )


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Get the Redis client. Raises RuntimeError before ``init_redis``."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool


async def publish_event(client: Any, channel: str, payload: dict[str, Any]) -> bool:  # noqa: ANN401
    """Publish ``payload`` as JSON on ``channel``.

    Best effort: returns False without a client or when Redis fails, so a
    lost notification never fails the write that caused it.
    """
    if client is None:
        return False
    try:
        await client.publish(channel, json.dumps(payload, default=str))
    except RedisError as e:
        logger.warning("redis_publish_failed", channel=channel, error=str(e))
        return False
    return True
