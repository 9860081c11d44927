"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.config import Settings, get_settings
from intervue.database import get_session
from intervue.redis_client import get_redis

router = APIRouter()

# A check in one of these states does not make the service degraded
_PASSING = frozenset({"ok", "disabled"})


def _oracle_check(settings: Settings) -> str:
    """Interview and quiz generation degrade to canned content without a key."""
    if settings.ai_provider.lower() != "gemini":
        return f"error: unsupported provider {settings.ai_provider}"
    return "ok" if settings.gemini_api_key else "disabled"


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Readiness check over the database, Redis and the completion oracle config.

    Redis and the oracle are optional: when they are not configured the
    check reads ``disabled`` and the service still counts as ready.
    """
    checks: dict[str, str] = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as exc:
        checks["database"] = f"error: {exc}"

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except RuntimeError:
        checks["redis"] = "disabled"
    except RedisError as exc:
        checks["redis"] = f"error: {exc}"

    checks["ai"] = _oracle_check(get_settings())

    ready = all(v in _PASSING for v in checks.values())
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
