"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intervue.auth.router import me_router
from intervue.auth.router import router as auth_router
from intervue.config import get_settings
from intervue.database import close_db, get_engine, init_db
from intervue.gamification.router import router as gamification_router
from intervue.gamification.seed import seed_badges
from intervue.health.router import router as health_router
from intervue.interviews.router import generate_router as interview_generate_router
from intervue.interviews.router import router as interviews_router
from intervue.middleware import setup_middleware
from intervue.peer.router import router as peer_router
from intervue.quiz.router import router as quiz_router
from intervue.redis_client import close_redis, init_redis

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.redis_url:
        await init_redis(settings.redis_url)
    else:
        logger.info("redis_disabled")

    # Badge catalog is upserted on every start
    session_factory = async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as db:
            await seed_badges(db)
    except SQLAlchemyError:
        logger.warning("badge_seeding_failed", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="InterVue API",
        description="Mock interview practice with AI questions, AI feedback, quizzes and rewards",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(me_router)
    app.include_router(gamification_router)
    app.include_router(interview_generate_router)
    app.include_router(interviews_router)
    app.include_router(quiz_router)
    app.include_router(peer_router)

    return app


app = create_app()
