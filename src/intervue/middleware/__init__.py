"""Middleware registration."""

from fastapi import FastAPI

from intervue.config import Settings
from intervue.middleware.cors import setup_cors
from intervue.middleware.error_handler import setup_error_handlers
from intervue.middleware.logging import setup_logging
from intervue.middleware.rate_limit import RateLimitMiddleware
from intervue.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and middleware.

    Starlette runs middleware in reverse-add order, so the request id is
    bound before rate limiting logs anything and CORS (added last) also
    wraps 429 and error responses. ``rate_limit_requests <= 0`` turns
    rate limiting off.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.rate_limit_requests > 0:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
