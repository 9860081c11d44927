"""CORS for the web client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intervue.config import Settings

# Methods and headers the web client actually sends
_METHODS = ["GET", "POST", "OPTIONS"]
_HEADERS = ["Authorization", "Content-Type", "X-Request-Id"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured origins (plus ``cors_origin_regex`` matches, e.g. preview deploys).

    Credentials are allowed so the browser sends the ``session`` cookie.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=_METHODS,
        allow_headers=_HEADERS,
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
