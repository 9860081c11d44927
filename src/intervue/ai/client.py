"""
Completion oracle with provider abstraction.

Supports the Gemini REST API (default). Callers treat the oracle as an
opaque text/JSON source and must tolerate ``CompletionError``.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from intervue.config import get_settings

logger = structlog.get_logger()

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


class CompletionError(Exception):
    """Raised when the oracle is unavailable or returns nothing usable."""


class BaseCompletionProvider(ABC):
    """Abstract base class for completion providers."""

    @abstractmethod
    async def complete(self, prompt: str, system: str | None = None) -> str:
        """Return the generated text for ``prompt``."""
        ...


class GeminiProvider(BaseCompletionProvider):
    """Generate text via the Gemini ``generateContent`` REST endpoint."""

    def __init__(self, api_key: str, model: str, base_url: str, timeout: float = 30.0) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def complete(self, prompt: str, system: str | None = None) -> str:
        """Send one prompt and return the text of the first candidate."""
        if not self.api_key:
            msg = "Gemini API key not configured"
            raise CompletionError(msg)

        payload: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    headers={
                        "x-goog-api-key": self.api_key,
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("completion_http_error", provider="gemini", status=e.response.status_code)
            msg = f"Gemini API error: {e.response.status_code}"
            raise CompletionError(msg) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("completion_request_failed", provider="gemini", error=str(e))
            msg = "Gemini API request failed"
            raise CompletionError(msg) from e

        text = extract_text(body)
        if not text:
            msg = "Gemini returned no text"
            raise CompletionError(msg)
        return text


def extract_text(body: Any) -> str:
    """Pull the generated text out of a ``generateContent`` response body."""
    if isinstance(body, str):
        return body
    if not isinstance(body, dict):
        return ""

    candidates = body.get("candidates") or []
    if candidates and isinstance(candidates[0], dict):
        content = candidates[0].get("content") or {}
        parts = content.get("parts", []) if isinstance(content, dict) else content
        if isinstance(parts, list):
            return "\n".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()

    # Older response shape
    contents = body.get("contents") or []
    if contents and isinstance(contents[0], dict):
        return "\n".join(p.get("text", "") for p in contents[0].get("parts", [])).strip()

    return ""


def strip_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    return _FENCE_RE.sub("", text.strip()).strip()


def safe_json_loads(text: str) -> Any | None:
    """Parse JSON, retrying once without markdown fences. None when both fail."""
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        pass
    try:
        return json.loads(strip_fences(text))
    except (TypeError, ValueError):
        return None


def _create_provider() -> BaseCompletionProvider:
    """Create completion provider based on configuration."""
    settings = get_settings()
    provider_name = settings.ai_provider.lower()

    if provider_name == "gemini":
        return GeminiProvider(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.ai_timeout_seconds,
        )
    msg = f"Unsupported completion provider: {provider_name}"
    raise ValueError(msg)


class CompletionClient:
    """High-level oracle access used by the interview and quiz services."""

    def __init__(self, provider: BaseCompletionProvider | None = None) -> None:
        self.provider = provider or _create_provider()

    async def generate_text(self, prompt: str, system: str | None = None) -> str:
        """Raw generated text."""
        return await self.provider.complete(prompt, system)

    async def generate_json(self, prompt: str, system: str | None = None) -> Any:
        """
        Generated text parsed as JSON.

        Raises:
            CompletionError: If the oracle fails or the text is not JSON.
        """
        text = await self.provider.complete(prompt, system)
        parsed = safe_json_loads(text)
        if parsed is None:
            logger.warning("completion_unparseable", preview=text[:200])
            msg = "Oracle returned unparseable JSON"
            raise CompletionError(msg)
        return parsed


# Module-level singleton
_completion_client: CompletionClient | None = None


def get_completion_client() -> CompletionClient:
    """Get or create the completion client singleton."""
    global _completion_client  # noqa: PLW0603
    if _completion_client is None:
        _completion_client = CompletionClient()
    return _completion_client


def reset_completion_client() -> None:
    """Reset the completion client singleton (for testing)."""
    global _completion_client  # noqa: PLW0603
    _completion_client = None
