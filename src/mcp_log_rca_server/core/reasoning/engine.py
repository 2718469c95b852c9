"""Reasoning engine interface and the Gemini-backed implementation."""

from __future__ import annotations

import logging
import os
from typing import Protocol

from ..errors import QuotaExceededError, RateLimitedError, ReasoningEngineError
from .models import ReasoningConfig, resolve_reasoning_config

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429
QUOTA_STATUS = 402


class ReasoningEngine(Protocol):
    """Single request/response call to a language model."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the raw text produced for ``user_prompt``."""
        ...


def classify_status(status: int | None, message: str) -> ReasoningEngineError:
    """Map an engine status code to the matching error type."""
    if status == QUOTA_STATUS:
        return QuotaExceededError(
            "Usage limit reached. Please add credits or raise the quota.", status=status
        )
    if status == RATE_LIMIT_STATUS:
        if "quota" in message.lower():
            return QuotaExceededError(
                "Usage quota exhausted for the reasoning engine.", status=status
            )
        return RateLimitedError("Rate limit exceeded. Please try again shortly.", status=status)
    return ReasoningEngineError(f"Reasoning engine returned {status}: {message}", status=status)


class GeminiReasoningEngine:
    """Reasoning engine backed by the Gemini API (``google-genai``)."""

    def __init__(self, cfg: ReasoningConfig | None = None, *, api_key: str | None = None) -> None:
        self.cfg = resolve_reasoning_config(cfg)
        self._api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        self._client = None

    def _get_client(self):
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise ReasoningEngineError("Missing GEMINI_API_KEY (or GOOGLE_API_KEY).")
        try:
            from google import genai
        except ImportError as e:  # pragma: no cover
            raise ReasoningEngineError(
                "google-genai is required for analysis. Install with: pip install '.[ai]'"
            ) from e
        self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        client = self._get_client()
        from google.genai import errors as genai_errors

        try:
            resp = await client.aio.models.generate_content(
                model=self.cfg.model,
                contents=user_prompt,
                config={
                    "system_instruction": system_prompt,
                    "temperature": self.cfg.temperature,
                },
            )
        except genai_errors.APIError as e:
            logger.error("Gemini call failed: %s %s", e.code, e.message)
            raise classify_status(e.code, e.message or str(e)) from e
        return resp.text or ""
