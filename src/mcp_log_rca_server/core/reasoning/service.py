"""Reasoning round trip: prompt, call, validate, retry once.

The engine's text is repaired where the shape is recoverable (fix steps
given as one string, missing or non-numeric score). Anything without a
string ``root_cause_summary`` is malformed and earns exactly one retry with
an amended prompt.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import re
from typing import Any

from pydantic import ValidationError

from ..errors import MalformedReasoningError, ReasoningEngineError, ReasoningTimeoutError
from .engine import ReasoningEngine
from .models import (
    DEFAULT_MODEL_SCORE,
    ReasoningAttempt,
    ReasoningConfig,
    ReasoningOutcome,
    ReasoningRequest,
    ReasoningResponse,
    resolve_reasoning_config,
)
from .prompt import SYSTEM_PROMPT, build_reasoning_prompt, build_retry_prompt

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_STEP_SPLIT_RE = re.compile(r"\n|;")


def _coerce_steps(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [s.strip() for s in _STEP_SPLIT_RE.split(value) if s.strip()]
    return []


def _coerce_score(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_MODEL_SCORE
    try:
        score = float(value)
    except OverflowError:
        return DEFAULT_MODEL_SCORE
    if not math.isfinite(score):
        return DEFAULT_MODEL_SCORE
    return score


def parse_reasoning_output(content: str) -> ReasoningResponse | None:
    """Extract and repair the JSON object embedded in ``content``.

    Returns ``None`` when no usable object is present.
    """
    m = _JSON_OBJECT_RE.search(content or "")
    if not m:
        return None
    try:
        data = json.loads(m.group(0))
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict) or not isinstance(data.get("root_cause_summary"), str):
        return None

    data["recommended_fix_steps"] = _coerce_steps(data.get("recommended_fix_steps"))
    data["confidence_score"] = _coerce_score(data.get("confidence_score"))
    try:
        return ReasoningResponse.model_validate(data)
    except ValidationError:
        return None


def check_response(content: str, *, retried: bool) -> ReasoningAttempt:
    """Decide what happens after one engine response."""
    parsed = parse_reasoning_output(content)
    if parsed is not None:
        return ReasoningAttempt(ReasoningOutcome.ACCEPTED, parsed)
    if retried:
        return ReasoningAttempt(ReasoningOutcome.FAILED)
    return ReasoningAttempt(ReasoningOutcome.RETRY_ONCE)


async def _call_engine(engine: ReasoningEngine, prompt: str, *, cfg: ReasoningConfig) -> str:
    """One engine call bounded by the configured timeout. Never retried."""
    try:
        return await asyncio.wait_for(
            engine.complete(SYSTEM_PROMPT, prompt), timeout=cfg.timeout_s
        )
    except asyncio.TimeoutError as e:
        raise ReasoningTimeoutError(
            f"Reasoning engine did not respond within {cfg.timeout_s:g}s"
        ) from e
    except ReasoningEngineError:
        raise
    except Exception as e:
        raise ReasoningEngineError(f"Reasoning engine call failed: {e}") from e


async def request_reasoning(
    request: ReasoningRequest,
    *,
    engine: ReasoningEngine,
    cfg: ReasoningConfig | None = None,
) -> tuple[ReasoningResponse, bool]:
    """Run the reasoning round trip.

    Returns the validated response and whether the retry was needed.
    Raises :class:`MalformedReasoningError` when the retry is also unusable.
    """
    cfg = resolve_reasoning_config(cfg)
    prompt = build_reasoning_prompt(request)

    retried = False
    attempt = check_response(await _call_engine(engine, prompt, cfg=cfg), retried=retried)
    if attempt.outcome is ReasoningOutcome.RETRY_ONCE:
        logger.warning("Reasoning output was not valid JSON, retrying once")
        retried = True
        retry_prompt = build_retry_prompt(prompt)
        attempt = check_response(await _call_engine(engine, retry_prompt, cfg=cfg), retried=retried)

    if attempt.outcome is not ReasoningOutcome.ACCEPTED or attempt.response is None:
        raise MalformedReasoningError("AI did not return valid JSON after retry")
    return attempt.response, retried
