"""Reasoning engine package."""

from __future__ import annotations

from .engine import GeminiReasoningEngine, ReasoningEngine, classify_status
from .models import (
    ReasoningAttempt,
    ReasoningConfig,
    ReasoningOutcome,
    ReasoningRequest,
    ReasoningResponse,
    resolve_reasoning_config,
)
from .service import check_response, parse_reasoning_output, request_reasoning

__all__ = [
    "GeminiReasoningEngine",
    "ReasoningAttempt",
    "ReasoningConfig",
    "ReasoningEngine",
    "ReasoningOutcome",
    "ReasoningRequest",
    "ReasoningResponse",
    "check_response",
    "classify_status",
    "parse_reasoning_output",
    "request_reasoning",
    "resolve_reasoning_config",
]
