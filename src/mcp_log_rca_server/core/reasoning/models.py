"""Reasoning-engine request/response models and configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import ParsedLog

DEFAULT_MODEL_SCORE = 50


class ReasoningRequest(BaseModel):
    """Structured input sent to the reasoning engine (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    detected_error_type: str = Field(alias="detectedErrorType")
    error_snippet: str = Field(alias="errorSnippet")
    log_summary: str = Field(alias="logSummary")
    service_name: str | None = Field(default=None, alias="serviceName")
    environment: str | None = None
    request_id: str | None = Field(default=None, alias="requestId")

    @classmethod
    def from_parsed(cls, parsed: ParsedLog) -> ReasoningRequest:
        return cls(
            detected_error_type=parsed.category.value,
            error_snippet=parsed.error_snippet,
            log_summary=parsed.summary,
            service_name=parsed.service_name,
            environment=parsed.environment,
            request_id=parsed.request_id,
        )


class ReasoningResponse(BaseModel):
    """Validated narrative returned by the reasoning engine."""

    error_type: str = Field(default="", description="The specific error classification.")
    affected_service: str = Field(default="", description="The service or component that failed.")
    root_cause_summary: str = Field(
        description="Concise technical explanation of why the failure occurred (2-4 sentences)."
    )
    confidence_reasoning: str = Field(
        default="", description="Evidence supporting the analysis and what is uncertain."
    )
    confidence_score: float = Field(
        default=DEFAULT_MODEL_SCORE, description="0-100 certainty of the analysis."
    )
    recommended_fix_steps: list[str] = Field(default_factory=list)
    long_term_prevention: str = Field(
        default="", description="Preventive measures to avoid recurrence."
    )
    impact_scope: str = Field(
        default="", description="Business and operational consequences if unresolved."
    )

    @field_validator(
        "error_type",
        "affected_service",
        "confidence_reasoning",
        "long_term_prevention",
        "impact_scope",
        mode="before",
    )
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("recommended_fix_steps", mode="before")
    @classmethod
    def _steps_as_strings(cls, value: Any) -> list[str]:
        return [s if isinstance(s, str) else str(s) for s in value]


class ReasoningOutcome(str, Enum):
    """Result of checking one engine response."""

    ACCEPTED = "accepted"
    RETRY_ONCE = "retry_once"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ReasoningAttempt:
    outcome: ReasoningOutcome
    response: ReasoningResponse | None = None


@dataclass(frozen=True, slots=True)
class ReasoningConfig:
    model: str = "gemini-2.5-flash"
    temperature: float = 0.2
    timeout_s: float = 60.0


def resolve_reasoning_config(cfg: ReasoningConfig | None) -> ReasoningConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = ReasoningConfig()

    model = os.getenv("LOG_RCA_MODEL")
    if model:
        cfg = replace(cfg, model=model)

    env = os.getenv("LOG_RCA_TIMEOUT_S")
    if env is None or env == "":
        return cfg

    try:
        value = float(env)
    except ValueError as exc:
        raise ValueError("LOG_RCA_TIMEOUT_S must be a number") from exc
    if value <= 0:
        raise ValueError("LOG_RCA_TIMEOUT_S must be > 0")
    return replace(cfg, timeout_s=value)
