"""Core data models for log root-cause analysis."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN = "Unknown"  # rendered in place of missing metadata


class ErrorCategory(str, Enum):
    """Closed set of error classes a log is assigned to.

    Values are the labels stored on historical incidents, so a freshly
    classified log compares equal to the stored ``error_type``.
    """

    OUT_OF_MEMORY = "OutOfMemoryError"
    NULL_REFERENCE = "NullPointerException"
    TIMEOUT = "TimeoutException"
    PERMISSION_DENIED = "PermissionDenied"
    SCHEMA_MISMATCH = "SchemaMismatch"
    NETWORK = "NetworkError"
    UNKNOWN = "UnknownError"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class ParsedLog:
    """Preprocessed view of one raw log, produced once per analysis."""

    category: ErrorCategory
    error_snippet: str
    summary: str
    service_name: str | None
    environment: str | None
    request_id: str | None
    timestamp: str | None
    stack_trace: str  # empty when no frames were found
    cleaned_text: str


@dataclass(frozen=True, slots=True)
class SimilarityMatch:
    """A historical incident scored against the current log."""

    incident_id: str
    created_at: datetime | None
    category_match: bool
    environment_match: bool  # reported only, never scored
    service_match: bool
    fingerprint_match: bool
    score: int
    error_type: str | None
    service_name: str | None
    root_cause_summary: str | None
    resolution_notes: str | None
    confidence_score: int
    status: str


@dataclass(frozen=True, slots=True)
class ConfidenceResult:
    score: int
    level: ConfidenceLevel
    reasoning: str


class HistoricalIncident(BaseModel):
    """Read-only incident row supplied by the incident store."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    created_at: datetime | None = None
    error_type: str | None = None
    service_name: str | None = None
    environment: str | None = None
    root_cause_summary: str | None = None
    resolution_notes: str | None = None
    confidence_score: int = 0
    status: str = "Open"
    stack_trace_hash: str | None = None

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _score_or_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def _status_or_open(cls, value: Any) -> Any:
        return "Open" if value is None else value


class IncidentRecord(BaseModel):
    """New incident row handed to the store after an analysis completes."""

    id: str
    user_id: str
    created_at: datetime
    environment: str | None = None
    error_type: str
    service_name: str | None = None
    stack_trace_hash: str = ""
    root_cause_summary: str = ""
    confidence_score: int = 0
    confidence_reasoning: str = ""
    recommended_fix_steps: list[str] = Field(default_factory=list)
    long_term_prevention: str = ""
    impact_scope: str = ""
    affected_service: str = ""
    resolution_notes: str | None = None
    status: str = "Open"
    raw_log: str = ""
    file_name: str | None = None
