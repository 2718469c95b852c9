"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from mcp_log_rca_server.core.evaluation import match_bucket, root_cause_match_score
from mcp_log_rca_server.core.fingerprint import fingerprint
from mcp_log_rca_server.core.incidents import IncidentStore, default_store
from mcp_log_rca_server.core.log_source import read_log_text
from mcp_log_rca_server.core.models import ConfidenceResult, ParsedLog, SimilarityMatch
from mcp_log_rca_server.core.orchestrator import AnalysisResult, analyze_log
from mcp_log_rca_server.core.preprocess import parse_log
from mcp_log_rca_server.core.reasoning import GeminiReasoningEngine, ReasoningEngine
from mcp_log_rca_server.core.similarity import find_similar_incidents, occurrence_count

DEFAULT_USER = "local"


async def _load_log(log_text: str | None, log_path: str | None) -> tuple[str, str | None]:
    """Return (text, file name) from exactly one of the two inputs."""
    if (log_text is None) == (log_path is None):
        raise ValueError("Provide exactly one of log_text or log_path.")
    if log_path is not None:
        return await read_log_text(log_path), Path(log_path).name
    return log_text, None


def _parsed_to_dict(parsed: ParsedLog, *, include_text: bool) -> dict[str, Any]:
    d: dict[str, Any] = {
        "detected_error_type": parsed.category.value,
        "error_snippet": parsed.error_snippet,
        "log_summary": parsed.summary,
        "service_name": parsed.service_name,
        "environment": parsed.environment,
        "request_id": parsed.request_id,
        "timestamp": parsed.timestamp,
        "stack_trace": parsed.stack_trace,
    }
    if include_text:
        d["cleaned_log"] = parsed.cleaned_text
    return d


def _match_to_dict(m: SimilarityMatch) -> dict[str, Any]:
    return {
        "id": m.incident_id,
        "created_at": m.created_at.isoformat() if m.created_at is not None else None,
        "similarity_score": m.score,
        "category_match": m.category_match,
        "environment_match": m.environment_match,
        "service_match": m.service_match,
        "fingerprint_match": m.fingerprint_match,
        "error_type": m.error_type,
        "service_name": m.service_name,
        "root_cause_summary": m.root_cause_summary,
        "resolution_notes": m.resolution_notes,
        "confidence_score": m.confidence_score,
        "status": m.status,
    }


def _confidence_to_dict(c: ConfidenceResult) -> dict[str, Any]:
    return {"score": c.score, "level": c.level.value, "reasoning": c.reasoning}


def result_to_dict(result: AnalysisResult) -> dict[str, Any]:
    """Convert an AnalysisResult into a JSON-serializable dict."""
    return {
        "detected_error_type": result.parsed.category.value,
        "error_snippet": result.parsed.error_snippet,
        "stack_trace_hash": result.fingerprint,
        "affected_service": result.affected_service,
        "root_cause_summary": result.root_cause_summary,
        "confidence_reasoning": result.confidence_reasoning,
        "confidence_score": result.confidence.score,
        "confidence_level": result.confidence.level.value,
        "confidence": _confidence_to_dict(result.confidence),
        "recommended_fix_steps": list(result.recommended_fix_steps),
        "long_term_prevention": result.long_term_prevention,
        "impact_scope": result.impact_scope,
        "similar_incidents": [_match_to_dict(m) for m in result.similar_incidents],
        "occurrence_count": result.occurrence_count,
        "stages": [s.value for s in result.stages],
    }


async def analyze_log_impl(
    *,
    log_text: str | None = None,
    log_path: str | None = None,
    user_id: str = DEFAULT_USER,
    persist: bool = True,
    file_name: str | None = None,
    engine: ReasoningEngine | None = None,
    store: IncidentStore | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_log` MCP tool."""
    text, path_name = await _load_log(log_text, log_path)
    result = await analyze_log(
        text,
        engine=engine or GeminiReasoningEngine(),
        store=store if store is not None else default_store(),
        user_id=user_id,
        persist=persist,
        file_name=file_name or path_name,
    )
    return result_to_dict(result)


async def preprocess_log_impl(
    *,
    log_text: str | None = None,
    log_path: str | None = None,
    include_cleaned: bool = True,
) -> dict[str, Any]:
    """Implementation for the `preprocess_log` MCP tool (no model call)."""
    text, _ = await _load_log(log_text, log_path)
    parsed = parse_log(text)
    d = _parsed_to_dict(parsed, include_text=include_cleaned)
    d["stack_trace_hash"] = fingerprint(parsed.stack_trace)
    return d


async def find_similar_impl(
    *,
    log_text: str | None = None,
    log_path: str | None = None,
    user_id: str = DEFAULT_USER,
    store: IncidentStore | None = None,
) -> dict[str, Any]:
    """Implementation for the `find_similar_incidents` MCP tool."""
    text, _ = await _load_log(log_text, log_path)
    parsed = parse_log(text)
    fp = fingerprint(parsed.stack_trace)
    store = store if store is not None else default_store()
    matches = find_similar_incidents(
        await store.recent_incidents(user_id),
        fingerprint=fp,
        category=parsed.category,
        service_name=parsed.service_name,
        environment=parsed.environment,
    )
    return {
        "stack_trace_hash": fp,
        "detected_error_type": parsed.category.value,
        "occurrence_count": occurrence_count(matches),
        "matches": [_match_to_dict(m) for m in matches],
    }


def evaluate_root_cause_impl(*, expected: str, predicted: str) -> dict[str, Any]:
    """Implementation for the `evaluate_root_cause` MCP tool."""
    if not expected.strip():
        raise ValueError("expected must not be empty")
    score = root_cause_match_score(expected, predicted)
    return {"match_score": score, "bucket": match_bucket(score)}
