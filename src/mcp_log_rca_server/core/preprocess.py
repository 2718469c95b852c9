"""Turn raw log text into a :class:`ParsedLog`.

Metadata and the error snippet are read from the raw text; the normalizer
only produces the sanitized copy and the summary.
"""

from __future__ import annotations

from .extract import (
    extract_environment,
    extract_request_id,
    extract_service_name,
    extract_stack_trace,
    extract_timestamp,
)
from .models import ParsedLog
from .normalize import normalize_log
from .taxonomy import classify, extract_error_snippet

PREVIEW_LINES = 3
PREVIEW_CHARS = 200


def summarize_log(text: str) -> str:
    """Return ``"<n> lines. Preview: ..."`` for the non-empty lines."""
    lines = [line for line in text.split("\n") if line.strip()]
    preview = " | ".join(lines[:PREVIEW_LINES]).strip()
    suffix = "..." if len(preview) > PREVIEW_CHARS else ""
    return f"{len(lines)} lines. Preview: {preview[:PREVIEW_CHARS]}{suffix}"


def parse_log(raw_log: str) -> ParsedLog:
    """Classify, extract and sanitize a raw log. Never raises on a string."""
    cleaned = normalize_log(raw_log)
    category = classify(raw_log)
    return ParsedLog(
        category=category,
        error_snippet=extract_error_snippet(raw_log, category),
        summary=summarize_log(cleaned),
        service_name=extract_service_name(raw_log),
        environment=extract_environment(raw_log),
        request_id=extract_request_id(raw_log),
        timestamp=extract_timestamp(raw_log),
        stack_trace=extract_stack_trace(raw_log),
        cleaned_text=cleaned,
    )
