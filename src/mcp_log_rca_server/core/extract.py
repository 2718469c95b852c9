"""Metadata extraction from raw log text.

Every extractor is optional and total: a missing field is ``None`` (or an
empty stack trace), never an error.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

_LABEL_VALUE = r"[:\s=]+[\"']?(\S+?)[\"']?(?:\s|$|,)"

SERVICE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"service" + _LABEL_VALUE, re.IGNORECASE),
    re.compile(r"\[([a-zA-Z][\w.-]+)\]"),
    re.compile(r"(\w+[-.]service)", re.IGNORECASE),
    re.compile(r"component" + _LABEL_VALUE, re.IGNORECASE),
)

ENV_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"env(?:ironment)?[:\s=]+[\"']?(production|staging|development|dev|prod|stg|qa|test)[\"']?",
        re.IGNORECASE,
    ),
    re.compile(r"\b(production|staging|development|prod|stg|dev|qa)\b", re.IGNORECASE),
)

_ID_VALUE = r"[:\s=]+[\"']?([a-f0-9-]{8,})[\"']?"

REQUEST_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"request[_-]?id" + _ID_VALUE, re.IGNORECASE),
    re.compile(r"trace[_-]?id" + _ID_VALUE, re.IGNORECASE),
    re.compile(r"correlation[_-]?id" + _ID_VALUE, re.IGNORECASE),
    re.compile(r"x-request-id" + _ID_VALUE, re.IGNORECASE),
)

TIMESTAMP_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2}[T\s]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)"
)

_TRACE_START_RE = re.compile(r"^\s+at\s|Caused by:|Traceback|File\s+\"")
_CONTINUATION_RE = re.compile(r"^\s")


def first_group(text: str, patterns: Sequence[re.Pattern[str]]) -> str | None:
    """Return the first capture group of the first pattern that matches."""
    for p in patterns:
        m = p.search(text)
        if m and m.group(1):
            return m.group(1)
    return None


def extract_service_name(text: str) -> str | None:
    return first_group(text, SERVICE_PATTERNS)


def extract_environment(text: str) -> str | None:
    return first_group(text, ENV_PATTERNS)


def extract_request_id(text: str) -> str | None:
    return first_group(text, REQUEST_ID_PATTERNS)


def extract_timestamp(text: str) -> str | None:
    return first_group(text, (TIMESTAMP_RE,))


def extract_stack_trace(text: str) -> str:
    """Collect frame lines plus their indented continuation lines."""
    trace: list[str] = []
    in_trace = False
    for line in text.split("\n"):
        if _TRACE_START_RE.search(line):
            in_trace = True
            trace.append(line)
        elif in_trace and _CONTINUATION_RE.match(line):
            trace.append(line)
        else:
            in_trace = False
    return "\n".join(trace)
