"""Ordered error taxonomy and error-snippet extraction.

Categories are tried in table order and the first one with any matching
pattern wins. Several categories can match the same text ("connection
timeout" is both a network and a timeout symptom), so the order is part of
the contract.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from .models import ErrorCategory

SNIPPET_BEFORE = 1
SNIPPET_AFTER = 3
FALLBACK_TAIL_LINES = 5


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


ERROR_TAXONOMY: tuple[tuple[ErrorCategory, tuple[re.Pattern[str], ...]], ...] = (
    (
        ErrorCategory.OUT_OF_MEMORY,
        _compile(
            r"OutOfMemoryError",
            r"out of memory",
            r"java heap space",
            r"OOMKilled",
            r"memory limit exceeded",
            r"GC overhead limit exceeded",
        ),
    ),
    (
        ErrorCategory.SCHEMA_MISMATCH,
        _compile(
            r"AnalysisException",
            r"cannot resolve column",
            r"cannot resolve",
            r"column not found",
            r"unresolved attribute",
            r"Schema mismatch",
            r"schema.*mismatch",
            r"incompatible schema",
            r"field.*missing",
            r"unexpected field",
            r"type mismatch",
            r"column.*does not exist",
        ),
    ),
    (
        ErrorCategory.PERMISSION_DENIED,
        _compile(
            r"Permission denied",
            r"AccessControlException",
            r"not authorized",
            r"Access denied",
            r"Unauthorized",
            r"403 Forbidden",
            r"insufficient privileges",
            r"PERMISSION_DENIED",
        ),
    ),
    (
        ErrorCategory.TIMEOUT,
        _compile(
            r"TimeoutException",
            r"timed out",
            r"timeout",
            r"job aborted due to timeout",
            r"connection timeout",
            r"read timeout",
            r"socket timeout",
            r"deadline exceeded",
        ),
    ),
    (
        ErrorCategory.NETWORK,
        _compile(
            r"Connection refused",
            r"Connection reset",
            r"JDBCConnectionException",
            r"network.*unreachable",
            r"host.*not found",
            r"DNS resolution failed",
        ),
    ),
    (
        ErrorCategory.NULL_REFERENCE,
        _compile(
            r"NullPointerException",
            r"NullReferenceException",
            r"null pointer",
            r"cannot read propert",
            r"is not defined",
            r"AttributeError.*NoneType",
        ),
    ),
)


def patterns_for(category: ErrorCategory) -> tuple[re.Pattern[str], ...]:
    """Return the declared patterns of a category (empty for UNKNOWN)."""
    for cat, patterns in ERROR_TAXONOMY:
        if cat is category:
            return patterns
    return ()


def classify(text: str) -> ErrorCategory:
    """Return the first category with a pattern found anywhere in ``text``."""
    for category, patterns in ERROR_TAXONOMY:
        if any(p.search(text) for p in patterns):
            return category
    return ErrorCategory.UNKNOWN


def _tail(lines: Sequence[str], count: int) -> str:
    return "\n".join(lines[-count:]).strip()


def extract_error_snippet(text: str, category: ErrorCategory) -> str:
    """Return the lines around the first line matching the category.

    The window runs from one line before to three lines after the hit. When
    nothing matched (or the category is UNKNOWN) the last five lines are
    returned instead.
    """
    lines = text.split("\n")
    patterns = patterns_for(category)
    if patterns:
        for i, line in enumerate(lines):
            if any(p.search(line) for p in patterns):
                start = max(0, i - SNIPPET_BEFORE)
                end = min(len(lines), i + SNIPPET_AFTER + 1)
                return "\n".join(lines[start:end]).strip()
    return _tail(lines, FALLBACK_TAIL_LINES)
