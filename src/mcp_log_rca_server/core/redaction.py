"""Redaction helpers applied before any text leaves the process."""

from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"(?i)\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b")
_CARD_RE = re.compile(r"\b\d{4}[ -]?\d{4}[ -]?\d{4}[ -]?\d{1,4}\b")
_SSN_RE = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
_ACCOUNT_RE = re.compile(r"\b\d{9,12}\b")
_CREDENTIAL_RE = re.compile(
    r"(?i)(?:password|passwd|secret|token|api_key|apikey)\s*[:=]\s*\S+"
)

# Applied in order: card numbers before the bare-digit rule, which would
# otherwise eat their unseparated form.
REDACTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (_EMAIL_RE, "[EMAIL_REDACTED]"),
    (_CARD_RE, "[CARD_REDACTED]"),
    (_SSN_RE, "[SSN_REDACTED]"),
    (_ACCOUNT_RE, "[ACCT_REDACTED]"),
    (_CREDENTIAL_RE, "[CREDENTIAL_REDACTED]"),
)


def redact_text(text: str) -> str:
    """Replace personal and secret substrings with fixed tags."""
    for pattern, tag in REDACTIONS:
        text = pattern.sub(tag, text)
    return text
