"""Stack-trace fingerprinting for recurrence matching."""

from __future__ import annotations

import re

_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2}[T\s]\d{2}:\d{2}:\d{2}\S*")
_LINE_NO_RE = re.compile(r":\d+")
_ADDRESS_RE = re.compile(r"0x[0-9a-f]+", re.IGNORECASE)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def normalize_trace(stack_trace: str) -> str:
    """Replace volatile details with fixed placeholders.

    Timestamps go first: their ``:MM:SS`` parts would otherwise be taken
    for line numbers and leave the hour behind.
    """
    text = _TIMESTAMP_RE.sub("TIMESTAMP", stack_trace)
    text = _LINE_NO_RE.sub(":N", text)
    text = _ADDRESS_RE.sub("0xADDR", text)
    return text.strip()


def rolling_hash(text: str) -> int:
    """32-bit signed ``h = h*31 + unit`` over UTF-16 code units."""
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def fingerprint(stack_trace: str) -> str:
    """Return a short stable fingerprint, or ``""`` when there is no trace."""
    if not stack_trace:
        return ""
    return to_base36(abs(rolling_hash(normalize_trace(stack_trace))))
