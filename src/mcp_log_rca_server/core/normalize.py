"""Sanitizing normalizer.

An explicit, ordered pipeline of pure ``str -> str`` stages. The order is
significant: duplicate frames are collapsed before redaction, and
truncation always runs last on the smallest text.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from .redaction import redact_text

MAX_CHARS = 12_000
HEAD_RATIO = 0.3
TAIL_RATIO = 0.7

_TIMESTAMPED_INFO_RE = re.compile(r"^\s*\d{4}-\d{2}-\d{2}.*\bINFO\b")
_BRACKET_INFO_RE = re.compile(r"^\s*\[INFO\]")
_SIGNAL_RE = re.compile(r"error|exception|fail|warn", re.IGNORECASE)
_FRAME_RE = re.compile(r"^\s+at\s")

TextStage = Callable[[str], str]


def _is_info_noise(line: str) -> bool:
    if _SIGNAL_RE.search(line):
        return False
    return bool(_TIMESTAMPED_INFO_RE.match(line) or _BRACKET_INFO_RE.match(line))


def remove_info_lines(text: str) -> str:
    """Drop blank lines and informational lines that carry no failure signal."""
    kept = [line for line in text.split("\n") if line.strip() and not _is_info_noise(line)]
    return "\n".join(kept)


def _duplicate_marker(count: int) -> str:
    return f"  ... ({count} duplicate frame(s) removed)"


def dedupe_stack_frames(text: str) -> str:
    """Collapse runs of identical consecutive ``at ...`` frames."""
    out: list[str] = []
    previous_frame: str | None = None
    dupes = 0

    for line in text.split("\n"):
        if _FRAME_RE.match(line):
            frame = line.strip()
            if frame == previous_frame:
                dupes += 1
                continue
            previous_frame = frame
        else:
            previous_frame = None
        if dupes:
            out.append(_duplicate_marker(dupes))
            dupes = 0
        out.append(line)

    if dupes:
        out.append(_duplicate_marker(dupes))
    return "\n".join(out)


def truncate_text(text: str, max_chars: int = MAX_CHARS) -> str:
    """Keep the head and (larger) tail of an oversized log.

    The failure usually surfaces near the end of the output, so 70% of the
    lines are kept from the tail and 30% from the head.
    """
    if len(text) <= max_chars:
        return text

    lines = text.split("\n")
    if len(lines) < 2:
        return text[:max_chars]

    head_count = int(len(lines) * HEAD_RATIO)
    tail_count = int(len(lines) * TAIL_RATIO)
    dropped = len(lines) - head_count - tail_count
    head = lines[:head_count]
    tail = lines[len(lines) - tail_count :] if tail_count else []

    combined = "\n".join([*head, f"... [{dropped} lines truncated] ...", *tail])
    return combined[:max_chars]


PIPELINE: tuple[tuple[str, TextStage], ...] = (
    ("remove_info_lines", remove_info_lines),
    ("dedupe_stack_frames", dedupe_stack_frames),
    ("redact", redact_text),
    ("truncate", truncate_text),
)


def run_pipeline(text: str, stages: Sequence[tuple[str, TextStage]] = PIPELINE) -> str:
    """Apply each stage in order."""
    for _, stage in stages:
        text = stage(text)
    return text


def normalize_log(text: str) -> str:
    """Return the sanitized, size-bounded form of a raw log."""
    return run_pipeline(text)
