"""Scoring a predicted root cause against a known one."""

from __future__ import annotations

import math

HIGH_MATCH = 60
PARTIAL_MATCH = 30


def root_cause_match_score(expected: str, predicted: str) -> int:
    """Word-set overlap (Jaccard) of the two texts as a 0-100 integer."""
    if not expected or not predicted:
        return 0
    words_a = set(expected.lower().split())
    words_b = set(predicted.lower().split())
    union = words_a | words_b
    if not union:
        return 0
    return math.floor(len(words_a & words_b) / len(union) * 100 + 0.5)


def match_bucket(score: int) -> str:
    if score >= HIGH_MATCH:
        return "high"
    if score >= PARTIAL_MATCH:
        return "partial"
    return "miss"
