"""Multi-factor confidence model.

Three signals are combined:

- model certainty: the reasoning engine's own 0-100 score, weighted 0.4
- similarity: a flat 30 or 15 points depending on the best match
- completeness: fixed increments per extracted field, at most 30

The reasoning string is rebuilt from the same three inputs, one sentence per
signal, so it can always be reproduced.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from .models import ConfidenceLevel, ConfidenceResult, ErrorCategory, ParsedLog, SimilarityMatch

MODEL_WEIGHT = 0.4
STRONG_MATCH = 70
PARTIAL_MATCH = 40
HIGH_THRESHOLD = 75
MEDIUM_THRESHOLD = 45
MIN_TRACE_CHARS = 20


def confidence_level(score: int) -> ConfidenceLevel:
    if score >= HIGH_THRESHOLD:
        return ConfidenceLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def completeness_points(parsed: ParsedLog) -> int:
    """Points for each structured field successfully extracted."""
    points = 0
    if parsed.category is not ErrorCategory.UNKNOWN:
        points += 8
    if parsed.service_name:
        points += 6
    if parsed.environment:
        points += 4
    if parsed.request_id:
        points += 4
    if parsed.timestamp:
        points += 4
    if len(parsed.stack_trace) > MIN_TRACE_CHARS:
        points += 4
    return points


def _certainty_reason(model_score: float) -> str:
    if model_score >= 80:
        return "LLM reports high certainty in its analysis"
    if model_score >= 50:
        return "LLM reports moderate certainty"
    return "LLM reports low certainty, analysis may be speculative"


def _similarity(matches: Sequence[SimilarityMatch]) -> tuple[int, str]:
    if not matches:
        return 0, "No similar past incidents found, this may be a novel issue"
    best = matches[0].score
    if best >= STRONG_MATCH:
        return 30, f"Strong match with {len(matches)} previous incident(s) ({best}% similarity)"
    if best >= PARTIAL_MATCH:
        return 15, f"Partial match with previous incidents ({best}% similarity)"
    return 0, f"Only weak matches with previous incidents ({best}% similarity)"


def _completeness_reason(points: int) -> str:
    if points >= 20:
        return "Log provided rich structured context (service, env, trace)"
    if points >= 10:
        return "Some structured context available from log"
    return "Limited structured context extracted, confidence reduced"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_confidence(
    model_score: float,
    matches: Sequence[SimilarityMatch],
    parsed: ParsedLog,
) -> ConfidenceResult:
    """Combine model certainty, similarity and completeness into one score.

    ``matches`` must already be ranked best-first.
    """
    certainty = min(max(float(model_score), 0.0), 100.0)
    similarity_points, similarity_reason = _similarity(matches)
    completeness = completeness_points(parsed)

    total = certainty * MODEL_WEIGHT + similarity_points + completeness
    score = _round_half_up(min(total, 100.0))

    reasons = [
        _certainty_reason(certainty),
        similarity_reason,
        _completeness_reason(completeness),
    ]
    return ConfidenceResult(
        score=score,
        level=confidence_level(score),
        reasoning=". ".join(reasons) + ".",
    )
