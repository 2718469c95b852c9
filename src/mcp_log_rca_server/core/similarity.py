"""Heuristic similarity between a new log and recent historical incidents.

Scoring favours exact recurrence: an identical fingerprint outweighs
category and service agreement combined.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import ErrorCategory, HistoricalIncident, SimilarityMatch

HISTORY_WINDOW = 50
MAX_MATCHES = 5
MIN_SCORE = 20

FINGERPRINT_POINTS = 70
CATEGORY_POINTS = 20
SERVICE_POINTS = 10


def score_incident(
    incident: HistoricalIncident,
    *,
    fingerprint: str,
    category: ErrorCategory,
    service_name: str | None,
    environment: str | None = None,
) -> SimilarityMatch:
    """Compare one incident against the current log."""
    fingerprint_match = bool(fingerprint) and incident.stack_trace_hash == fingerprint
    category_match = incident.error_type == category.value
    service_match = bool(service_name) and incident.service_name == service_name
    environment_match = bool(environment) and incident.environment == environment

    score = 0
    if fingerprint_match:
        score += FINGERPRINT_POINTS
    if category_match:
        score += CATEGORY_POINTS
    if service_match:
        score += SERVICE_POINTS

    return SimilarityMatch(
        incident_id=incident.id,
        created_at=incident.created_at,
        category_match=category_match,
        environment_match=environment_match,
        service_match=service_match,
        fingerprint_match=fingerprint_match,
        score=min(score, 100),
        error_type=incident.error_type,
        service_name=incident.service_name,
        root_cause_summary=incident.root_cause_summary,
        resolution_notes=incident.resolution_notes,
        confidence_score=incident.confidence_score,
        status=incident.status,
    )


def find_similar_incidents(
    incidents: Sequence[HistoricalIncident],
    *,
    fingerprint: str,
    category: ErrorCategory,
    service_name: str | None,
    environment: str | None = None,
) -> list[SimilarityMatch]:
    """Return up to five matches scoring at least 20, best first.

    ``incidents`` must be ordered newest-first; the sort is stable so the
    more recent incident wins a tie.
    """
    matches = [
        score_incident(
            incident,
            fingerprint=fingerprint,
            category=category,
            service_name=service_name,
            environment=environment,
        )
        for incident in incidents[:HISTORY_WINDOW]
    ]
    kept = [m for m in matches if m.score >= MIN_SCORE]
    kept.sort(key=lambda m: m.score, reverse=True)
    return kept[:MAX_MATCHES]


def occurrence_count(matches: Sequence[SimilarityMatch]) -> int:
    """Number of earlier incidents the current log appears to repeat."""
    return len(matches)
