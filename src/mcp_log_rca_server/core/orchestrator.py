"""Analysis orchestrator.

Sequences one request through preprocessing, incident memory, the
reasoning engine and confidence scoring:

    Received -> Preprocessed -> SimilarityChecked -> ReasoningRequested
      -> [ReasoningRetried] -> ReasoningValidated -> ScoreComputed -> Completed

Each request owns its ParsedLog; nothing is shared between requests.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from .confidence import compute_confidence
from .errors import EmptyLogError
from .fingerprint import fingerprint as compute_fingerprint
from .incidents import IncidentStore, build_incident_record
from .models import UNKNOWN, ConfidenceResult, ParsedLog, SimilarityMatch
from .preprocess import parse_log
from .reasoning import ReasoningConfig, ReasoningEngine, ReasoningRequest, request_reasoning
from .similarity import HISTORY_WINDOW, find_similar_incidents, occurrence_count

logger = logging.getLogger(__name__)

_EDGE_BRACKETS_RE = re.compile(r"^\[|\]$")


class AnalysisStage(str, Enum):
    RECEIVED = "Received"
    PREPROCESSED = "Preprocessed"
    SIMILARITY_CHECKED = "SimilarityChecked"
    REASONING_REQUESTED = "ReasoningRequested"
    REASONING_RETRIED = "ReasoningRetried"
    REASONING_VALIDATED = "ReasoningValidated"
    SCORE_COMPUTED = "ScoreComputed"
    COMPLETED = "Completed"


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Everything the caller gets back for one analyzed log."""

    parsed: ParsedLog
    fingerprint: str
    affected_service: str
    root_cause_summary: str
    confidence_reasoning: str
    recommended_fix_steps: tuple[str, ...]
    long_term_prevention: str
    impact_scope: str
    similar_incidents: tuple[SimilarityMatch, ...]
    occurrence_count: int
    confidence: ConfidenceResult
    stages: tuple[AnalysisStage, ...]


def clean_llm_text(text: str) -> str:
    """Strip one leading ``[`` and one trailing ``]`` from model output."""
    if not text:
        return text
    return _EDGE_BRACKETS_RE.sub("", text).strip()


class _Trail:
    def __init__(self) -> None:
        self.stages: list[AnalysisStage] = []

    def enter(self, stage: AnalysisStage) -> None:
        logger.debug("analysis stage: %s", stage.value)
        self.stages.append(stage)


async def analyze_log(
    raw_log: str,
    *,
    engine: ReasoningEngine,
    store: IncidentStore | None = None,
    user_id: str = "local",
    persist: bool = True,
    file_name: str | None = None,
    cfg: ReasoningConfig | None = None,
) -> AnalysisResult:
    """Run the full analysis of one raw log.

    Raises :class:`EmptyLogError` for blank input and the reasoning errors
    from :mod:`.errors` when the engine round trip fails.
    """
    if not raw_log or not raw_log.strip():
        raise EmptyLogError("Please provide a log to analyze")

    trail = _Trail()
    trail.enter(AnalysisStage.RECEIVED)

    parsed = parse_log(raw_log)
    fp = compute_fingerprint(parsed.stack_trace)
    trail.enter(AnalysisStage.PREPROCESSED)

    history = await store.recent_incidents(user_id, limit=HISTORY_WINDOW) if store else []
    matches = find_similar_incidents(
        history,
        fingerprint=fp,
        category=parsed.category,
        service_name=parsed.service_name,
        environment=parsed.environment,
    )
    trail.enter(AnalysisStage.SIMILARITY_CHECKED)

    trail.enter(AnalysisStage.REASONING_REQUESTED)
    response, retried = await request_reasoning(
        ReasoningRequest.from_parsed(parsed), engine=engine, cfg=cfg
    )
    if retried:
        trail.enter(AnalysisStage.REASONING_RETRIED)
    trail.enter(AnalysisStage.REASONING_VALIDATED)

    confidence = compute_confidence(response.confidence_score, matches, parsed)
    trail.enter(AnalysisStage.SCORE_COMPUTED)

    trail.enter(AnalysisStage.COMPLETED)
    result = AnalysisResult(
        parsed=parsed,
        fingerprint=fp,
        affected_service=clean_llm_text(response.affected_service)
        or parsed.service_name
        or UNKNOWN,
        root_cause_summary=clean_llm_text(response.root_cause_summary),
        confidence_reasoning=clean_llm_text(response.confidence_reasoning)
        or confidence.reasoning,
        recommended_fix_steps=tuple(clean_llm_text(s) for s in response.recommended_fix_steps),
        long_term_prevention=clean_llm_text(response.long_term_prevention),
        impact_scope=clean_llm_text(response.impact_scope),
        similar_incidents=tuple(matches),
        occurrence_count=occurrence_count(matches),
        confidence=confidence,
        stages=tuple(trail.stages),
    )

    if store is not None and persist:
        record = build_incident_record(result, user_id=user_id, raw_log=raw_log, file_name=file_name)
        try:
            await store.add_incident(record)
        except OSError:
            logger.warning("Failed to save incident %s", record.id, exc_info=True)

    logger.info(
        "analysis complete: category=%s confidence=%s (%s) matches=%d",
        parsed.category.value,
        confidence.score,
        confidence.level.value,
        len(matches),
    )
    return result
