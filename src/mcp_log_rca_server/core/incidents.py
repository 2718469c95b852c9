"""Incident memory: the store interface and two local implementations.

The analysis core only ever reads a bounded, newest-first window of a
user's incidents and appends new records; it never updates one.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import uuid
from collections import defaultdict
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import aiofiles
from pydantic import ValidationError

from .models import HistoricalIncident, IncidentRecord
from .similarity import HISTORY_WINDOW

if TYPE_CHECKING:
    from .orchestrator import AnalysisResult

logger = logging.getLogger(__name__)

STORE_PATH_ENV = "LOG_RCA_INCIDENT_STORE"
DEFAULT_STORE_PATH = "incidents.jsonl"
RAW_LOG_CAP = 50_000


class IncidentStore(Protocol):
    async def recent_incidents(
        self, user_id: str, *, limit: int = HISTORY_WINDOW
    ) -> list[HistoricalIncident]:
        """Return up to ``limit`` incidents for ``user_id``, newest first."""
        ...

    async def add_incident(self, record: IncidentRecord) -> None:
        """Persist a new incident."""
        ...


def _as_incident(record: IncidentRecord) -> HistoricalIncident:
    return HistoricalIncident.model_validate(record.model_dump())


class InMemoryIncidentStore:
    """Process-local store, mostly for tests and one-off CLI runs."""

    def __init__(self, records: list[IncidentRecord] | None = None) -> None:
        self._by_user: dict[str, list[IncidentRecord]] = defaultdict(list)
        for record in records or []:
            self._by_user[record.user_id].append(record)

    async def recent_incidents(
        self, user_id: str, *, limit: int = HISTORY_WINDOW
    ) -> list[HistoricalIncident]:
        rows = self._by_user.get(user_id, [])
        return [_as_incident(r) for r in reversed(rows[-limit:])] if limit > 0 else []

    async def add_incident(self, record: IncidentRecord) -> None:
        self._by_user[record.user_id].append(record)


class JsonlIncidentStore:
    """Append-only JSON-lines file; file order is creation order."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def recent_incidents(
        self, user_id: str, *, limit: int = HISTORY_WINDOW
    ) -> list[HistoricalIncident]:
        if limit <= 0 or not self.path.is_file():
            return []

        rows: list[HistoricalIncident] = []
        async with aiofiles.open(self.path, encoding="utf-8") as f:
            async for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError:
                    logger.warning("Skipping corrupt incident line in %s", self.path)
                    continue
                if not isinstance(data, dict):
                    logger.warning("Skipping non-object incident line in %s", self.path)
                    continue
                if data.get("user_id") != user_id:
                    continue
                try:
                    rows.append(HistoricalIncident.model_validate(data))
                except ValidationError as e:
                    logger.warning(
                        "Skipping invalid incident %s in %s: %s", data.get("id"), self.path, e
                    )
        return list(reversed(rows[-limit:]))

    async def add_incident(self, record: IncidentRecord) -> None:
        async with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.path, mode="a", encoding="utf-8") as f:
                await f.write(record.model_dump_json() + "\n")


def default_store() -> JsonlIncidentStore:
    """Store configured through ``LOG_RCA_INCIDENT_STORE``."""
    return JsonlIncidentStore(os.getenv(STORE_PATH_ENV) or DEFAULT_STORE_PATH)


def build_incident_record(
    result: AnalysisResult,
    *,
    user_id: str,
    raw_log: str,
    file_name: str | None = None,
    now: datetime | None = None,
) -> IncidentRecord:
    """Build the row a store persists for a completed analysis."""
    parsed = result.parsed
    return IncidentRecord(
        id=uuid.uuid4().hex,
        user_id=user_id,
        created_at=now or datetime.now(UTC),
        environment=parsed.environment,
        error_type=parsed.category.value,
        service_name=parsed.service_name,
        stack_trace_hash=result.fingerprint,
        root_cause_summary=result.root_cause_summary,
        confidence_score=result.confidence.score,
        confidence_reasoning=result.confidence.reasoning,
        recommended_fix_steps=list(result.recommended_fix_steps),
        long_term_prevention=result.long_term_prevention,
        impact_scope=result.impact_scope,
        affected_service=result.affected_service,
        raw_log=raw_log[:RAW_LOG_CAP],
        file_name=file_name,
    )
