from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from mcp_log_rca_server.core.confidence import compute_confidence
from mcp_log_rca_server.core.fingerprint import fingerprint
from mcp_log_rca_server.core.incidents import (
    RAW_LOG_CAP,
    InMemoryIncidentStore,
    JsonlIncidentStore,
    build_incident_record,
    default_store,
)
from mcp_log_rca_server.core.models import IncidentRecord
from mcp_log_rca_server.core.orchestrator import AnalysisResult, analyze_log
from mcp_log_rca_server.core.preprocess import parse_log

T0 = datetime(2024, 1, 15, tzinfo=UTC)


def _record(i: int, user_id: str = "u1") -> IncidentRecord:
    return IncidentRecord(
        id=f"inc-{i}",
        user_id=user_id,
        created_at=T0 + timedelta(minutes=i),
        error_type="TimeoutException",
        stack_trace_hash=f"h{i}",
    )


@pytest.mark.asyncio
async def test_in_memory_newest_first_and_limited() -> None:
    store = InMemoryIncidentStore([_record(i) for i in range(5)])
    rows = await store.recent_incidents("u1", limit=3)
    assert [r.id for r in rows] == ["inc-4", "inc-3", "inc-2"]
    assert await store.recent_incidents("nobody") == []


@pytest.mark.asyncio
async def test_jsonl_round_trip(tmp_path: Path) -> None:
    store = JsonlIncidentStore(tmp_path / "data" / "incidents.jsonl")
    for i in range(3):
        await store.add_incident(_record(i))
    await store.add_incident(_record(9, user_id="u2"))

    rows = await store.recent_incidents("u1")
    assert [r.id for r in rows] == ["inc-2", "inc-1", "inc-0"]
    assert rows[0].created_at == T0 + timedelta(minutes=2)
    assert rows[0].error_type == "TimeoutException"
    assert [r.id for r in await store.recent_incidents("u2")] == ["inc-9"]


@pytest.mark.asyncio
async def test_jsonl_missing_file_is_empty(tmp_path: Path) -> None:
    store = JsonlIncidentStore(tmp_path / "absent.jsonl")
    assert await store.recent_incidents("u1") == []


@pytest.mark.asyncio
async def test_jsonl_skips_corrupt_lines(tmp_path: Path) -> None:
    path = tmp_path / "incidents.jsonl"
    good = _record(1).model_dump_json()
    lines = [
        "{broken",
        "",
        "[1, 2]",
        '"just a string"',
        json.dumps({"user_id": "u1", "created_at": "2024-01-15"}),
        json.dumps({"id": "bad-date", "user_id": "u1", "created_at": "yesterday"}),
        good,
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    rows = await JsonlIncidentStore(path).recent_incidents("u1")
    assert [r.id for r in rows] == ["inc-1"]


@pytest.mark.asyncio
async def test_jsonl_null_score_and_status_default(tmp_path: Path) -> None:
    path = tmp_path / "incidents.jsonl"
    row = {
        "id": "a",
        "user_id": "local",
        "error_type": "OutOfMemoryError",
        "confidence_score": None,
        "status": None,
    }
    path.write_text(json.dumps(row) + "\n", encoding="utf-8")

    rows = await JsonlIncidentStore(path).recent_incidents("local")

    assert len(rows) == 1
    assert rows[0].confidence_score == 0
    assert rows[0].status == "Open"


@pytest.mark.asyncio
async def test_analysis_tolerates_null_score_history(
    tmp_path: Path, sample_log: str, engine_factory, make_reasoning_json
) -> None:
    parsed = parse_log(sample_log)
    path = tmp_path / "incidents.jsonl"
    row = {
        "id": "a",
        "user_id": "local",
        "error_type": parsed.category.value,
        "service_name": parsed.service_name,
        "stack_trace_hash": fingerprint(parsed.stack_trace),
        "confidence_score": None,
    }
    path.write_text(json.dumps(row) + "\n", encoding="utf-8")

    result = await analyze_log(
        sample_log,
        engine=engine_factory(make_reasoning_json()),
        store=JsonlIncidentStore(path),
        persist=False,
    )

    assert result.occurrence_count == 1
    assert result.similar_incidents[0].confidence_score == 0
    assert result.confidence.score == 92


def test_default_store_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    assert default_store().path == Path("incidents.jsonl")
    monkeypatch.setenv("LOG_RCA_INCIDENT_STORE", str(tmp_path / "x.jsonl"))
    assert default_store().path == tmp_path / "x.jsonl"


def test_build_incident_record(sample_log: str) -> None:
    parsed = parse_log(sample_log)
    fp = fingerprint(parsed.stack_trace)
    confidence = compute_confidence(80, [], parsed)
    result = AnalysisResult(
        parsed=parsed,
        fingerprint=fp,
        affected_service="etl-service",
        root_cause_summary="heap exhausted",
        confidence_reasoning="evidence",
        recommended_fix_steps=("a", "b"),
        long_term_prevention="alerts",
        impact_scope="etl late",
        similar_incidents=(),
        occurrence_count=0,
        confidence=confidence,
        stages=(),
    )
    huge = "x" * (RAW_LOG_CAP + 10)
    record = build_incident_record(result, user_id="u1", raw_log=huge, file_name="job.log", now=T0)

    assert record.user_id == "u1"
    assert record.created_at == T0
    assert record.error_type == "OutOfMemoryError"
    assert record.environment == "production"
    assert record.stack_trace_hash == fp
    assert record.confidence_score == 62
    assert record.confidence_reasoning == confidence.reasoning
    assert record.recommended_fix_steps == ["a", "b"]
    assert record.status == "Open"
    assert record.file_name == "job.log"
    assert len(record.raw_log) == RAW_LOG_CAP
    assert len(record.id) == 32
    assert json.loads(record.model_dump_json())["id"] == record.id
