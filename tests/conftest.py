from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import pytest

from mcp_log_rca_server.core.models import ErrorCategory, ParsedLog

SAMPLE_LOG = "\n".join(
    [
        "2024-01-15T10:23:40Z INFO Starting executor service: etl-service env: production",
        "[2024-01-15T10:23:45] ERROR: OutOfMemoryError: Java heap space request_id=9f3a2c1d77",
        "  at Executor.run(Executor.java:142)",
        "  at Executor.run(Executor.java:142)",
        "  at Worker.loop(Worker.java:88)",
    ]
)


def reasoning_json(**overrides: Any) -> str:
    body: dict[str, Any] = {
        "error_type": "OutOfMemoryError",
        "affected_service": "etl-service",
        "root_cause_summary": "[Executor heap exhausted by an unbounded cache.]",
        "confidence_reasoning": "Heap space error with repeated executor frames.",
        "confidence_score": 80,
        "recommended_fix_steps": ["[Raise executor memory]", "Bound the cache"],
        "long_term_prevention": "Add heap usage alerts.",
        "impact_scope": "Nightly ETL does not complete.",
    }
    body.update(overrides)
    return json.dumps(body)


class ScriptedEngine:
    """Reasoning engine that replays canned responses (str or exception)."""

    def __init__(self, *responses: str | Exception, delay: float = 0.0) -> None:
        self._responses = list(responses)
        self.delay = delay
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append(user_prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LOG_RCA_MODEL", "LOG_RCA_TIMEOUT_S", "LOG_RCA_INCIDENT_STORE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_parsed() -> Callable[..., ParsedLog]:
    def _make(**overrides: Any) -> ParsedLog:
        fields: dict[str, Any] = {
            "category": ErrorCategory.UNKNOWN,
            "error_snippet": "",
            "summary": "0 lines. Preview: ",
            "service_name": None,
            "environment": None,
            "request_id": None,
            "timestamp": None,
            "stack_trace": "",
            "cleaned_text": "",
        }
        fields.update(overrides)
        return ParsedLog(**fields)

    return _make


@pytest.fixture
def sample_log() -> str:
    return SAMPLE_LOG


@pytest.fixture
def engine_factory() -> Callable[..., ScriptedEngine]:
    return ScriptedEngine


@pytest.fixture
def make_reasoning_json() -> Callable[..., str]:
    return reasoning_json
