from __future__ import annotations

import pytest

from mcp_log_rca_server.server import log_server


def test_main_runs_stdio_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(log_server.mcp, "run", lambda **kwargs: calls.append(kwargs))

    log_server.main()

    assert calls == [{"transport": "stdio"}]
