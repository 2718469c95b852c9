from __future__ import annotations

import gzip
import json
from pathlib import Path

import pytest

from mcp_log_rca_server import cli
from mcp_log_rca_server.cli import main
from mcp_log_rca_server.core.errors import QuotaExceededError, RateLimitedError


def test_cli_preprocess_text_output(
    tmp_path: Path, sample_log: str, capsys: pytest.CaptureFixture[str]
) -> None:
    log = tmp_path / "job.log"
    log.write_text(sample_log, encoding="utf-8")

    main([str(log)])

    out = capsys.readouterr().out
    assert "Category:    OutOfMemoryError" in out
    assert "Service:     etl-service" in out
    assert "Environment: production" in out
    assert "Summary: 4 lines. Preview:" in out


def test_cli_preprocess_json_output(
    tmp_path: Path, sample_log: str, capsys: pytest.CaptureFixture[str]
) -> None:
    log = tmp_path / "job.log"
    log.write_text(sample_log, encoding="utf-8")

    main([str(log), "--json"])

    data = json.loads(capsys.readouterr().out)
    assert data["detected_error_type"] == "OutOfMemoryError"
    assert "cleaned_log" not in data


def test_cli_missing_file_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "missing.log")])
    assert exc.value.code == 2
    assert "Log file not found" in capsys.readouterr().err


def test_cli_analyze_without_api_key_exits_2(
    tmp_path: Path,
    sample_log: str,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    log = tmp_path / "job.log"
    log.write_text(sample_log, encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main([str(log), "--analyze"])

    assert exc.value.code == 2
    assert "GEMINI_API_KEY" in capsys.readouterr().err
    assert not (tmp_path / "incidents.jsonl").exists()


def test_cli_reads_gzip_log_outside_base_dir(
    tmp_path: Path,
    sample_log: str,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    base = tmp_path / "base"
    base.mkdir()
    monkeypatch.setenv("LOG_RCA_BASE_DIR", str(base))
    log = tmp_path / "job.log.gz"
    with gzip.open(log, mode="wt", encoding="utf-8") as f:
        f.write(sample_log)

    main([str(log), "--json"])

    data = json.loads(capsys.readouterr().out)
    assert data["service_name"] == "etl-service"


@pytest.mark.parametrize(
    "error",
    [
        RateLimitedError("Rate limit exceeded. Please try again shortly.", status=429),
        QuotaExceededError("Usage quota exhausted for the reasoning engine.", status=402),
    ],
)
def test_cli_rate_limit_and_quota_exit_3(
    tmp_path: Path,
    sample_log: str,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    error: Exception,
) -> None:
    async def fake_analyze(**kwargs):
        raise error

    monkeypatch.setattr(cli, "analyze_log_impl", fake_analyze)
    log = tmp_path / "job.log"
    log.write_text(sample_log, encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main([str(log), "--analyze"])

    assert exc.value.code == 3
    assert "Reasoning engine unavailable" in capsys.readouterr().err
