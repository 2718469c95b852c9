from __future__ import annotations

from mcp_log_rca_server.core.fingerprint import (
    fingerprint,
    normalize_trace,
    rolling_hash,
    to_base36,
)


def test_empty_trace_has_empty_fingerprint() -> None:
    assert fingerprint("") == ""


def test_known_values() -> None:
    assert rolling_hash("a") == 97
    assert fingerprint("a") == "2p"
    assert fingerprint("ab") == "2e9"


def test_hash_wraps_to_signed_32_bit() -> None:
    value = rolling_hash("x" * 50)
    assert -(2**31) <= value < 2**31


def test_base36() -> None:
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"


def test_normalize_trace_placeholders() -> None:
    trace = "  at A.run(A.java:142) 2024-01-15T10:23:45Z ptr=0xDEADbeef  "
    assert normalize_trace(trace) == "at A.run(A.java:N) TIMESTAMP ptr=0xADDR"


def test_line_numbers_do_not_change_fingerprint() -> None:
    a = "  at Executor.run(Executor.java:142)\n  at Worker.loop(Worker.java:88)"
    b = "  at Executor.run(Executor.java:999)\n  at Worker.loop(Worker.java:7)"
    assert fingerprint(a) == fingerprint(b)


def test_timestamps_and_addresses_do_not_change_fingerprint() -> None:
    a = "2024-01-15 10:23:45 at Obj@0x7f3a in run"
    b = "2025-06-30 23:59:01 at Obj@0x1b2c in run"
    assert fingerprint(a) == fingerprint(b)


def test_different_frames_differ() -> None:
    a = "  at Executor.run(Executor.java:142)"
    b = "  at Scheduler.tick(Scheduler.java:142)"
    assert fingerprint(a) != fingerprint(b)


def test_non_bmp_characters_hash_as_utf16_units() -> None:
    # U+1F600 is the surrogate pair D83D DE00
    expected = ((0xD83D * 31) + 0xDE00) & 0xFFFFFFFF
    assert rolling_hash("\U0001F600") == expected
