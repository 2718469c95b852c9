from __future__ import annotations

from mcp_log_rca_server.core.preprocess import parse_log
from mcp_log_rca_server.resources.registry import SAMPLE_LOG, taxonomy_table


def test_taxonomy_table_is_ordered() -> None:
    table = taxonomy_table()
    assert [row["category"] for row in table] == [
        "OutOfMemoryError",
        "SchemaMismatch",
        "PermissionDenied",
        "TimeoutException",
        "NetworkError",
        "NullPointerException",
    ]
    assert "java heap space" in table[0]["patterns"]


def test_sample_log_resource_parses() -> None:
    parsed = parse_log(SAMPLE_LOG)
    assert parsed.category.value == "OutOfMemoryError"
    assert parsed.service_name == "etl-service"
