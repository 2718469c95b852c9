"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_rca_server.core.log_source import (
    ALLOWED_FILE_SUFFIXES,
    BASE_DIR_ENV,
    base_dir,
    read_log_text,
)
from mcp_log_rca_server.core.reasoning import ReasoningResponse
from mcp_log_rca_server.core.taxonomy import ERROR_TAXONOMY

SAMPLE_LOG = (
    "2024-01-15T10:23:40Z INFO Starting executor service: etl-service env: production\n"
    "[2024-01-15T10:23:45] ERROR: OutOfMemoryError: Java heap space request_id=9f3a2c1d77\n"
    "  at Executor.run(Executor.java:142)\n"
    "  at Executor.run(Executor.java:142)\n"
    "  at Worker.loop(Worker.java:88)\n"
)


def taxonomy_table() -> list[dict[str, Any]]:
    """Return the ordered taxonomy as category -> pattern strings."""
    return [
        {"category": category.value, "patterns": [p.pattern for p in patterns]}
        for category, patterns in ERROR_TAXONOMY
    ]


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://log-rca/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        return (
            "Resources:\n"
            "- app://log-rca/help\n"
            "- app://log-rca/taxonomy\n"
            "- app://log-rca/schemas/reasoning-response\n"
            "- app://log-rca/examples/sample-log\n"
            f"- log://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {base_dir()}\n"
        )

    @mcp.resource("app://log-rca/examples/sample-log")
    def sample_log() -> str:
        """Return a tiny sample log for demos and tests."""
        return SAMPLE_LOG

    @mcp.resource("app://log-rca/taxonomy")
    def taxonomy() -> list[dict[str, Any]]:
        """Return the error categories in evaluation order."""
        return taxonomy_table()

    @mcp.resource("app://log-rca/schemas/reasoning-response")
    def reasoning_schema() -> dict[str, Any]:
        """Return the JSON schema expected from the reasoning engine."""
        return ReasoningResponse.model_json_schema()

    @mcp.resource("log://{path}")
    async def read_log(path: str) -> str:
        """Return the full log contents."""
        return await read_log_text(path)
