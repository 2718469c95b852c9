"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: analyze a log, preprocess only, look up similar incidents, score an evaluation
- Resources: taxonomy, response schema, sample log, log files via URI
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_log_rca_server.server.log_server
"""

from __future__ import annotations

import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_rca_server.prompts.registry import register_prompts
from mcp_log_rca_server.resources.registry import register_resources
from mcp_log_rca_server.tools.analyze import (
    analyze_log_impl,
    evaluate_root_cause_impl,
    find_similar_impl,
    preprocess_log_impl,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv("LOG_RCA_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("log-rca", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def analyze_log(
    log_text: str | None = None,
    log_path: str | None = None,
    user_id: str = "local",
    persist: bool = True,
) -> dict[str, Any]:
    """Diagnose a failed pipeline/application log.

    Parameters
    ----------
    log_text / log_path:
        The raw log, or a path to it under LOG_RCA_BASE_DIR (.gz supported).
        Provide exactly one.
    user_id:
        Whose incident history is searched for recurrences.
    persist:
        Record the analysis as a new incident.

    Returns
    -------
    dict:
        Category, snippet, root-cause narrative, fix steps, similar incidents
        and a calibrated confidence score with its reasoning.
    """
    return await analyze_log_impl(
        log_text=log_text,
        log_path=log_path,
        user_id=user_id,
        persist=persist,
    )


@mcp.tool()
async def preprocess_log(
    log_text: str | None = None,
    log_path: str | None = None,
    include_cleaned: bool = True,
) -> dict[str, Any]:
    """Classify, extract metadata and sanitize a log without calling the model."""
    return await preprocess_log_impl(
        log_text=log_text,
        log_path=log_path,
        include_cleaned=include_cleaned,
    )


@mcp.tool()
async def find_similar_incidents(
    log_text: str | None = None,
    log_path: str | None = None,
    user_id: str = "local",
) -> dict[str, Any]:
    """Rank recent incidents that look like the same failure."""
    return await find_similar_impl(log_text=log_text, log_path=log_path, user_id=user_id)


@mcp.tool()
def evaluate_root_cause(expected: str, predicted: str) -> dict[str, Any]:
    """Score a predicted root cause against the known one (0-100 word overlap)."""
    return evaluate_root_cause_impl(expected=expected, predicted=predicted)


def main() -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
