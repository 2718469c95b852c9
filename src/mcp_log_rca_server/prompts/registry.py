"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def explain_failure(log_path: str, user_id: str = "local") -> list[dict[str, Any]]:
        """Build a prompt that walks through a root-cause analysis."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a senior reliability engineer. Explain failures concisely and "
                    "only from the evidence returned by the tools. Do not invent details; "
                    "if the evidence is insufficient, say so."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Diagnose the failed run using analyze_log. Follow this workflow:\n"
                    f"- Call analyze_log with log_path={log_path!r} and user_id={user_id!r}.\n"
                    "- If similar_incidents is non-empty, mention the best match and its "
                    "resolution_notes.\n"
                    "- Report the confidence level and quote its reasoning.\n\n"
                    "Return this structure:\n"
                    "1) What failed (category and affected service)\n"
                    "2) Root cause (1-3 sentences)\n"
                    "3) Fix steps (numbered)\n"
                    "4) Has this happened before? (occurrence_count and best match)\n"
                    "5) Confidence (level, score, reasoning)\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Raw log, if you need more context:"},
                    {"type": "resource", "uri": f"log://{log_path}"},
                ],
            },
        ]

    @mcp.prompt()
    def create_incident_report(title: str, log_path: str) -> list[dict[str, Any]]:
        """Build a prompt that produces a Markdown incident report."""
        return [
            {
                "role": "system",
                "content": (
                    "Create a high-quality incident report in Markdown. Redact secrets, "
                    "credentials, or PII if present."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Title: {title}\n\n"
                    "Please create an incident report with sections:\n"
                    "- Summary\n"
                    "- Environment (if missing, say 'unknown')\n"
                    "- Evidence (error snippet)\n"
                    "- Root Cause\n"
                    "- Impact\n"
                    "- Remediation Steps\n"
                    "- Prevention\n\n"
                    f"Use tool analyze_log on {log_path} with persist=false.\n"
                ),
            },
        ]
