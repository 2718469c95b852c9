"""Prompt construction for the reasoning engine."""

from __future__ import annotations

from .models import ReasoningRequest

SYSTEM_PROMPT = """\
You are a senior data platform reliability engineer with deep expertise in \
distributed systems, data pipelines, and incident response.

You will receive preprocessed log data: a detected error type, an extracted \
error snippet, a log summary, and service, environment and request metadata \
when available.

Analyze the failure and return ONLY a JSON object with exactly these fields:

{
  "error_type": "The specific error classification",
  "affected_service": "The service or component that failed",
  "root_cause_summary": "A concise, technical explanation of why this failure occurred (2-4 sentences)",
  "confidence_reasoning": "What evidence supports the analysis and what is uncertain",
  "confidence_score": 0-100,
  "recommended_fix_steps": ["Step 1", "Step 2", "Step 3"],
  "long_term_prevention": "Specific preventive measures to avoid recurrence",
  "impact_scope": "Business and operational consequences if unresolved (1-3 sentences)"
}

Rules:
- Output ONLY the JSON object. No markdown, no backticks, no text outside the JSON.
- Do not guess when data is insufficient; set confidence_score below 40 and explain why.
- If the log is ambiguous, say so in confidence_reasoning.
- Do not wrap string values in square brackets.
- recommended_fix_steps must be a JSON array of strings.
- confidence_score must be an integer 0-100.
- If the root cause cannot be determined, say "Insufficient data to determine root cause" \
and set confidence_score to 10-20.
"""

RETRY_SUFFIX = (
    "\n\nIMPORTANT: Your previous response was not valid JSON. "
    "Return ONLY a valid JSON object."
)


def build_reasoning_prompt(request: ReasoningRequest) -> str:
    """Render the user prompt for one analysis request."""
    meta = [f"Detected Error Type: {request.detected_error_type}"]
    if request.service_name:
        meta.append(f"Service Name: {request.service_name}")
    if request.environment:
        meta.append(f"Environment: {request.environment}")
    if request.request_id:
        meta.append(f"Request ID: {request.request_id}")

    return (
        "\n".join(meta)
        + "\n\nError Snippet:\n```\n"
        + f"{request.error_snippet}\n```\n\n"
        + f"Log Summary: {request.log_summary}\n\n"
        + "Analyze this failure and respond with the structured JSON object as specified."
    )


def build_retry_prompt(prompt: str) -> str:
    return prompt + RETRY_SUFFIX
