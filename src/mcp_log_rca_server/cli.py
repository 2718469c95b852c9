from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from mcp_log_rca_server.core.errors import LogAnalysisError, QuotaExceededError, RateLimitedError
from mcp_log_rca_server.core.log_source import read_text_file
from mcp_log_rca_server.tools.analyze import analyze_log_impl, preprocess_log_impl


async def _run(args: argparse.Namespace) -> dict[str, Any]:
    path = Path(args.log_path)
    text = await read_text_file(path)
    if args.analyze:
        return await analyze_log_impl(
            log_text=text,
            file_name=path.name,
            user_id=args.user_id,
            persist=not args.no_persist,
        )
    return await preprocess_log_impl(log_text=text, include_cleaned=False)


def _print_preprocessed(d: dict[str, Any]) -> None:
    print(f"Category:    {d['detected_error_type']}")
    print(f"Service:     {d['service_name'] or 'Unknown'}")
    print(f"Environment: {d['environment'] or 'Unknown'}")
    print(f"Request ID:  {d['request_id'] or 'Unknown'}")
    print(f"Timestamp:   {d['timestamp'] or 'Unknown'}")
    print(f"Fingerprint: {d['stack_trace_hash'] or '-'}")
    print(f"\nSummary: {d['log_summary']}")
    print(f"\nError snippet:\n{d['error_snippet']}")


def _print_analysis(d: dict[str, Any]) -> None:
    print(f"Category:         {d['detected_error_type']}")
    print(f"Affected service: {d['affected_service']}")
    print(f"\nRoot cause: {d['root_cause_summary']}")
    print("\nFix steps:")
    for i, step in enumerate(d["recommended_fix_steps"], start=1):
        print(f"  {i}. {step}")
    if d["long_term_prevention"]:
        print(f"\nPrevention: {d['long_term_prevention']}")
    if d["impact_scope"]:
        print(f"Impact: {d['impact_scope']}")
    print(f"\nSimilar incidents: {d['occurrence_count']}")
    for m in d["similar_incidents"]:
        print(f"  - {m['id']} ({m['similarity_score']}%) {m['root_cause_summary'] or ''}")
    conf = d["confidence"]
    print(f"\nConfidence: {conf['score']}% ({conf['level']})")
    print(f"  {conf['reasoning']}")


def main(argv: Sequence[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="Root-cause analysis for failed pipeline logs.")
    p.add_argument("log_path")
    p.add_argument(
        "--analyze",
        action="store_true",
        help="Call the reasoning engine (needs GEMINI_API_KEY). Default: preprocess only",
    )
    p.add_argument("--user-id", default="local", help="Incident history to match against")
    p.add_argument("--no-persist", action="store_true", help="Do not record the incident")
    p.add_argument("--json", dest="as_json", action="store_true", help="Print JSON output")

    args = p.parse_args(argv)

    try:
        out = asyncio.run(_run(args))
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except (RateLimitedError, QuotaExceededError) as e:
        print(f"Reasoning engine unavailable: {e}", file=sys.stderr)
        raise SystemExit(3)
    except (ValueError, LogAnalysisError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    if args.as_json:
        print(json.dumps(out, indent=2))
    elif args.analyze:
        _print_analysis(out)
    else:
        _print_preprocessed(out)


if __name__ == "__main__":
    main()
