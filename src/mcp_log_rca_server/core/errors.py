"""Exceptions raised by the analysis pipeline.

Only input validation and the reasoning-engine round trip can fail;
preprocessing and scoring are total.
"""

from __future__ import annotations


class LogAnalysisError(Exception):
    """Base class for analysis failures."""


class EmptyLogError(LogAnalysisError, ValueError):
    """The submitted log is empty or whitespace only."""


class ReasoningEngineError(LogAnalysisError):
    """The reasoning engine could not be reached or returned an error status."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RateLimitedError(ReasoningEngineError):
    """Too many requests; the caller should wait and try again."""


class QuotaExceededError(ReasoningEngineError):
    """Usage quota exhausted; credits or a plan change are needed."""


class ReasoningTimeoutError(ReasoningEngineError):
    """The reasoning call did not finish within the configured timeout."""


class MalformedReasoningError(LogAnalysisError):
    """The engine's output could not be parsed, even after one retry."""
