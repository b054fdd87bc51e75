"""Exception hierarchy for the CFP pipeline.

Only ``InvalidInputError`` ends a run early. Every other error is produced
at a stage boundary, wrapped in a ``Failure`` and recorded on the stage
outcome; the orchestrator never lets one escape ``run()``.
"""

from typing import Any


class KgflowError(Exception):
    """Base exception for all pipeline errors."""


class ConfigurationError(KgflowError):
    """Raised when configuration values are missing or invalid."""


class InvalidInputError(KgflowError):
    """Raised when the subject URL is not a valid http(s) URL."""


class StageTimeoutError(KgflowError):
    """A stage did not finish within its share of the time budget."""

    def __init__(self, stage: str, budget_ms: int) -> None:
        self.stage = stage
        self.budget_ms = budget_ms
        super().__init__(f"timeout: {stage} exceeded {budget_ms}ms")


class StageFailureError(KgflowError):
    """A stage's collaborator raised or reported an unsuccessful result."""

    def __init__(self, stage: str, message: str, cause: Exception | None = None):
        self.stage = stage
        self.cause = cause
        super().__init__(message)


class EntityConstructionError(KgflowError):
    """The candidate entity could not be assembled from the source data."""


class PublishPreconditionError(KgflowError):
    """Publishing was requested but the entity is not eligible.

    Distinct from ``PublishError``: nothing was sent to the knowledge base.
    """

    def __init__(self, message: str, *, reason: str, verdict: Any = None) -> None:
        self.reason = reason
        self.verdict = verdict
        super().__init__(message)


class PublishError(KgflowError):
    """The publish collaborator raised or reported an unsuccessful write.

    ``outcome`` holds what the collaborator reported (or a synthesized
    failed outcome when it raised).
    """

    def __init__(self, message: str, *, outcome: Any = None, verdict: Any = None) -> None:
        self.outcome = outcome
        self.verdict = verdict
        super().__init__(message)


class QuotaExceededError(KgflowError):
    """The shared daily reference-search quota is exhausted."""


class AssessmentParseError(KgflowError):
    """The text-assessment response could not be parsed into assessments."""


class SearchError(KgflowError):
    """A reference-search request failed at the transport level."""
