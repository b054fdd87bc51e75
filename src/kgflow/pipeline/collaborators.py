"""Contracts for the external services the pipeline consumes.

Implementations live outside the core (see ``kgflow.adapters`` for the
bundled ones). All calls are async; implementations that wrap blocking
clients should offload to a thread.
"""

from typing import Any, Protocol, runtime_checkable

from kgflow.core.types import (
    CandidateEntity,
    CrawlResult,
    FingerprintRequest,
    PublishOptions,
    PublishOutcome,
    Reference,
)


@runtime_checkable
class Crawler(Protocol):
    """Fetches structured data about a subject's website.

    Ordinary failures (network errors, HTTP 4xx/5xx) are reported with
    ``CrawlResult(succeeded=False, error=...)`` rather than raised.
    """

    async def crawl(self, url: str) -> CrawlResult: ...


@runtime_checkable
class Fingerprinter(Protocol):
    """Measures a subject's AI visibility. May raise on failure."""

    async def fingerprint(self, request: FingerprintRequest) -> Any: ...


@runtime_checkable
class ReferenceSearch(Protocol):
    """Web search used to discover evidentiary references.

    Returns an empty list for zero-result searches.
    """

    async def search(self, query: str, max_results: int) -> list[Reference]: ...


@runtime_checkable
class TextAssessor(Protocol):
    """Sends a prompt to a language model and returns the raw response text."""

    async def assess(self, prompt: str) -> str: ...


@runtime_checkable
class Publisher(Protocol):
    """Writes an entity to the knowledge base."""

    async def publish(
        self, entity: CandidateEntity, options: PublishOptions
    ) -> PublishOutcome: ...
