"""Fake collaborators that record their calls."""

import asyncio
from typing import Any

from kgflow.core.types import (
    CandidateEntity,
    CrawlResult,
    FingerprintRequest,
    PublishOptions,
    PublishOutcome,
    Reference,
    SourceData,
)


class FakeCrawler:
    def __init__(
        self,
        source_data: SourceData | None = None,
        *,
        succeeded: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.source_data = source_data
        self.succeeded = succeeded
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def crawl(self, url: str) -> CrawlResult:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if not self.succeeded:
            return CrawlResult(succeeded=False, error="site unreachable")
        return CrawlResult(succeeded=True, source_data=self.source_data)


class FakeFingerprinter:
    def __init__(self, analysis: Any = None, *, delay: float = 0.0):
        self.analysis = analysis if analysis is not None else {"visibility_score": 42}
        self.delay = delay
        self.calls: list[FingerprintRequest] = []

    async def fingerprint(self, request: FingerprintRequest) -> Any:
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.analysis


class FakeSearch:
    """Returns the same references for every query."""

    def __init__(self, references: list[Reference] | None = None, *, error: Exception | None = None):
        self.references = references or []
        self.error = error
        self.queries: list[tuple[str, int]] = []

    async def search(self, query: str, max_results: int) -> list[Reference]:
        self.queries.append((query, max_results))
        if self.error is not None:
            raise self.error
        return self.references[:max_results]


class FakeAssessor:
    def __init__(self, response: str = "", *, error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    async def assess(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakePublisher:
    def __init__(
        self,
        *,
        succeeded: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.succeeded = succeeded
        self.error = error
        self.delay = delay
        self.calls: list[tuple[CandidateEntity, PublishOptions]] = []

    async def publish(self, entity: CandidateEntity, options: PublishOptions) -> PublishOutcome:
        self.calls.append((entity, options))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if not self.succeeded:
            return PublishOutcome(
                succeeded=False,
                target=options.target_environment.host,
                error="edit rejected",
            )
        return PublishOutcome(
            succeeded=True,
            target=options.target_environment.host,
            external_id="Q4242",
            properties_published=len(entity.facts),
            references_published=entity.reference_count,
        )
