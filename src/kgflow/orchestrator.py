"""The CFP orchestrator: crawl, fingerprint, build an entity, publish.

Stages run sequentially because fingerprinting consumes the crawl's
subject identity. Every stage failure is recorded as data on its
``StageOutcome`` and the run continues with the best data available. Only
a malformed subject URL ends a run before any stage starts, and ``run``
never raises.
"""

from __future__ import annotations

from collections.abc import Callable
import dataclasses
import logging
from time import perf_counter
from typing import Any, TypeAlias
from urllib.parse import urlparse

from kgflow.config import FrozenConfig, resolve_config
from kgflow.core.exceptions import (
    InvalidInputError,
    KgflowError,
    PublishError,
    PublishPreconditionError,
    StageTimeoutError,
)
from kgflow.core.models import ProgressStage, StageName, StageStatus
from kgflow.core.types import (
    CandidateEntity,
    Failure,
    FingerprintRequest,
    Location,
    NotabilityVerdict,
    PipelineOptions,
    PipelineRequest,
    PipelineResult,
    ProgressEvent,
    PublishOutcome,
    Result,
    SourceData,
    StageOutcome,
    Success,
)
from kgflow.entity.values import fallback_name
from kgflow.notability.engine import NotabilityEngine
from kgflow.notability.quota import DailyQuota
from kgflow.pipeline.collaborators import (
    Crawler,
    Fingerprinter,
    Publisher,
    ReferenceSearch,
    TextAssessor,
)
from kgflow.pipeline.crawl_stage import CrawlCommand, CrawlStage
from kgflow.pipeline.entity_stage import ConstructionCommand, EntityConstructionStage
from kgflow.pipeline.fingerprint_stage import FingerprintCommand, FingerprintStage
from kgflow.pipeline.publish_stage import PublishCommand, PublishReport, PublishStage
from kgflow.telemetry import TelemetryContext, TelemetryReporter

logger = logging.getLogger(__name__)

ProgressCallback: TypeAlias = Callable[[ProgressEvent], None]

DEFAULT_CATEGORY = "business"


def validate_subject_url(url: str) -> str:
    """Return the URL's host (``www.`` stripped) if it is a usable http(s) URL.

    Raises:
        InvalidInputError: If the URL is not an absolute http(s) URL.
    """
    if not isinstance(url, str) or not url.strip() or any(c.isspace() for c in url.strip()):
        raise InvalidInputError(f"invalid subject URL: {url!r}")
    try:
        parsed = urlparse(url.strip())
        host = parsed.hostname
    except ValueError as e:
        raise InvalidInputError(f"invalid subject URL: {url!r}") from e
    if parsed.scheme not in ("http", "https") or not host:
        raise InvalidInputError(f"invalid subject URL: {url!r} (expected http or https)")
    return host.removeprefix("www.")


@dataclasses.dataclass(frozen=True, slots=True)
class SubjectIdentity:
    name: str
    category: str
    location: Location | None = None


def resolve_identity(
    subject_url: str, source_data: SourceData, *, allow_fallback: bool
) -> SubjectIdentity | None:
    """Name and location from crawl data, else a name derived from the domain.

    Placeholder location values ("Unknown") were already dropped when the
    source data was built, so any location present here is real.
    """
    category = source_data.details.industry or DEFAULT_CATEGORY
    if source_data.name:
        return SubjectIdentity(source_data.name, category, source_data.location)
    if not allow_fallback:
        return None
    return SubjectIdentity(fallback_name(subject_url), category, source_data.location)


def split_budget(total_ms: int, crawl_share: float, include_fingerprint: bool) -> tuple[int, int]:
    """Crawl and fingerprint deadlines. Crawl takes the whole budget when fingerprinting is off."""
    if not include_fingerprint:
        return total_ms, 0
    crawl_ms = max(1, round(total_ms * crawl_share))
    return crawl_ms, max(1, total_ms - crawl_ms)


class _ProgressEmitter:
    """Forwards progress events, keeping percentages non-decreasing.

    Observer exceptions are logged and never reach the pipeline.
    """

    def __init__(self, subject_url: str, callback: ProgressCallback | None) -> None:
        self._subject_url = subject_url
        self._callback = callback
        self._last = 0

    def emit(self, stage: ProgressStage, percent: int, message: str) -> None:
        percent = max(percent, self._last)
        self._last = percent
        event = ProgressEvent(stage=stage, percent_complete=percent, message=message)
        logger.info("[%s] %s %d%%: %s", self._subject_url, stage.value, percent, message)
        if self._callback is None:
            return
        try:
            self._callback(event)
        except Exception as e:
            logger.warning("Progress callback raised, ignoring: %s", e)


@dataclasses.dataclass(slots=True)
class _RunState:
    """Mutable per-run accumulator; frozen into a PipelineResult at the end."""

    request: PipelineRequest
    outcomes: dict[StageName, StageOutcome] = dataclasses.field(default_factory=dict)
    crawl_data: SourceData | None = None
    fingerprint_data: Any = None
    entity: CandidateEntity | None = None
    publish_outcome: PublishOutcome | None = None
    notability: NotabilityVerdict | None = None


class CFPOrchestrator:
    """Runs CFP pipelines against injected collaborators.

    One instance can serve many concurrent runs; the only shared mutable
    state is the notability engine's daily search quota, which it owns.

    Args:
        config: Frozen configuration (budgets, defaults, limits).
        crawler: Crawl collaborator.
        publisher: Publish collaborator.
        fingerprinter: Fingerprint collaborator; runs requesting a
            fingerprint without one record a failed fingerprint stage.
        search: Reference-search collaborator for notability checks.
        assessor: Text-assessment collaborator for notability checks.
        quota: Daily search quota; created from ``config`` when omitted.
        reporters: Telemetry reporters, used when telemetry is enabled.
    """

    def __init__(
        self,
        config: FrozenConfig,
        *,
        crawler: Crawler,
        publisher: Publisher,
        fingerprinter: Fingerprinter | None = None,
        search: ReferenceSearch | None = None,
        assessor: TextAssessor | None = None,
        quota: DailyQuota | None = None,
        reporters: tuple[TelemetryReporter, ...] = (),
    ) -> None:
        self.config = config
        self.quota = quota if quota is not None else DailyQuota(config.daily_search_limit)
        self.engine = NotabilityEngine(
            search,
            assessor,
            self.quota,
            max_references=config.max_references,
            max_citations=config.max_citations,
        )
        self._crawl = CrawlStage(crawler)
        self._fingerprint = FingerprintStage(fingerprinter)
        self._construct = EntityConstructionStage()
        self._publish = PublishStage(self.engine, publisher)
        self._telemetry = TelemetryContext(
            *reporters, enabled=True if config.telemetry_enabled else None
        )

    async def run(
        self, request: PipelineRequest, on_progress: ProgressCallback | None = None
    ) -> PipelineResult:
        """Execute one CFP run and return its complete result."""
        started = perf_counter()
        progress = _ProgressEmitter(request.subject_url, on_progress)

        try:
            own_domain = validate_subject_url(request.subject_url)
        except InvalidInputError as e:
            logger.warning("Rejected CFP request: %s", e)
            progress.emit(ProgressStage.FAILED, 100, str(e))
            return PipelineResult(
                subject_url=request.subject_url,
                overall_succeeded=False,
                stage_outcomes={},
                total_duration_ms=_elapsed_ms(started),
                terminal_error=f"InvalidInputError: {e}",
            )

        state = _RunState(request=request)
        try:
            await self._execute(state, own_domain, progress)
        except Exception as e:
            logger.error("CFP run for %s failed unexpectedly", request.subject_url, exc_info=True)
            progress.emit(ProgressStage.FAILED, 100, f"CFP run failed: {e}")
            return self._finish(state, started, terminal_error=f"{type(e).__name__}: {e}")

        result = self._finish(state, started)
        if result.overall_succeeded:
            progress.emit(ProgressStage.COMPLETED, 100, "CFP complete")
        else:
            failed = [s.value for s, o in result.stage_outcomes.items() if not o.succeeded]
            progress.emit(
                ProgressStage.COMPLETED, 100, f"CFP finished; unsuccessful stages: {', '.join(failed)}"
            )
        return result

    async def create_entity_from_url(
        self, url: str, options: PipelineOptions | None = None
    ) -> CandidateEntity | None:
        """Run crawl, fingerprint and construction only; return the entity."""
        options = dataclasses.replace(options or PipelineOptions(), should_publish=False)
        result = await self.run(PipelineRequest(url, options))
        return result.entity

    async def crawl_fingerprint_and_publish(
        self,
        url: str,
        options: PipelineOptions | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineResult:
        """A full run with publishing forced on."""
        options = dataclasses.replace(options or PipelineOptions(), should_publish=True)
        return await self.run(PipelineRequest(url, options), on_progress)

    async def _execute(
        self, state: _RunState, own_domain: str, progress: _ProgressEmitter
    ) -> None:
        request = state.request
        options = request.options
        url = request.subject_url
        budget = options.timeout_budget_ms or self.config.timeout_budget_ms
        crawl_ms, fingerprint_ms = split_budget(
            budget, self.config.crawl_budget_share, options.include_fingerprint
        )

        # 1. Crawl
        progress.emit(ProgressStage.CRAWLING, 10, f"Crawling {url}")
        crawl = await self._run_stage(self._crawl, CrawlCommand(url, crawl_ms), state)
        crawled = isinstance(crawl, Success)
        source_data = crawl.value if crawled else SourceData()
        if crawled:
            state.crawl_data = source_data
        progress.emit(
            ProgressStage.CRAWLING,
            40,
            "Crawl complete" if crawled else "Crawl failed; continuing with fallback data",
        )

        identity = resolve_identity(url, source_data, allow_fallback=options.allow_fallback_data)

        # 2. Fingerprint
        if options.include_fingerprint:
            progress.emit(ProgressStage.FINGERPRINTING, 45, "Fingerprinting")
            fp_request = (
                FingerprintRequest(
                    name=identity.name,
                    url=url,
                    category=identity.category,
                    location=identity.location,
                    source_data=source_data if crawled else None,
                )
                if identity
                else None
            )
            fingerprint = await self._run_stage(
                self._fingerprint, FingerprintCommand(fp_request, fingerprint_ms), state
            )
            if isinstance(fingerprint, Success):
                state.fingerprint_data = fingerprint.value
            progress.emit(ProgressStage.FINGERPRINTING, 60, "Fingerprint stage finished")
        else:
            self._record_skip(state, StageName.FINGERPRINT, "fingerprint not requested")

        # 3. Entity construction
        progress.emit(ProgressStage.CONSTRUCTING_ENTITY, 70, "Constructing entity")
        construction = await self._run_stage(
            self._construct,
            ConstructionCommand(
                subject_url=url,
                source_data=source_data,
                crawled=crawled,
                tier=options.tier or self.config.default_tier,
                enrichment_level=(
                    options.enrichment_level
                    if options.enrichment_level is not None
                    else self.config.default_enrichment_level
                ),
                fallback_name=identity.name if identity and not source_data.name else None,
            ),
            state,
        )
        if isinstance(construction, Success):
            state.entity = construction.value
        progress.emit(ProgressStage.CONSTRUCTING_ENTITY, 85, "Entity construction finished")

        # 4. Publish
        if not options.should_publish:
            self._record_skip(state, StageName.PUBLISH, "publish not requested")
            return
        if state.entity is None or identity is None:
            self._record(
                state,
                StageName.PUBLISH,
                Failure(
                    PublishPreconditionError(
                        "no entity to publish: entity construction failed",
                        reason="no entity",
                    )
                ),
                0,
            )
            return

        progress.emit(ProgressStage.PUBLISHING, 90, "Checking notability and publishing")
        published = await self._run_stage(
            self._publish,
            PublishCommand(
                entity=state.entity,
                subject_name=identity.name,
                location=identity.location,
                own_domain=own_domain,
                target_environment=options.target_environment
                or self.config.target_environment,
                budget_ms=self.config.publish_timeout_ms,
            ),
            state,
        )
        self._collect_publish(state, published)

    async def _run_stage(self, handler: Any, command: Any, state: _RunState) -> Result[Any, KgflowError]:
        stage: StageName = handler.stage
        with self._telemetry("cfp.stage", stage=stage.value):
            start = perf_counter()
            result = await handler.handle(command)
            duration_ms = _elapsed_ms(start)
        if not isinstance(result, Success | Failure):
            raise TypeError(f"{stage.value} handler returned {type(result).__name__}, expected Success|Failure")
        self._record(state, stage, result, duration_ms)
        return result

    def _record(
        self, state: _RunState, stage: StageName, result: Result[Any, KgflowError], duration_ms: int
    ) -> None:
        if isinstance(result, Success):
            data = result.value
            if isinstance(data, PublishReport):
                data = data.outcome
            state.outcomes[stage] = StageOutcome(
                stage=stage, status=StageStatus.SUCCEEDED, duration_ms=duration_ms, data=data
            )
            return

        error = result.error
        if isinstance(error, StageTimeoutError):
            status = StageStatus.TIMED_OUT
            self._telemetry.count("cfp.stage.timeout", stage=stage.value)
        elif isinstance(error, PublishPreconditionError):
            status = StageStatus.SKIPPED_INELIGIBLE
        else:
            status = StageStatus.FAILED
            self._telemetry.count("cfp.stage.failed", stage=stage.value)
        logger.warning("Stage %s %s: %s", stage.value, status.value, error)
        state.outcomes[stage] = StageOutcome(
            stage=stage,
            status=status,
            duration_ms=duration_ms,
            error=str(error),
            error_kind=type(error).__name__,
        )

    def _record_skip(self, state: _RunState, stage: StageName, why: str) -> None:
        logger.info("Stage %s skipped: %s", stage.value, why)
        state.outcomes[stage] = StageOutcome(stage=stage, status=StageStatus.SKIPPED, error=why)

    def _collect_publish(self, state: _RunState, result: Result[Any, KgflowError]) -> None:
        if isinstance(result, Success):
            report: PublishReport = result.value
            state.entity = report.entity
            state.notability = report.verdict
            state.publish_outcome = report.outcome
            return
        error = result.error
        if isinstance(error, PublishError):
            state.publish_outcome = error.outcome
            state.notability = error.verdict
        elif isinstance(error, PublishPreconditionError):
            state.notability = error.verdict

    def _finish(
        self, state: _RunState, started: float, terminal_error: str | None = None
    ) -> PipelineResult:
        required = (StageName.CRAWL, StageName.FINGERPRINT, StageName.ENTITY_CONSTRUCTION, StageName.PUBLISH)
        overall = terminal_error is None and all(
            stage in state.outcomes and state.outcomes[stage].succeeded for stage in required
        )
        return PipelineResult(
            subject_url=state.request.subject_url,
            overall_succeeded=overall,
            stage_outcomes=dict(state.outcomes),
            total_duration_ms=_elapsed_ms(started),
            entity=state.entity,
            publish_outcome=state.publish_outcome,
            crawl_data=state.crawl_data,
            fingerprint_data=state.fingerprint_data,
            notability=state.notability,
            terminal_error=terminal_error,
        )


def _elapsed_ms(start: float) -> int:
    return int((perf_counter() - start) * 1000)


def create_orchestrator(
    config: FrozenConfig | None = None,
    *,
    crawler: Crawler,
    publisher: Publisher | None = None,
    fingerprinter: Fingerprinter | None = None,
    search: ReferenceSearch | None = None,
    assessor: TextAssessor | None = None,
    quota: DailyQuota | None = None,
    reporters: tuple[TelemetryReporter, ...] = (),
) -> CFPOrchestrator:
    """Build an orchestrator, filling unspecified collaborators from configuration.

    Config is resolved from the environment and project files when not
    given. With search credentials configured a Google Custom Search client
    is created; with a Gemini API key, a Gemini assessor. Without a
    publisher, entities go to a dry-run publisher that writes nothing.
    """
    from kgflow.adapters import DryRunPublisher, GeminiTextAssessor, GoogleSearchClient

    if config is None:
        config = resolve_config().to_frozen()
    if search is None and config.search_api_key and config.search_engine_id:
        search = GoogleSearchClient(config.search_api_key, config.search_engine_id)
    if assessor is None and config.gemini_api_key:
        assessor = GeminiTextAssessor(config.gemini_api_key, model=config.assessment_model)
    if publisher is None:
        logger.warning("No publisher configured; using a dry-run publisher")
        publisher = DryRunPublisher()
    return CFPOrchestrator(
        config,
        crawler=crawler,
        publisher=publisher,
        fingerprinter=fingerprinter,
        search=search,
        assessor=assessor,
        quota=quota,
        reporters=reporters,
    )
