"""Publish stage: notability gate, citation attachment and the publish call."""

from __future__ import annotations

import dataclasses
import logging

from kgflow.core.exceptions import (
    KgflowError,
    PublishError,
    PublishPreconditionError,
    StageFailureError,
    StageTimeoutError,
)
from kgflow.core.models import StageName, TargetEnvironment
from kgflow.core.types import (
    CandidateEntity,
    Failure,
    Location,
    NotabilityVerdict,
    PublishOptions,
    PublishOutcome,
    Result,
    Success,
)
from kgflow.entity.readiness import attach_best_citation, check_publish_ready
from kgflow.notability.engine import NotabilityEngine
from kgflow.pipeline.base import BaseAsyncHandler
from kgflow.pipeline.collaborators import Publisher
from kgflow.pipeline.deadline import run_with_deadline

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class PublishCommand:
    entity: CandidateEntity
    subject_name: str
    location: Location | None
    own_domain: str | None
    target_environment: TargetEnvironment
    budget_ms: int
    dry_run: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class PublishReport:
    """What a successful publish stage produced."""

    entity: CandidateEntity
    verdict: NotabilityVerdict
    outcome: PublishOutcome


class PublishStage(BaseAsyncHandler[PublishCommand, PublishReport, KgflowError]):
    """Gates publishing on readiness and notability, then publishes once.

    The whole stage (assessment included) runs under one deadline.
    """

    stage = StageName.PUBLISH

    def __init__(self, engine: NotabilityEngine, publisher: Publisher) -> None:
        self._engine = engine
        self._publisher = publisher

    async def handle(self, command: PublishCommand) -> Result[PublishReport, KgflowError]:
        readiness = check_publish_ready(command.entity)
        if not readiness.ready:
            return Failure(
                PublishPreconditionError(
                    "entity is not publish-ready: " + "; ".join(readiness.reasons),
                    reason="not publish-ready",
                )
            )
        try:
            report = await run_with_deadline(
                self.stage, command.budget_ms, self._gate_and_publish(command)
            )
        except (StageTimeoutError, PublishPreconditionError, PublishError) as e:
            return Failure(e)
        except Exception as e:
            return Failure(
                StageFailureError(self.stage.value, f"publish stage raised: {e}", cause=e)
            )
        return Success(report)

    async def _gate_and_publish(self, command: PublishCommand) -> PublishReport:
        verdict = await self._engine.assess(
            command.subject_name, command.location, own_domain=command.own_domain
        )
        logger.info(
            "Notability for %r: notable=%s confidence=%.2f via %s",
            command.subject_name,
            verdict.is_notable,
            verdict.confidence,
            verdict.method,
        )
        if not verdict.is_notable:
            detail = verdict.reason or verdict.summary or "not notable"
            raise PublishPreconditionError(
                f"not notable: {detail}", reason="not notable", verdict=verdict
            )

        entity = attach_best_citation(command.entity, verdict)
        target = command.target_environment.host
        options = PublishOptions(
            target_environment=command.target_environment, dry_run=command.dry_run
        )
        try:
            outcome = await self._publisher.publish(entity, options)
        except Exception as e:
            failed = PublishOutcome(succeeded=False, target=target, error=str(e))
            raise PublishError(
                f"publisher raised: {e}", outcome=failed, verdict=verdict
            ) from e

        if not outcome.succeeded:
            raise PublishError(
                outcome.error or "publish failed", outcome=outcome, verdict=verdict
            )
        return PublishReport(entity=entity, verdict=verdict, outcome=outcome)
