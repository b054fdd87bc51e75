"""Fingerprint stage: measure the subject's AI visibility."""

import dataclasses
from typing import Any

from kgflow.core.exceptions import KgflowError, StageFailureError, StageTimeoutError
from kgflow.core.models import StageName
from kgflow.core.types import Failure, FingerprintRequest, Result, Success
from kgflow.pipeline.base import BaseAsyncHandler
from kgflow.pipeline.collaborators import Fingerprinter
from kgflow.pipeline.deadline import run_with_deadline


@dataclasses.dataclass(frozen=True, slots=True)
class FingerprintCommand:
    """``request`` is None when no subject identity could be resolved."""

    request: FingerprintRequest | None
    budget_ms: int


class FingerprintStage(BaseAsyncHandler[FingerprintCommand, Any, KgflowError]):
    stage = StageName.FINGERPRINT

    def __init__(self, fingerprinter: Fingerprinter | None) -> None:
        self._fingerprinter = fingerprinter

    async def handle(self, command: FingerprintCommand) -> Result[Any, KgflowError]:
        if self._fingerprinter is None:
            return Failure(
                StageFailureError(self.stage.value, "no fingerprint collaborator configured")
            )
        if command.request is None:
            return Failure(
                StageFailureError(self.stage.value, "no subject identity available")
            )
        try:
            analysis = await run_with_deadline(
                self.stage,
                command.budget_ms,
                self._fingerprinter.fingerprint(command.request),
            )
        except StageTimeoutError as e:
            return Failure(e)
        except Exception as e:
            return Failure(
                StageFailureError(self.stage.value, f"fingerprinter raised: {e}", cause=e)
            )
        return Success(analysis)
