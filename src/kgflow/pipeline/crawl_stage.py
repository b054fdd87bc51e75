"""Crawl stage: fetch structured source data for the subject."""

import dataclasses
import logging

from kgflow.core.exceptions import KgflowError, StageFailureError, StageTimeoutError
from kgflow.core.models import StageName
from kgflow.core.types import Failure, Result, SourceData, Success
from kgflow.pipeline.base import BaseAsyncHandler
from kgflow.pipeline.collaborators import Crawler
from kgflow.pipeline.deadline import run_with_deadline

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class CrawlCommand:
    subject_url: str
    budget_ms: int


class CrawlStage(BaseAsyncHandler[CrawlCommand, SourceData, KgflowError]):
    """Calls the crawl collaborator under the crawl share of the budget."""

    stage = StageName.CRAWL

    def __init__(self, crawler: Crawler) -> None:
        self._crawler = crawler

    async def handle(self, command: CrawlCommand) -> Result[SourceData, KgflowError]:
        try:
            result = await run_with_deadline(
                self.stage, command.budget_ms, self._crawler.crawl(command.subject_url)
            )
        except StageTimeoutError as e:
            return Failure(e)
        except Exception as e:
            return Failure(
                StageFailureError(self.stage.value, f"crawler raised: {e}", cause=e)
            )

        if not result.succeeded:
            return Failure(
                StageFailureError(self.stage.value, result.error or "crawl failed")
            )
        return Success(result.source_data or SourceData())
