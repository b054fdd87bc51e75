"""Entity construction stage: property selection plus local assembly."""

import dataclasses
import logging

from kgflow.core.exceptions import EntityConstructionError
from kgflow.core.models import StageName, SubscriptionTier
from kgflow.core.types import CandidateEntity, Failure, Result, SourceData, Success
from kgflow.entity.builder import build_entity
from kgflow.entity.readiness import quality_score
from kgflow.pipeline.base import BaseAsyncHandler
from kgflow.properties import select_properties

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class ConstructionCommand:
    subject_url: str
    source_data: SourceData
    crawled: bool
    tier: SubscriptionTier
    enrichment_level: int
    fallback_name: str | None = None


class EntityConstructionStage(
    BaseAsyncHandler[ConstructionCommand, CandidateEntity, EntityConstructionError]
):
    """Builds the candidate entity. Local and fast, so not deadline-raced."""

    stage = StageName.ENTITY_CONSTRUCTION

    async def handle(
        self, command: ConstructionCommand
    ) -> Result[CandidateEntity, EntityConstructionError]:
        selection = select_properties(
            command.tier, command.enrichment_level, command.source_data
        )
        try:
            entity = build_entity(
                command.subject_url,
                command.source_data,
                selection,
                crawled=command.crawled,
                fallback=command.fallback_name,
            )
        except EntityConstructionError as e:
            return Failure(e)
        except ValueError as e:
            return Failure(EntityConstructionError(f"invalid entity: {e}"))

        logger.info(
            "Built entity %r: %d facts from %d selected properties (quality %.2f)",
            entity.labels.get("en"),
            len(entity.facts),
            len(selection),
            quality_score(entity),
        )
        return Success(entity)
