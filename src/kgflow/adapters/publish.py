"""A publisher that records entities instead of writing them."""

import logging

from kgflow.core.types import CandidateEntity, PublishOptions, PublishOutcome

logger = logging.getLogger(__name__)


class DryRunPublisher:
    """Accepts every entity and reports what a real publish would have written."""

    def __init__(self) -> None:
        self.published: list[tuple[CandidateEntity, PublishOptions]] = []

    async def publish(
        self, entity: CandidateEntity, options: PublishOptions
    ) -> PublishOutcome:
        self.published.append((entity, options))
        target = options.target_environment.host
        logger.info(
            "Dry run: would publish %r to %s (%d facts, %d references)",
            entity.labels.get("en"),
            target,
            len(entity.facts),
            entity.reference_count,
        )
        return PublishOutcome(
            succeeded=True,
            target=target,
            external_id=None,
            properties_published=len(entity.facts),
            references_published=entity.reference_count,
        )
