"""Enumerations shared across the pipeline, the engine and the selector.

Values are lowercase strings so they round-trip through configuration files,
environment variables and JSON payloads without a custom codec.
"""

from enum import Enum


class SubscriptionTier(str, Enum):
    """Subscription tiers, ordered from least to most entitled."""

    FREE = "free"
    PRO = "pro"
    AGENCY = "agency"

    @property
    def rank(self) -> int:
        """Position in the containment order free < pro < agency."""
        return _TIER_RANK[self]


_TIER_RANK = {
    SubscriptionTier.FREE: 0,
    SubscriptionTier.PRO: 1,
    SubscriptionTier.AGENCY: 2,
}


class PriorityClass(str, Enum):
    """When a property is worth including on an entity."""

    REQUIRED = "required"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    OPTIONAL = "optional"

    @property
    def order(self) -> int:
        return _PRIORITY_ORDER[self]


_PRIORITY_ORDER = {
    PriorityClass.REQUIRED: 0,
    PriorityClass.HIGH: 1,
    PriorityClass.MEDIUM: 2,
    PriorityClass.LOW: 3,
    PriorityClass.OPTIONAL: 4,
}


class PropertyCategory(str, Enum):
    """Semantic grouping of catalog properties."""

    CORE = "core"
    IDENTIFICATION = "identification"
    LOCATION = "location"
    CONTACT = "contact"
    TEMPORAL = "temporal"
    CLASSIFICATION = "classification"
    SOCIAL = "social"
    SCALE = "scale"
    RELATIONSHIPS = "relationships"
    MEDIA = "media"
    FINANCIAL = "financial"
    OPERATIONAL = "operational"


class DataOrigin(str, Enum):
    """Where the value of a property comes from.

    Only ``SOURCE_DATA`` values are traceable to a crawled page and may carry
    provenance references.
    """

    SOURCE_DATA = "source_data"
    SUBJECT = "subject"  # supplied with the request (the subject URL)
    INFERRED = "inferred"  # needs resolution by a model or lookup service
    HARDCODED = "hardcoded"


class SourceCategory(str, Enum):
    """Classification of a reference's publisher."""

    NEWS = "news"
    GOVERNMENT = "government"
    ACADEMIC = "academic"
    DATABASE = "database"
    DIRECTORY = "directory"
    REVIEW = "review"
    COMPANY = "company"
    OTHER = "other"


class TargetEnvironment(str, Enum):
    """Knowledge base instance that receives published entities."""

    TEST = "test"
    PRODUCTION = "production"

    @property
    def host(self) -> str:
        return "wikidata.org" if self is TargetEnvironment.PRODUCTION else "test.wikidata.org"


class StageName(str, Enum):
    """The four stages of a CFP run, in execution order."""

    CRAWL = "crawl"
    FINGERPRINT = "fingerprint"
    ENTITY_CONSTRUCTION = "entity_construction"
    PUBLISH = "publish"


class StageStatus(str, Enum):
    """How a stage ended.

    ``SKIPPED`` (by configuration) counts as succeeded for the overall
    verdict; ``SKIPPED_INELIGIBLE`` (publish requested but the entity may
    not be published) does not.
    """

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SKIPPED_INELIGIBLE = "skipped_ineligible"

    @property
    def counts_as_success(self) -> bool:
        return self in (StageStatus.SUCCEEDED, StageStatus.SKIPPED)


class ProgressStage(str, Enum):
    """Stage names reported to progress observers."""

    CRAWLING = "crawling"
    FINGERPRINTING = "fingerprinting"
    CONSTRUCTING_ENTITY = "constructing-entity"
    PUBLISHING = "publishing"
    COMPLETED = "completed"
    FAILED = "failed"
