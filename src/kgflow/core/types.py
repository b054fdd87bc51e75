"""Core data types that flow through the CFP pipeline.

Every record here is an immutable dataclass. Stages never mutate what they
receive; they return new values wrapped in a ``Result`` so that failures
are part of the data flow rather than exceptions crossing stage seams.
"""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
from datetime import UTC, date, datetime
from types import MappingProxyType
import typing

from kgflow.core.models import (
    DataOrigin,
    PriorityClass,
    ProgressStage,
    PropertyCategory,
    SourceCategory,
    StageName,
    StageStatus,
    SubscriptionTier,
    TargetEnvironment,
)

T = typing.TypeVar("T")

# --- Minimal guard helpers ---


def _freeze_mapping(m: Mapping[str, T] | None) -> Mapping[str, T]:
    if isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m or {}))


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def _blank_to_none(value: typing.Any) -> str | None:
    """Treat empty strings and literal "unknown" placeholders as absent."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "unknown":
        return None
    return text


# --- Result type ---

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success(typing.Generic[TSuccess]):
    """A successful stage result."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure(typing.Generic[TFailure]):
    """A failed stage result, carrying the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Source data ---


@dataclasses.dataclass(frozen=True, slots=True)
class Location:
    """Postal and geographic location of a subject.

    Use ``Location.clean`` to build one from crawler output; it drops the
    literal "Unknown" placeholders some crawlers emit.
    """

    city: str | None = None
    state: str | None = None
    country: str | None = None
    address: str | None = None
    postal_code: str | None = None
    lat: float | None = None
    lng: float | None = None

    def __post_init__(self) -> None:
        if self.lat is not None:
            _require(
                condition=-90.0 <= self.lat <= 90.0,
                message="must be within [-90, 90]",
                field_name="lat",
            )
        if self.lng is not None:
            _require(
                condition=-180.0 <= self.lng <= 180.0,
                message="must be within [-180, 180]",
                field_name="lng",
            )

    @classmethod
    def clean(cls, raw: Mapping[str, typing.Any] | None) -> Location | None:
        """Build a location from a loosely-typed mapping, or None if empty."""
        if not raw:
            return None
        location = cls(
            city=_blank_to_none(raw.get("city")),
            state=_blank_to_none(raw.get("state")),
            country=_blank_to_none(raw.get("country")),
            address=_blank_to_none(raw.get("address")),
            postal_code=_blank_to_none(raw.get("postal_code", raw.get("postalCode"))),
            lat=_as_float(raw.get("lat")),
            lng=_as_float(raw.get("lng")),
        )
        return None if location.is_empty else location

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in dataclasses.fields(self))

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def has_city_and_state(self) -> bool:
        return bool(self.city and self.state)


def _as_float(value: typing.Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclasses.dataclass(frozen=True, slots=True)
class BusinessDetails:
    """Richer business facts extracted from a crawled site."""

    industry: str | None = None
    legal_form: str | None = None
    founded: str | None = None
    dissolved: str | None = None
    employee_count: int | None = None
    revenue: str | None = None
    stock_symbol: str | None = None
    ceo: str | None = None
    products: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class SourceData:
    """Structured data about a subject, as produced by the crawl collaborator.

    Every field is optional; an empty instance is the fallback used when the
    crawl fails.
    """

    name: str | None = None
    description: str | None = None
    phone: str | None = None
    email: str | None = None
    location: Location | None = None
    social_links: Mapping[str, str] = dataclasses.field(default_factory=dict)
    image_url: str | None = None
    logo_url: str | None = None
    details: BusinessDetails = dataclasses.field(default_factory=BusinessDetails)

    def __post_init__(self) -> None:
        object.__setattr__(self, "social_links", _freeze_mapping(self.social_links))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, typing.Any]) -> SourceData:
        """Build source data from crawler JSON (camelCase or snake_case keys).

        A top-level ``address`` is folded into the location, and crawler
        shapes that nest ``founded`` either at the top level or under the
        business details are both accepted.
        """

        def pick(mapping: Mapping[str, typing.Any], *keys: str) -> typing.Any:
            for key in keys:
                if mapping.get(key) not in (None, ""):
                    return mapping[key]
            return None

        details_raw = pick(raw, "business_details", "businessDetails") or {}
        location_raw = dict(pick(raw, "location") or {})
        if not location_raw.get("address") and raw.get("address"):
            location_raw["address"] = raw["address"]

        employees = pick(details_raw, "employee_count", "employeeCount")
        try:
            employee_count = int(employees) if employees is not None else None
        except (TypeError, ValueError):
            employee_count = None

        details = BusinessDetails(
            industry=_blank_to_none(pick(details_raw, "industry")),
            legal_form=_blank_to_none(pick(details_raw, "legal_form", "legalForm")),
            founded=_blank_to_none(
                pick(raw, "founded") or pick(details_raw, "founded")
            ),
            dissolved=_blank_to_none(pick(details_raw, "dissolved")),
            employee_count=employee_count,
            revenue=_blank_to_none(pick(details_raw, "revenue")),
            stock_symbol=_blank_to_none(
                pick(details_raw, "stock_symbol", "stockSymbol")
            ),
            ceo=_blank_to_none(pick(details_raw, "ceo")),
            products=tuple(pick(details_raw, "products") or ()),
        )
        socials = pick(raw, "social_links", "socialLinks") or {}
        return cls(
            name=_blank_to_none(pick(raw, "name")),
            description=_blank_to_none(pick(raw, "description")),
            phone=_blank_to_none(pick(raw, "phone")),
            email=_blank_to_none(pick(raw, "email")),
            location=Location.clean(location_raw),
            social_links={k: v for k, v in socials.items() if v},
            image_url=_blank_to_none(pick(raw, "image_url", "imageUrl")),
            logo_url=_blank_to_none(pick(raw, "logo_url", "logoUrl")),
            details=details,
        )


# --- Collaborator payloads ---


@dataclasses.dataclass(frozen=True, slots=True)
class CrawlResult:
    """What the crawl collaborator reports for one URL."""

    succeeded: bool
    source_data: SourceData | None = None
    error: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class FingerprintRequest:
    """Subject context handed to the fingerprint collaborator."""

    name: str
    url: str
    category: str
    location: Location | None = None
    source_data: SourceData | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class PublishOptions:
    target_environment: TargetEnvironment = TargetEnvironment.TEST
    dry_run: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class PublishOutcome:
    """Result of one publish attempt, captured verbatim from the collaborator."""

    succeeded: bool
    target: str = TargetEnvironment.TEST.host
    external_id: str | None = None
    properties_published: int = 0
    references_published: int = 0
    error: str | None = None


# --- Requests, progress and stage outcomes ---


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineOptions:
    """Per-run switches. Unset environment, tier and enrichment level come from config."""

    target_environment: TargetEnvironment | None = None
    include_fingerprint: bool = True
    should_publish: bool = True
    timeout_budget_ms: int | None = None
    allow_fallback_data: bool = True
    tier: SubscriptionTier | None = None
    enrichment_level: int | None = None

    def __post_init__(self) -> None:
        if self.timeout_budget_ms is not None:
            _require(
                condition=self.timeout_budget_ms > 0,
                message="must be > 0 when provided",
                field_name="timeout_budget_ms",
            )
        if self.enrichment_level is not None:
            _require(
                condition=self.enrichment_level >= 0,
                message="must be >= 0 when provided",
                field_name="enrichment_level",
            )


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineRequest:
    """A single CFP run request. The URL is validated by the orchestrator."""

    subject_url: str
    options: PipelineOptions = dataclasses.field(default_factory=PipelineOptions)


@dataclasses.dataclass(frozen=True, slots=True)
class ProgressEvent:
    stage: ProgressStage
    percent_complete: int
    message: str
    timestamp: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        _require(
            condition=0 <= self.percent_complete <= 100,
            message="must be within [0, 100]",
            field_name="percent_complete",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class StageOutcome:
    """How one stage ended. ``error_kind`` names the error class, if any."""

    stage: StageName
    status: StageStatus
    duration_ms: int = 0
    data: typing.Any = None
    error: str | None = None
    error_kind: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status.counts_as_success

    @property
    def skipped(self) -> bool:
        return self.status in (StageStatus.SKIPPED, StageStatus.SKIPPED_INELIGIBLE)


# --- Entities ---


@dataclasses.dataclass(frozen=True, slots=True)
class ProvenanceReference:
    """A citation attached to a fact."""

    url: str
    retrieved: date
    title: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class Fact:
    """One typed statement about the subject.

    ``datatype`` follows the knowledge base's value types (``wikibase-item``,
    ``string``, ``url``, ``globe-coordinate``, ``time``, ``quantity``).
    """

    property_id: str
    value: typing.Any
    datatype: str
    origin: DataOrigin
    provenance: tuple[ProvenanceReference, ...] = ()

    def __post_init__(self) -> None:
        _require(
            condition=self.property_id.startswith("P"),
            message=f"must be a property id like 'P31', got {self.property_id!r}",
            field_name="property_id",
        )
        _require(
            condition=not self.provenance or self.origin is DataOrigin.SOURCE_DATA,
            message="only source-data facts may carry provenance",
            field_name="provenance",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class CandidateEntity:
    """A knowledge-graph entity assembled locally, not yet published."""

    labels: Mapping[str, str]
    descriptions: Mapping[str, str]
    facts: tuple[Fact, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", _freeze_mapping(self.labels))
        object.__setattr__(self, "descriptions", _freeze_mapping(self.descriptions))
        seen = [f.property_id for f in self.facts]
        _require(
            condition=len(seen) == len(set(seen)),
            message="must not repeat a property id",
            field_name="facts",
        )

    @property
    def property_ids(self) -> tuple[str, ...]:
        return tuple(f.property_id for f in self.facts)

    def fact(self, property_id: str) -> Fact | None:
        return next((f for f in self.facts if f.property_id == property_id), None)

    @property
    def reference_count(self) -> int:
        return sum(len(f.provenance) for f in self.facts)


# --- Property selection ---


@dataclasses.dataclass(frozen=True, slots=True)
class SelectedProperty:
    property_id: str
    label: str
    category: PropertyCategory
    priority: PriorityClass
    required_data_available: bool


@dataclasses.dataclass(frozen=True, slots=True)
class PropertySelection:
    """Ordered property choice for one tier/enrichment/source-data triple."""

    properties: tuple[SelectedProperty, ...] = ()

    @property
    def property_ids(self) -> tuple[str, ...]:
        return tuple(p.property_id for p in self.properties)

    def __contains__(self, property_id: object) -> bool:
        return property_id in self.property_ids

    def __len__(self) -> int:
        return len(self.properties)


# --- Notability ---


@dataclasses.dataclass(frozen=True, slots=True)
class Reference:
    """A search hit considered as third-party evidence."""

    url: str
    title: str
    snippet: str
    source_domain: str


@dataclasses.dataclass(frozen=True, slots=True)
class ReferenceAssessment:
    reference_index: int
    is_serious: bool
    is_publicly_available: bool
    is_independent: bool
    source_category: SourceCategory
    trust_score: int
    reasoning: str = ""

    def __post_init__(self) -> None:
        _require(
            condition=0 <= self.trust_score <= 100,
            message="must be within [0, 100]",
            field_name="trust_score",
        )
        _require(
            condition=not (
                self.is_independent and self.source_category is SourceCategory.COMPANY
            ),
            message="company-owned references are never independent",
            field_name="is_independent",
        )

    @property
    def is_qualifying(self) -> bool:
        """Serious, independent and publicly available."""
        return self.is_serious and self.is_independent and self.is_publicly_available


@dataclasses.dataclass(frozen=True, slots=True)
class NotabilityVerdict:
    """Eligibility decision for publishing one subject.

    ``reason`` names a soft failure ("rate limited", "no references found")
    and ``method`` records whether assessments came from the language model
    or the heuristic fallback.
    """

    is_notable: bool
    confidence: float
    serious_reference_count: int = 0
    publicly_available_count: int = 0
    independent_count: int = 0
    summary: str = ""
    top_citations: tuple[Reference, ...] = ()
    recommendations: tuple[str, ...] = ()
    references: tuple[Reference, ...] = ()
    assessments: tuple[ReferenceAssessment, ...] = ()
    reason: str | None = None
    method: typing.Literal["llm", "heuristic", "none"] = "none"

    def __post_init__(self) -> None:
        _require(
            condition=0.0 <= self.confidence <= 1.0,
            message="must be within [0.0, 1.0]",
            field_name="confidence",
        )
        _require(
            condition=len(self.top_citations) <= 5,
            message="at most 5 citations",
            field_name="top_citations",
        )
        _require(
            condition=self.serious_reference_count <= len(self.assessments),
            message="cannot exceed the number of assessed references",
            field_name="serious_reference_count",
        )


# --- Terminal result ---


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineResult:
    """Everything a CFP run produced, including partial results."""

    subject_url: str
    overall_succeeded: bool
    stage_outcomes: Mapping[StageName, StageOutcome]
    total_duration_ms: int
    entity: CandidateEntity | None = None
    publish_outcome: PublishOutcome | None = None
    crawl_data: SourceData | None = None
    fingerprint_data: typing.Any = None
    notability: NotabilityVerdict | None = None
    terminal_error: str | None = None
    finished_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        object.__setattr__(self, "stage_outcomes", _freeze_mapping(self.stage_outcomes))

    def outcome(self, stage: StageName) -> StageOutcome | None:
        return self.stage_outcomes.get(stage)

    @property
    def is_partial(self) -> bool:
        """Some stages succeeded while others did not."""
        outcomes = list(self.stage_outcomes.values())
        return (
            not self.overall_succeeded
            and any(o.succeeded for o in outcomes)
            and any(not o.succeeded for o in outcomes)
        )
