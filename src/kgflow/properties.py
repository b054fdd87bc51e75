"""Strategic property selection.

Decides which knowledge-base properties an entity should carry for a given
subscription tier, enrichment level and set of crawled source data. Every
function here is pure: no I/O and no module state beyond the constant
catalog.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import dataclasses

from kgflow.core.models import DataOrigin, PriorityClass, PropertyCategory, SubscriptionTier
from kgflow.core.types import PropertySelection, SelectedProperty, SourceData


@dataclasses.dataclass(frozen=True, slots=True)
class PropertyDefinition:
    """One catalog entry.

    ``min_enrichment_level`` only applies to agency-tier properties.
    """

    property_id: str
    label: str
    category: PropertyCategory
    priority: PriorityClass
    origin: DataOrigin
    tier: SubscriptionTier
    min_enrichment_level: int | None = None


def _p(
    pid: str,
    label: str,
    category: str,
    priority: str,
    origin: DataOrigin,
    tier: str,
    level: int | None = None,
) -> PropertyDefinition:
    return PropertyDefinition(
        property_id=pid,
        label=label,
        category=PropertyCategory(category),
        priority=PriorityClass(priority),
        origin=origin,
        tier=SubscriptionTier(tier),
        min_enrichment_level=level,
    )


_SRC = DataOrigin.SOURCE_DATA
_LLM = DataOrigin.INFERRED

# Catalog order breaks ties within a priority class.
CATALOG: tuple[PropertyDefinition, ...] = (
    _p("P31", "instance of", "core", "required", DataOrigin.HARDCODED, "free"),
    _p("P856", "official website", "identification", "required", DataOrigin.SUBJECT, "free"),
    _p("P1448", "official name", "identification", "required", _SRC, "free"),
    _p("P625", "coordinate location", "location", "high", _SRC, "free"),
    _p("P6375", "street address", "location", "high", _SRC, "pro"),
    _p("P131", "located in", "location", "medium", _LLM, "agency", 3),
    _p("P159", "headquarters location", "location", "medium", _LLM, "agency", 3),
    _p("P17", "country", "location", "medium", _LLM, "agency", 3),
    _p("P1329", "phone number", "contact", "high", _SRC, "free"),
    _p("P968", "email address", "contact", "high", _SRC, "pro"),
    _p("P571", "inception", "temporal", "medium", _SRC, "pro"),
    _p("P576", "dissolved", "temporal", "low", _SRC, "agency", 4),
    _p("P580", "start time", "temporal", "low", _SRC, "agency", 4),
    _p("P582", "end time", "temporal", "low", _SRC, "agency", 4),
    _p("P452", "industry", "classification", "medium", _LLM, "agency", 3),
    _p("P1454", "legal form", "classification", "medium", _LLM, "agency", 3),
    _p("P279", "subclass of", "classification", "low", _LLM, "agency", 4),
    _p("P2002", "Twitter username", "social", "high", _SRC, "pro"),
    _p("P2013", "Facebook ID", "social", "high", _SRC, "pro"),
    _p("P2003", "Instagram username", "social", "high", _SRC, "pro"),
    _p("P4264", "LinkedIn company ID", "social", "high", _SRC, "pro"),
    _p("P2004", "YouTube channel ID", "social", "medium", _SRC, "agency", 2),
    _p("P2012", "Facebook page ID", "social", "medium", _SRC, "agency", 2),
    _p("P1128", "employees", "scale", "medium", _SRC, "pro"),
    _p("P2138", "employees (at time of dissolution)", "scale", "low", _SRC, "agency", 4),
    _p("P749", "parent organization", "relationships", "low", _LLM, "agency", 4),
    _p("P355", "subsidiary", "relationships", "low", _LLM, "agency", 4),
    _p("P112", "founded by", "relationships", "low", _LLM, "agency", 4),
    _p("P169", "chief executive officer", "relationships", "low", _LLM, "agency", 4),
    _p("P18", "image", "media", "medium", _SRC, "agency", 3),
    _p("P4896", "logo", "media", "medium", _SRC, "agency", 3),
    _p("P154", "logo image", "media", "low", _SRC, "agency", 4),
    _p("P249", "ticker symbol", "financial", "medium", _SRC, "agency", 2),
    _p("P414", "stock exchange", "financial", "low", _LLM, "agency", 4),
    _p("P2139", "total revenue", "financial", "low", _SRC, "agency", 4),
    _p("P1056", "product or material produced", "operational", "low", _SRC, "agency", 4),
    _p("P1015", "NORAF ID", "identification", "low", _LLM, "agency", 4),
)

_BY_ID = {d.property_id: d for d in CATALOG}
_CATALOG_INDEX = {d.property_id: i for i, d in enumerate(CATALOG)}


def _social(network: str) -> Callable[[SourceData], bool]:
    return lambda d: bool(d.social_links.get(network))


# Source-data checks; a catalog property without an entry never has data.
_DATA_CHECKS: dict[str, Callable[[SourceData], bool]] = {
    "P1448": lambda d: bool(d.name),
    "P625": lambda d: bool(d.location and d.location.has_coordinates),
    "P6375": lambda d: bool(d.location and d.location.address),
    "P1329": lambda d: bool(d.phone),
    "P968": lambda d: bool(d.email),
    "P571": lambda d: bool(d.details.founded),
    "P576": lambda d: bool(d.details.dissolved),
    "P2002": _social("twitter"),
    "P2013": _social("facebook"),
    "P2003": _social("instagram"),
    "P4264": _social("linkedin"),
    "P2004": _social("youtube"),
    "P2012": _social("facebook"),
    "P1128": lambda d: bool(d.details.employee_count),
    "P249": lambda d: bool(d.details.stock_symbol),
    "P18": lambda d: bool(d.image_url),
    "P4896": lambda d: bool(d.logo_url),
    "P154": lambda d: bool(d.logo_url),
    "P2139": lambda d: bool(d.details.revenue),
    "P1056": lambda d: bool(d.details.products),
}


def has_data_for(property_id: str, source_data: SourceData | None) -> bool:
    """Whether the crawled source data populates the field behind a property."""
    if source_data is None:
        return False
    check = _DATA_CHECKS.get(property_id)
    return check(source_data) if check else False


def is_eligible(
    definition: PropertyDefinition,
    tier: SubscriptionTier,
    enrichment_level: int | None = None,
) -> bool:
    """Tier and enrichment gate. Required properties are always eligible."""
    if definition.priority is PriorityClass.REQUIRED:
        return True
    if definition.tier.rank > tier.rank:
        return False
    if tier is SubscriptionTier.AGENCY and definition.min_enrichment_level:
        return (enrichment_level or 0) >= definition.min_enrichment_level
    return True


def _data_available(definition: PropertyDefinition, source_data: SourceData | None) -> bool:
    if definition.origin is not DataOrigin.SOURCE_DATA:
        return True
    return has_data_for(definition.property_id, source_data)


def _sort_key(definition: PropertyDefinition) -> tuple[int, int]:
    return (definition.priority.order, _CATALOG_INDEX[definition.property_id])


def _to_selection(definitions: Iterable[PropertyDefinition], source_data: SourceData | None) -> PropertySelection:
    return PropertySelection(
        properties=tuple(
            SelectedProperty(
                property_id=d.property_id,
                label=d.label,
                category=d.category,
                priority=d.priority,
                required_data_available=_data_available(d, source_data),
            )
            for d in sorted(definitions, key=_sort_key)
        )
    )


def select_properties(
    tier: SubscriptionTier | str,
    enrichment_level: int | None = None,
    source_data: SourceData | None = None,
) -> PropertySelection:
    """Choose the properties to populate on an entity.

    A property is included when its priority is ``required``, or when the
    tier (and, for agency properties, the enrichment level) admits it and
    its source-data field is populated. Properties whose values do not come
    from source data only need the tier gate. Output is ordered by priority
    class, ties broken by catalog order.

    Example:
        >>> "P31" in select_properties("free")
        True
    """
    tier = SubscriptionTier(tier)
    chosen = [
        d
        for d in CATALOG
        if d.priority is PriorityClass.REQUIRED
        or (is_eligible(d, tier, enrichment_level) and _data_available(d, source_data))
    ]
    return _to_selection(chosen, source_data)


def recommend_properties(
    already_included: Iterable[str],
    source_data: SourceData | None,
    tier: SubscriptionTier | str = SubscriptionTier.PRO,
) -> PropertySelection:
    """Source-backed properties the tier allows that are not yet included.

    Only the tier gate applies here, not the enrichment level, so agency
    callers see what a higher enrichment level would add.
    """
    tier = SubscriptionTier(tier)
    included = set(already_included)
    candidates = [
        d
        for d in CATALOG
        if d.property_id not in included
        and d.origin is DataOrigin.SOURCE_DATA
        and _tier_admits(d, tier)
        and has_data_for(d.property_id, source_data)
    ]
    return _to_selection(candidates, source_data)


def _tier_admits(definition: PropertyDefinition, tier: SubscriptionTier) -> bool:
    return (
        definition.priority is PriorityClass.REQUIRED
        or definition.tier.rank <= tier.rank
    )


def properties_by_category(category: PropertyCategory | str) -> tuple[str, ...]:
    category = PropertyCategory(category)
    return tuple(d.property_id for d in CATALOG if d.category is category)


def properties_by_priority(priority: PriorityClass | str) -> tuple[str, ...]:
    priority = PriorityClass(priority)
    return tuple(d.property_id for d in CATALOG if d.priority is priority)


def property_stats(property_id: str) -> PropertyDefinition | None:
    return _BY_ID.get(property_id)
