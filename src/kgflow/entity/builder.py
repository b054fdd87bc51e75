"""Assembles a candidate entity from source data and a property selection.

No network calls happen here. Each selected property is mapped to a value
builder; properties that need external resolution (item lookups for
industry, administrative area and the like) and have no local value are
left out of the entity.
"""

from __future__ import annotations

from collections.abc import Callable
import dataclasses
from datetime import UTC, date, datetime
import logging
from typing import Any, TypeAlias

from kgflow.core.exceptions import EntityConstructionError
from kgflow.core.models import DataOrigin
from kgflow.core.types import (
    CandidateEntity,
    Fact,
    PropertySelection,
    ProvenanceReference,
    SourceData,
)
from kgflow.entity import values

log = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 250
_US_ALIASES = frozenset({"us", "usa", "u.s.", "u.s.a.", "united states", "united states of america"})
_SOCIAL_PROPERTIES = {
    "P2002": ("twitter", "x"),
    "P2013": ("facebook",),
    "P2003": ("instagram",),
    "P4264": ("linkedin",),
    "P2004": ("youtube",),
    "P2012": ("facebook",),
}


@dataclasses.dataclass(frozen=True, slots=True)
class _Subject:
    url: str
    name: str
    data: SourceData


@dataclasses.dataclass(frozen=True, slots=True)
class _Value:
    value: Any
    datatype: str
    origin: DataOrigin = DataOrigin.SOURCE_DATA


_Builder: TypeAlias = Callable[[_Subject], _Value | None]


def _instance_of(_: _Subject) -> _Value:
    return _Value(values.item(values.BUSINESS), "wikibase-item", DataOrigin.HARDCODED)


def _website(s: _Subject) -> _Value:
    return _Value(s.url, "url", DataOrigin.SUBJECT)


def _official_name(s: _Subject) -> _Value:
    origin = DataOrigin.SOURCE_DATA if s.data.name else DataOrigin.SUBJECT
    return _Value(s.name, "string", origin)


def _coordinates(s: _Subject) -> _Value | None:
    loc = s.data.location
    if loc is None or not loc.has_coordinates:
        return None
    return _Value(values.coordinate(loc.lat, loc.lng), "globe-coordinate")


def _street_address(s: _Subject) -> _Value | None:
    loc = s.data.location
    if loc is None or not loc.address or len(loc.address) <= 5:
        return None
    return _Value(values.monolingual(loc.address), "monolingualtext")


def _country(s: _Subject) -> _Value | None:
    loc = s.data.location
    if loc is None or not loc.country or loc.country.strip().lower() not in _US_ALIASES:
        return None
    return _Value(values.item(values.UNITED_STATES), "wikibase-item", DataOrigin.INFERRED)


def _phone(s: _Subject) -> _Value | None:
    return _Value(s.data.phone, "string") if s.data.phone else None


def _email(s: _Subject) -> _Value | None:
    email = s.data.email
    if not email or "@" not in email:
        return None
    return _Value(email if email.startswith("mailto:") else f"mailto:{email}", "url")


def _date_of(field: str) -> _Builder:
    def build(s: _Subject) -> _Value | None:
        raw = getattr(s.data.details, field)
        parsed = values.time_value(raw) if raw else None
        return _Value(parsed, "time") if parsed else None

    return build


def _social(pid: str) -> _Builder:
    def build(s: _Subject) -> _Value | None:
        for network in _SOCIAL_PROPERTIES[pid]:
            link = s.data.social_links.get(network)
            if link and (handle := values.social_handle(network, link)):
                return _Value(handle, "external-id")
        return None

    return build


def _employees(s: _Subject) -> _Value | None:
    count = s.data.details.employee_count
    if not count or count < 0:
        return None
    return _Value(values.quantity(count, values.PERSON), "quantity")


def _ticker(s: _Subject) -> _Value | None:
    symbol = s.data.details.stock_symbol
    return _Value(symbol.upper(), "string") if symbol else None


def _url_of(field: str) -> _Builder:
    def build(s: _Subject) -> _Value | None:
        link = getattr(s.data, field)
        return _Value(link, "url") if link else None

    return build


def _revenue(s: _Subject) -> _Value | None:
    raw = s.data.details.revenue
    if not raw:
        return None
    try:
        amount = float(raw.replace(",", "").replace("$", "").strip())
    except ValueError:
        return None
    if amount.is_integer():
        amount = int(amount)
    return _Value(values.quantity(amount, values.US_DOLLAR), "quantity")


_BUILDERS: dict[str, _Builder] = {
    "P31": _instance_of,
    "P856": _website,
    "P1448": _official_name,
    "P625": _coordinates,
    "P6375": _street_address,
    "P17": _country,
    "P1329": _phone,
    "P968": _email,
    "P571": _date_of("founded"),
    "P576": _date_of("dissolved"),
    **{pid: _social(pid) for pid in _SOCIAL_PROPERTIES},
    "P1128": _employees,
    "P249": _ticker,
    "P18": _url_of("image_url"),
    "P4896": _url_of("logo_url"),
    "P154": _url_of("logo_url"),
    "P2139": _revenue,
}


def build_description(source_data: SourceData) -> str:
    """Crawled description, else one generated from industry and city/state."""
    description = source_data.description
    if not description:
        parts = []
        if source_data.details.industry:
            parts.append(source_data.details.industry)
        loc = source_data.location
        if loc is not None and loc.has_city_and_state:
            parts.append(f"in {loc.city}, {loc.state}")
        description = f"Business {' '.join(parts)}" if parts else "Business entity"
    return description[:MAX_DESCRIPTION_LENGTH]


def build_entity(
    subject_url: str,
    source_data: SourceData,
    selection: PropertySelection,
    *,
    crawled: bool,
    fallback: str | None = None,
    retrieved: date | None = None,
) -> CandidateEntity:
    """Assemble a candidate entity.

    Args:
        subject_url: The subject's website; cited by every source-data fact.
        source_data: Crawled data, or an empty ``SourceData`` when the crawl
            failed.
        selection: Properties to populate, in output order.
        crawled: Whether ``source_data`` came from a successful crawl. Only
            then are source-data facts given provenance.
        fallback: Name to use when the source data has none.
        retrieved: Retrieval date recorded on provenance (defaults to today, UTC).

    Raises:
        EntityConstructionError: If no name is available or no fact could be built.
    """
    raw_name = source_data.name or fallback
    if not raw_name:
        raise EntityConstructionError("no subject name available from source data or fallback")
    name = values.clean_business_name(raw_name)
    if not name:
        raise EntityConstructionError(f"subject name {raw_name!r} is empty after cleaning")

    subject = _Subject(
        url=subject_url,
        name=name,
        data=source_data,
    )
    provenance = (
        ProvenanceReference(url=subject_url, retrieved=retrieved or datetime.now(UTC).date()),
    )

    facts = []
    for selected in selection.properties:
        builder = _BUILDERS.get(selected.property_id)
        if builder is None:
            log.debug("No local value for %s; skipping", selected.property_id)
            continue
        built = builder(subject)
        if built is None:
            continue
        origin = built.origin
        if origin is DataOrigin.SOURCE_DATA and not crawled:
            origin = DataOrigin.INFERRED
        traceable = origin is DataOrigin.SOURCE_DATA
        facts.append(
            Fact(
                property_id=selected.property_id,
                value=built.value,
                datatype=built.datatype,
                origin=origin,
                provenance=provenance if traceable else (),
            )
        )

    if not facts:
        raise EntityConstructionError("no facts could be built for the entity")

    return CandidateEntity(
        labels={"en": name},
        descriptions={"en": build_description(source_data)},
        facts=tuple(facts),
    )
