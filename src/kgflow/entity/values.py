"""Typed value builders in the knowledge base's datavalue shapes."""

from __future__ import annotations

from collections.abc import Mapping
import re
from types import MappingProxyType
from typing import Any
from urllib.parse import urlparse

ENTITY_BASE = "http://www.wikidata.org/entity/"
EARTH = "Q2"
GREGORIAN = "Q1985727"
PERSON = "Q11573"
BUSINESS = "Q4830453"
UNITED_STATES = "Q30"
US_DOLLAR = "Q4917"

_TIMESTAMP_SUFFIX = re.compile(r"\s+\d{10,}$")
_SHORT_NUMBER_SUFFIX = re.compile(r"\s+\d{1,3}$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_YEAR = re.compile(r"\b(\d{4})\b")


def _frozen(**values: Any) -> Mapping[str, Any]:
    return MappingProxyType(values)


def item(qid: str) -> Mapping[str, Any]:
    return _frozen(**{"entity-type": "item", "id": qid})


def coordinate(lat: float, lng: float) -> Mapping[str, Any]:
    return _frozen(
        latitude=lat, longitude=lng, precision=0.0001, globe=ENTITY_BASE + EARTH
    )


def quantity(amount: int | float, unit: str | None = None) -> Mapping[str, Any]:
    return _frozen(
        amount=f"+{amount}" if amount >= 0 else str(amount),
        unit=ENTITY_BASE + unit if unit else "1",
    )


def time_value(text: str) -> Mapping[str, Any] | None:
    """Parse a founding-style date.

    ``YYYY-MM-DD`` becomes day precision (11); anything else containing a
    four-digit year becomes year precision (9). Returns None otherwise.
    """
    text = text.strip()
    if match := _ISO_DATE.match(text):
        year, month, day = match.groups()
        stamp, precision = f"+{year}-{month}-{day}T00:00:00Z", 11
    elif match := _YEAR.search(text):
        stamp, precision = f"+{match.group(1)}-00-00T00:00:00Z", 9
    else:
        return None
    return _frozen(
        time=stamp,
        timezone=0,
        before=0,
        after=0,
        precision=precision,
        calendarmodel=ENTITY_BASE + GREGORIAN,
    )


def clean_business_name(name: str) -> str:
    """Drop trailing timestamps and short counters appended by upstream systems."""
    name = _TIMESTAMP_SUFFIX.sub("", name.strip())
    return _SHORT_NUMBER_SUFFIX.sub("", name).strip()


def fallback_name(url: str) -> str:
    """A display name from the URL's domain: ``https://www.acme.com`` -> ``Acme``."""
    host = (urlparse(url).hostname or "").removeprefix("www.")
    label = host.split(".")[0] if host else ""
    if not label:
        return "Unknown Business"
    return label[0].upper() + label[1:]


_SOCIAL_PATH_PREFIXES = {
    "linkedin": ("company", "in", "school"),
    "youtube": ("channel", "c", "user"),
}


def social_handle(network: str, link: str) -> str | None:
    """Extract the account identifier from a profile URL (or a bare handle)."""
    link = link.strip()
    if not link:
        return None
    if "/" not in link:
        return link.lstrip("@") or None
    parsed = urlparse(link if "://" in link else f"https://{link}")
    parts = [p for p in parsed.path.split("/") if p]
    if not parts:
        return None
    prefixes = _SOCIAL_PATH_PREFIXES.get(network, ())
    if parts[0] in prefixes and len(parts) > 1:
        return parts[1].lstrip("@")
    if parts[0] == "pages" and len(parts) > 1:
        return parts[-1]
    return parts[0].lstrip("@") or None


def monolingual(text: str, language: str = "en") -> Mapping[str, Any]:
    return _frozen(text=text, language=language)
