"""Subject-name normalization and reference-search query planning."""

from __future__ import annotations

import dataclasses
import re

from kgflow.core.types import Location

_GENERATED_SUFFIX = re.compile(r"\s+\d{6,}$")

# Checked in order; "Inc." before "Inc" so the period goes with it
LEGAL_SUFFIXES = (
    ", Inc.",
    " Inc.",
    ", Inc",
    " Inc",
    ", LLC",
    " LLC",
    ", Ltd.",
    " Ltd.",
    " Corporation",
    " Corp.",
    " Corp",
)

EXACT_RESULTS = 10
VARIANT_RESULTS = 5
OFFICIAL_RESULTS = 5


@dataclasses.dataclass(frozen=True, slots=True)
class PlannedQuery:
    query: str
    max_results: int


def normalize_name(name: str) -> str:
    """Strip a trailing numeric suffix of six or more digits.

    >>> normalize_name("Example Clinic 1763324055284")
    'Example Clinic'
    """
    return _GENERATED_SUFFIX.sub("", name.strip()).strip()


def name_variants(name: str) -> list[str]:
    """Names with one legal suffix removed; ``[name]`` when none applies."""
    variants = []
    for suffix in LEGAL_SUFFIXES:
        if suffix in name:
            variant = name.replace(suffix, "", 1).strip()
            if variant and variant not in variants:
                variants.append(variant)
    return variants or [name]


def search_query(name: str, location: Location | None = None) -> str:
    if location is not None and location.has_city_and_state:
        return f'"{name}" {location.city} {location.state}'
    return f'"{name}"'


def plan_queries(name: str, location: Location | None = None) -> list[PlannedQuery]:
    """Exact name, at most one delegalized variant, then government/academic sites."""
    variants = name_variants(name)
    planned = [PlannedQuery(search_query(name, location), EXACT_RESULTS)]
    if variants[0] != name:
        planned.append(PlannedQuery(search_query(variants[0], location), VARIANT_RESULTS))
    planned.append(
        PlannedQuery(
            f'"{name}" OR "{variants[0]}" site:*.gov OR site:*.edu', OFFICIAL_RESULTS
        )
    )
    return planned
