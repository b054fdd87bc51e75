"""Deterministic reference classification and the notability eligibility rule.

The keyword table below is used whenever language-model assessment is
unavailable or unusable. It is intentionally simple and kept stable so its
verdicts are predictable.
"""

from __future__ import annotations

from collections.abc import Sequence

from kgflow.core.models import SourceCategory
from kgflow.core.types import Reference, ReferenceAssessment

HEURISTIC_CONFIDENCE = 0.7

SERIOUS_CATEGORIES = frozenset(
    {
        SourceCategory.GOVERNMENT,
        SourceCategory.NEWS,
        SourceCategory.ACADEMIC,
        SourceCategory.DATABASE,
        SourceCategory.DIRECTORY,
        SourceCategory.REVIEW,
    }
)

# Lower ranks are cited first
SOURCE_CATEGORY_RANK = {
    SourceCategory.GOVERNMENT: 1,
    SourceCategory.NEWS: 2,
    SourceCategory.ACADEMIC: 3,
    SourceCategory.DATABASE: 4,
    SourceCategory.DIRECTORY: 5,
    SourceCategory.REVIEW: 6,
    SourceCategory.OTHER: 7,
    SourceCategory.COMPANY: 8,
}

TRUST_SCORES = {
    SourceCategory.GOVERNMENT: 90,
    SourceCategory.NEWS: 85,
    SourceCategory.ACADEMIC: 85,
    SourceCategory.DATABASE: 80,
    SourceCategory.DIRECTORY: 75,
    SourceCategory.REVIEW: 70,
    SourceCategory.OTHER: 60,
    SourceCategory.COMPANY: 50,
}

_KEYWORDS: tuple[tuple[tuple[str, ...], SourceCategory], ...] = (
    ((".gov",), SourceCategory.GOVERNMENT),
    (("news",), SourceCategory.NEWS),
    (("directory", "yelp", "google"), SourceCategory.DIRECTORY),
    (("review",), SourceCategory.REVIEW),
    (("database", "chamber"), SourceCategory.DATABASE),
    ((".edu",), SourceCategory.ACADEMIC),
)


def _same_site(domain: str, own_domain: str) -> bool:
    own = own_domain.lower().removeprefix("www.")
    return domain == own or domain.endswith("." + own)


def classify_domain(domain: str, own_domain: str | None = None) -> SourceCategory:
    """Classify a reference's publisher by keywords in its domain.

    A domain matching the subject's own site is ``company``, whatever its
    keywords say.
    """
    domain = domain.lower().removeprefix("www.")
    if own_domain and _same_site(domain, own_domain):
        return SourceCategory.COMPANY
    for keywords, category in _KEYWORDS:
        if any(k in domain for k in keywords):
            return category
    return SourceCategory.OTHER


def heuristic_assessments(
    references: Sequence[Reference], own_domain: str | None = None
) -> tuple[ReferenceAssessment, ...]:
    """Assess every reference from its domain alone."""
    assessments = []
    for index, ref in enumerate(references):
        category = classify_domain(ref.source_domain, own_domain)
        assessments.append(
            ReferenceAssessment(
                reference_index=index,
                is_serious=category in SERIOUS_CATEGORIES,
                is_publicly_available=True,
                is_independent=category is not SourceCategory.COMPANY,
                source_category=category,
                trust_score=TRUST_SCORES[category],
                reasoning=f"Reference from {ref.source_domain} classified as {category.value} by domain",
            )
        )
    return tuple(assessments)


def meets_notability(assessments: Sequence[ReferenceAssessment]) -> bool:
    """The local-business eligibility bar.

    Notable when a serious, independent, public reference exists, or when
    the subject's own site is backed by at least one independent directory
    or review listing.
    """
    if any(a.is_qualifying for a in assessments):
        return True
    has_company = any(a.source_category is SourceCategory.COMPANY for a in assessments)
    has_listing = any(
        a.is_independent
        and a.source_category in (SourceCategory.DIRECTORY, SourceCategory.REVIEW)
        for a in assessments
    )
    return has_company and has_listing


def select_citations(
    references: Sequence[Reference],
    assessments: Sequence[ReferenceAssessment],
    limit: int = 5,
) -> tuple[Reference, ...]:
    """Qualifying references ordered by category rank, then trust score."""
    qualifying = sorted(
        (
            a
            for a in assessments
            if a.is_qualifying and 0 <= a.reference_index < len(references)
        ),
        key=lambda a: (SOURCE_CATEGORY_RANK[a.source_category], -a.trust_score),
    )
    citations: list[Reference] = []
    for a in qualifying:
        ref = references[a.reference_index]
        if ref not in citations:
            citations.append(ref)
        if len(citations) == limit:
            break
    return tuple(citations)
