"""Entity quality, publish readiness and notability citations."""

from __future__ import annotations

import dataclasses
from datetime import UTC, date, datetime

from kgflow.core.models import DataOrigin
from kgflow.core.types import CandidateEntity, NotabilityVerdict, ProvenanceReference, Reference

REQUIRED_PROPERTIES = ("P31", "P856", "P1448")
# Facts that receive the best notability citation as extra provenance
CITED_PROPERTIES = ("P1448", "P625")


@dataclasses.dataclass(frozen=True, slots=True)
class PublishReadiness:
    ready: bool
    reasons: tuple[str, ...] = ()


def check_publish_ready(entity: CandidateEntity) -> PublishReadiness:
    """An entity needs at least one label, one fact and an ``instance of`` fact."""
    reasons = []
    if not any(text.strip() for text in entity.labels.values()):
        reasons.append("entity has no label")
    if not entity.facts:
        reasons.append("entity has no facts")
    elif entity.fact("P31") is None:
        reasons.append("entity is missing 'instance of' (P31)")
    return PublishReadiness(ready=not reasons, reasons=tuple(reasons))


def quality_score(entity: CandidateEntity) -> float:
    """Score in [0, 1].

    0.4 when every required property is present, plus 0.1 per fact up to
    0.4, plus the share of referenced facts up to 0.2.
    """
    if not entity.facts:
        return 0.0
    count = len(entity.facts)
    score = 0.4 if all(entity.fact(pid) for pid in REQUIRED_PROPERTIES) else 0.0
    score += min(count / 10, 0.4)
    referenced = sum(1 for f in entity.facts if f.provenance)
    score += min(referenced / count, 0.2)
    return min(score, 1.0)


def best_citation(verdict: NotabilityVerdict) -> Reference | None:
    """The top citation with the highest trust score, or None."""
    if not verdict.top_citations:
        return None
    trust = {
        verdict.references[a.reference_index].url: a.trust_score
        for a in verdict.assessments
        if 0 <= a.reference_index < len(verdict.references)
    }
    # max() keeps the first of equal scores, so category rank breaks ties
    return max(verdict.top_citations, key=lambda ref: trust.get(ref.url, 0))


def attach_best_citation(
    entity: CandidateEntity,
    verdict: NotabilityVerdict,
    *,
    retrieved: date | None = None,
) -> CandidateEntity:
    """Return a copy citing the verdict's best reference on the key traceable facts.

    Only source-data facts take the citation; hardcoded and inferred values
    are never given provenance.
    """
    citation = best_citation(verdict)
    if citation is None:
        return entity
    reference = ProvenanceReference(
        url=citation.url,
        retrieved=retrieved or datetime.now(UTC).date(),
        title=citation.title or None,
    )
    facts = []
    for fact in entity.facts:
        if (
            fact.property_id in CITED_PROPERTIES
            and fact.origin is DataOrigin.SOURCE_DATA
            and all(p.url != reference.url for p in fact.provenance)
        ):
            fact = dataclasses.replace(fact, provenance=(*fact.provenance, reference))
        facts.append(fact)
    return dataclasses.replace(entity, facts=tuple(facts))
