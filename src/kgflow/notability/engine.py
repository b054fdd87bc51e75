"""Notability assessment engine.

Finds third-party references for a subject, judges them (language model
first, keyword heuristic as fallback) and renders a verdict with supporting
citations. Every failure mode degrades to a verdict; ``assess`` does not
raise for search, quota or assessment problems.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging

from kgflow.core.exceptions import AssessmentParseError, QuotaExceededError
from kgflow.core.types import Location, NotabilityVerdict, Reference, ReferenceAssessment
from kgflow.notability.heuristics import (
    HEURISTIC_CONFIDENCE,
    heuristic_assessments,
    meets_notability,
    select_citations,
)
from kgflow.notability.parsing import ParsedAssessment, parse_assessment_response
from kgflow.notability.prompts import build_assessment_prompt
from kgflow.notability.queries import normalize_name, plan_queries
from kgflow.notability.quota import DailyQuota
from kgflow.pipeline.collaborators import ReferenceSearch, TextAssessor

log = logging.getLogger(__name__)

RATE_LIMITED = "rate limited"
NO_REFERENCES = "no references found"

_SEEK_MORE = (
    "Seek additional references from reputable sources "
    "(news, government, directories, review platforms)"
)


def rate_limited_verdict() -> NotabilityVerdict:
    return NotabilityVerdict(
        is_notable=False,
        confidence=0.5,
        summary="Daily reference-search quota exhausted; notability not assessed",
        recommendations=("Retry after the daily search quota resets (00:00 UTC)",),
        reason=RATE_LIMITED,
    )


def no_references_verdict() -> NotabilityVerdict:
    return NotabilityVerdict(
        is_notable=False,
        confidence=0.0,
        summary="No references found; cannot verify notability",
        recommendations=(_SEEK_MORE,),
        reason=NO_REFERENCES,
    )


class NotabilityEngine:
    """Renders notability verdicts.

    Args:
        search: Reference-search collaborator. Without one, every subject
            gets the no-references verdict.
        assessor: Text-assessment collaborator. Without one, references
            are judged by the keyword heuristic.
        quota: Daily query budget, shared with every other engine in the
            process.
        max_references: Cap on unique references gathered per assessment.
        max_citations: Cap on citations returned with a verdict.
    """

    def __init__(
        self,
        search: ReferenceSearch | None,
        assessor: TextAssessor | None,
        quota: DailyQuota,
        *,
        max_references: int = 15,
        max_citations: int = 5,
    ) -> None:
        self._search = search
        self._assessor = assessor
        self._quota = quota
        self._max_references = max_references
        self._max_citations = min(max_citations, 5)

    @property
    def quota(self) -> DailyQuota:
        return self._quota

    async def assess(
        self,
        subject_name: str,
        location: Location | None = None,
        *,
        own_domain: str | None = None,
    ) -> NotabilityVerdict:
        """Assess whether a subject clears the notability bar.

        ``own_domain`` identifies the subject's website so that references
        hosted there are classified as company-owned.
        """
        name = normalize_name(subject_name) or subject_name.strip()
        try:
            references = await self.find_references(name, location)
        except QuotaExceededError:
            log.warning("Notability check for %r skipped: search quota exhausted", name)
            return rate_limited_verdict()

        if not references:
            return no_references_verdict()

        assessments, parsed = await self._judge(references, name, own_domain)
        return self._verdict(references, assessments, parsed)

    async def find_references(
        self, name: str, location: Location | None = None
    ) -> list[Reference]:
        """Run the planned queries, deduplicating by URL.

        Raises:
            QuotaExceededError: If the quota admits not even the first query.
        """
        if self._search is None:
            return []

        references: list[Reference] = []
        seen: set[str] = set()
        for position, planned in enumerate(plan_queries(name, location)):
            if not self._quota.try_acquire():
                if position == 0:
                    raise QuotaExceededError(
                        f"daily search quota of {self._quota.limit} exhausted"
                    )
                break
            try:
                results = await self._search.search(planned.query, planned.max_results)
            except Exception as e:
                log.warning("Reference search failed for %r: %s", planned.query, e)
                continue
            for ref in results:
                if ref.url not in seen:
                    seen.add(ref.url)
                    references.append(ref)
        return references[: self._max_references]

    async def _judge(
        self, references: Sequence[Reference], name: str, own_domain: str | None
    ) -> tuple[tuple[ReferenceAssessment, ...], ParsedAssessment | None]:
        if self._assessor is not None:
            prompt = build_assessment_prompt(references, name)
            try:
                raw = await self._assessor.assess(prompt)
                parsed = parse_assessment_response(raw, len(references))
            except AssessmentParseError as e:
                log.warning("Falling back to heuristic assessment: %s", e)
            except Exception as e:
                log.warning("Text assessment failed, using heuristic: %s", e)
            else:
                return parsed.assessments, parsed
        return heuristic_assessments(references, own_domain), None

    def _verdict(
        self,
        references: Sequence[Reference],
        assessments: tuple[ReferenceAssessment, ...],
        parsed: ParsedAssessment | None,
    ) -> NotabilityVerdict:
        notable = meets_notability(assessments)
        serious = sum(a.is_serious for a in assessments)

        if parsed is not None:
            if parsed.claimed_notable != notable:
                log.info(
                    "Model verdict (notable=%s) overridden by eligibility rule (notable=%s)",
                    parsed.claimed_notable,
                    notable,
                )
            confidence = parsed.confidence
            summary = parsed.summary
            recommendations = parsed.recommendations
            method = "llm"
        else:
            confidence = HEURISTIC_CONFIDENCE
            summary = ""
            recommendations = ()
            method = "heuristic"

        if not summary:
            summary = (
                f"References meet notability standards for local businesses with {serious} serious references"
                if notable
                else "References found but may need additional verification"
            )
        if not recommendations:
            recommendations = (
                ("Ready to publish - meets notability standards for local businesses",)
                if notable
                else ("Consider adding additional references from directories or review platforms",)
            )

        return NotabilityVerdict(
            is_notable=notable,
            confidence=confidence,
            serious_reference_count=serious,
            publicly_available_count=sum(a.is_publicly_available for a in assessments),
            independent_count=sum(a.is_independent for a in assessments),
            summary=summary,
            top_citations=select_citations(references, assessments, self._max_citations),
            recommendations=recommendations,
            references=tuple(references),
            assessments=assessments,
            method=method,
        )
