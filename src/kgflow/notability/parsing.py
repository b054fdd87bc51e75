"""Parsing of language-model assessment responses."""

from __future__ import annotations

import dataclasses
import logging
import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from kgflow.core.exceptions import AssessmentParseError
from kgflow.core.models import SourceCategory
from kgflow.core.types import ReferenceAssessment

log = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\s*```$")


class _Judgement(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    index: int
    is_serious: bool = Field(alias="isSerious")
    is_publicly_available: bool = Field(alias="isPubliclyAvailable")
    is_independent: bool = Field(alias="isIndependent")
    source_type: str = Field(default="other", alias="sourceType")
    trust_score: float = Field(default=0, alias="trustScore", allow_inf_nan=False)
    reasoning: str = ""


class _AssessmentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    meets_notability: bool = Field(default=False, alias="meetsNotability")
    confidence: float = Field(default=0.0, allow_inf_nan=False)
    summary: str = ""
    references: list[_Judgement] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


@dataclasses.dataclass(frozen=True, slots=True)
class ParsedAssessment:
    """Per-reference assessments plus the model's overall commentary.

    The model's own verdict and counts are kept for logging only; the
    engine recomputes both from ``assessments``.
    """

    assessments: tuple[ReferenceAssessment, ...]
    confidence: float
    summary: str
    recommendations: tuple[str, ...]
    claimed_notable: bool


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` (or bare ```) wrapper."""
    content = text.strip()
    if content.startswith("```"):
        content = _CLOSING_FENCE.sub("", _OPENING_FENCE.sub("", content))
    return content.strip()


def _category(value: str) -> SourceCategory:
    try:
        return SourceCategory(value.strip().lower())
    except ValueError:
        return SourceCategory.OTHER


def parse_assessment_response(raw: str, reference_count: int) -> ParsedAssessment:
    """Parse and sanitize a rubric response.

    Judgements with an out-of-range or repeated index are dropped, trust
    scores and confidence are clamped, and company-owned references are
    forced to non-independent.

    Raises:
        AssessmentParseError: If the text is not valid JSON of the expected
            shape or no usable per-reference judgement remains.
    """
    try:
        response = _AssessmentResponse.model_validate_json(strip_code_fences(raw))
    except ValidationError as e:
        log.warning("Unparsable assessment response (first 500 chars): %s", raw[:500])
        raise AssessmentParseError(f"invalid assessment response: {e}") from e

    assessments: list[ReferenceAssessment] = []
    seen: set[int] = set()
    for judgement in response.references:
        if not 0 <= judgement.index < reference_count or judgement.index in seen:
            continue
        seen.add(judgement.index)
        category = _category(judgement.source_type)
        assessments.append(
            ReferenceAssessment(
                reference_index=judgement.index,
                is_serious=judgement.is_serious,
                is_publicly_available=judgement.is_publicly_available,
                is_independent=judgement.is_independent
                and category is not SourceCategory.COMPANY,
                source_category=category,
                trust_score=round(min(max(judgement.trust_score, 0), 100)),
                reasoning=judgement.reasoning,
            )
        )

    if reference_count and not assessments:
        raise AssessmentParseError("assessment response judged none of the references")

    return ParsedAssessment(
        assessments=tuple(sorted(assessments, key=lambda a: a.reference_index)),
        confidence=min(max(response.confidence, 0.0), 1.0),
        summary=response.summary,
        recommendations=tuple(response.recommendations),
        claimed_notable=response.meets_notability,
    )
