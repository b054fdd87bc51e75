"""Rubric prompt for language-model reference assessment."""

from collections.abc import Sequence

from kgflow.core.types import Reference

_RUBRIC = """\
Assess if these references meet Wikidata's "serious and publicly available" standard for LOCAL BUSINESSES:

Business: {name}

References:
{references}

Wikidata standards for LOCAL BUSINESSES (adapted for practical notability):
1. From reputable sources (news, government, academic, official databases, OR legitimate business directories/review sites)
2. Publicly available (not paywalled, not private documents)
3. Independent third-party verification (company website alone is not enough, but company website + directories/reviews IS acceptable)

ACCEPTED SOURCE TYPES for local businesses:
- "news": News articles, press releases from reputable outlets
- "government": Government registrations, business licenses, official directories
- "academic": Academic publications or databases
- "database": Official business databases, chamber of commerce listings
- "directory": Business directories (Yelp, Google Business, local directories, Better Business Bureau)
- "review": Review platforms (Yelp, Google Reviews, industry-specific review sites)
- "company": The company's own website (publicly available but never independent)
- "other": Other publicly available sources

For each reference, assess:
- isSerious: Is this from a reputable source?
- isPubliclyAvailable: Can anyone access this?
- isIndependent: Is this from a third party? (false for the company's own website)
- sourceType: "news" | "government" | "academic" | "database" | "directory" | "review" | "company" | "other"
- trustScore: 0-100 (government/news=90+, directory/review=70+, company website=50+)
- reasoning: Why is this assessment given?

Overall:
- meetsNotability: at least 1 serious independent reference, OR company website + at least 1 independent directory/review listing
- confidence: 0-1
- summary: Brief explanation of the decision
- recommendations: What to do with this entity (if not notable, suggest improvements)

Return ONLY valid JSON with this exact structure, where "index" is the
bracketed reference number above:
{{
  "meetsNotability": boolean,
  "confidence": number,
  "seriousReferenceCount": number,
  "publiclyAvailableCount": number,
  "independentCount": number,
  "summary": string,
  "references": [
    {{
      "index": number,
      "isSerious": boolean,
      "isPubliclyAvailable": boolean,
      "isIndependent": boolean,
      "sourceType": string,
      "trustScore": number,
      "reasoning": string
    }}
  ],
  "recommendations": string[]
}}"""


def _format_reference(index: int, ref: Reference) -> str:
    return (
        f"[{index}] {ref.title}\n"
        f"    URL: {ref.url}\n"
        f"    Source: {ref.source_domain}\n"
        f"    Snippet: {ref.snippet}"
    )


def build_assessment_prompt(references: Sequence[Reference], name: str) -> str:
    """Render the rubric for ``name``; references are numbered from 0."""
    rendered = "\n\n".join(_format_reference(i, r) for i, r in enumerate(references))
    return _RUBRIC.format(name=name, references=rendered)
