"""Query planning, domain heuristics and the eligibility rule."""

import pytest

from kgflow.core.models import SourceCategory
from kgflow.core.types import Location, Reference, ReferenceAssessment
from kgflow.notability import (
    classify_domain,
    heuristic_assessments,
    meets_notability,
    name_variants,
    normalize_name,
    plan_queries,
    select_citations,
)
from kgflow.notability.prompts import build_assessment_prompt

pytestmark = pytest.mark.unit


def ref(domain: str, path: str = "") -> Reference:
    return Reference(
        url=f"https://{domain}/{path}",
        title=f"Page on {domain}",
        snippet="Acme Dental",
        source_domain=domain,
    )


def assessment(index, category, *, serious=True, public=True, independent=True, trust=70):
    return ReferenceAssessment(
        reference_index=index,
        is_serious=serious,
        is_publicly_available=public,
        is_independent=independent,
        source_category=category,
        trust_score=trust,
    )


class TestQueries:
    def test_normalize_strips_generated_suffix(self):
        assert normalize_name("Example Clinic 1763324055284") == "Example Clinic"
        assert normalize_name("Route 66 Diner") == "Route 66 Diner"

    def test_variants_remove_one_legal_suffix(self):
        assert name_variants("Acme Dental, Inc.")[0] == "Acme Dental"
        assert name_variants("Acme Dental LLC") == ["Acme Dental"]
        assert name_variants("Acme Dental") == ["Acme Dental"]

    def test_plan_with_location_and_variant(self):
        planned = plan_queries("Acme Dental LLC", Location(city="Austin", state="TX"))
        assert [(q.query, q.max_results) for q in planned] == [
            ('"Acme Dental LLC" Austin TX', 10),
            ('"Acme Dental" Austin TX', 5),
            ('"Acme Dental LLC" OR "Acme Dental" site:*.gov OR site:*.edu', 5),
        ]

    def test_plan_skips_identical_variant(self):
        planned = plan_queries("Acme Dental")
        assert [q.query for q in planned] == [
            '"Acme Dental"',
            '"Acme Dental" OR "Acme Dental" site:*.gov OR site:*.edu',
        ]

    def test_city_without_state_is_ignored(self):
        assert plan_queries("Acme", Location(city="Austin"))[0].query == '"Acme"'


class TestClassifyDomain:
    @pytest.mark.parametrize(
        ("domain", "expected"),
        [
            ("ri.gov", SourceCategory.GOVERNMENT),
            ("brown.edu", SourceCategory.ACADEMIC),
            ("providencenews.com", SourceCategory.NEWS),
            ("news.brown.edu", SourceCategory.NEWS),
            ("reviews.brown.edu", SourceCategory.REVIEW),
            ("www.yelp.com", SourceCategory.DIRECTORY),
            ("dentistreviews.com", SourceCategory.REVIEW),
            ("chamberofcommerce.com", SourceCategory.DATABASE),
            ("example.org", SourceCategory.OTHER),
        ],
    )
    def test_keywords(self, domain, expected):
        assert classify_domain(domain) is expected

    def test_own_domain_is_company_first(self):
        assert classify_domain("news.acme.com", "www.acme.com") is SourceCategory.COMPANY
        assert classify_domain("acme.com", "acme.com") is SourceCategory.COMPANY


class TestHeuristicAssessments:
    def test_company_reference_is_never_independent(self):
        (company,) = heuristic_assessments([ref("acme.com")], own_domain="acme.com")
        assert company.source_category is SourceCategory.COMPANY
        assert not company.is_independent
        assert not company.is_serious
        assert company.trust_score == 50

    def test_government_reference_alone_is_notable(self):
        assessments = heuristic_assessments([ref("ri.gov")])
        assert assessments[0].is_qualifying
        assert assessments[0].trust_score == 90
        assert meets_notability(assessments)


class TestMeetsNotability:
    def test_company_plus_directory_is_notable(self):
        assessments = [
            assessment(0, SourceCategory.COMPANY, serious=False, independent=False),
            assessment(1, SourceCategory.DIRECTORY, serious=False),
        ]
        assert meets_notability(assessments)

    def test_directory_alone_without_qualifying_is_not(self):
        assert not meets_notability([assessment(0, SourceCategory.DIRECTORY, serious=False)])

    def test_private_reference_does_not_qualify(self):
        assert not meets_notability([assessment(0, SourceCategory.NEWS, public=False)])

    def test_nothing_is_not_notable(self):
        assert not meets_notability([])


class TestSelectCitations:
    def test_ordered_by_category_then_trust(self):
        refs = [ref("a.example"), ref("news1.example"), ref("city.gov"), ref("news2.example")]
        assessments = [
            assessment(0, SourceCategory.OTHER, trust=99),
            assessment(1, SourceCategory.NEWS, trust=70),
            assessment(2, SourceCategory.GOVERNMENT, trust=60),
            assessment(3, SourceCategory.NEWS, trust=90),
        ]
        citations = select_citations(refs, assessments)
        assert [c.source_domain for c in citations] == [
            "city.gov",
            "news2.example",
            "news1.example",
            "a.example",
        ]

    def test_limit_and_non_qualifying_excluded(self):
        refs = [ref(f"site{i}.gov") for i in range(8)]
        assessments = [assessment(i, SourceCategory.GOVERNMENT) for i in range(8)]
        assessments[0] = assessment(0, SourceCategory.GOVERNMENT, independent=False)
        citations = select_citations(refs, assessments, limit=5)
        assert len(citations) == 5
        assert refs[0] not in citations


def test_prompt_numbers_references_from_zero():
    prompt = build_assessment_prompt([ref("ri.gov"), ref("yelp.com")], "Acme Dental")
    assert "Acme Dental" in prompt
    assert "[0] Page on ri.gov" in prompt
    assert "[1] Page on yelp.com" in prompt
