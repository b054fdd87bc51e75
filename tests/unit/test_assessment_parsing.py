"""Parsing and sanitizing language-model assessment responses."""

import json

import pytest

from kgflow.core.exceptions import AssessmentParseError
from kgflow.core.models import SourceCategory
from kgflow.notability import parse_assessment_response, strip_code_fences

pytestmark = pytest.mark.unit


def judgement(index, source_type="news", **overrides):
    body = {
        "index": index,
        "isSerious": True,
        "isPubliclyAvailable": True,
        "isIndependent": True,
        "sourceType": source_type,
        "trustScore": 80,
        "reasoning": "local newspaper",
    }
    body.update(overrides)
    return body


def response(*judgements, **overrides):
    body = {
        "meetsNotability": True,
        "confidence": 0.85,
        "seriousReferenceCount": len(judgements),
        "summary": "Covered by local press",
        "references": list(judgements),
        "recommendations": ["Ready to publish"],
    }
    body.update(overrides)
    return json.dumps(body)


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences("```\n{}\n```") == "{}"

    def test_no_fence(self):
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


class TestParseAssessmentResponse:
    def test_valid_response(self):
        parsed = parse_assessment_response(response(judgement(0), judgement(1, "government")), 2)
        assert [a.reference_index for a in parsed.assessments] == [0, 1]
        assert parsed.assessments[1].source_category is SourceCategory.GOVERNMENT
        assert parsed.confidence == 0.85
        assert parsed.summary == "Covered by local press"
        assert parsed.recommendations == ("Ready to publish",)
        assert parsed.claimed_notable is True

    def test_fenced_response(self):
        raw = "```json\n" + response(judgement(0)) + "\n```"
        assert len(parse_assessment_response(raw, 1).assessments) == 1

    def test_company_reference_forced_dependent(self):
        parsed = parse_assessment_response(response(judgement(0, "company")), 1)
        assert parsed.assessments[0].is_independent is False

    def test_values_clamped(self):
        parsed = parse_assessment_response(
            response(judgement(0, trustScore=140), confidence=1.7), 1
        )
        assert parsed.assessments[0].trust_score == 100
        assert parsed.confidence == 1.0

    def test_unknown_source_type_becomes_other(self):
        parsed = parse_assessment_response(response(judgement(0, "blog")), 1)
        assert parsed.assessments[0].source_category is SourceCategory.OTHER

    def test_out_of_range_and_duplicate_indexes_dropped(self):
        parsed = parse_assessment_response(
            response(judgement(0), judgement(0, "government"), judgement(5), judgement(-1)), 2
        )
        assert len(parsed.assessments) == 1
        assert parsed.assessments[0].source_category is SourceCategory.NEWS

    def test_invalid_json_raises(self):
        with pytest.raises(AssessmentParseError):
            parse_assessment_response("The references look notable.", 2)

    def test_missing_required_fields_raise(self):
        raw = response({"index": 0, "sourceType": "news"})
        with pytest.raises(AssessmentParseError):
            parse_assessment_response(raw, 1)

    def test_no_usable_judgements_raise(self):
        with pytest.raises(AssessmentParseError):
            parse_assessment_response(response(judgement(3)), 2)

    @pytest.mark.parametrize(
        "raw",
        [
            response(judgement(0), confidence=float("nan")),
            response(judgement(0, trustScore=float("inf"))),
        ],
    )
    def test_non_finite_numbers_raise(self, raw):
        with pytest.raises(AssessmentParseError):
            parse_assessment_response(raw, 1)
