"""Notability assessment: reference discovery, judgement and verdicts."""

from .engine import NO_REFERENCES, RATE_LIMITED, NotabilityEngine
from .heuristics import classify_domain, heuristic_assessments, meets_notability, select_citations
from .parsing import parse_assessment_response, strip_code_fences
from .queries import name_variants, normalize_name, plan_queries
from .quota import DailyQuota

__all__ = [
    "NO_REFERENCES",
    "RATE_LIMITED",
    "DailyQuota",
    "NotabilityEngine",
    "classify_domain",
    "heuristic_assessments",
    "meets_notability",
    "name_variants",
    "normalize_name",
    "parse_assessment_response",
    "plan_queries",
    "select_citations",
    "strip_code_fences",
]
