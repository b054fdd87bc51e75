"""Entity construction: typed facts with provenance from crawled source data."""

from .builder import build_description, build_entity
from .readiness import (
    PublishReadiness,
    attach_best_citation,
    best_citation,
    check_publish_ready,
    quality_score,
)
from .values import clean_business_name, fallback_name

__all__ = [
    "PublishReadiness",
    "attach_best_citation",
    "best_citation",
    "build_description",
    "build_entity",
    "check_publish_ready",
    "clean_business_name",
    "fallback_name",
    "quality_score",
]
