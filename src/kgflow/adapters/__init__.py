"""Bundled collaborator implementations."""

from .gemini import GeminiTextAssessor
from .publish import DryRunPublisher
from .search import GoogleSearchClient

__all__ = ["DryRunPublisher", "GeminiTextAssessor", "GoogleSearchClient"]
