"""Crawl, fingerprint and publish business entities to a knowledge graph."""

import importlib.metadata
import logging

from kgflow.config import FrozenConfig, load_config, resolve_config
from kgflow.core.exceptions import (
    ConfigurationError,
    EntityConstructionError,
    InvalidInputError,
    KgflowError,
    PublishError,
    PublishPreconditionError,
    StageFailureError,
    StageTimeoutError,
)
from kgflow.core.models import (
    DataOrigin,
    ProgressStage,
    StageName,
    StageStatus,
    SubscriptionTier,
    TargetEnvironment,
)
from kgflow.core.types import (
    CandidateEntity,
    CrawlResult,
    Fact,
    Failure,
    FingerprintRequest,
    Location,
    NotabilityVerdict,
    PipelineOptions,
    PipelineRequest,
    PipelineResult,
    ProgressEvent,
    PublishOptions,
    PublishOutcome,
    Reference,
    Result,
    SourceData,
    StageOutcome,
    Success,
)
from kgflow.notability import DailyQuota, NotabilityEngine
from kgflow.orchestrator import CFPOrchestrator, create_orchestrator
from kgflow.properties import recommend_properties, select_properties
from kgflow.telemetry import TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("kgflow")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Orchestration
    "CFPOrchestrator",
    "create_orchestrator",
    # Configuration
    "FrozenConfig",
    "load_config",
    "resolve_config",
    # Requests and results
    "PipelineOptions",
    "PipelineRequest",
    "PipelineResult",
    "ProgressEvent",
    "StageOutcome",
    "Result",
    "Success",
    "Failure",
    # Data
    "SourceData",
    "Location",
    "CrawlResult",
    "FingerprintRequest",
    "CandidateEntity",
    "Fact",
    "Reference",
    "NotabilityVerdict",
    "PublishOptions",
    "PublishOutcome",
    # Enums
    "DataOrigin",
    "ProgressStage",
    "StageName",
    "StageStatus",
    "SubscriptionTier",
    "TargetEnvironment",
    # Notability and properties
    "DailyQuota",
    "NotabilityEngine",
    "select_properties",
    "recommend_properties",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "KgflowError",
    "ConfigurationError",
    "InvalidInputError",
    "StageTimeoutError",
    "StageFailureError",
    "EntityConstructionError",
    "PublishPreconditionError",
    "PublishError",
]
