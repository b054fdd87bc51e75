"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces values
from every source (environment, files, programmatic) into the right types
with defaults.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kgflow.core.models import SubscriptionTier, TargetEnvironment


class KgflowSettings(BaseSettings):
    """Pydantic settings schema for the CFP pipeline.

    Integrates with environment variables using the ``KGFLOW_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="KGFLOW_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Pipeline budget ---

    timeout_budget_ms: int = Field(
        default=60_000,
        description="Total time budget shared by crawl and fingerprint",
        ge=1,
    )
    crawl_budget_share: float = Field(
        default=0.6,
        description="Fraction of the budget given to the crawl stage",
        gt=0.0,
        lt=1.0,
    )
    publish_timeout_ms: int = Field(
        default=30_000,
        description="Deadline for notability assessment plus publishing",
        ge=1,
    )

    # --- Entity and publishing ---

    target_environment: TargetEnvironment = Field(default=TargetEnvironment.TEST)
    default_tier: SubscriptionTier = Field(default=SubscriptionTier.PRO)
    default_enrichment_level: int = Field(default=0, ge=0, le=5)

    # --- Notability ---

    daily_search_limit: int = Field(
        default=100,
        description="Reference-search queries allowed per UTC day, process-wide",
        ge=0,
    )
    max_references: int = Field(default=15, ge=1)
    max_citations: int = Field(default=5, ge=1, le=5)
    assessment_model: str = Field(default="gemini-2.0-flash", min_length=1)

    # --- Credentials ---

    gemini_api_key: str | None = Field(default=None)
    search_api_key: str | None = Field(default=None)
    search_engine_id: str | None = Field(default=None)

    telemetry_enabled: bool = Field(default=False)

    @field_validator("target_environment", mode="before")
    @classmethod
    def parse_environment(cls, v: Any) -> TargetEnvironment:
        """Accept enum values or case-insensitive strings ("prod" included)."""
        if isinstance(v, TargetEnvironment):
            return v
        if isinstance(v, str):
            normalized = v.strip().lower()
            if normalized in ("prod", "production"):
                return TargetEnvironment.PRODUCTION
            if normalized == "test":
                return TargetEnvironment.TEST
        raise ValueError(
            f"Invalid target_environment: {v}. Must be one of: test, production"
        )

    @field_validator("default_tier", mode="before")
    @classmethod
    def parse_tier(cls, v: Any) -> SubscriptionTier:
        if isinstance(v, SubscriptionTier):
            return v
        if isinstance(v, str):
            try:
                return SubscriptionTier(v.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Invalid default_tier: {v}. Must be one of: free, pro, agency")

    @model_validator(mode="after")
    def validate_search_credentials(self) -> "KgflowSettings":
        """Search credentials only make sense as a pair."""
        if bool(self.search_api_key) != bool(self.search_engine_id):
            raise ValueError(
                "search_api_key and search_engine_id must be provided together. "
                "Set KGFLOW_SEARCH_API_KEY and KGFLOW_SEARCH_ENGINE_ID, or neither."
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary of resolved values keyed by field name."""
        return {name: getattr(self, name) for name in type(self).model_fields}
