"""Configuration data types, following the resolve-once, freeze-then-flow pattern."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, NamedTuple

from kgflow.core.models import SubscriptionTier, TargetEnvironment

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_SECRET_FIELDS = ("gemini_api_key", "search_api_key")


@dataclass(frozen=True, slots=True)
class FrozenConfig:
    """Immutable configuration consumed by the orchestrator and engine."""

    timeout_budget_ms: int = 60_000
    crawl_budget_share: float = 0.6
    publish_timeout_ms: int = 30_000
    target_environment: TargetEnvironment = TargetEnvironment.TEST
    default_tier: SubscriptionTier = SubscriptionTier.PRO
    default_enrichment_level: int = 0
    daily_search_limit: int = 100
    max_references: int = 15
    max_citations: int = 5
    assessment_model: str = "gemini-2.0-flash"
    gemini_api_key: str | None = None
    search_api_key: str | None = None
    search_engine_id: str | None = None
    telemetry_enabled: bool = False

    def __repr__(self) -> str:
        """Repr with secrets redacted for safe logging."""
        parts = []
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if name in _SECRET_FIELDS and value:
                value = "[REDACTED]"
            parts.append(f"{name}={value!r}")
        return f"FrozenConfig({', '.join(parts)})"

    __str__ = __repr__


class ResolvedConfig(NamedTuple):
    """Validated, merged configuration plus the origin of each value."""

    values: Mapping[str, Any]
    origin: SourceMap

    def to_frozen(self) -> FrozenConfig:
        return FrozenConfig(**dict(self.values))

    def redacted(self) -> dict[str, Any]:
        """Values with secrets masked, for display."""
        return {
            k: ("[REDACTED]" if k in _SECRET_FIELDS and v else v)
            for k, v in self.values.items()
        }

    def __str__(self) -> str:
        return f"ResolvedConfig(values={self.redacted()!r}, origin={dict(self.origin)!r})"
