"""Public API for the configuration system."""

import os
from pathlib import Path
from typing import Any

from .resolver import PROFILE_ENV_VAR, ConfigResolver
from .types import FrozenConfig, ResolvedConfig

_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    profile: str | None = None,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Precedence: Programmatic > Environment > Project file > Home file > Defaults.

    Args:
        programmatic: Overrides with the highest precedence. Unknown keys
            are ignored.
        profile: Profile name to load from configuration files. Defaults to
            the ``KGFLOW_PROFILE`` environment variable.
        project_root: Directory to start the pyproject.toml search from.

    Raises:
        ConfigurationError: If the merged configuration is invalid.

    Example:
        config = resolve_config({"timeout_budget_ms": 30_000}).to_frozen()
    """
    return _resolver.resolve(
        programmatic=programmatic, profile=profile, project_root=project_root
    )


def load_config(**overrides: Any) -> FrozenConfig:
    """Shortcut for ``resolve_config(overrides).to_frozen()``."""
    return resolve_config(overrides or None).to_frozen()


def list_available_profiles(project_root: Path | None = None) -> dict[str, list[str]]:
    return _resolver.list_available_profiles(project_root)


def get_effective_profile() -> str | None:
    return os.getenv(PROFILE_ENV_VAR)
