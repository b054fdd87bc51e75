"""Configuration for the CFP pipeline.

Values are resolved once from defaults, ``~/.config/kgflow.toml``,
``[tool.kgflow]`` in pyproject.toml, ``KGFLOW_*`` environment variables and
programmatic overrides, then frozen and passed explicitly to the
orchestrator.
"""

from .api import get_effective_profile, list_available_profiles, load_config, resolve_config
from .file_loader import ConfigFileError
from .schema import KgflowSettings
from .types import FrozenConfig, ResolvedConfig

__all__ = [
    "ConfigFileError",
    "FrozenConfig",
    "KgflowSettings",
    "ResolvedConfig",
    "get_effective_profile",
    "list_available_profiles",
    "load_config",
    "resolve_config",
]
