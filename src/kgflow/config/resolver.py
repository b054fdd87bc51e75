"""Configuration resolution with precedence handling.

Sources are merged in this order, later winning:
Defaults < Home file < Project file < Environment < Programmatic
"""

import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kgflow.core.exceptions import ConfigurationError

from .file_loader import ConfigFileError, FileConfigLoader
from .schema import KgflowSettings
from .types import ConfigOrigin, ResolvedConfig

ENV_PREFIX = "KGFLOW_"
PROFILE_ENV_VAR = "KGFLOW_PROFILE"


def env_var_name(field: str) -> str:
    return f"{ENV_PREFIX}{field.upper()}"


class ConfigResolver:
    """Merges configuration from every source and records where each value came from."""

    def __init__(self) -> None:
        self.file_loader = FileConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        profile: str | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Raises:
            ConfigurationError: If the merged values fail validation.
            ConfigFileError: If the project file is malformed.
        """
        if profile is None:
            profile = os.getenv(PROFILE_ENV_VAR)

        merged: dict[str, Any] = {}
        origin: dict[str, ConfigOrigin] = {}

        def apply(values: dict[str, Any], source: ConfigOrigin) -> None:
            for field, value in values.items():
                if field in merged:  # Unknown keys are ignored
                    merged[field] = value
                    origin[field] = source

        for field, info in KgflowSettings.model_fields.items():
            merged[field] = info.get_default(call_default_factory=True)
            origin[field] = "default"

        try:
            apply(self.file_loader.load_home_config(profile=profile), "file")
        except ConfigFileError:
            # A broken home file never blocks a run
            pass

        try:
            apply(
                self.file_loader.load_project_config(
                    project_root=project_root, profile=profile
                ),
                "file",
            )
        except ConfigFileError:
            if profile is None:
                raise

        apply(self.load_env_config(), "env")

        if programmatic:
            apply(programmatic, "programmatic")

        try:
            settings = KgflowSettings(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(values=settings.to_dict(), origin=origin)

    def load_env_config(self) -> dict[str, Any]:
        """Raw values of the ``KGFLOW_*`` variables that are actually set."""
        return {
            field: os.environ[env_var_name(field)]
            for field in KgflowSettings.model_fields
            if env_var_name(field) in os.environ
        }

    def list_available_profiles(
        self, project_root: Path | None = None
    ) -> dict[str, list[str]]:
        return self.file_loader.list_available_profiles(project_root)
