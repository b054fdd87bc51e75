"""File-based configuration loading with profile support.

Configuration can live in a project's ``pyproject.toml`` under
``[tool.kgflow]`` or in ``~/.config/kgflow.toml``. Both support named
profiles (``[tool.kgflow.profiles.<name>]`` and ``[profiles.<name>]``).
"""

import os
from pathlib import Path
import tomllib
from typing import Any

from kgflow.core.exceptions import ConfigurationError

HOME_CONFIG_ENV_VAR = "KGFLOW_CONFIG_HOME"


class ConfigFileError(ConfigurationError):
    """Raised when configuration file loading fails."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open(mode="rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, f"Failed to parse TOML: {e}", cause=e) from e


def _select_profile(
    section: dict[str, Any], profile: str | None, path: Path
) -> dict[str, Any]:
    if profile:
        profiles = section.get("profiles", {})
        if profile not in profiles:
            available = list(profiles.keys()) if profiles else []
            raise ConfigFileError(
                path, f"Profile '{profile}' not found. Available profiles: {available}"
            )
        return dict(profiles[profile])
    config = dict(section)
    config.pop("profiles", None)
    return config


class FileConfigLoader:
    """Loads configuration from TOML files with profile support."""

    def load_project_config(
        self, project_root: Path | None = None, profile: str | None = None
    ) -> dict[str, Any]:
        """Load ``[tool.kgflow]`` (or one of its profiles) from pyproject.toml.

        Returns an empty dict when no pyproject.toml or no kgflow section
        exists.

        Raises:
            ConfigFileError: If the file exists but cannot be parsed, or the
                requested profile is missing.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if not pyproject_path:
            return {}
        section = _read_toml(pyproject_path).get("tool", {}).get("kgflow", {})
        if not section:
            return {}
        return _select_profile(section, profile, pyproject_path)

    def load_home_config(self, profile: str | None = None) -> dict[str, Any]:
        """Load configuration from ``~/.config/kgflow.toml``."""
        path = self._get_home_config_path()
        if not path.exists():
            return {}
        return _select_profile(_read_toml(path), profile, path)

    def list_available_profiles(
        self, project_root: Path | None = None
    ) -> dict[str, list[str]]:
        """Profile names keyed by ``project`` and ``home``. Parse errors are ignored."""
        profiles: dict[str, list[str]] = {"project": [], "home": []}

        pyproject_path = self._find_pyproject_toml(project_root)
        if pyproject_path:
            try:
                section = _read_toml(pyproject_path).get("tool", {}).get("kgflow", {})
                profiles["project"] = list(section.get("profiles", {}).keys())
            except ConfigFileError:
                pass

        home_path = self._get_home_config_path()
        if home_path.exists():
            try:
                profiles["home"] = list(_read_toml(home_path).get("profiles", {}).keys())
            except ConfigFileError:
                pass

        return profiles

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Search up the directory tree for pyproject.toml."""
        current = Path(start_dir if start_dir is not None else Path.cwd()).resolve()
        while current != current.parent:
            candidate = current / "pyproject.toml"
            if candidate.exists():
                return candidate
            current = current.parent
        return None

    def _get_home_config_path(self) -> Path:
        """``KGFLOW_CONFIG_HOME`` overrides the default location."""
        override = os.getenv(HOME_CONFIG_ENV_VAR)
        if override:
            return Path(override).expanduser()
        return Path.home() / ".config" / "kgflow.toml"
