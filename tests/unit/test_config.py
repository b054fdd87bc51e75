"""Unit tests for configuration resolution.

These tests verify the core behaviors of the configuration module:
- Precedence of programmatic, environment, file and default values.
- Profiles loaded from pyproject.toml and the home file.
- Validation errors and secret redaction.
"""

import json

import pytest

from kgflow.config import (
    ConfigFileError,
    FrozenConfig,
    list_available_profiles,
    load_config,
    resolve_config,
)
from kgflow.config.introspection import get_config_info, main
from kgflow.core.exceptions import ConfigurationError
from kgflow.core.models import SubscriptionTier, TargetEnvironment

pytestmark = pytest.mark.unit

PYPROJECT = """
[tool.kgflow]
timeout_budget_ms = 45000
default_tier = "agency"

[tool.kgflow.profiles.fast]
timeout_budget_ms = 5000
daily_search_limit = 10
"""


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    (root / "pyproject.toml").write_text(PYPROJECT)
    return root


class TestPrecedence:
    def test_defaults(self, tmp_path):
        resolved = resolve_config(project_root=tmp_path)
        config = resolved.to_frozen()
        assert config == FrozenConfig()
        assert set(resolved.origin.values()) == {"default"}

    def test_environment_overrides_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KGFLOW_TIMEOUT_BUDGET_MS", "5000")
        monkeypatch.setenv("KGFLOW_TARGET_ENVIRONMENT", "prod")
        resolved = resolve_config(project_root=tmp_path)
        assert resolved.values["timeout_budget_ms"] == 5000
        assert resolved.values["target_environment"] is TargetEnvironment.PRODUCTION
        assert resolved.origin["timeout_budget_ms"] == "env"

    def test_programmatic_overrides_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KGFLOW_MAX_REFERENCES", "8")
        resolved = resolve_config({"max_references": 12}, project_root=tmp_path)
        assert resolved.values["max_references"] == 12
        assert resolved.origin["max_references"] == "programmatic"

    def test_unknown_programmatic_keys_ignored(self, tmp_path):
        resolved = resolve_config({"not_a_setting": 1}, project_root=tmp_path)
        assert "not_a_setting" not in resolved.values

    def test_project_file(self, project):
        resolved = resolve_config(project_root=project)
        assert resolved.values["timeout_budget_ms"] == 45000
        assert resolved.values["default_tier"] is SubscriptionTier.AGENCY
        assert resolved.origin["default_tier"] == "file"

    def test_environment_beats_project_file(self, project, monkeypatch):
        monkeypatch.setenv("KGFLOW_TIMEOUT_BUDGET_MS", "7000")
        assert resolve_config(project_root=project).values["timeout_budget_ms"] == 7000

    def test_load_config_shortcut(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        config = load_config(daily_search_limit=3)
        assert isinstance(config, FrozenConfig)
        assert config.daily_search_limit == 3


class TestProfiles:
    def test_project_profile(self, project):
        resolved = resolve_config(profile="fast", project_root=project)
        assert resolved.values["timeout_budget_ms"] == 5000
        assert resolved.values["daily_search_limit"] == 10
        # profile replaces the base section
        assert resolved.values["default_tier"] is SubscriptionTier.PRO

    def test_profile_from_environment(self, project, monkeypatch):
        monkeypatch.setenv("KGFLOW_PROFILE", "fast")
        assert resolve_config(project_root=project).values["daily_search_limit"] == 10

    def test_home_profile(self, tmp_path, monkeypatch):
        home = tmp_path / "kgflow.toml"
        home.write_text("max_citations = 3\n\n[profiles.strict]\nmax_citations = 1\n")
        monkeypatch.setenv("KGFLOW_CONFIG_HOME", str(home))
        assert resolve_config(project_root=tmp_path).values["max_citations"] == 3
        strict = resolve_config(profile="strict", project_root=tmp_path)
        assert strict.values["max_citations"] == 1

    def test_list_profiles(self, project):
        assert list_available_profiles(project) == {"project": ["fast"], "home": []}


class TestValidation:
    def test_invalid_value_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KGFLOW_CRAWL_BUDGET_SHARE", "1.5")
        with pytest.raises(ConfigurationError):
            resolve_config(project_root=tmp_path)

    def test_search_credentials_must_be_paired(self, tmp_path):
        with pytest.raises(ConfigurationError):
            resolve_config({"search_api_key": "k"}, project_root=tmp_path)

    def test_invalid_environment_name(self, tmp_path):
        with pytest.raises(ConfigurationError):
            resolve_config({"target_environment": "staging"}, project_root=tmp_path)

    def test_malformed_project_file(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[tool.kgflow\n")
        with pytest.raises(ConfigFileError):
            resolve_config(project_root=tmp_path)


class TestRedaction:
    def test_frozen_config_hides_secrets(self):
        config = FrozenConfig(gemini_api_key="sk-secret", search_api_key="also-secret")
        assert "sk-secret" not in repr(config)
        assert "also-secret" not in str(config)
        assert "[REDACTED]" in repr(config)

    def test_resolved_config_hides_secrets(self, tmp_path):
        resolved = resolve_config({"gemini_api_key": "sk-secret"}, project_root=tmp_path)
        assert "sk-secret" not in str(resolved)
        assert resolved.redacted()["gemini_api_key"] == "[REDACTED]"


class TestIntrospection:
    def test_config_info(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("KGFLOW_GEMINI_API_KEY", "sk-secret")
        info = get_config_info()
        assert info["status"] == "valid"
        assert info["config"]["gemini_api_key"] == "[REDACTED]"
        assert info["sources"]["gemini_api_key"] == "env"
        assert any("search credentials" in w for w in info["warnings"])

    def test_invalid_config_info(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("KGFLOW_DAILY_SEARCH_LIMIT", "-4")
        assert get_config_info()["status"] == "invalid"

    def test_cli_json(self, monkeypatch, tmp_path, capsys):
        monkeypatch.chdir(tmp_path)
        main(["--json"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["config"]["target_environment"] == "test"

    def test_cli_check_exit_code(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit) as exc:
            main(["--check"])
        assert exc.value.code == 0
