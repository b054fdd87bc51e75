"""
Global test configuration: environment isolation, markers and shared fixtures.
"""

import logging
import os

import pytest

from kgflow.config import FrozenConfig
from kgflow.core.types import Location, Reference, SourceData
from tests.helpers import (
    FakeAssessor,
    FakeCrawler,
    FakeFingerprinter,
    FakePublisher,
    FakeSearch,
)


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_kgflow_env(request, monkeypatch):
    """Ensure a clean KGFLOW_* environment for each test.

    Escape hatch: mark a test with @pytest.mark.allow_env_pollution to keep
    the current environment unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("KGFLOW_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def neutral_home_config(request, monkeypatch, tmp_path):
    """Point the home-config path at an isolated temp file.

    Prevents reading a developer's real ~/.config/kgflow.toml during tests.
    """
    if request.node.get_closest_marker("allow_real_home_config"):
        return
    fake_home = tmp_path / "home_config_isolated" / "kgflow.toml"
    fake_home.parent.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("KGFLOW_CONFIG_HOME", str(fake_home))


@pytest.fixture(autouse=True)
def quiet_third_party_logs():
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Component integration tests with fake collaborators",
        "allow_env_pollution: Keep KGFLOW_* environment variables for this test",
        "allow_real_home_config: Read the real home configuration file",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Core Fixtures ---


@pytest.fixture
def config() -> FrozenConfig:
    """Defaults with budgets short enough for timeout tests to finish quickly."""
    return FrozenConfig(
        timeout_budget_ms=2_000,
        publish_timeout_ms=2_000,
        daily_search_limit=100,
    )


@pytest.fixture
def source_data() -> SourceData:
    return SourceData(
        name="Brightside Dental 1763324055284",
        description="Family dental practice in Providence",
        phone="+1-401-555-0100",
        email="hello@brightsidedental.com",
        location=Location(
            city="Providence",
            state="RI",
            country="USA",
            address="120 Hope Street, Providence, RI",
            lat=41.8240,
            lng=-71.4128,
        ),
        social_links={"twitter": "https://twitter.com/brightsidedental"},
    )


@pytest.fixture
def crawler(source_data) -> FakeCrawler:
    return FakeCrawler(source_data)


@pytest.fixture
def fingerprinter() -> FakeFingerprinter:
    return FakeFingerprinter()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def notable_references() -> list[Reference]:
    return [
        Reference(
            url="https://www.ri.gov/licenses/brightside",
            title="RI dental license registry",
            snippet="Brightside Dental, licensed practice",
            source_domain="ri.gov",
        ),
        Reference(
            url="https://www.yelp.com/biz/brightside-dental",
            title="Brightside Dental - Yelp",
            snippet="42 reviews",
            source_domain="yelp.com",
        ),
    ]


@pytest.fixture
def search(notable_references) -> FakeSearch:
    return FakeSearch(notable_references)


@pytest.fixture
def assessor() -> FakeAssessor:
    """An assessor whose responses are unusable, so the heuristic decides."""
    return FakeAssessor("not json")
