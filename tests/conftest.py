"""
Pytest configuration and shared fixtures for gitopskit tests.
"""

import os
from pathlib import Path

import pytest

from tests.utils.helpers import write_fake_gitops

IS_WINDOWS = os.name == "nt"

RELEASE_ENV_VARS = (
    "GITOPSKIT_HOME",
    "RUNNER_TEMP",
    "RUNNER_TOOL_CACHE",
    "GITHUB_TOKEN",
    "GITHUB_OUTPUT",
    "GITHUB_PATH",
)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )
    config.addinivalue_line(
        "markers", "posix: marks tests that execute shell-script fake binaries"
    )


def pytest_runtest_setup(item):
    """Skip tests that run shell-script binaries on Windows."""
    if "posix" in item.keywords and IS_WINDOWS:
        pytest.skip("requires a POSIX shell")


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate tests from runner variables and any local gitopskit.yaml."""
    for name in RELEASE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("INPUT_"):
            monkeypatch.delenv(name, raising=False)

    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Working base directory of one acquisition."""
    return tmp_path / "gitops-cli"


@pytest.fixture
def tool_cache_dir(tmp_path: Path) -> Path:
    """Root of the local tool cache."""
    return tmp_path / "tool-cache"


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Scratch directory for temporary downloads."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return scratch


@pytest.fixture
def fake_gitops(tmp_path: Path):
    """Factory writing an executable that reports a given version."""

    def factory(version: str = "2.2.2", name: str = "gitops") -> Path:
        return write_fake_gitops(tmp_path / "fakes" / version / name, version)

    return factory
