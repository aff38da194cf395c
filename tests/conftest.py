"""Shared fixtures for the grpr test suite."""

from pathlib import Path

import pytest

from grpr.config.schema import LoggingConfig
from grpr.logging import configure_logging

GRPR_ENV_VARS = (
    "GRPR_TOOL",
    "GRPR_ROOT",
    "GRPR_MARKERS",
    "GRPR_LOG_LEVEL",
    "GRPR_LOG_FILE",
    "GRPR_VERBOSE",
    "GRPR_QUIET",
    "GRPR_REPORT_FILE",
)


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch):
    """Silence console logging and isolate tests from GRPR_* variables."""
    for name in GRPR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    configure_logging(LoggingConfig(quiet=True))
    yield


def make_repo(path: Path, marker: str = ".git") -> Path:
    """Create a directory that looks like a repository root."""
    (path / marker).mkdir(parents=True)
    return path


@pytest.fixture
def scenario_tree(tmp_path: Path) -> Path:
    """root/{A(repo), B/{C(repo), D}}."""
    root = tmp_path / "root"
    make_repo(root / "A")
    make_repo(root / "B" / "C")
    (root / "B" / "D").mkdir(parents=True)
    return root
