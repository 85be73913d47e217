"""Pytest configuration and fixtures for gh-release-installer tests."""

import logging
from pathlib import Path

import pytest

from gh_release_installer.config import ProjectConfig
from gh_release_installer.domain.platform import Platform
from tests.helpers import BASE_URL, FakeFetcher


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for all loggers during tests.

    This allows pytest's caplog fixture to capture logs from all loggers,
    even those created with propagate=False in production code.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("gh_release_installer"):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logger = logging.getLogger(name)
        logger.propagate = propagate_value


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    """Provide an empty FakeFetcher."""
    return FakeFetcher()


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for ProjectConfig instances rooted in ``tmp_path``."""

    def _make(**overrides) -> ProjectConfig:
        values = {
            "owner": "acme",
            "repo": "widget",
            "project_name": "widget",
            "binary_name": "widget",
            "archive_format": "tar.gz",
            "name_template": "{project}-{tag}-{os}-{arch}",
            "checksum_template": "{asset}.sha256",
            "checksum_fallbacks": ("SHA256SUMS", "checksums.txt"),
            "supported_platforms": (
                Platform("linux", "amd64"),
                Platform("linux", "arm64"),
                Platform("darwin", "arm64"),
            ),
            "cache_root": tmp_path / "cache",
            "install_dir": tmp_path / "bin",
            "github_url": BASE_URL,
        }
        values.update(overrides)
        return ProjectConfig(**values)

    return _make
