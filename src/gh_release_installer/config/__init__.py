"""Configuration package for gh-release-installer."""

from gh_release_installer.config.paths import Paths
from gh_release_installer.config.settings import (
    ProjectConfig,
    load_config,
    read_settings_file,
)

__all__ = ["Paths", "ProjectConfig", "load_config", "read_settings_file"]
