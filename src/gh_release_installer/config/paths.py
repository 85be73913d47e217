"""Default filesystem locations for gh-release-installer."""

import os
import tempfile
from pathlib import Path

from gh_release_installer.constants import (
    APP_NAME,
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CACHE_DIR_NAME,
    DEFAULT_INSTALL_DIR_NAME,
)


class Paths:
    """Application paths and directory structure."""

    HOME_DIR = Path.home()
    CONFIG_DIR = HOME_DIR / CONFIG_DIR_NAME / APP_NAME
    SETTINGS_FILE = CONFIG_DIR / CONFIG_FILE_NAME

    @classmethod
    def default_install_dir(cls) -> Path:
        """User-specific binaries directory (``~/.bin``)."""
        return cls.HOME_DIR / DEFAULT_INSTALL_DIR_NAME

    @staticmethod
    def default_cache_root() -> Path:
        """Launch-mode cache root under the system temp directory."""
        return Path(tempfile.gettempdir()) / DEFAULT_CACHE_DIR_NAME

    @staticmethod
    def expand_path(path_str: str) -> Path:
        """Expand ``~`` and environment variables in a configured path."""
        return Path(os.path.expandvars(path_str)).expanduser()
