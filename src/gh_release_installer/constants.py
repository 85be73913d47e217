"""Centralized constants module for gh-release-installer.

This module serves as the single source of truth for all shared constants
across the gh-release-installer codebase. Constants are organized by logical
categories and use typing.Final annotations to ensure immutability.

Usage:
    from gh_release_installer.constants import DEFAULT_NAME_TEMPLATE
"""

from typing import Final

# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "gh-release-installer"

# Logger namespace; every module logger is a child of this one
LOGGER_NAME: Final[str] = "gh_release_installer"

# Settings file (INI) looked up under ~/.config/<APP_NAME>/
CONFIG_FILE_NAME: Final[str] = "settings.conf"
CONFIG_DIR_NAME: Final[str] = ".config"
SECTION_PROJECT: Final[str] = "project"

# Keyring service/username used for the optional GitHub token
KEYRING_SERVICE: Final[str] = APP_NAME
KEYRING_USERNAME: Final[str] = "github_token"

# =============================================================================
# Project Defaults (overridable through settings file and environment)
# =============================================================================

DEFAULT_OWNER: Final[str] = "example"
DEFAULT_REPO: Final[str] = "example-repo"
DEFAULT_PROJECT_NAME: Final[str] = "example"
DEFAULT_FORMAT: Final[str] = "tar.gz"

# Placeholders: {project}, {tag}, {os}, {arch}
DEFAULT_NAME_TEMPLATE: Final[str] = "{project}-{tag}-{os}-{arch}"

# Placeholders: {asset}, {ext}, {project}, {tag}, {os}, {arch}
DEFAULT_CHECKSUM_TEMPLATE: Final[str] = "{asset}.sha256"

DEFAULT_CHECKSUM_FALLBACKS: Final[tuple[str, ...]] = (
    "SHA256SUMS",
    "SHA256SUMS.txt",
    "checksums.txt",
    "checksums.sha256",
)

DEFAULT_SUPPORTED_PLATFORMS: Final[tuple[str, ...]] = (
    "darwin/amd64",
    "darwin/arm64",
    "linux/amd64",
    "linux/arm64",
)

DEFAULT_GITHUB_URL: Final[str] = "https://github.com"
DEFAULT_CACHE_DIR_NAME: Final[str] = "gh-rel-installer-cache"
DEFAULT_INSTALL_DIR_NAME: Final[str] = ".bin"

# Environment variable names
ENV_OWNER: Final[str] = "OWNER"
ENV_REPO: Final[str] = "REPO"
ENV_PROJECT_NAME: Final[str] = "PROJECT_NAME"
ENV_BINARY: Final[str] = "BINARY"
ENV_FORMAT: Final[str] = "FORMAT"
ENV_NAME_TEMPLATE: Final[str] = "NAME_TEMPLATE"
ENV_CHECKSUM_TEMPLATE: Final[str] = "CHECKSUM_TEMPLATE"
ENV_CHECKSUM_FALLBACKS: Final[str] = "CHECKSUM_FALLBACKS"
ENV_SUPPORTED_PLATFORMS: Final[str] = "SUPPORTED_PLATFORMS"
ENV_CACHE_ROOT: Final[str] = "CACHE_ROOT"
ENV_BINDIR: Final[str] = "BINDIR"
ENV_GITHUB_URL: Final[str] = "GITHUB_URL"
ENV_GITHUB_TOKEN: Final[str] = "GITHUB_TOKEN"
ENV_LOG_FILE: Final[str] = "LOG_FILE"
ENV_LOG_LEVEL: Final[str] = "LOG_LEVEL"
ENV_CONFIG_FILE: Final[str] = "GHREL_CONFIG"

# =============================================================================
# Asset Format Constants
# =============================================================================

ARCHIVE_FORMATS: Final[tuple[str, ...]] = ("tar.gz", "tgz", "tar", "zip")
RAW_FORMATS: Final[tuple[str, ...]] = ("bin", "raw")

# Extension used in checksum templates for raw executables
RAW_EXTENSION: Final[str] = "bin"

# =============================================================================
# Checksum Constants
# =============================================================================

# Alternate per-asset checksum templates tried after the configured one
ALT_CHECKSUM_TEMPLATES: Final[tuple[str, ...]] = (
    "{asset}.sha256",
    "{asset}.{ext}.sha256",
)

# Smallest plausible checksum source (a SHA-256 hex digest is 64 chars)
MIN_CHECKSUM_SOURCE_BYTES: Final[int] = 32

HASH_CHUNK_SIZE: Final[int] = 8192

# =============================================================================
# Cache Constants
# =============================================================================

CACHE_CHECKSUM_FILE: Final[str] = "checksums.txt"
CACHE_WITNESS_FILE: Final[str] = ".witness.json"
CACHE_EXTRACT_DIR: Final[str] = "extracted"

# =============================================================================
# Network Constants
# =============================================================================

DOWNLOAD_CHUNK_SIZE: Final[int] = 8192
METADATA_ACCEPT_HEADER: Final[str] = "application/json"

# =============================================================================
# Launch Constants
# =============================================================================

TTY_DEVICE: Final[str] = "/dev/tty"

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_OK: Final[int] = 0
EXIT_FAILURE: Final[int] = 1
EXIT_USAGE: Final[int] = 2

# =============================================================================
# Logging Constants
# =============================================================================

DEFAULT_LOG_LEVEL: Final[str] = "DEBUG"
DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "INFO"

LOG_ROTATION_THRESHOLD_BYTES: Final[int] = 1024 * 1024  # 1 MB
LOG_BACKUP_COUNT: Final[int] = 3

LOG_CONSOLE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}
