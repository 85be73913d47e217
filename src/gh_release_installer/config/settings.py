"""Project configuration.

The configuration is assembled once at process entry and then passed
explicitly to every component. Sources, lowest precedence first:

1. Built-in defaults (:mod:`gh_release_installer.constants`)
2. ``[project]`` section of the INI settings file
3. Environment variables (``OWNER``, ``REPO``, ``FORMAT``, ...)
4. Command-line overrides (``-b bindir``)

A value that is set but empty falls back to the lower-precedence source.
The name and checksum templates are the exception: an empty template is
honored as set, and then rejected because it cannot name a file. An unset
or empty ``BINARY`` means the project name.
"""

from __future__ import annotations

import configparser
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from gh_release_installer.config.paths import Paths
from gh_release_installer.constants import (
    DEFAULT_CHECKSUM_FALLBACKS,
    DEFAULT_CHECKSUM_TEMPLATE,
    DEFAULT_FORMAT,
    DEFAULT_GITHUB_URL,
    DEFAULT_NAME_TEMPLATE,
    DEFAULT_OWNER,
    DEFAULT_PROJECT_NAME,
    DEFAULT_REPO,
    DEFAULT_SUPPORTED_PLATFORMS,
    ENV_BINARY,
    ENV_BINDIR,
    ENV_CACHE_ROOT,
    ENV_CHECKSUM_FALLBACKS,
    ENV_CHECKSUM_TEMPLATE,
    ENV_CONFIG_FILE,
    ENV_FORMAT,
    ENV_GITHUB_TOKEN,
    ENV_GITHUB_URL,
    ENV_LOG_FILE,
    ENV_NAME_TEMPLATE,
    ENV_OWNER,
    ENV_PROJECT_NAME,
    ENV_REPO,
    ENV_SUPPORTED_PLATFORMS,
    SECTION_PROJECT,
)
from gh_release_installer.domain.platform import Platform, parse_platforms
from gh_release_installer.exceptions import ConfigurationError
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)

# settings.conf key -> environment variable
_KEY_TO_ENV: dict[str, str] = {
    "owner": ENV_OWNER,
    "repo": ENV_REPO,
    "project_name": ENV_PROJECT_NAME,
    "binary": ENV_BINARY,
    "format": ENV_FORMAT,
    "name_template": ENV_NAME_TEMPLATE,
    "checksum_template": ENV_CHECKSUM_TEMPLATE,
    "checksum_fallbacks": ENV_CHECKSUM_FALLBACKS,
    "supported_platforms": ENV_SUPPORTED_PLATFORMS,
    "cache_root": ENV_CACHE_ROOT,
    "bindir": ENV_BINDIR,
    "github_url": ENV_GITHUB_URL,
    "log_file": ENV_LOG_FILE,
}

# Keys whose empty value is kept instead of falling back
_EMPTY_HONORED: frozenset[str] = frozenset(
    {"name_template", "checksum_template"}
)


@dataclass(frozen=True)
class ProjectConfig:
    """Immutable, process-lifetime project configuration."""

    owner: str
    repo: str
    project_name: str
    binary_name: str
    archive_format: str
    name_template: str
    checksum_template: str
    checksum_fallbacks: tuple[str, ...]
    supported_platforms: tuple[Platform, ...]
    cache_root: Path
    install_dir: Path
    github_url: str = DEFAULT_GITHUB_URL
    github_token: str | None = field(default=None, repr=False)
    log_file: Path | None = None

    @property
    def owner_repo(self) -> str:
        """``owner/repo`` slug used in URLs and log messages."""
        return f"{self.owner}/{self.repo}"


def _defaults() -> dict[str, str]:
    return {
        "owner": DEFAULT_OWNER,
        "repo": DEFAULT_REPO,
        "project_name": DEFAULT_PROJECT_NAME,
        "binary": "",
        "format": DEFAULT_FORMAT,
        "name_template": DEFAULT_NAME_TEMPLATE,
        "checksum_template": DEFAULT_CHECKSUM_TEMPLATE,
        "checksum_fallbacks": " ".join(DEFAULT_CHECKSUM_FALLBACKS),
        "supported_platforms": " ".join(DEFAULT_SUPPORTED_PLATFORMS),
        "cache_root": str(Paths.default_cache_root()),
        "bindir": str(Paths.default_install_dir()),
        "github_url": DEFAULT_GITHUB_URL,
        "log_file": "",
    }


def _merge(values: dict[str, str], updates: Mapping[str, str]) -> None:
    for key, value in updates.items():
        if value.strip() or key in _EMPTY_HONORED:
            values[key] = value


def read_settings_file(settings_file: Path) -> dict[str, str]:
    """Read the ``[project]`` section of an INI settings file.

    Args:
        settings_file: Path to the settings file

    Returns:
        Mapping of known keys found in the file (missing file -> empty)

    Raises:
        ConfigurationError: If the file exists but cannot be parsed.

    """
    if not settings_file.is_file():
        return {}

    parser = configparser.ConfigParser(
        inline_comment_prefixes=("#", ";"),
        interpolation=None,
    )
    try:
        parser.read(settings_file, encoding="utf-8")
    except configparser.Error as e:
        msg = f"cannot parse settings file: {e}"
        raise ConfigurationError(msg, str(settings_file)) from e

    if not parser.has_section(SECTION_PROJECT):
        logger.debug("No [%s] section in %s", SECTION_PROJECT, settings_file)
        return {}

    values: dict[str, str] = {}
    for key, value in parser.items(SECTION_PROJECT):
        if key in _KEY_TO_ENV:
            values[key] = value.strip()
        else:
            logger.warning(
                "Ignoring unknown setting '%s' in %s", key, settings_file
            )
    return values


def load_config(
    environ: Mapping[str, str],
    settings_file: Path | None = None,
    install_dir: str | None = None,
    token_lookup: Callable[[], str | None] | None = None,
) -> ProjectConfig:
    """Build the project configuration.

    Args:
        environ: Environment mapping (``os.environ`` at the entry point)
        settings_file: INI file to read; defaults to ``GHREL_CONFIG`` or
            ``~/.config/gh-release-installer/settings.conf``
        install_dir: ``-b`` override for the installation directory
        token_lookup: Optional callable returning a stored GitHub token,
            consulted when ``GITHUB_TOKEN`` is unset

    Returns:
        Frozen project configuration

    Raises:
        ConfigurationError: If a value is invalid.

    """
    if settings_file is None:
        configured = environ.get(ENV_CONFIG_FILE)
        settings_file = (
            Paths.expand_path(configured)
            if configured
            else Paths.SETTINGS_FILE
        )

    values = _defaults()
    _merge(values, read_settings_file(settings_file))
    _merge(
        values,
        {
            key: environ[env_name]
            for key, env_name in _KEY_TO_ENV.items()
            if env_name in environ
        },
    )
    if install_dir:
        values["bindir"] = install_dir

    for key in sorted(_EMPTY_HONORED):
        if not values[key].strip():
            msg = f"{_KEY_TO_ENV[key]} must not be empty"
            raise ConfigurationError(msg)

    token = environ.get(ENV_GITHUB_TOKEN) or None
    if token is None and token_lookup is not None:
        token = token_lookup()

    log_file = values["log_file"].strip()
    return ProjectConfig(
        owner=values["owner"].strip(),
        repo=values["repo"].strip(),
        project_name=values["project_name"].strip(),
        binary_name=values["binary"].strip() or values["project_name"].strip(),
        archive_format=values["format"].strip().lower(),
        name_template=values["name_template"],
        checksum_template=values["checksum_template"],
        checksum_fallbacks=tuple(values["checksum_fallbacks"].split()),
        supported_platforms=parse_platforms(values["supported_platforms"]),
        cache_root=Paths.expand_path(values["cache_root"]),
        install_dir=Paths.expand_path(values["bindir"]),
        github_url=(
            values["github_url"].strip().rstrip("/") or DEFAULT_GITHUB_URL
        ),
        github_token=token,
        log_file=Paths.expand_path(log_file) if log_file else None,
    )
