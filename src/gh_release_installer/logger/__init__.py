"""Logging utilities for gh-release-installer.

This package provides structured logging with:
- Colored console output (stderr) with ANSI color codes
- Optional file rotation using RotatingFileHandler
- Queue-based handler dispatch via QueueHandler/QueueListener
- Hierarchical logger naming (e.g., gh_release_installer.core.deploy)

Usage:
    >>> from gh_release_installer.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("downloading asset: %s", filename)

RULES FOR CONTRIBUTORS:
    1. Always use: logger = get_logger(__name__)
    2. Never call logging.basicConfig()
    3. Never attach handlers to child loggers
    4. Use %-formatting in log calls, never f-strings
"""

from pathlib import Path

from gh_release_installer.logger.config import (
    apply_log_settings as _apply_settings,
)
from gh_release_installer.logger.config import (
    load_log_settings,
)
from gh_release_installer.logger.formatters import (
    ColoredConsoleFormatter,
    HybridConsoleFormatter,
    SimpleConsoleFormatter,
)
from gh_release_installer.logger.handlers import LoggingConfigurationError
from gh_release_installer.logger.logger import (
    clear_logger_state,
    flush_all_handlers,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from gh_release_installer.logger.state import _state, get_state

__all__ = [
    "ColoredConsoleFormatter",
    "HybridConsoleFormatter",
    "LoggingConfigurationError",
    "SimpleConsoleFormatter",
    "_state",  # For testing only
    "apply_log_settings",
    "clear_logger_state",
    "flush_all_handlers",
    "get_logger",
    "load_log_settings",
    "setup_logging",
    "shutdown_logging",
]


def apply_log_settings(
    *, debug: bool = False, log_file: Path | None = None
) -> None:
    """Apply the run's logging settings to the already-initialized root.

    Args:
        debug: Raise the console level to DEBUG (the ``-d`` flag)
        log_file: Optional path of a rotating log file

    """
    state = get_state()
    if not state.root_initialized:
        setup_logging()
    console_level = "DEBUG" if debug else load_log_settings()[0]
    _apply_settings(state, console_level, log_file)
