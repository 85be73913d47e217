"""Configuration loading and updating for logging system.

The logger is bootstrapped with environment defaults the first time a module
asks for a logger; the CLI then applies the run's settings (``-d`` and the
configured log file) through :func:`apply_log_settings`.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from gh_release_installer.constants import (
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    ENV_LOG_LEVEL,
)
from gh_release_installer.logger.handlers import (
    create_file_handler,
    start_listener,
)

if TYPE_CHECKING:
    from gh_release_installer.logger.state import _LoggerState


def load_log_settings() -> tuple[str, str]:
    """Load bootstrap console and file levels.

    Environment Variable Override:
        LOG_LEVEL: Overrides the console log level. Primarily a testing aid;
        the ``-d`` flag is the user-facing way to enable debug output.

    Returns:
        Tuple of (console_level, file_level)

    """
    console_level = os.getenv(ENV_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(console_level), int):
        console_level = DEFAULT_CONSOLE_LOG_LEVEL
    return console_level, DEFAULT_LOG_LEVEL


def apply_log_settings(
    state: "_LoggerState",
    console_level: str,
    log_file: Path | None = None,
) -> None:
    """Update handler levels and attach a file handler when requested.

    Only the console level changes for existing handlers. When ``log_file``
    is given and no file handler exists yet, the listener is restarted with
    the extra handler so records keep flowing through the same queue.

    Args:
        state: Logger state object (from logger.state module)
        console_level: New console level name
        log_file: Optional log file path

    """
    with state.lock:
        listener = state.queue_listener
        if listener is None:
            return

        level = getattr(logging, console_level.upper(), logging.INFO)
        handlers = list(listener.handlers)
        has_file = False
        for handler in handlers:
            if isinstance(handler, RotatingFileHandler):
                has_file = True
            elif isinstance(handler, logging.StreamHandler):
                handler.setLevel(level)

        if log_file is not None and not has_file:
            _, file_level = load_log_settings()
            handlers.append(create_file_handler(log_file, file_level))
            listener.stop()
            start_listener(state, handlers)
