"""Handler creation and management for logging system.

- Console handler with hybrid formatting (plain INFO, structured otherwise)
- Optional rotating file handler
- Root logger setup with QueueListener

Console output goes to stderr: in launch mode the installer shares its
terminal with the tool it replaces itself with, and stdout belongs to that
tool.
"""

import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from gh_release_installer.constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_DATE_FORMAT,
    LOG_CONSOLE_FORMAT,
    LOG_FILE_DATE_FORMAT,
    LOG_FILE_FORMAT,
    LOG_ROTATION_THRESHOLD_BYTES,
    LOGGER_NAME,
)
from gh_release_installer.logger.formatters import HybridConsoleFormatter


class LoggingConfigurationError(Exception):
    """Error in logging configuration."""


def create_console_handler(console_level: str) -> logging.StreamHandler:
    """Create and configure console handler with hybrid formatting.

    Args:
        console_level: Log level for console (e.g., "DEBUG", "INFO")

    Returns:
        Configured StreamHandler for console output

    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        HybridConsoleFormatter(
            LOG_CONSOLE_FORMAT,
            datefmt=LOG_CONSOLE_DATE_FORMAT,
        )
    )
    console_handler.setLevel(getattr(logging, console_level, logging.INFO))
    return console_handler


def create_file_handler(
    log_file: Path, file_level: str
) -> RotatingFileHandler:
    """Create and configure rotating file handler.

    Args:
        log_file: Path to log file
        file_level: Log level for file (e.g., "DEBUG", "INFO")

    Returns:
        Configured RotatingFileHandler

    Raises:
        LoggingConfigurationError: If file handler creation fails

    """
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=LOG_ROTATION_THRESHOLD_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter(
                LOG_FILE_FORMAT,
                datefmt=LOG_FILE_DATE_FORMAT,
            )
        )
        file_handler.setLevel(getattr(logging, file_level, logging.DEBUG))
    except OSError as e:
        msg = f"Failed to setup file logging: {e}"
        raise LoggingConfigurationError(msg) from e
    else:
        return file_handler


def start_listener(state, handlers: list[logging.Handler]) -> None:
    """Start a QueueListener over ``handlers`` and store it in ``state``.

    Args:
        state: Logger state object (from logger.state module)
        handlers: Handlers that will process records from the queue

    """
    if state.log_queue is None:
        state.log_queue = queue.Queue(-1)  # Unbounded queue
    state.queue_listener = QueueListener(
        state.log_queue,
        *handlers,
        respect_handler_level=True,
    )
    state.queue_listener.start()


def setup_root_logger(
    state,
    console_level: str,
    file_level: str,
    log_file: Path | None,
) -> None:
    """Initialize root logger with handlers via QueueListener.

    Called exactly once to set up the root logger. All handlers are attached
    to the listener; loggers only ever see the QueueHandler.

    Args:
        state: Logger state object (from logger.state module)
        console_level: Console log level (e.g., "INFO", "WARNING")
        file_level: File log level (e.g., "DEBUG", "INFO")
        log_file: Path to log file, or None to disable file logging

    Raises:
        LoggingConfigurationError: If handler setup fails

    """
    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)  # Capture all, filter at handlers
    root_logger.propagate = False  # Terminal node

    # Remove any existing handlers (for test isolation)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = [create_console_handler(console_level)]
    if log_file is not None:
        handlers.append(create_file_handler(log_file, file_level))

    state.log_queue = queue.Queue(-1)
    start_listener(state, handlers)

    root_logger.addHandler(QueueHandler(state.log_queue))
    state.root_initialized = True
