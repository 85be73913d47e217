"""Main logger module providing public API functions.

- setup_logging(): Configure logging with the QueueHandler architecture
- get_logger(): Get or create logger instance with singleton pattern
- flush_all_handlers(): Ensure all pending log records are written
- shutdown_logging(): Flush and stop the listener (before exec or exit)
- clear_logger_state(): Clear global logger state for testing
"""

import atexit
import contextlib
import logging
import time
from pathlib import Path

from gh_release_installer.constants import LOGGER_NAME
from gh_release_installer.logger.config import load_log_settings
from gh_release_installer.logger.handlers import setup_root_logger
from gh_release_installer.logger.state import get_state


def flush_all_handlers() -> None:
    """Flush all handlers in the QueueListener to ensure writes complete.

    Waits for the queue to drain, then flushes each handler. Safe to call
    from any thread.
    """
    state = get_state()
    if state.queue_listener is not None and state.log_queue is not None:
        # QueueListener doesn't use task_done(), so poll the queue
        timeout = 5.0
        start_time = time.time()
        while not state.log_queue.empty():
            if time.time() - start_time > timeout:
                break
            time.sleep(0.01)

        for handler in state.queue_listener.handlers:
            with contextlib.suppress(OSError, ValueError):
                handler.flush()


def shutdown_logging() -> None:
    """Drain the queue and stop the listener thread.

    Must run before the process image is replaced: ``os.execv`` does not run
    atexit hooks, so records still queued would otherwise be lost.
    """
    state = get_state()
    with state.lock:
        if state.queue_listener is not None:
            state.queue_listener.stop()  # stop() drains remaining records
            for handler in state.queue_listener.handlers:
                with contextlib.suppress(OSError, ValueError):
                    handler.flush()
            state.queue_listener = None


atexit.register(shutdown_logging)


def setup_logging(
    name: str = LOGGER_NAME,
    console_level: str | None = None,
    file_level: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure logging with the QueueHandler architecture.

    The root ``gh_release_installer`` logger is initialized exactly once;
    child loggers propagate to it.

    Args:
        name: Logger name, typically __name__ for module-level loggers
        console_level: Console log level ("DEBUG", "INFO", "WARNING")
        file_level: File log level ("DEBUG", "INFO")
        log_file: Optional path to a rotating log file

    Returns:
        Logger instance (singleton per name via logging.getLogger)

    Raises:
        LoggingConfigurationError: If file logging setup fails

    """
    state = get_state()
    with state.lock:
        if not state.root_initialized:
            default_console, default_file = load_log_settings()
            setup_root_logger(
                state,
                console_level or default_console,
                file_level or default_file,
                log_file,
            )

    return logging.getLogger(name)


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get or create logger instance with singleton pattern.

    Use __name__ as the logger name for proper hierarchical logging:
        >>> logger = get_logger(__name__)
        >>> logger.info("resolved version: %s", tag)

    Args:
        name: Logger name, typically __name__ for module loggers

    Returns:
        Configured logger instance (singleton per name)

    """
    return setup_logging(name=name)


def clear_logger_state() -> None:
    """Clear global logger state for testing purposes.

    Stops the QueueListener, removes all handlers and resets the state flags.
    Not for production use.
    """
    state = get_state()
    with state.lock:
        if state.queue_listener is not None:
            flush_all_handlers()
            state.queue_listener.stop()
            state.queue_listener = None

        state.log_queue = None
        state.root_initialized = False

        for logger_name in list(logging.Logger.manager.loggerDict.keys()):
            if logger_name.startswith(LOGGER_NAME):
                log_instance = logging.getLogger(logger_name)
                for handler in log_instance.handlers[:]:
                    handler.close()
                    log_instance.removeHandler(handler)
