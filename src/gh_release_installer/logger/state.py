"""Logger state management module.

This module provides the global logger state singleton used throughout
gh-release-installer. The singleton pattern ensures a single root logger
instance across the entire application.
"""

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import queue
    from logging.handlers import QueueListener


class _LoggerState:
    """Container for logger state (avoids module-level mutable globals).

    Attributes:
        lock: Thread lock for singleton initialization
        root_initialized: Whether root logger has been set up
        queue_listener: Background thread processing log records
        log_queue: Queue feeding the listener

    """

    def __init__(self) -> None:
        """Initialize logger state."""
        self.lock = threading.Lock()
        self.root_initialized = False
        self.queue_listener: QueueListener | None = None
        self.log_queue: queue.Queue | None = None


# Single source of truth for logger state across the application
_state = _LoggerState()


def get_state() -> _LoggerState:
    """Get the global logger state singleton.

    Returns:
        The global logger state instance

    """
    return _state
