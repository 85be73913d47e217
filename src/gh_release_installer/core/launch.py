"""Process replacement for launch mode.

After :func:`launch` the installer process no longer exists: the cached
executable takes over its PID, arguments and (possibly rebound) terminal.
"""

import os
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import NoReturn, TextIO

from gh_release_installer.constants import TTY_DEVICE
from gh_release_installer.logger import get_logger, shutdown_logging

logger = get_logger(__name__)


def reattach_terminal(tty_path: str = TTY_DEVICE) -> bool:
    """Rebind stdin, stdout and stderr to the controlling terminal.

    Args:
        tty_path: Terminal device to open

    Returns:
        True if the descriptors were rebound

    """
    try:
        fd = os.open(tty_path, os.O_RDWR)
    except OSError as e:
        logger.debug("Cannot open %s: %s", tty_path, e)
        return False
    try:
        for target in (0, 1, 2):
            os.dup2(fd, target)
    finally:
        if fd > 2:
            os.close(fd)
    return True


def _stdin_is_tty(stdin: TextIO | None) -> bool:
    if stdin is None:
        return False
    try:
        return stdin.isatty()
    except ValueError:
        # closed stream
        return False


def launch(
    executable: Path,
    tool_args: Sequence[str],
    *,
    stdin: TextIO | None = None,
    tty_path: str = TTY_DEVICE,
    execv: Callable[[str, list[str]], NoReturn] = os.execv,
) -> NoReturn:
    """Replace the current process with ``executable``.

    ``tool_args`` are passed through unchanged. When stdin is not a terminal
    (the installer was piped into) and ``tty_path`` is readable, all three
    standard descriptors are rebound to it first so interactive tools work.

    Args:
        executable: Verified executable to run
        tool_args: Arguments captured after ``--``
        stdin: Stream to test for a terminal (defaults to ``sys.stdin``)
        tty_path: Terminal device used for rebinding
        execv: Process replacement function

    Raises:
        OSError: If the executable cannot be started.

    """
    stream = sys.stdin if stdin is None else stdin
    logger.info("launching: %s (args preserved)", executable)

    rebind = not _stdin_is_tty(stream) and os.access(tty_path, os.R_OK)

    # Flush queued records before the descriptors are rebound
    shutdown_logging()
    if rebind:
        reattach_terminal(tty_path)

    program = str(executable)
    execv(program, [program, *tool_args])
