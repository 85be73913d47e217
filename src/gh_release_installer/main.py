"""Main CLI entry point for gh-release-installer.

The async pipeline runs under uvloop. In launch mode the process image is
replaced only after the event loop has been closed.
"""

import sys

import uvloop

from gh_release_installer.cli import CLIRunner, LaunchRequest
from gh_release_installer.constants import EXIT_FAILURE
from gh_release_installer.core.launch import launch
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)


def main() -> None:
    """Run the CLI application and exit with its status."""
    runner = CLIRunner()
    try:
        outcome = uvloop.run(runner.run(sys.argv[1:]))
    except KeyboardInterrupt:
        logger.info("Cancelled by user")
        sys.exit(EXIT_FAILURE)

    if isinstance(outcome, LaunchRequest):
        try:
            launch(outcome.executable, outcome.tool_args)
        except OSError as e:
            # logging is already shut down at this point
            print(f"cannot launch {outcome.executable}: {e}", file=sys.stderr)
            sys.exit(EXIT_FAILURE)

    sys.exit(outcome)


if __name__ == "__main__":
    main()
