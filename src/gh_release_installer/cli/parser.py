"""CLI argument parser for gh-release-installer.

Everything after the first literal ``--`` belongs to the launched tool and
is split off before argparse sees the command line, so the tool's
arguments are never reinterpreted.
"""

import argparse
from argparse import Namespace
from collections.abc import Sequence

from gh_release_installer import __version__
from gh_release_installer.constants import APP_NAME
from gh_release_installer.exceptions import UsageError

TOOL_ARGS_SEPARATOR = "--"


def split_tool_args(
    argv: Sequence[str],
) -> tuple[list[str], tuple[str, ...]]:
    """Split ``argv`` at the first ``--``.

    Args:
        argv: Command-line arguments without the program name

    Returns:
        Tuple of (installer arguments, tool arguments); tool arguments are
        kept verbatim

    """
    args = list(argv)
    if TOOL_ARGS_SEPARATOR not in args:
        return args, ()
    index = args.index(TOOL_ARGS_SEPARATOR)
    return args[:index], tuple(args[index + 1 :])


def validate_tag(tag: str | None) -> None:
    """Reject tags that cannot be used as a URL or cache path segment.

    Raises:
        UsageError: If the tag contains a slash or whitespace, or is a
            relative path component.

    """
    if not tag:
        return
    if tag in (".", "..") or "/" in tag or any(
        ch.isspace() for ch in tag
    ):
        msg = "tag must be a single path segment without whitespace"
        raise UsageError(msg, tag)


class CLIParser:
    """Command-line argument parser for gh-release-installer."""

    def parse_args(self, argv: Sequence[str]) -> Namespace:
        """Parse installer arguments.

        Args:
            argv: Arguments without the program name; may contain ``--``

        Returns:
            Namespace with ``bindir``, ``debug``, ``launch``, ``tag`` and
            ``tool_args``

        Raises:
            SystemExit: On ``-h``/``--version`` (code 0) or a usage
                error (code 2), as raised by argparse.

        """
        own_args, tool_args = split_tool_args(argv)
        args = self._create_parser().parse_args(own_args)
        args.tool_args = tool_args
        return args

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=APP_NAME,
            description=(
                "Download, verify (SHA-256) and install a binary published "
                "on GitHub Releases, or run it from a local cache."
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Install the latest release into ~/.bin
  %(prog)s

  # Install a specific version into another directory
  %(prog)s -b /usr/local/bin v1.2.3

  # Run a version from the cache, passing arguments to the tool
  %(prog)s -l 1.2.3 -- --help

Environment overrides:
  OWNER, REPO, PROJECT_NAME, BINARY, FORMAT, NAME_TEMPLATE,
  CHECKSUM_TEMPLATE, CHECKSUM_FALLBACKS, SUPPORTED_PLATFORMS,
  CACHE_ROOT, BINDIR, GITHUB_URL, GITHUB_TOKEN, LOG_FILE, GHREL_CONFIG
            """,
        )
        parser.add_argument(
            "-b",
            dest="bindir",
            metavar="bindir",
            help="installation directory (default: ~/.bin)",
        )
        parser.add_argument(
            "-d",
            dest="debug",
            action="store_true",
            help="enable debug logging",
        )
        parser.add_argument(
            "-l",
            dest="launch",
            action="store_true",
            help="launch from cache instead of installing",
        )
        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}",
        )
        parser.add_argument(
            "tag",
            nargs="?",
            default=None,
            help="release tag or version (default: latest)",
        )
        return parser
