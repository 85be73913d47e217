"""Command-line interface for gh-release-installer."""

from gh_release_installer.cli.parser import (
    CLIParser,
    split_tool_args,
    validate_tag,
)
from gh_release_installer.cli.runner import CLIRunner, LaunchRequest

__all__ = [
    "CLIParser",
    "CLIRunner",
    "LaunchRequest",
    "split_tool_args",
    "validate_tag",
]
