"""CLI runner for gh-release-installer.

Builds the configuration, applies logging settings and runs the install or
launch pipeline. Every installer error is handled here and turned into an
exit code. Launch mode does not exec from inside the event loop: the
runner returns a :class:`LaunchRequest` and the entry point replaces the
process once the loop has shut down.
"""

import os
from collections.abc import Callable, Mapping, Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from pathlib import Path

import aiohttp

from gh_release_installer.config import ProjectConfig, load_config
from gh_release_installer.constants import EXIT_FAILURE, EXIT_OK, EXIT_USAGE
from gh_release_installer.core.deploy import Deployer
from gh_release_installer.core.fetch import HttpFetcher
from gh_release_installer.core.http_session import create_http_session
from gh_release_installer.core.token import KeyringTokenStore
from gh_release_installer.domain.platform import Platform
from gh_release_installer.exceptions import (
    DownloadError,
    InstallerError,
    UsageError,
)
from gh_release_installer.logger import (
    LoggingConfigurationError,
    apply_log_settings,
    get_logger,
)

from .parser import CLIParser, validate_tag

logger = get_logger(__name__)

SessionFactory = Callable[
    [], AbstractAsyncContextManager[aiohttp.ClientSession]
]


@dataclass(frozen=True, slots=True)
class LaunchRequest:
    """Executable to replace the process with, and its arguments."""

    executable: Path
    tool_args: tuple[str, ...]


class CLIRunner:
    """CLI command runner and orchestrator."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        *,
        platform: Platform | None = None,
        session_factory: SessionFactory = create_http_session,
        token_lookup: Callable[[], str | None] | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
            platform: Host platform override (detected when omitted)
            session_factory: Async context manager yielding the HTTP session
            token_lookup: Stored-token lookup (defaults to the keyring)

        """
        self.environ = os.environ if environ is None else environ
        self.platform = platform
        self.session_factory = session_factory
        self.token_lookup = token_lookup or KeyringTokenStore().get

    async def run(self, argv: Sequence[str]) -> int | LaunchRequest:
        """Run the CLI application.

        Args:
            argv: Arguments without the program name

        Returns:
            Exit code, or a LaunchRequest in launch mode

        """
        try:
            args = CLIParser().parse_args(argv)
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else EXIT_USAGE

        try:
            apply_log_settings(debug=args.debug)
            validate_tag(args.tag)
            config = load_config(
                self.environ,
                install_dir=args.bindir,
                token_lookup=self.token_lookup,
            )
            if config.log_file is not None:
                apply_log_settings(debug=args.debug, log_file=config.log_file)
            return await self._execute(
                config, args.tag, args.launch, args.tool_args
            )
        except UsageError as e:
            logger.error("%s", e)
            return EXIT_USAGE
        except DownloadError as e:
            logger.critical("%s", e)
            return EXIT_FAILURE
        except (InstallerError, LoggingConfigurationError) as e:
            logger.error("%s", e)
            return EXIT_FAILURE
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return EXIT_FAILURE
        except Exception:
            logger.exception("Unexpected error")
            return EXIT_FAILURE

    async def _execute(
        self,
        config: ProjectConfig,
        tag: str | None,
        launch_mode: bool,
        tool_args: tuple[str, ...],
    ) -> int | LaunchRequest:
        logger.debug(
            "Project %s, format %s, cache %s",
            config.owner_repo,
            config.archive_format,
            config.cache_root,
        )
        if tool_args and not launch_mode:
            logger.warning("Tool arguments are ignored without -l")

        async with self.session_factory() as session:
            deployer = Deployer(
                config, HttpFetcher(session), platform=self.platform
            )
            if launch_mode:
                executable = await deployer.prepare_launch(tag)
                return LaunchRequest(executable, tool_args)
            await deployer.install(tag)
        return EXIT_OK
