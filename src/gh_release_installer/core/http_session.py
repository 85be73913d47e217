"""HTTP session utilities for gh-release-installer."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from gh_release_installer import __version__
from gh_release_installer.constants import APP_NAME


@asynccontextmanager
async def create_http_session() -> AsyncIterator[aiohttp.ClientSession]:
    """Create the HTTP session used for every request of a run.

    Timeouts and redirect limits are aiohttp's defaults; the installer adds
    none of its own.

    Yields:
        Configured aiohttp.ClientSession

    """
    connector = aiohttp.TCPConnector(limit=1)
    async with aiohttp.ClientSession(
        connector=connector,
        headers={"User-Agent": f"{APP_NAME}/{__version__}"},
    ) as session:
        yield session
