"""URL retrieval with a binary found/not-found outcome.

Every failure mode (404, other HTTP statuses, connection errors, redirect
loops, timeouts) is reported the same way and callers move on to their next
candidate. The cause is logged at debug level.
"""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Protocol

import aiofiles
import aiohttp

from gh_release_installer.constants import DOWNLOAD_CHUNK_SIZE
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)

HTTP_OK = 200


class Fetcher(Protocol):
    """Retrieve a URL into memory or into a file."""

    async def fetch(
        self, url: str, headers: dict[str, str] | None = None
    ) -> bytes | None:
        """Return the response body, or None unless the response was 200."""
        ...

    async def fetch_to_file(
        self, url: str, dest: Path, headers: dict[str, str] | None = None
    ) -> bool:
        """Write the response body to ``dest``; return True only on 200."""
        ...


class HttpFetcher:
    """Fetcher backed by an aiohttp session."""

    def __init__(self, session: aiohttp.ClientSession) -> None:
        """Initialize with a shared HTTP session.

        Args:
            session: aiohttp session for requests

        """
        self.session = session

    async def fetch(
        self, url: str, headers: dict[str, str] | None = None
    ) -> bytes | None:
        """Fetch ``url`` into memory.

        Args:
            url: URL to request
            headers: Optional extra request headers

        Returns:
            Response body on HTTP 200, otherwise None

        """
        logger.debug("GET %s", url)
        try:
            async with self.session.get(url, headers=headers) as response:
                if response.status != HTTP_OK:
                    logger.debug(
                        "not found: %s (HTTP %s)", url, response.status
                    )
                    return None
                return await response.read()
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.debug("request failed: %s (%s)", url, e)
            return None

    async def fetch_to_file(
        self, url: str, dest: Path, headers: dict[str, str] | None = None
    ) -> bool:
        """Stream ``url`` into ``dest``.

        A partially written ``dest`` is removed when the transfer fails.

        Args:
            url: URL to request
            dest: Destination file (parent directories are created)
            headers: Optional extra request headers

        Returns:
            True on HTTP 200 with a complete body, otherwise False

        """
        logger.debug("GET %s -> %s", url, dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with self.session.get(url, headers=headers) as response:
                if response.status != HTTP_OK:
                    logger.debug(
                        "not found: %s (HTTP %s)", url, response.status
                    )
                    return False
                async with aiofiles.open(dest, mode="wb") as f:
                    async for chunk in response.content.iter_chunked(
                        DOWNLOAD_CHUNK_SIZE
                    ):
                        await f.write(chunk)
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.debug("request failed: %s (%s)", url, e)
            with contextlib.suppress(FileNotFoundError):
                dest.unlink()
            return False

        logger.debug("Download completed: %s", dest)
        return True
