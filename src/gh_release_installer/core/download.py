"""Asset and checksum-source downloads for one release."""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import TYPE_CHECKING

from gh_release_installer.constants import MIN_CHECKSUM_SOURCE_BYTES
from gh_release_installer.exceptions import DownloadError
from gh_release_installer.logger import get_logger

if TYPE_CHECKING:
    from gh_release_installer.config import ProjectConfig
    from gh_release_installer.core.fetch import Fetcher
    from gh_release_installer.domain.asset import (
        AssetDescriptor,
        ChecksumCandidate,
    )
    from gh_release_installer.domain.platform import Platform

logger = get_logger(__name__)


class AssetDownloader:
    """Download a release asset and the first usable checksum source.

    Candidates are tried strictly in order and the first one that downloads
    with a plausible size wins. Nothing is hashed here; verification is a
    separate step once both files are on disk.
    """

    def __init__(
        self, config: ProjectConfig, fetcher: Fetcher, platform: Platform
    ) -> None:
        """Initialize the downloader.

        Args:
            config: Project configuration
            fetcher: Fetcher used for all downloads
            platform: Host platform, reported in failure hints

        """
        self.config = config
        self.fetcher = fetcher
        self.platform = platform

    def download_url(self, tag: str, filename: str) -> str:
        """Release asset URL for ``filename`` under ``tag``."""
        return (
            f"{self.config.github_url}/{self.config.owner_repo}"
            f"/releases/download/{tag}/{filename}"
        )

    async def download(
        self,
        descriptor: AssetDescriptor,
        tag: str,
        asset_dest: Path,
        checksum_dest: Path,
    ) -> ChecksumCandidate:
        """Download the asset and a checksum source.

        Args:
            descriptor: Asset descriptor for the canonical tag
            tag: Canonical release tag
            asset_dest: Where to write the asset
            checksum_dest: Where to write the checksum source

        Returns:
            The checksum candidate that was saved to ``checksum_dest``

        Raises:
            DownloadError: If the asset or every checksum candidate is
                unreachable.

        """
        asset_url = self.download_url(tag, descriptor.filename)
        logger.info("downloading asset: %s", descriptor.filename)
        if not await self.fetcher.fetch_to_file(asset_url, asset_dest):
            logger.info(
                "tip: ensure NAME_TEMPLATE/FORMAT match the release asset "
                "naming"
            )
            logger.info(
                "     tried platform: %s, tag: %s", self.platform, tag
            )
            msg = (
                f"failed to download asset (platform: {self.platform}, "
                f"tag: {tag})"
            )
            raise DownloadError(msg, asset_url)

        for candidate in descriptor.checksum_candidates:
            if await self._try_checksum(tag, candidate, checksum_dest):
                return candidate

        tried = " ".join(descriptor.candidate_names)
        logger.info("tried: %s", tried)
        logger.info(
            "tip: add the correct manifest name to CHECKSUM_FALLBACKS if "
            "your project uses a custom filename"
        )
        msg = (
            f"no usable checksum found (platform: {self.platform}, "
            f"tag: {tag}, tried: {tried})"
        )
        raise DownloadError(
            msg, descriptor.filename, descriptor.candidate_names
        )

    async def _try_checksum(
        self, tag: str, candidate: ChecksumCandidate, dest: Path
    ) -> bool:
        url = self.download_url(tag, candidate.name)
        logger.info("looking for checksum file: %s", candidate.name)
        if not await self.fetcher.fetch_to_file(url, dest):
            logger.debug("not found: %s", url)
            return False

        size = dest.stat().st_size
        if size < MIN_CHECKSUM_SOURCE_BYTES:
            logger.debug(
                "checksum candidate too small: %s (%d bytes)",
                candidate.name,
                size,
            )
            with contextlib.suppress(FileNotFoundError):
                dest.unlink()
            return False

        logger.info("found checksum file: %s", candidate.name)
        return True
