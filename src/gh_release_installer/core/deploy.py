"""Install and launch-mode orchestration.

``Deployer`` strings the pieces together for one run::

    platform check -> resolve tag -> describe asset -> download
        -> verify -> unpack/locate -> install (copy) | prepare launch (cache)

Platform and format checks run before any request is made.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from gh_release_installer.constants import (
    CACHE_CHECKSUM_FILE,
    CACHE_EXTRACT_DIR,
)
from gh_release_installer.core.archive import locate_executable, unpack
from gh_release_installer.core.cache import CacheManager, CacheSlot, SlotState
from gh_release_installer.core.download import AssetDownloader
from gh_release_installer.core.resolver import (
    ReleaseResolver,
    is_latest,
    tag_variants,
)
from gh_release_installer.core.verification import verify
from gh_release_installer.domain.asset import (
    AssetDescriptor,
    describe_asset,
    ensure_supported_format,
)
from gh_release_installer.domain.platform import (
    Platform,
    detect,
    ensure_supported,
)
from gh_release_installer.exceptions import (
    ExecutableNotFoundError,
    VerificationError,
)
from gh_release_installer.logger import get_logger

if TYPE_CHECKING:
    from gh_release_installer.config import ProjectConfig
    from gh_release_installer.core.auth import GitHubAuthManager
    from gh_release_installer.core.fetch import Fetcher

logger = get_logger(__name__)

EXECUTABLE_MODE = 0o755
SCRATCH_PREFIX = "ghrel."


def install_file(source: Path, dest: Path) -> None:
    """Copy ``source`` to ``dest`` with mode 0o755, replacing atomically.

    The copy is written next to ``dest`` and renamed into place, so
    ``dest`` is either the previous file or the complete new one.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(
        prefix=f".{dest.name}.", dir=dest.parent
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as out, source.open("rb") as src:
            shutil.copyfileobj(src, out)
        os.chmod(temp_path, EXECUTABLE_MODE)
        os.replace(temp_path, dest)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            temp_path.unlink()
        raise


class Deployer:
    """Run the install or launch pipeline for one project configuration."""

    def __init__(
        self,
        config: ProjectConfig,
        fetcher: Fetcher,
        *,
        platform: Platform | None = None,
        cache: CacheManager | None = None,
        auth_manager: GitHubAuthManager | None = None,
    ) -> None:
        """Initialize the deployer.

        Args:
            config: Project configuration
            fetcher: Fetcher used for every request
            platform: Host platform (detected when omitted)
            cache: Cache manager (defaults to one at ``config.cache_root``)
            auth_manager: Auth manager for release metadata requests

        """
        self.config = config
        self.fetcher = fetcher
        self.platform = platform or detect()
        self.cache = cache or CacheManager(config.cache_root)
        self.resolver = ReleaseResolver(config, fetcher, auth_manager)
        self.downloader = AssetDownloader(config, fetcher, self.platform)

    def preflight(self) -> None:
        """Reject unsupported platforms and formats before any request.

        Raises:
            ConfigurationError: If the platform is not allow-listed.
            UnsupportedFormatError: If the asset format is unknown.

        """
        ensure_supported(self.platform, self.config.supported_platforms)
        ensure_supported_format(self.config.archive_format)

    async def _resolve(self, tag_request: str | None) -> str:
        tag = await self.resolver.resolve(tag_request)
        logger.info("resolved version: %s for %s", tag, self.platform)
        return tag

    async def install(self, tag_request: str | None = None) -> Path:
        """Install the release binary into ``config.install_dir``.

        Args:
            tag_request: Requested version; None means the latest release

        Returns:
            Path of the installed binary

        Raises:
            InstallerError: On any failure; nothing is written to the
                install directory in that case.

        """
        self.preflight()
        tag = await self._resolve(tag_request)
        descriptor = describe_asset(self.config, tag, self.platform)

        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as scratch:
            scratch_dir = Path(scratch)
            asset_path = scratch_dir / descriptor.filename
            checksum_path = scratch_dir / CACHE_CHECKSUM_FILE

            candidate = await self.downloader.download(
                descriptor, tag, asset_path, checksum_path
            )
            verify(
                asset_path, checksum_path, descriptor.filename, candidate.mode
            )

            if descriptor.is_archive:
                extract_dir = scratch_dir / CACHE_EXTRACT_DIR
                unpack(asset_path, self.config.archive_format, extract_dir)
                source = locate_executable(
                    extract_dir,
                    self.config.binary_name,
                    self.config.project_name,
                )
            else:
                source = asset_path

            dest = self.config.install_dir / self.config.binary_name
            install_file(source, dest)

        logger.info("installed %s", dest)
        return dest

    async def prepare_launch(self, tag_request: str | None = None) -> Path:
        """Make the release binary available in the cache.

        An explicit tag whose slot already holds an executable is served
        without any request. Otherwise the tag is resolved, and the slot is
        downloaded, verified and extracted as needed. A verification failure
        invalidates the slot and triggers exactly one fresh download.

        Args:
            tag_request: Requested version; None means the latest release

        Returns:
            Path of the cached executable

        Raises:
            InstallerError: If the executable cannot be produced.

        """
        self.preflight()
        config = self.config

        if not is_latest(tag_request):
            cached = self.cache.find_cached_executable(
                config.owner,
                config.repo,
                tag_variants(tag_request),
                self.platform,
                config.binary_name,
            )
            if cached is not None:
                logger.info("using cached binary: %s", cached)
                return cached

        tag = await self._resolve(tag_request)
        descriptor = describe_asset(config, tag, self.platform)
        slot = self.cache.slot(
            config.owner,
            config.repo,
            tag,
            self.platform,
            descriptor.filename,
            config.binary_name,
        )

        state = self.cache.slot_state(slot)
        logger.debug("Cache slot %s is %s", slot.directory, state.name)
        if state is SlotState.EXTRACTED:
            logger.info("using cached binary: %s", slot.binary_path)
            return slot.binary_path

        if state is SlotState.EMPTY:
            await self._download_into(slot, descriptor, tag)

        try:
            digest = self._verify_slot(slot, descriptor)
        except VerificationError as e:
            logger.debug("Slot verification failed: %s", e)
            logger.info("cached asset checksum failed; re-downloading")
            self.cache.invalidate(slot)
            await self._download_into(slot, descriptor, tag)
            digest = self._verify_slot(slot, descriptor)

        self.cache.write_witness(slot, digest)
        self._extract_into(slot, descriptor)

        if not self.cache.has_valid_executable(slot):
            msg = "extracted binary not executable"
            raise ExecutableNotFoundError(msg, str(slot.binary_path))
        return slot.binary_path

    async def _download_into(
        self, slot: CacheSlot, descriptor: AssetDescriptor, tag: str
    ) -> None:
        candidate = await self.downloader.download(
            descriptor, tag, slot.asset_path, slot.checksum_path
        )
        self.cache.record_checksum_source(slot, tag, candidate)

    def _verify_slot(
        self, slot: CacheSlot, descriptor: AssetDescriptor
    ) -> str:
        source = self.cache.checksum_source(slot)
        return verify(
            slot.asset_path,
            slot.checksum_path,
            descriptor.filename,
            source.mode,
        )

    def _extract_into(
        self, slot: CacheSlot, descriptor: AssetDescriptor
    ) -> None:
        if descriptor.is_archive:
            if slot.extract_dir.exists():
                shutil.rmtree(slot.extract_dir)
            unpack(
                slot.asset_path, self.config.archive_format, slot.extract_dir
            )
            source = locate_executable(
                slot.extract_dir,
                self.config.binary_name,
                self.config.project_name,
            )
        else:
            source = slot.asset_path

        if source == slot.binary_path:
            os.chmod(source, EXECUTABLE_MODE)
        else:
            install_file(source, slot.binary_path)
