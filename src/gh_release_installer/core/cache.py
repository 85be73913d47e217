"""On-disk cache slots for launch mode.

One slot per ``(owner, repo, tag, os, arch)``::

    {cache_root}/{owner}/{repo}/{tag}/{os}-{arch}/
        <asset filename>     downloaded asset
        checksums.txt        checksum source it was verified against
        .witness.json        checksum source name/mode and verified digest
        extracted/           unpacked archive tree
        <binary>             executable that is launched

An executable binary in the slot is trusted without re-hashing: it only
appears after a verified pipeline run. The witness file adds a record of
what was verified but is never required for that trust.
"""

import contextlib
import shutil
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import orjson

from gh_release_installer.constants import (
    CACHE_CHECKSUM_FILE,
    CACHE_EXTRACT_DIR,
    CACHE_WITNESS_FILE,
)
from gh_release_installer.domain.asset import ChecksumCandidate, ChecksumMode
from gh_release_installer.domain.platform import Platform
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)

_EXEC_BITS = 0o111


class SlotState(Enum):
    """Lifecycle of a cache slot."""

    EMPTY = "empty"
    DOWNLOADED = "downloaded"
    VERIFIED = "verified"
    EXTRACTED = "extracted"


@dataclass(frozen=True, slots=True)
class CacheSlot:
    """Paths of one cache slot."""

    directory: Path
    asset_filename: str
    binary_name: str

    @property
    def asset_path(self) -> Path:
        return self.directory / self.asset_filename

    @property
    def checksum_path(self) -> Path:
        return self.directory / CACHE_CHECKSUM_FILE

    @property
    def binary_path(self) -> Path:
        return self.directory / self.binary_name

    @property
    def extract_dir(self) -> Path:
        return self.directory / CACHE_EXTRACT_DIR

    @property
    def witness_path(self) -> Path:
        return self.directory / CACHE_WITNESS_FILE


def is_executable_file(path: Path) -> bool:
    """Return whether ``path`` is a regular file with any execute bit."""
    try:
        return path.is_file() and bool(path.stat().st_mode & _EXEC_BITS)
    except OSError:
        return False


class CacheManager:
    """Create, inspect and invalidate cache slots under a root directory."""

    def __init__(self, cache_root: Path) -> None:
        """Initialize the cache manager.

        Args:
            cache_root: Root directory of all slots (created lazily)

        """
        self.cache_root = cache_root

    def slot_path(
        self, owner: str, repo: str, tag: str, platform: Platform
    ) -> Path:
        """Directory of the slot for ``(owner, repo, tag, platform)``."""
        return self.cache_root / owner / repo / tag / platform.slug

    def slot(
        self,
        owner: str,
        repo: str,
        tag: str,
        platform: Platform,
        asset_filename: str,
        binary_name: str,
    ) -> CacheSlot:
        """Return the slot for a canonical tag, creating its directory."""
        directory = self.slot_path(owner, repo, tag, platform)
        directory.mkdir(parents=True, exist_ok=True)
        return CacheSlot(directory, asset_filename, binary_name)

    def has_valid_executable(self, slot: CacheSlot) -> bool:
        """Return whether the slot's binary exists and is executable."""
        return is_executable_file(slot.binary_path)

    def has_download(self, slot: CacheSlot) -> bool:
        """Return whether both the asset and its checksum source exist."""
        return slot.asset_path.is_file() and slot.checksum_path.is_file()

    def slot_state(self, slot: CacheSlot) -> SlotState:
        """Derive the slot's lifecycle state from what is on disk."""
        if self.has_valid_executable(slot):
            return SlotState.EXTRACTED
        if not self.has_download(slot):
            return SlotState.EMPTY
        witness = self.read_witness(slot)
        if witness and witness.get("sha256"):
            return SlotState.VERIFIED
        return SlotState.DOWNLOADED

    def invalidate(self, slot: CacheSlot) -> None:
        """Remove every entry of the slot so the next access re-downloads."""
        logger.debug("Invalidating cache slot %s", slot.directory)
        for path in (
            slot.binary_path,
            slot.asset_path,
            slot.checksum_path,
            slot.witness_path,
        ):
            with contextlib.suppress(FileNotFoundError):
                path.unlink()
        if slot.extract_dir.exists():
            shutil.rmtree(slot.extract_dir)

    def record_checksum_source(
        self, slot: CacheSlot, tag: str, candidate: ChecksumCandidate
    ) -> None:
        """Start a new witness naming the checksum source just downloaded."""
        self._write_witness_data(
            slot,
            {
                "tag": tag,
                "asset": slot.asset_filename,
                "checksum_source": candidate.name,
                "checksum_mode": candidate.mode.value,
            },
        )

    def checksum_source(self, slot: CacheSlot) -> ChecksumCandidate:
        """Return the recorded checksum source of a downloaded slot.

        Slots without a readable record are treated as manifests, so the
        asset must be named explicitly in the cached checksum file.
        """
        witness = self.read_witness(slot) or {}
        try:
            mode = ChecksumMode(witness.get("checksum_mode"))
        except ValueError:
            mode = ChecksumMode.MANIFEST
        name = witness.get("checksum_source") or CACHE_CHECKSUM_FILE
        return ChecksumCandidate(str(name), mode)

    def write_witness(self, slot: CacheSlot, digest: str) -> None:
        """Add the verified digest and a timestamp to the slot's witness."""
        record = self.read_witness(slot) or {}
        record["sha256"] = digest
        record["verified_at"] = datetime.now(UTC).isoformat()
        self._write_witness_data(slot, record)

    def read_witness(self, slot: CacheSlot) -> dict[str, Any] | None:
        """Return the witness record, or None if absent or unreadable."""
        try:
            data = orjson.loads(slot.witness_path.read_bytes())
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            # orjson raises ValueError for JSON errors
            logger.warning(
                "Ignoring unreadable witness %s: %s", slot.witness_path, e
            )
            return None
        return data if isinstance(data, dict) else None

    def _write_witness_data(
        self, slot: CacheSlot, record: dict[str, Any]
    ) -> None:
        temp_file = slot.witness_path.with_suffix(".tmp")
        temp_file.write_bytes(orjson.dumps(record, option=orjson.OPT_INDENT_2))
        temp_file.replace(slot.witness_path)

    def find_cached_executable(
        self,
        owner: str,
        repo: str,
        tag_variants: tuple[str, ...],
        platform: Platform,
        binary_name: str,
    ) -> Path | None:
        """Look up an executable for any tag variant without network access.

        Args:
            owner: Repository owner
            repo: Repository name
            tag_variants: Candidate tag spellings, tried in order
            platform: Host platform
            binary_name: Name of the cached executable

        Returns:
            Path of the first executable found, or None

        """
        for tag in tag_variants:
            directory = self.slot_path(owner, repo, tag, platform)
            candidate = directory / binary_name
            if is_executable_file(candidate):
                logger.debug("Cache hit for %s/%s %s", owner, repo, tag)
                return candidate
        return None
