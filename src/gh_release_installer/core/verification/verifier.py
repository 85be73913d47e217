"""SHA-256 verification of downloaded assets."""

from __future__ import annotations

import hashlib
from pathlib import Path

from gh_release_installer.constants import (
    HASH_CHUNK_SIZE,
    MIN_CHECKSUM_SOURCE_BYTES,
)
from gh_release_installer.core.verification.checksum_parser import (
    extract_expected_digest,
)
from gh_release_installer.domain.asset import ChecksumMode
from gh_release_installer.exceptions import (
    ChecksumMismatchError,
    MissingChecksumEntryError,
)
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)


def compute_sha256(path: Path) -> str:
    """Compute the SHA-256 hex digest of a file.

    Args:
        path: File to hash

    Returns:
        Lowercase hexadecimal digest

    """
    hasher = hashlib.sha256()
    bytes_processed = 0
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            hasher.update(chunk)
            bytes_processed += len(chunk)

    computed_hash = hasher.hexdigest()
    logger.debug("   Processed: %s bytes", f"{bytes_processed:,}")
    logger.debug("   Hash: %s", computed_hash)
    return computed_hash


def read_checksum_source(checksum_path: Path) -> str:
    """Read a checksum source, rejecting implausibly small files.

    Raises:
        MissingChecksumEntryError: If the file is shorter than a plausible
            manifest (an error page or empty body slipped through).

    """
    size = checksum_path.stat().st_size
    if size < MIN_CHECKSUM_SOURCE_BYTES:
        msg = (
            f"checksum source is too small ({size} bytes, "
            f"need at least {MIN_CHECKSUM_SOURCE_BYTES})"
        )
        raise MissingChecksumEntryError(msg, checksum_path.name)
    return checksum_path.read_text(encoding="utf-8-sig", errors="replace")


def verify(
    asset_path: Path,
    checksum_path: Path,
    asset_filename: str,
    mode: ChecksumMode = ChecksumMode.SINGLE,
) -> str:
    """Verify ``asset_path`` against the digest listed in ``checksum_path``.

    Args:
        asset_path: Downloaded asset
        checksum_path: Checksum source that was downloaded for it
        asset_filename: Name the asset is listed under
        mode: Interpretation of the checksum source

    Returns:
        The verified digest

    Raises:
        MissingChecksumEntryError: If no expected digest can be found.
        ChecksumMismatchError: If the digests differ.

    """
    logger.debug("Starting SHA256 verification for %s", asset_filename)
    expected = extract_expected_digest(
        read_checksum_source(checksum_path), asset_filename, mode
    )
    logger.debug("   Expected hash: %s", expected)

    actual = compute_sha256(asset_path)
    if actual != expected:
        logger.error("checksum mismatch: want=%s got=%s", expected, actual)
        raise ChecksumMismatchError(expected, actual, asset_filename)

    logger.debug("SHA256 verification PASSED for %s", asset_filename)
    return actual
