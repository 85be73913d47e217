"""Checksum source parsing.

Two line layouts are understood:

- GNU coreutils: ``<digest>  <filename>`` or ``<digest> *<filename>``
- BSD tag style: ``SHA256 (<filename>) = <digest>``

How a source without a line naming the asset is treated depends on its
:class:`~gh_release_installer.domain.asset.ChecksumMode`: a per-asset file
(``SINGLE``) may hold just the digest, so the first token of its first line
is used; a ``MANIFEST`` must name the asset, otherwise the entry is missing.
"""

from __future__ import annotations

import re

from gh_release_installer.domain.asset import ChecksumMode
from gh_release_installer.exceptions import MissingChecksumEntryError
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)

_BSD_LINE = re.compile(
    r"^\s*SHA256\s*\((?P<name>.+)\)\s*=\s*(?P<digest>\S+)\s*$"
)


def normalize_digest(value: str) -> str:
    """Lowercase a digest and strip an ``sha256:`` style prefix."""
    digest = value.strip()
    algo, sep, rest = digest.partition(":")
    if sep and algo.lower() == "sha256":
        digest = rest
    return digest.lower()


def _names_asset(line: str, asset_filename: str) -> bool:
    """Return whether a coreutils-style line ends with the asset name."""
    pattern = rf"\s\*?(?:\./)?{re.escape(asset_filename)}$"
    return re.search(pattern, line.rstrip()) is not None


def find_named_digest(text: str, asset_filename: str) -> str | None:
    """Return the digest on the line naming ``asset_filename``, if any.

    Args:
        text: Checksum source content
        asset_filename: Asset filename to look up

    Returns:
        Normalized digest or None when no line names the asset

    """
    for line_num, line in enumerate(text.splitlines(), 1):
        bsd = _BSD_LINE.match(line)
        if bsd:
            name = bsd.group("name").strip().removeprefix("./")
            if name == asset_filename:
                logger.debug("   Match found on line %d (BSD)", line_num)
                return normalize_digest(bsd.group("digest"))
            continue

        if _names_asset(line, asset_filename):
            tokens = line.split()
            if tokens:
                logger.debug("   Match found on line %d", line_num)
                return normalize_digest(tokens[0])
    return None


def first_digest(text: str) -> str | None:
    """Return the first token of the first non-empty line."""
    for line in text.splitlines():
        tokens = line.split()
        if tokens:
            return normalize_digest(tokens[0])
    return None


def extract_expected_digest(
    text: str,
    asset_filename: str,
    mode: ChecksumMode = ChecksumMode.SINGLE,
) -> str:
    """Locate the expected digest for ``asset_filename`` in a source.

    Args:
        text: Checksum source content
        asset_filename: Asset filename to look up
        mode: How to treat a source that does not name the asset

    Returns:
        Lowercase digest

    Raises:
        MissingChecksumEntryError: If no usable digest exists.

    """
    logger.debug("   Looking for: %s (%s)", asset_filename, mode.value)

    digest = find_named_digest(text, asset_filename)
    if digest is None and mode is ChecksumMode.SINGLE:
        digest = first_digest(text)
        if digest is not None:
            logger.debug("   Using bare digest from per-asset checksum file")

    if not digest:
        msg = f"checksum file lacks entry for {asset_filename}"
        raise MissingChecksumEntryError(msg)
    return digest
