"""Domain types: host platform and release asset naming."""

from gh_release_installer.domain.asset import (
    AssetDescriptor,
    ChecksumCandidate,
    ChecksumMode,
    checksum_candidates,
    describe_asset,
    render_asset_name,
    render_checksum_name,
    render_template,
)
from gh_release_installer.domain.platform import (
    Platform,
    detect,
    ensure_supported,
    is_supported,
    normalize_arch,
    normalize_os,
    parse_platforms,
)

__all__ = [
    "AssetDescriptor",
    "ChecksumCandidate",
    "ChecksumMode",
    "Platform",
    "checksum_candidates",
    "describe_asset",
    "detect",
    "ensure_supported",
    "is_supported",
    "normalize_arch",
    "normalize_os",
    "parse_platforms",
    "render_asset_name",
    "render_checksum_name",
    "render_template",
]
