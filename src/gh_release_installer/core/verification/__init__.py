"""Checksum parsing and SHA-256 verification."""

from gh_release_installer.core.verification.checksum_parser import (
    extract_expected_digest,
    find_named_digest,
    normalize_digest,
)
from gh_release_installer.core.verification.verifier import (
    compute_sha256,
    read_checksum_source,
    verify,
)

__all__ = [
    "compute_sha256",
    "extract_expected_digest",
    "find_named_digest",
    "normalize_digest",
    "read_checksum_source",
    "verify",
]
