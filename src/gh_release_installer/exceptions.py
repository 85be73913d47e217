"""Exception classes for gh-release-installer operations."""

from collections.abc import Sequence


class InstallerError(Exception):
    """Base exception for gh-release-installer operations."""

    error_prefix: str = "Operation failed"

    def __init__(self, message: str, target: str | None = None) -> None:
        """Initialize error with message and optional target.

        Args:
            message: Error message describing the failure.
            target: Optional name of the target that failed
                (a URL, a file or a platform).

        """
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.target:
            return f"{self.error_prefix} for '{self.target}': {self.message}"
        return f"{self.error_prefix}: {self.message}"


class UsageError(InstallerError):
    """Raised when the command line cannot be interpreted."""

    error_prefix = "Usage error"


class ConfigurationError(InstallerError):
    """Raised for invalid configuration or an unsupported host platform."""

    error_prefix = "Configuration error"


class ResolutionError(InstallerError):
    """Raised when a release tag cannot be resolved."""

    error_prefix = "Release resolution failed"


class DownloadError(InstallerError):
    """Raised when the asset or every checksum candidate is unreachable."""

    error_prefix = "Download failed"

    def __init__(
        self,
        message: str,
        target: str | None = None,
        candidates: Sequence[str] = (),
    ) -> None:
        """Initialize error with the checksum candidates that were tried.

        Args:
            message: Error message describing the failure.
            target: Optional name of the target that failed.
            candidates: Checksum filenames attempted before giving up.

        """
        super().__init__(message, target)
        self.candidates = tuple(candidates)


class VerificationError(InstallerError):
    """Raised when an asset cannot be proven intact."""

    error_prefix = "Verification failed"


class ChecksumMismatchError(VerificationError):
    """Raised when the computed digest differs from the expected one."""

    def __init__(
        self,
        expected: str,
        actual: str,
        target: str | None = None,
    ) -> None:
        super().__init__(
            f"checksum mismatch: want={expected} got={actual}", target
        )
        self.expected = expected
        self.actual = actual


class MissingChecksumEntryError(VerificationError):
    """Raised when a checksum source holds no usable digest for the asset."""


class UnsupportedFormatError(InstallerError):
    """Raised for archive formats that cannot be unpacked."""

    error_prefix = "Unsupported format"


class ExecutableNotFoundError(InstallerError):
    """Raised when no executable can be located after unpacking."""

    error_prefix = "Executable not found"
