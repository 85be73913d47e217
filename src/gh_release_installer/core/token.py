"""GitHub token lookup using the system keyring.

Tokens are optional. They raise the GitHub rate limit for release metadata
requests; store one with the keyring CLI::

    keyring set gh-release-installer github_token
"""

import re

import keyring
from keyring.errors import KeyringError

from gh_release_installer.constants import KEYRING_SERVICE, KEYRING_USERNAME
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)

# GitHub token security constraints
MAX_TOKEN_LENGTH: int = 255

_PREFIXED_PATTERNS: tuple[str, ...] = (
    r"^ghp_[A-Za-z0-9_]{36,251}$",  # Personal Access Tokens
    r"^gho_[A-Za-z0-9_]{36,251}$",  # OAuth Access tokens
    r"^ghu_[A-Za-z0-9_]{36,251}$",  # GitHub App user-to-server tokens
    r"^ghs_[A-Za-z0-9_]{36,251}$",  # GitHub App server-to-server tokens
    r"^ghr_[A-Za-z0-9_]{36,251}$",  # GitHub App refresh tokens
    r"^github_pat_[A-Za-z0-9_]{36,243}$",  # Fine-grained PATs
)


def validate_github_token(token: str | None) -> bool:
    """Validate GitHub token format.

    Supports classic 40-character hexadecimal tokens and the prefixed
    formats (``ghp_``, ``gho_``, ``ghu_``, ``ghs_``, ``ghr_``,
    ``github_pat_``).

    Args:
        token: The token to validate. ``None`` is invalid.

    Returns:
        True if the token format is valid, False otherwise.

    """
    if not token or not isinstance(token, str):
        return False

    token = token.strip()
    if not token or len(token) > MAX_TOKEN_LENGTH:
        return False

    if re.match(r"^[a-f0-9]{40}$", token):
        return True

    return any(re.match(pattern, token) for pattern in _PREFIXED_PATTERNS)


class KeyringTokenStore:
    """Read-only access to a GitHub token kept in the system keyring."""

    def __init__(
        self,
        service: str = KEYRING_SERVICE,
        username: str = KEYRING_USERNAME,
    ) -> None:
        self.service = service
        self.username = username

    def get(self) -> str | None:
        """Return the stored token, or None when absent or unavailable.

        A missing or locked keyring backend (headless CI, containers) is not
        an error: the installer works unauthenticated.
        """
        try:
            token = keyring.get_password(self.service, self.username)
        except KeyringError as e:
            logger.debug("Keyring unavailable: %s", e)
            return None

        if token is None:
            return None
        if not validate_github_token(token):
            logger.warning("Ignoring malformed GitHub token from keyring")
            return None
        return token.strip()
