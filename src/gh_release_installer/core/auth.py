"""GitHub authentication header management.

``GitHubAuthManager`` decides which headers accompany release metadata
requests. Asset downloads are sent without credentials: they are served
from public URLs and redirect to a storage host.
"""

from gh_release_installer.constants import METADATA_ACCEPT_HEADER
from gh_release_installer.logger import get_logger

logger = get_logger(__name__)


class GitHubAuthManager:
    """Apply optional GitHub authentication to request headers."""

    def __init__(self, token: str | None = None) -> None:
        """Initialize the auth manager.

        Args:
            token: GitHub token from the configuration, if any

        """
        self._token = token.strip() if token else None
        self._user_notified = False

    def apply_auth(self, headers: dict[str, str]) -> dict[str, str]:
        """Apply GitHub authentication to the given request headers.

        When no token is configured the user is told once per run that
        anonymous rate limits apply.

        Args:
            headers: HTTP headers to update

        Returns:
            The same headers, with Authorization set when a token exists

        """
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
            logger.debug("Applied GitHub authentication (token present)")
        elif not self._user_notified:
            self._user_notified = True
            logger.debug(
                "No GitHub token configured; anonymous rate limits apply"
            )
        return headers

    def metadata_headers(self) -> dict[str, str]:
        """Headers for release metadata requests."""
        return self.apply_auth({"Accept": METADATA_ACCEPT_HEADER})
