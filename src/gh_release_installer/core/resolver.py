"""Release tag resolution.

Turns a requested version (``latest``, ``v1.2.3`` or ``1.2.3``) into the
canonical tag reported by GitHub. The metadata endpoint is the release page
requested with ``Accept: application/json``; its body is not a documented
API, so tag extraction is isolated in :func:`parse_release_tag`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import orjson

from gh_release_installer.core.auth import GitHubAuthManager
from gh_release_installer.exceptions import ResolutionError
from gh_release_installer.logger import get_logger

if TYPE_CHECKING:
    from gh_release_installer.config import ProjectConfig
    from gh_release_installer.core.fetch import Fetcher

logger = get_logger(__name__)

LATEST = "latest"
VERSION_PREFIX = "v"

_TAG_NAME_PATTERN = re.compile(rb'"tag_name"\s*:\s*"([^"]*)"')


def parse_release_tag(raw_body: bytes | str) -> str:
    """Extract ``tag_name`` from a release metadata body.

    Structured JSON is tried first; bodies that are not valid JSON (or are
    not objects) fall back to a substring match on ``"tag_name":"..."``.

    Args:
        raw_body: Response body

    Returns:
        Non-empty tag name

    Raises:
        ResolutionError: If no tag can be extracted.

    """
    body = raw_body.encode() if isinstance(raw_body, str) else raw_body

    try:
        data = orjson.loads(body)
    except orjson.JSONDecodeError:
        data = None

    if isinstance(data, dict):
        tag = data.get("tag_name")
        if isinstance(tag, str) and tag.strip():
            return tag.strip()

    match = _TAG_NAME_PATTERN.search(body.replace(b"\n", b""))
    if match:
        tag = match.group(1).decode("utf-8", errors="replace").strip()
        if tag:
            return tag

    msg = "release metadata has no tag_name"
    raise ResolutionError(msg)


def is_latest(requested: str | None) -> bool:
    """Return whether ``requested`` means the newest release."""
    return not requested or requested == LATEST


def tag_variants(requested: str) -> tuple[str, ...]:
    """Return the prefixed then unprefixed forms of a requested version.

    >>> tag_variants("1.2.3")
    ('v1.2.3', '1.2.3')
    >>> tag_variants("v1.2.3")
    ('v1.2.3', '1.2.3')
    """
    bare = requested.removeprefix(VERSION_PREFIX)
    return (f"{VERSION_PREFIX}{bare}", bare)


class ReleaseResolver:
    """Resolve requested versions to canonical release tags."""

    def __init__(
        self,
        config: ProjectConfig,
        fetcher: Fetcher,
        auth_manager: GitHubAuthManager | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Project configuration
            fetcher: Fetcher used for metadata requests
            auth_manager: Optional auth manager (defaults to the config token)

        """
        self.config = config
        self.fetcher = fetcher
        self.auth_manager = auth_manager or GitHubAuthManager(
            config.github_token
        )

    def release_url(self, ref: str) -> str:
        """Release metadata URL for ``ref`` (a tag or ``latest``)."""
        return (
            f"{self.config.github_url}/{self.config.owner_repo}/releases/{ref}"
        )

    async def resolve(self, requested: str | None = None) -> str:
        """Resolve ``requested`` to the canonical release tag.

        Args:
            requested: Version reference; None, empty or ``latest`` selects
                the newest release

        Returns:
            Canonical tag as reported by GitHub

        Raises:
            ResolutionError: If no candidate URL yields a tag.

        """
        if is_latest(requested):
            urls = [self.release_url(LATEST)]
        else:
            urls = [self.release_url(tag) for tag in tag_variants(requested)]

        headers = self.auth_manager.metadata_headers()
        for url in urls:
            body = await self.fetcher.fetch(url, dict(headers))
            if body is None:
                continue
            try:
                tag = parse_release_tag(body)
            except ResolutionError:
                logger.debug("No tag_name in response from %s", url)
                continue
            logger.debug("Resolved '%s' to tag %s", requested or LATEST, tag)
            return tag

        msg = f"cannot resolve tag (tried: {' '.join(urls)})"
        raise ResolutionError(msg, requested or LATEST)
