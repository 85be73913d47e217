"""Shared test helpers: an in-memory Fetcher and release URL builders."""

import hashlib

from gh_release_installer.domain.platform import Platform

BASE_URL = "https://example.test"
HOST = Platform("linux", "amd64")


class FakeFetcher:
    """In-memory Fetcher that records every request.

    ``routes`` maps a URL to its body; any other URL is "not found".
    """

    def __init__(self, routes: dict[str, bytes] | None = None) -> None:
        self.routes: dict[str, bytes] = dict(routes or {})
        self.calls: list[str] = []
        self.headers: list[dict[str, str] | None] = []

    async def fetch(self, url, headers=None):
        self.calls.append(url)
        self.headers.append(headers)
        return self.routes.get(url)

    async def fetch_to_file(self, url, dest, headers=None):
        self.calls.append(url)
        self.headers.append(headers)
        body = self.routes.get(url)
        if body is None:
            return False
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(body)
        return True

    def count(self, url: str) -> int:
        """Number of requests made for ``url``."""
        return self.calls.count(url)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def release_url(tag_ref: str, owner: str = "acme", repo: str = "widget"):
    return f"{BASE_URL}/{owner}/{repo}/releases/{tag_ref}"


def download_url(
    tag: str, filename: str, owner: str = "acme", repo: str = "widget"
):
    return f"{BASE_URL}/{owner}/{repo}/releases/download/{tag}/{filename}"


def tag_body(tag: str) -> bytes:
    return f'{{"tag_name":"{tag}","name":"Release {tag}"}}'.encode()
