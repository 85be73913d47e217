"""Tests for release tag resolution."""

import pytest

from gh_release_installer.core.auth import GitHubAuthManager
from gh_release_installer.core.resolver import (
    ReleaseResolver,
    is_latest,
    parse_release_tag,
    tag_variants,
)
from gh_release_installer.exceptions import ResolutionError
from tests.helpers import FakeFetcher, release_url, tag_body


class TestParseReleaseTag:
    """Test tag extraction from metadata bodies."""

    def test_json_body(self):
        """Test a JSON object yields its tag_name."""
        assert parse_release_tag(tag_body("v1.2.3")) == "v1.2.3"

    def test_pretty_printed_json(self):
        """Test whitespace and newlines around the field are accepted."""
        body = b'{\n  "id": 1,\n  "tag_name" :\n    "v2.0.0"\n}'
        assert parse_release_tag(body) == "v2.0.0"

    def test_substring_fallback(self):
        """Test a non-JSON body still yields the tag."""
        body = b'<html>{"id":1,"tag_name":"v3.1.0","draft":false}</html>'
        assert parse_release_tag(body) == "v3.1.0"

    def test_str_body(self):
        """Test text bodies are accepted."""
        assert parse_release_tag('{"tag_name":"1.0"}') == "1.0"

    @pytest.mark.parametrize(
        "body",
        [b"", b"Not Found", b'{"name":"x"}', b'{"tag_name":""}', b"[]"],
    )
    def test_missing_tag(self, body):
        """Test bodies without a usable tag raise ResolutionError."""
        with pytest.raises(ResolutionError):
            parse_release_tag(body)


class TestTagHelpers:
    """Test tag spelling helpers."""

    @pytest.mark.parametrize("requested", ["1.2.3", "v1.2.3"])
    def test_variants_prefixed_first(self, requested):
        """Test both spellings produce the same ordered variants."""
        assert tag_variants(requested) == ("v1.2.3", "1.2.3")

    @pytest.mark.parametrize("requested", [None, "", "latest"])
    def test_latest(self, requested):
        """Test the spellings that mean the newest release."""
        assert is_latest(requested)

    def test_explicit_is_not_latest(self):
        """Test an explicit version is not treated as latest."""
        assert not is_latest("v1.0.0")


class TestReleaseResolver:
    """Test ReleaseResolver against an in-memory fetcher."""

    @pytest.mark.asyncio
    async def test_latest_single_request(self, make_config):
        """Test latest resolves with exactly one metadata request."""
        fetcher = FakeFetcher({release_url("latest"): tag_body("v1.2.3")})
        resolver = ReleaseResolver(make_config(), fetcher)

        assert await resolver.resolve(None) == "v1.2.3"
        assert fetcher.calls == [release_url("latest")]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested", ["1.2.3", "v1.2.3"])
    async def test_prefix_tolerance(self, make_config, requested):
        """Test both spellings resolve to the canonical prefixed tag."""
        fetcher = FakeFetcher({release_url("v1.2.3"): tag_body("v1.2.3")})
        resolver = ReleaseResolver(make_config(), fetcher)

        assert await resolver.resolve(requested) == "v1.2.3"
        assert fetcher.calls == [release_url("v1.2.3")]

    @pytest.mark.asyncio
    async def test_unprefixed_release(self, make_config):
        """Test projects tagging without a prefix still resolve."""
        fetcher = FakeFetcher({release_url("1.2.3"): tag_body("1.2.3")})
        resolver = ReleaseResolver(make_config(), fetcher)

        assert await resolver.resolve("v1.2.3") == "1.2.3"
        assert fetcher.calls == [release_url("v1.2.3"), release_url("1.2.3")]

    @pytest.mark.asyncio
    async def test_body_without_tag_moves_on(self, make_config):
        """Test a 200 without tag_name is treated like a miss."""
        fetcher = FakeFetcher(
            {
                release_url("v1.2.3"): b"<html>rate limited</html>",
                release_url("1.2.3"): tag_body("1.2.3"),
            }
        )
        resolver = ReleaseResolver(make_config(), fetcher)

        assert await resolver.resolve("1.2.3") == "1.2.3"

    @pytest.mark.asyncio
    async def test_unresolvable(self, make_config):
        """Test ResolutionError lists every URL tried."""
        fetcher = FakeFetcher()
        resolver = ReleaseResolver(make_config(), fetcher)

        with pytest.raises(ResolutionError) as exc_info:
            await resolver.resolve("9.9.9")

        message = str(exc_info.value)
        assert release_url("v9.9.9") in message
        assert release_url("9.9.9") in message
        assert exc_info.value.target == "9.9.9"

    @pytest.mark.asyncio
    async def test_metadata_headers(self, make_config):
        """Test requests ask for JSON and carry the token when present."""
        fetcher = FakeFetcher({release_url("latest"): tag_body("v1")})
        resolver = ReleaseResolver(
            make_config(), fetcher, GitHubAuthManager("secret-token")
        )

        await resolver.resolve("latest")

        assert fetcher.headers[0] == {
            "Accept": "application/json",
            "Authorization": "Bearer secret-token",
        }

    @pytest.mark.asyncio
    async def test_anonymous_headers(self, make_config):
        """Test no Authorization header is sent without a token."""
        fetcher = FakeFetcher({release_url("latest"): tag_body("v1")})
        resolver = ReleaseResolver(make_config(), fetcher)

        await resolver.resolve()

        assert fetcher.headers[0] == {"Accept": "application/json"}
