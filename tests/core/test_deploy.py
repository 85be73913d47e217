"""Tests for the install and launch pipelines."""

import io
import os
import tarfile
from unittest.mock import patch

import pytest

from gh_release_installer.core.cache import CacheManager, SlotState
from gh_release_installer.core.deploy import Deployer, install_file
from gh_release_installer.core.verification import compute_sha256
from gh_release_installer.domain.platform import Platform
from gh_release_installer.exceptions import (
    ChecksumMismatchError,
    ConfigurationError,
    DownloadError,
    UnsupportedFormatError,
)
from tests.helpers import (
    HOST,
    FakeFetcher,
    download_url,
    release_url,
    sha256_hex,
    tag_body,
)

TAG = "v1.2.3"
RAW_NAME = "widget-v1.2.3-linux-amd64"
TAR_NAME = f"{RAW_NAME}.tar.gz"
BINARY = b"#!/bin/sh\necho widget\n"


def tar_gz_bytes(members):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


ARCHIVE = tar_gz_bytes({f"{RAW_NAME}/widget": BINARY})


def publish_metadata(fetcher, tag=TAG):
    fetcher.routes[release_url(tag)] = tag_body(tag)
    fetcher.routes[release_url("latest")] = tag_body(tag)


def publish_raw(fetcher, content=BINARY, digest=None):
    publish_metadata(fetcher)
    fetcher.routes[download_url(TAG, RAW_NAME)] = content
    fetcher.routes[download_url(TAG, f"{RAW_NAME}.sha256")] = (
        f"{digest or sha256_hex(content)}\n".encode()
    )


def publish_tar(fetcher, content=ARCHIVE, digest=None):
    """Publish a tar.gz asset verified through a SHA256SUMS manifest."""
    publish_metadata(fetcher)
    fetcher.routes[download_url(TAG, TAR_NAME)] = content
    fetcher.routes[download_url(TAG, "SHA256SUMS")] = (
        f"{'0' * 64}  widget-v1.2.3-darwin-arm64.tar.gz\n"
        f"{digest or sha256_hex(content)}  {TAR_NAME}\n"
    ).encode()


class TestPreflight:
    """Test checks that must happen before any request."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["install", "prepare_launch"])
    @pytest.mark.parametrize(
        "platform",
        [Platform("windows", "amd64"), Platform("linux", "386")],
    )
    async def test_unsupported_platform_makes_no_requests(
        self, make_config, platform, action
    ):
        """Test a platform outside the allow-list aborts with zero fetches."""
        fetcher = FakeFetcher()
        publish_tar(fetcher)
        deployer = Deployer(make_config(), fetcher, platform=platform)

        with pytest.raises(ConfigurationError):
            await getattr(deployer, action)(TAG)

        assert fetcher.calls == []

    @pytest.mark.parametrize(
        "platform",
        [
            Platform("linux", "amd64"),
            Platform("linux", "arm64"),
            Platform("darwin", "arm64"),
        ],
    )
    def test_allowed_platforms(self, make_config, platform):
        """Test every allow-listed platform passes the preflight."""
        Deployer(make_config(), FakeFetcher(), platform=platform).preflight()

    @pytest.mark.asyncio
    async def test_unsupported_format_makes_no_requests(self, make_config):
        """Test an unknown format aborts with zero fetches."""
        fetcher = FakeFetcher()
        deployer = Deployer(
            make_config(archive_format="7z"), fetcher, platform=HOST
        )

        with pytest.raises(UnsupportedFormatError):
            await deployer.install(TAG)

        assert fetcher.calls == []


class TestInstall:
    """Test install mode."""

    @pytest.mark.asyncio
    async def test_raw_round_trip(self, make_config):
        """Test the installed file re-hashes to the verified digest."""
        config = make_config(archive_format="bin")
        fetcher = FakeFetcher()
        publish_raw(fetcher)

        dest = await Deployer(config, fetcher, platform=HOST).install(TAG)

        assert dest == config.install_dir / "widget"
        assert compute_sha256(dest) == sha256_hex(BINARY)
        assert os.access(dest, os.X_OK)
        assert dest.stat().st_mode & 0o777 == 0o755

    @pytest.mark.asyncio
    async def test_archive_install(self, make_config):
        """Test the binary is located in the archive and installed."""
        config = make_config()
        fetcher = FakeFetcher()
        publish_tar(fetcher)

        dest = await Deployer(config, fetcher, platform=HOST).install()

        assert dest.read_bytes() == BINARY
        assert os.access(dest, os.X_OK)
        assert fetcher.calls[0] == release_url("latest")

    @pytest.mark.asyncio
    async def test_replaces_existing_binary(self, make_config):
        """Test an older installed binary is overwritten."""
        config = make_config()
        config.install_dir.mkdir(parents=True)
        (config.install_dir / "widget").write_bytes(b"old")
        fetcher = FakeFetcher()
        publish_tar(fetcher)

        dest = await Deployer(config, fetcher, platform=HOST).install(TAG)

        assert dest.read_bytes() == BINARY
        assert sorted(p.name for p in config.install_dir.iterdir()) == [
            "widget"
        ]

    @pytest.mark.asyncio
    async def test_mismatch_leaves_nothing_installed(self, make_config):
        """Test a failed verification writes nothing to the install dir."""
        config = make_config()
        fetcher = FakeFetcher()
        publish_tar(fetcher, digest="f" * 64)

        with pytest.raises(ChecksumMismatchError):
            await Deployer(config, fetcher, platform=HOST).install(TAG)

        assert not (config.install_dir / "widget").exists()

    @pytest.mark.asyncio
    async def test_unreachable_checksum(self, make_config):
        """Test every checksum 404 fails with DownloadError before hashing."""
        config = make_config()
        fetcher = FakeFetcher()
        publish_metadata(fetcher)
        fetcher.routes[download_url(TAG, TAR_NAME)] = ARCHIVE

        with patch(
            "gh_release_installer.core.verification.verifier.compute_sha256"
        ) as mock_hash:
            with pytest.raises(DownloadError) as exc_info:
                await Deployer(config, fetcher, platform=HOST).install(TAG)

        mock_hash.assert_not_called()
        assert exc_info.value.candidates == (
            f"{TAR_NAME}.sha256",
            f"{TAR_NAME}.tar.gz.sha256",
            "SHA256SUMS",
            "checksums.txt",
        )
        assert not (config.install_dir / "widget").exists()


class TestPrepareLaunch:
    """Test launch mode and its cache behavior."""

    @pytest.mark.asyncio
    async def test_first_run_fills_slot(self, make_config):
        """Test a cold cache is downloaded, verified and extracted."""
        config = make_config()
        fetcher = FakeFetcher()
        publish_tar(fetcher)
        cache = CacheManager(config.cache_root)

        executable = await Deployer(
            config, fetcher, platform=HOST, cache=cache
        ).prepare_launch(TAG)

        slot = cache.slot("acme", "widget", TAG, HOST, TAR_NAME, "widget")
        assert executable == slot.binary_path
        assert executable.read_bytes() == BINARY
        assert cache.slot_state(slot) is SlotState.EXTRACTED
        assert cache.read_witness(slot)["sha256"] == sha256_hex(ARCHIVE)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested", ["v1.2.3", "1.2.3"])
    async def test_cache_reuse_makes_no_requests(self, make_config, requested):
        """Test a second launch against an extracted slot is offline."""
        config = make_config()
        first = FakeFetcher()
        publish_tar(first)
        expected = await Deployer(
            config, first, platform=HOST
        ).prepare_launch(TAG)

        second = FakeFetcher()
        executable = await Deployer(
            config, second, platform=HOST
        ).prepare_launch(requested)

        assert executable == expected
        assert second.calls == []

    @pytest.mark.asyncio
    async def test_latest_reuse_only_resolves(self, make_config):
        """Test latest needs the tag lookup but nothing else."""
        config = make_config()
        fetcher = FakeFetcher()
        publish_tar(fetcher)
        deployer = Deployer(config, fetcher, platform=HOST)
        await deployer.prepare_launch(None)

        fetcher.calls.clear()
        await deployer.prepare_launch(None)

        assert fetcher.calls == [release_url("latest")]

    @pytest.mark.asyncio
    async def test_prefix_tolerance_shares_slot(self, tmp_path, make_config):
        """Test 1.2.3 and v1.2.3 resolve into the same slot."""
        paths = []
        for index, requested in enumerate(("1.2.3", "v1.2.3")):
            config = make_config(cache_root=tmp_path / f"cache{index}")
            fetcher = FakeFetcher()
            publish_tar(fetcher)
            executable = await Deployer(
                config, fetcher, platform=HOST
            ).prepare_launch(requested)
            paths.append(executable.relative_to(config.cache_root))

        assert paths[0] == paths[1]
        assert paths[0].parts[:3] == ("acme", "widget", TAG)

    @pytest.mark.asyncio
    async def test_corrupted_cache_redownloads_once(
        self, make_config, caplog
    ):
        """Test a tampered cached asset triggers one fresh download."""
        config = make_config()
        cache = CacheManager(config.cache_root)
        slot = cache.slot("acme", "widget", TAG, HOST, TAR_NAME, "widget")
        tampered = bytearray(ARCHIVE)
        tampered[10] ^= 0xFF
        assert bytes(tampered) != ARCHIVE
        slot.asset_path.write_bytes(bytes(tampered))
        slot.checksum_path.write_text(f"{sha256_hex(ARCHIVE)}  {TAR_NAME}\n")
        assert cache.slot_state(slot) is SlotState.DOWNLOADED

        fetcher = FakeFetcher()
        publish_tar(fetcher)
        executable = await Deployer(
            config, fetcher, platform=HOST, cache=cache
        ).prepare_launch(TAG)

        assert fetcher.count(download_url(TAG, TAR_NAME)) == 1
        assert executable.read_bytes() == BINARY
        assert compute_sha256(slot.asset_path) == sha256_hex(ARCHIVE)
        assert "cached asset checksum failed; re-downloading" in caplog.text

    @pytest.mark.asyncio
    async def test_persistent_corruption_fails_after_one_retry(
        self, make_config
    ):
        """Test a remote that never verifies is fetched exactly twice."""
        config = make_config()
        fetcher = FakeFetcher()
        publish_tar(fetcher, digest="e" * 64)
        cache = CacheManager(config.cache_root)

        with pytest.raises(ChecksumMismatchError):
            await Deployer(
                config, fetcher, platform=HOST, cache=cache
            ).prepare_launch(TAG)

        assert fetcher.count(download_url(TAG, TAR_NAME)) == 2
        slot = cache.slot("acme", "widget", TAG, HOST, TAR_NAME, "widget")
        assert not cache.has_valid_executable(slot)

    @pytest.mark.asyncio
    async def test_downloaded_slot_is_reused(self, make_config):
        """Test an intact downloaded slot is verified without a download."""
        config = make_config()
        cache = CacheManager(config.cache_root)
        slot = cache.slot("acme", "widget", TAG, HOST, TAR_NAME, "widget")
        slot.asset_path.write_bytes(ARCHIVE)
        slot.checksum_path.write_text(f"{sha256_hex(ARCHIVE)}  {TAR_NAME}\n")

        fetcher = FakeFetcher()
        publish_tar(fetcher)
        await Deployer(
            config, fetcher, platform=HOST, cache=cache
        ).prepare_launch(TAG)

        assert fetcher.calls == [release_url(TAG)]

    @pytest.mark.asyncio
    async def test_verified_slot_is_extracted_without_download(
        self, make_config
    ):
        """Test a verified but unextracted slot only needs extraction."""
        config = make_config()
        cache = CacheManager(config.cache_root)
        slot = cache.slot("acme", "widget", TAG, HOST, TAR_NAME, "widget")
        slot.asset_path.write_bytes(ARCHIVE)
        slot.checksum_path.write_text(f"{sha256_hex(ARCHIVE)}  {TAR_NAME}\n")
        cache.write_witness(slot, sha256_hex(ARCHIVE))
        assert cache.slot_state(slot) is SlotState.VERIFIED

        fetcher = FakeFetcher()
        publish_tar(fetcher)
        executable = await Deployer(
            config, fetcher, platform=HOST, cache=cache
        ).prepare_launch(None)

        assert fetcher.calls == [release_url("latest")]
        assert executable.read_bytes() == BINARY
        assert cache.slot_state(slot) is SlotState.EXTRACTED

    @pytest.mark.asyncio
    async def test_raw_asset_named_like_binary(self, make_config):
        """Test a raw asset that is its own binary is made executable."""
        config = make_config(archive_format="bin", name_template="{project}")
        fetcher = FakeFetcher()
        publish_metadata(fetcher)
        fetcher.routes[download_url(TAG, "widget")] = BINARY
        fetcher.routes[download_url(TAG, "widget.sha256")] = (
            f"{sha256_hex(BINARY)}  widget\n".encode()
        )

        executable = await Deployer(
            config, fetcher, platform=HOST
        ).prepare_launch(TAG)

        assert executable.name == "widget"
        assert os.access(executable, os.X_OK)
        assert executable.read_bytes() == BINARY


class TestInstallFile:
    """Test the atomic copy helper."""

    def test_copy_sets_mode(self, tmp_path):
        """Test the destination is a 0o755 copy and no temp file remains."""
        source = tmp_path / "src"
        source.write_bytes(b"data")
        dest = tmp_path / "out" / "tool"

        install_file(source, dest)

        assert dest.read_bytes() == b"data"
        assert dest.stat().st_mode & 0o777 == 0o755
        assert [p.name for p in dest.parent.iterdir()] == ["tool"]

    def test_failed_copy_cleans_up(self, tmp_path):
        """Test a failed copy leaves neither dest nor a temp file."""
        dest = tmp_path / "out" / "tool"

        with pytest.raises(FileNotFoundError):
            install_file(tmp_path / "missing", dest)

        assert list(dest.parent.iterdir()) == []
