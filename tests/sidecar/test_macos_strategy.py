"""
Tests for the macOS acquisition strategy.

The fetcher is in-memory; archives are real zips built in the test, so
extraction, verification and placement all run for real.
"""

import logging
import os
import stat
from unittest.mock import patch

import pytest

from sidecarkit.config.settings import CONFIG_FILENAME, load_config_file
from sidecarkit.core.exceptions import (
    ArchiveLayoutError,
    ChecksumMismatchError,
    ChecksumUnavailableError,
    DownloadError,
)
from sidecarkit.core.download import default_fetcher
from sidecarkit.sidecar.macos import MacOSStrategy
from tests.fixtures.archives import (
    FFMPEG_BYTES,
    FFPROBE_BYTES,
    mac_binary_zip,
    sha256_of,
    zip_bytes,
)
from tests.mocks.network import MockFetcher

pytestmark = pytest.mark.skipif(os.name == "nt", reason="macOS layout uses symlinks")

X64_FFMPEG = b"intel ffmpeg"
X64_FFPROBE = b"intel ffprobe"

ARM64_FILES = ["ffmpeg", "ffprobe"]
X64_FILES = ["ffmpeg-x86_64-apple-darwin", "ffprobe-x86_64-apple-darwin"]
ALIASES = ["ffmpeg-aarch64-apple-darwin", "ffprobe-aarch64-apple-darwin"]


@pytest.fixture
def mac_config(config):
    """Configuration pinned to the digests of the fake binaries."""
    return config.replace(
        ffmpeg_mac_bin_sha256=sha256_of(FFMPEG_BYTES),
        ffprobe_mac_bin_sha256=sha256_of(FFPROBE_BYTES),
    )


@pytest.fixture
def fetcher(mac_config, mac_archives):
    """Fetcher serving all four macOS archives."""
    return MockFetcher(
        {
            mac_config.ffmpeg_mac_url: mac_archives["ffmpeg"],
            mac_config.ffprobe_mac_url: mac_archives["ffprobe"],
            mac_config.ffmpeg_mac_x64_url: mac_binary_zip("ffmpeg", X64_FFMPEG),
            mac_config.ffprobe_mac_x64_url: mac_binary_zip("ffprobe", X64_FFPROBE),
        }
    )


@pytest.fixture
def strategy(mac_arm64, fetcher):
    return MacOSStrategy(mac_arm64, fetcher=fetcher)


def _place(output_dir, names, content=b"existing"):
    output_dir.mkdir(parents=True, exist_ok=True)
    for name in names:
        (output_dir / name).write_bytes(content)


class TestFreshInstall:
    """Empty output directory: both architectures are installed."""

    def test_installs_both_architectures(self, strategy, output_dir, mac_config):
        result = strategy.acquire(output_dir, mac_config)

        assert (output_dir / "ffmpeg").read_bytes() == FFMPEG_BYTES
        assert (output_dir / "ffprobe").read_bytes() == FFPROBE_BYTES
        assert (output_dir / "ffmpeg-x86_64-apple-darwin").read_bytes() == X64_FFMPEG
        assert (output_dir / "ffprobe-x86_64-apple-darwin").read_bytes() == X64_FFPROBE
        assert not result.degraded
        assert len(result.downloads) == 4

    def test_binaries_are_executable(self, strategy, output_dir, mac_config):
        strategy.acquire(output_dir, mac_config)

        for name in ARM64_FILES + X64_FILES:
            mode = (output_dir / name).stat().st_mode
            assert mode & stat.S_IXUSR, name

    def test_aliases_are_relative_symlinks(self, strategy, output_dir, mac_config):
        strategy.acquire(output_dir, mac_config)

        for alias, target in zip(ALIASES, ARM64_FILES):
            link = output_dir / alias
            assert link.is_symlink()
            assert os.readlink(link) == target
            assert link.read_bytes() == (output_dir / target).read_bytes()

    def test_primary_downloaded_before_secondary(self, strategy, fetcher, output_dir, mac_config):
        strategy.acquire(output_dir, mac_config)

        assert fetcher.request_history == [
            mac_config.ffmpeg_mac_url,
            mac_config.ffprobe_mac_url,
            mac_config.ffmpeg_mac_x64_url,
            mac_config.ffprobe_mac_x64_url,
        ]

    def test_temp_directories_removed(self, strategy, output_dir, mac_config, temp_root):
        strategy.acquire(output_dir, mac_config)

        assert list(temp_root.iterdir()) == []

    def test_second_run_downloads_nothing(self, strategy, fetcher, output_dir, mac_config, caplog):
        strategy.acquire(output_dir, mac_config)
        fetcher.request_history.clear()

        with caplog.at_level(logging.INFO):
            result = strategy.acquire(output_dir, mac_config)

        assert fetcher.request_history == []
        assert result.downloads == []
        assert result.installed == []
        assert "present for both architectures" in caplog.text

    def test_intel_host_logged(self, mac_x64, fetcher, output_dir, mac_config, caplog):
        with caplog.at_level(logging.INFO):
            MacOSStrategy(mac_x64, fetcher=fetcher).acquire(output_dir, mac_config)

        assert "Intel Mac detected" in caplog.text
        assert (output_dir / "ffmpeg").exists()


class TestPartialPresence:
    """Either architecture pair may already be present."""

    def test_arm64_present_fetches_only_intel(self, strategy, fetcher, output_dir, mac_config):
        _place(output_dir, ARM64_FILES)

        result = strategy.acquire(output_dir, mac_config)

        assert fetcher.request_history == [
            mac_config.ffmpeg_mac_x64_url,
            mac_config.ffprobe_mac_x64_url,
        ]
        assert (output_dir / "ffmpeg").read_bytes() == b"existing"
        assert (output_dir / "ffmpeg-x86_64-apple-darwin").read_bytes() == X64_FFMPEG
        assert sorted(p.name for p in result.aliases) == sorted(ALIASES)

    def test_intel_present_fetches_only_arm64(self, strategy, fetcher, output_dir, mac_config, caplog):
        _place(output_dir, X64_FILES)

        with caplog.at_level(logging.INFO):
            strategy.acquire(output_dir, mac_config)

        assert fetcher.request_history == [
            mac_config.ffmpeg_mac_url,
            mac_config.ffprobe_mac_url,
        ]
        assert (output_dir / "ffmpeg-x86_64-apple-darwin").read_bytes() == b"existing"
        assert "x86_64 binaries already present" in caplog.text

    def test_both_present_repairs_aliases(self, strategy, output_dir, mac_config):
        _place(output_dir, ARM64_FILES + X64_FILES)

        strategy.acquire(output_dir, mac_config)

        for alias in ALIASES:
            assert (output_dir / alias).is_symlink()

    def test_one_missing_binary_counts_as_absent(self, strategy, fetcher, output_dir, mac_config):
        _place(output_dir, ["ffmpeg"] + X64_FILES)

        strategy.acquire(output_dir, mac_config)

        assert mac_config.ffmpeg_mac_url in fetcher.request_history
        assert (output_dir / "ffprobe").read_bytes() == FFPROBE_BYTES


class TestPrimaryFailures:
    """Apple Silicon failures abort the run."""

    def test_mismatch_aborts_before_copy(self, fetcher, mac_arm64, output_dir, mac_config, temp_root):
        config = mac_config.replace(ffprobe_mac_bin_sha256="0" * 64)

        with pytest.raises(ChecksumMismatchError, match="macOS ffprobe"):
            MacOSStrategy(mac_arm64, fetcher=fetcher).acquire(output_dir, config)

        assert list(output_dir.iterdir()) == []
        assert list(temp_root.iterdir()) == []

    def test_missing_digest_fails_closed(self, fetcher, mac_arm64, output_dir, mac_config):
        config = mac_config.replace(ffmpeg_mac_bin_sha256=None)

        with pytest.raises(ChecksumUnavailableError, match="FFMPEG_MAC_BIN_SHA256"):
            MacOSStrategy(mac_arm64, fetcher=fetcher).acquire(output_dir, config)

        assert list(output_dir.iterdir()) == []

    def test_download_failure_propagates(self, fetcher, strategy, output_dir, mac_config, temp_root):
        fetcher.fail(mac_config.ffprobe_mac_url)

        with pytest.raises(DownloadError):
            strategy.acquire(output_dir, mac_config)

        assert list(output_dir.iterdir()) == []
        assert list(temp_root.iterdir()) == []

    def test_archive_without_binary(self, fetcher, strategy, output_dir, mac_config):
        fetcher.add_response(mac_config.ffmpeg_mac_url, zip_bytes({"readme.txt": b"x"}))

        with pytest.raises(ArchiveLayoutError, match="did not contain expected"):
            strategy.acquire(output_dir, mac_config)

    def test_secondary_not_attempted_after_primary_failure(self, fetcher, strategy, output_dir, mac_config):
        fetcher.fail(mac_config.ffmpeg_mac_url)

        with pytest.raises(DownloadError):
            strategy.acquire(output_dir, mac_config)

        assert mac_config.ffmpeg_mac_x64_url not in fetcher.request_history


class TestSecondaryFailures:
    """Intel failures degrade to warnings."""

    def test_intel_server_down(self, fetcher, strategy, output_dir, mac_config, temp_root, caplog):
        fetcher.fail(mac_config.ffmpeg_mac_x64_url)

        with caplog.at_level(logging.WARNING):
            result = strategy.acquire(output_dir, mac_config)

        assert result.degraded
        assert "Failed to download x86_64 binaries" in result.warnings[0]
        assert "ARM64 binaries are still available" in caplog.text
        assert (output_dir / "ffmpeg").exists()
        assert (output_dir / "ffmpeg-aarch64-apple-darwin").is_symlink()
        assert not (output_dir / "ffmpeg-x86_64-apple-darwin").exists()
        assert list(temp_root.iterdir()) == []

    def test_intel_archive_without_binaries(self, fetcher, strategy, output_dir, mac_config):
        fetcher.add_response(mac_config.ffprobe_mac_x64_url, zip_bytes({"other": b"x"}))

        result = strategy.acquire(output_dir, mac_config)

        assert result.warnings == [
            "Could not extract x86_64 binaries; Intel Mac builds may fail."
        ]
        assert not (output_dir / "ffmpeg-x86_64-apple-darwin").exists()

    def test_intel_corrupt_archive(self, fetcher, strategy, output_dir, mac_config):
        fetcher.add_response(mac_config.ffmpeg_mac_x64_url, b"not a zip")

        result = strategy.acquire(output_dir, mac_config)

        assert result.degraded
        assert (output_dir / "ffprobe").exists()

    def test_empty_intel_url_with_real_fetchers(self, mac_arm64, output_dir, mac_config):
        _place(output_dir, ARM64_FILES)
        config = mac_config.replace(ffmpeg_mac_x64_url="")

        with patch("sidecarkit.core.download.subprocess.run") as mock_run:
            result = MacOSStrategy(mac_arm64, fetcher=default_fetcher()).acquire(
                output_dir, config
            )

        mock_run.assert_not_called()
        assert result.degraded
        assert "URL cannot be empty" in result.warnings[0]
        assert (output_dir / "ffmpeg-aarch64-apple-darwin").is_symlink()
        assert not (output_dir / "ffmpeg-x86_64-apple-darwin").exists()

    def test_empty_intel_url_in_config_file_keeps_default(self, tmp_path, strategy, fetcher, output_dir):
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text('sources:\n  FFMPEG_MAC_X64_URL: ""\n')
        _place(output_dir, ARM64_FILES)

        config = load_config_file(config_file).replace(temp_root=tmp_path / "scratch")
        result = strategy.acquire(output_dir, config)

        assert not result.degraded
        assert fetcher.request_history == [
            config.ffmpeg_mac_x64_url,
            config.ffprobe_mac_x64_url,
        ]
        assert (output_dir / "ffmpeg-x86_64-apple-darwin").read_bytes() == X64_FFMPEG
