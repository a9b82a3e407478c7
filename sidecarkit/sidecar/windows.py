"""
Windows acquisition strategy.

Downloads a single "latest" essentials zip, which must be verified before
anything is installed: the digest comes from ``FFMPEG_WIN_ZIP_SHA256`` or
from the ``.sha256`` file published next to the archive. With neither, the
run aborts.
"""

import logging
from pathlib import Path
from typing import Optional

from sidecarkit.config.settings import ProvisionConfig
from sidecarkit.core.exceptions import ArchiveLayoutError, DownloadError
from sidecarkit.core.filesystem import (
    ensure_copy,
    ensure_directory,
    find_prefixed_directory,
    install_file,
    temporary_directory,
)
from sidecarkit.core.platform import OSFamily
from sidecarkit.core.verification import (
    ChecksumPolicy,
    parse_checksum_text,
    verify_checksum,
)
from sidecarkit.sidecar.artifacts import RemoteSource, windows_aliases, windows_artifacts
from sidecarkit.sidecar.base import AcquisitionResult, AcquisitionStrategy

logger = logging.getLogger(__name__)

MISSING_CHECKSUM_HINT = (
    "Provide FFMPEG_WIN_ZIP_SHA256 env to pin a known archive, "
    "or ensure the .sha256 file is accessible.\n"
    "Example: FFMPEG_WIN_URL + FFMPEG_WIN_ZIP_SHA256."
)


class WindowsStrategy(AcquisitionStrategy):
    """Provision ffmpeg.exe/ffprobe.exe and their bundler aliases."""

    os_family = OSFamily.WINDOWS

    def acquire(self, output_dir: Path, config: ProvisionConfig) -> AcquisitionResult:
        output_dir = ensure_directory(output_dir)
        result = self._new_result(output_dir)
        artifacts = windows_artifacts(output_dir)

        if all(a.is_present() for a in artifacts):
            self._ensure_aliases(output_dir, result)
            logger.info("ffmpeg/ffprobe sidecars present. Copies ensured.")
            return result

        source = RemoteSource(config.ffmpeg_win_url, config.ffmpeg_win_zip_sha256, "Windows ffmpeg.zip")

        with temporary_directory("fftools-", config.temp_root) as tmp:
            archive = self._download(source, tmp / "ffmpeg.zip", result)

            expected = source.sha256 or self._fetch_published_checksum(source.url, tmp, result)
            verify_checksum(
                archive, expected, source.label, ChecksumPolicy.REQUIRED, hint=MISSING_CHECKSUM_HINT
            )

            out_dir = tmp / "out"
            self.extractor.extract(archive, out_dir)

            root = find_prefixed_directory(out_dir, "ffmpeg-", case_sensitive=False)
            if root is None:
                raise ArchiveLayoutError("Unexpected archive structure for Windows ffmpeg build.")

            bin_dir = root / "bin"
            sources = {a.role: bin_dir / f"{a.role}.exe" for a in artifacts}
            if not all(path.is_file() for path in sources.values()):
                raise ArchiveLayoutError("Downloaded Windows archive missing ffmpeg.exe/ffprobe.exe")

            for artifact in artifacts:
                install_file(sources[artifact.role], artifact.path, executable=False)
                result.installed.append(artifact.path)

        self._ensure_aliases(output_dir, result)
        logger.info("Installed Windows sidecar binaries by download.")
        return result

    def _fetch_published_checksum(
        self, archive_url: str, tmp: Path, result: AcquisitionResult
    ) -> Optional[str]:
        """
        Read the digest from ``<archive_url>.sha256``.

        Returns:
            Digest, or None if the file cannot be fetched or parsed
        """
        sha_url = f"{archive_url}.sha256"
        sha_file = tmp / "ffmpeg.zip.sha256"
        try:
            self._download(RemoteSource(sha_url), sha_file, result)
        except DownloadError as e:
            logger.debug(f"No published checksum at {sha_url}: {e}")
            return None

        # Typical format: <sha256> *ffmpeg-release-essentials.zip
        digest = parse_checksum_text(sha_file.read_text(encoding="utf-8", errors="replace"))
        if digest is None:
            logger.debug(f"Could not parse checksum from {sha_url}")
        return digest

    def _ensure_aliases(self, output_dir: Path, result: AcquisitionResult) -> None:
        for alias in windows_aliases(output_dir):
            if ensure_copy(alias.target.path, alias.path):
                result.aliases.append(alias.path)


__all__ = ["WindowsStrategy"]
