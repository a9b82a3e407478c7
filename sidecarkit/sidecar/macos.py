"""
macOS acquisition strategy.

macOS provisions both architectures regardless of the host:

- Apple Silicon (primary): pinned builds whose extracted binaries must match
  known SHA256 digests. Any failure here aborts the run.
- Intel x86_64 (secondary): best-effort builds from a third-party source.
  Failures are logged and the release continues Apple-Silicon-only.

The two pairs can be present or absent independently:

    arm64 \\ x86_64 | present                 | absent
    ----------------+-------------------------+------------------------------
    present         | aliases only            | aliases + secondary install
    absent          | primary install         | primary + secondary install
"""

import logging
from pathlib import Path
from typing import Dict, List

from sidecarkit.config.settings import ProvisionConfig
from sidecarkit.core.exceptions import ArchiveLayoutError, SidecarKitError
from sidecarkit.core.filesystem import (
    ensure_directory,
    ensure_symlink,
    install_file,
    temporary_directory,
)
from sidecarkit.core.platform import Arch, OSFamily
from sidecarkit.core.verification import ChecksumPolicy, verify_checksum
from sidecarkit.sidecar.artifacts import (
    BinaryArtifact,
    RemoteSource,
    macos_aliases,
    macos_artifacts,
)
from sidecarkit.sidecar.base import AcquisitionResult, AcquisitionStrategy

logger = logging.getLogger(__name__)


class MacOSStrategy(AcquisitionStrategy):
    """Provision Apple Silicon and Intel ffmpeg/ffprobe for macOS bundles."""

    os_family = OSFamily.MACOS

    def acquire(self, output_dir: Path, config: ProvisionConfig) -> AcquisitionResult:
        output_dir = ensure_directory(output_dir)
        result = self._new_result(output_dir)

        if self.target.arch is Arch.X86_64:
            logger.info("Intel Mac detected - will download binaries for both architectures.")

        by_arch = macos_artifacts(output_dir)
        arm64_present = all(a.is_present() for a in by_arch[Arch.ARM64])
        x64_present = all(a.is_present() for a in by_arch[Arch.X86_64])

        if arm64_present and x64_present:
            self._ensure_aliases(output_dir, result)
            logger.info("ffmpeg/ffprobe sidecars present for both architectures.")
            return result

        if arm64_present:
            self._ensure_aliases(output_dir, result)
            logger.info("ARM64 binaries present, downloading x86_64...")
            self._install_x64(by_arch[Arch.X86_64], config, result)
            return result

        self._install_arm64(by_arch[Arch.ARM64], output_dir, config, result)

        if x64_present:
            logger.info("x86_64 binaries already present.")
        else:
            logger.info("Downloading Intel x86_64 binaries for universal support...")
            self._install_x64(by_arch[Arch.X86_64], config, result)

        return result

    def _install_arm64(
        self,
        artifacts: List[BinaryArtifact],
        output_dir: Path,
        config: ProvisionConfig,
        result: AcquisitionResult,
    ) -> None:
        """Download, verify and place the pinned Apple Silicon binaries."""
        sources: Dict[str, RemoteSource] = {
            "ffmpeg": RemoteSource(
                config.ffmpeg_mac_url, config.ffmpeg_mac_bin_sha256, "macOS ffmpeg (binary)"
            ),
            "ffprobe": RemoteSource(
                config.ffprobe_mac_url, config.ffprobe_mac_bin_sha256, "macOS ffprobe (binary)"
            ),
        }

        with temporary_directory("fftools-", config.temp_root) as tmp:
            extracted = self._fetch_pair(sources, tmp, result)

            # OSXExperts zips hold a single top-level binary each
            if not all(path.is_file() for path in extracted.values()):
                raise ArchiveLayoutError(
                    "Downloaded archives did not contain expected ffmpeg/ffprobe binaries."
                )

            # The provider publishes digests of the binaries, not the zips
            for artifact in artifacts:
                source = sources[artifact.role]
                verify_checksum(
                    extracted[artifact.role],
                    source.sha256,
                    source.label,
                    ChecksumPolicy.REQUIRED,
                    hint=f"Provide {artifact.role.upper()}_MAC_BIN_SHA256 to pin the binary.",
                )

            for artifact in artifacts:
                install_file(extracted[artifact.role], artifact.path)
                result.installed.append(artifact.path)

        self._ensure_aliases(output_dir, result)
        logger.info("Installed macOS ARM64 sidecar binaries by download.")

    def _install_x64(
        self,
        artifacts: List[BinaryArtifact],
        config: ProvisionConfig,
        result: AcquisitionResult,
    ) -> None:
        """Best-effort install of the Intel binaries; never raises."""
        sources = {
            "ffmpeg": RemoteSource(config.ffmpeg_mac_x64_url, label="macOS x86_64 ffmpeg"),
            "ffprobe": RemoteSource(config.ffprobe_mac_x64_url, label="macOS x86_64 ffprobe"),
        }

        try:
            with temporary_directory("fftools-x64-", config.temp_root) as tmp:
                extracted = self._fetch_pair(sources, tmp, result)

                if not all(path.is_file() for path in extracted.values()):
                    result.warn(
                        "Could not extract x86_64 binaries; Intel Mac builds may fail."
                    )
                    return

                for artifact in artifacts:
                    install_file(extracted[artifact.role], artifact.path)
                    result.installed.append(artifact.path)

            logger.info("Installed macOS x86_64 sidecar binaries for Intel Mac support.")
        except (SidecarKitError, OSError) as e:
            result.warn(f"Failed to download x86_64 binaries: {e}")
            logger.warning("Intel Mac builds may fail. ARM64 binaries are still available.")

    def _fetch_pair(
        self, sources: Dict[str, RemoteSource], tmp: Path, result: AcquisitionResult
    ) -> Dict[str, Path]:
        """Download both zips, then extract both into tmp."""
        archives = {}
        for role, source in sources.items():
            archives[role] = self._download(source, tmp / f"{role}.zip", result)

        for archive in archives.values():
            self.extractor.extract(archive, tmp)

        return {role: tmp / role for role in sources}

    def _ensure_aliases(self, output_dir: Path, result: AcquisitionResult) -> None:
        for alias in macos_aliases(output_dir):
            if ensure_symlink(alias.target.path, alias.path):
                result.aliases.append(alias.path)


__all__ = ["MacOSStrategy"]
