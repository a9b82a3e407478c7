"""
Linux acquisition strategy.

Installs static builds named after the host triple
(``ffmpeg-aarch64-unknown-linux-gnu`` etc.). The archive is not
checksum-verified: the upstream "latest" builds publish no stable digest.
"""

import logging
from pathlib import Path

from sidecarkit.config.settings import ProvisionConfig
from sidecarkit.core.exceptions import ArchiveLayoutError
from sidecarkit.core.filesystem import (
    ensure_directory,
    find_prefixed_directory,
    install_file,
    temporary_directory,
)
from sidecarkit.core.platform import OSFamily
from sidecarkit.sidecar.artifacts import RemoteSource, linux_artifacts, linux_triple
from sidecarkit.sidecar.base import AcquisitionResult, AcquisitionStrategy

logger = logging.getLogger(__name__)


class LinuxStrategy(AcquisitionStrategy):
    """Provision triple-suffixed ffmpeg/ffprobe for the host architecture."""

    os_family = OSFamily.LINUX

    def acquire(self, output_dir: Path, config: ProvisionConfig) -> AcquisitionResult:
        output_dir = ensure_directory(output_dir)
        result = self._new_result(output_dir)
        triple = linux_triple(self.target.arch)
        artifacts = linux_artifacts(output_dir, self.target.arch)

        if all(a.is_present() for a in artifacts):
            logger.info(f"ffmpeg/ffprobe sidecars present for Linux ({triple}).")
            return result

        source = RemoteSource(config.linux_url(self.target.arch), label=f"Linux ffmpeg ({triple})")

        with temporary_directory("fftools-linux-", config.temp_root) as tmp:
            archive = self._download(source, tmp / "ffmpeg.tar.xz", result)

            out_dir = tmp / "out"
            self.extractor.extract(archive, out_dir)

            root = find_prefixed_directory(out_dir, "ffmpeg-")
            if root is None:
                raise ArchiveLayoutError("Unexpected archive structure for Linux ffmpeg build.")

            bin_dir = root / "bin"
            sources = {a.role: bin_dir / a.role for a in artifacts}
            if not all(path.is_file() for path in sources.values()):
                raise ArchiveLayoutError("Downloaded Linux archive missing ffmpeg/ffprobe binaries.")

            for artifact in artifacts:
                install_file(sources[artifact.role], artifact.path)
                result.installed.append(artifact.path)

        logger.info(f"Installed Linux sidecar binaries for {triple}.")
        return result


__all__ = ["LinuxStrategy"]
