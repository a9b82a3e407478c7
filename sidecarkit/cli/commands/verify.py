"""
Verify command implementation.

Post-provisioning gate for release pipelines: fails if any binary or alias
the host platform needs is missing, and optionally cross-checks binaries
against the configured digests.
"""

import logging
from typing import Dict, Optional

from sidecarkit.cli.utils import load_run_config, resolve_project_root
from sidecarkit.config.settings import ProvisionConfig
from sidecarkit.core.exceptions import ChecksumMismatchError
from sidecarkit.core.platform import Arch, OSFamily, detect_target
from sidecarkit.core.verification import ChecksumPolicy, verify_checksum
from sidecarkit.sidecar.artifacts import BinaryArtifact, SidecarLayout, layout_for

logger = logging.getLogger(__name__)


def expected_digests(
    layout: SidecarLayout, config: ProvisionConfig
) -> Dict[BinaryArtifact, Optional[str]]:
    """
    Map each canonical binary to its configured digest.

    Only the macOS Apple Silicon pins are digests of the binaries
    themselves; the Windows digest covers the archive.

    Args:
        layout: Required layout for the host target
        config: Effective configuration

    Returns:
        Artifact -> expected SHA256, or None where no digest is known
    """
    pins = {}
    if layout.target.os is OSFamily.MACOS:
        pins = {
            "ffmpeg": config.ffmpeg_mac_bin_sha256,
            "ffprobe": config.ffprobe_mac_bin_sha256,
        }

    return {
        artifact: pins.get(artifact.role) if artifact.arch is Arch.ARM64 else None
        for artifact in layout.artifacts
    }


def run(args) -> int:
    """
    Run the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if everything is in place, 1 otherwise)
    """
    project_root = resolve_project_root(args.project_root)
    config = load_run_config(args)
    output_dir = config.resolve_output_dir(project_root)

    target = detect_target()
    layout = layout_for(target, output_dir)

    missing = layout.missing()
    if missing:
        logger.error(f"Missing sidecar files in {output_dir}: {', '.join(missing)}")
        return 1

    if getattr(args, "checksums", False):
        for artifact, expected in expected_digests(layout, config).items():
            try:
                verify_checksum(
                    artifact.path, expected, artifact.name, ChecksumPolicy.OPTIONAL
                )
            except ChecksumMismatchError as e:
                logger.error(str(e))
                return 1

    logger.info(f"All sidecar files present for {target} in {output_dir}")
    return 0
