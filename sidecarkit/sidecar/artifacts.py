"""
Sidecar artifact model and naming conventions.

Every platform places ``ffmpeg`` and ``ffprobe`` into one shared output
directory, but each uses its own file names:

- macOS: ``ffmpeg`` / ``ffprobe`` (Apple Silicon canonical),
  ``ffmpeg-x86_64-apple-darwin`` / ``ffprobe-x86_64-apple-darwin`` (Intel
  canonical) and ``*-aarch64-apple-darwin`` symlinks
- Windows: ``ffmpeg.exe`` / ``ffprobe.exe`` plus four copies under the two
  bundler naming conventions
- Linux: ``ffmpeg-<arch>-unknown-linux-gnu`` / ``ffprobe-<arch>-unknown-linux-gnu``
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from sidecarkit.core.platform import Arch, OSFamily, PlatformTarget

ROLES = ("ffmpeg", "ffprobe")

MACOS_TRIPLE = "apple-darwin"
WINDOWS_TRIPLE = "x86_64-pc-windows-msvc"
LINUX_TRIPLE = "unknown-linux-gnu"


@dataclass(frozen=True)
class BinaryArtifact:
    """
    A required sidecar executable.

    Attributes:
        role: Canonical role name ('ffmpeg' or 'ffprobe')
        path: Absolute destination inside the output directory
        arch: Architecture the binary runs on
    """

    role: str
    path: Path
    arch: Arch

    @property
    def name(self) -> str:
        return self.path.name

    def is_present(self) -> bool:
        return self.path.is_file()


@dataclass(frozen=True)
class RemoteSource:
    """A downloadable archive and the digest it should have, if known."""

    url: str
    sha256: Optional[str] = None
    label: str = ""


@dataclass(frozen=True)
class AliasPath:
    """
    An extra file name exposing a placed artifact to the bundler.

    Attributes:
        path: Alias location
        target: Artifact the alias points at
        kind: 'symlink' or 'copy'
    """

    path: Path
    target: BinaryArtifact
    kind: str = "symlink"

    @property
    def name(self) -> str:
        return self.path.name

    def is_present(self) -> bool:
        if self.kind == "symlink":
            return self.path.is_symlink() and self.path.exists()
        return self.path.is_file()


@dataclass
class SidecarLayout:
    """Everything a target requires in the output directory."""

    target: PlatformTarget
    output_dir: Path
    artifacts: List[BinaryArtifact] = field(default_factory=list)
    aliases: List[AliasPath] = field(default_factory=list)

    def missing(self) -> List[str]:
        """Names of required artifacts and aliases that are not in place."""
        names = [a.name for a in self.artifacts if not a.is_present()]
        names.extend(a.name for a in self.aliases if not a.is_present())
        return names


# ============================================================================
# macOS
# ============================================================================


def macos_artifacts(output_dir: Path) -> Dict[Arch, List[BinaryArtifact]]:
    """Canonical macOS artifacts for both architectures."""
    return {
        Arch.ARM64: [
            BinaryArtifact(role, output_dir / role, Arch.ARM64) for role in ROLES
        ],
        Arch.X86_64: [
            BinaryArtifact(role, output_dir / f"{role}-x86_64-{MACOS_TRIPLE}", Arch.X86_64)
            for role in ROLES
        ],
    }


def macos_aliases(output_dir: Path) -> List[AliasPath]:
    """Triple-suffixed symlinks for the Apple Silicon binaries."""
    return [
        AliasPath(output_dir / f"{artifact.role}-aarch64-{MACOS_TRIPLE}", artifact, "symlink")
        for artifact in macos_artifacts(output_dir)[Arch.ARM64]
    ]


# ============================================================================
# Windows
# ============================================================================


def windows_artifacts(output_dir: Path) -> List[BinaryArtifact]:
    """Canonical Windows artifacts."""
    return [BinaryArtifact(role, output_dir / f"{role}.exe", Arch.X86_64) for role in ROLES]


def windows_aliases(output_dir: Path) -> List[AliasPath]:
    """
    Alias copies under both bundler conventions.

    Some bundlers look for ``ffmpeg-x86_64-pc-windows-msvc.exe``, others for
    ``ffmpeg.exe-x86_64-pc-windows-msvc.exe``.
    """
    artifacts = windows_artifacts(output_dir)
    aliases = [
        AliasPath(output_dir / f"{a.role}-{WINDOWS_TRIPLE}.exe", a, "copy") for a in artifacts
    ]
    aliases.extend(
        AliasPath(output_dir / f"{a.role}.exe-{WINDOWS_TRIPLE}.exe", a, "copy")
        for a in artifacts
    )
    return aliases


# ============================================================================
# Linux
# ============================================================================


def linux_triple(arch: Arch) -> str:
    """
    Target triple for a Linux architecture.

    Example:
        >>> linux_triple(Arch.ARM64)
        'aarch64-unknown-linux-gnu'
    """
    return f"{arch.triple_arch}-{LINUX_TRIPLE}"


def linux_artifacts(output_dir: Path, arch: Arch) -> List[BinaryArtifact]:
    """Triple-suffixed Linux artifacts for the host architecture."""
    triple = linux_triple(arch)
    return [BinaryArtifact(role, output_dir / f"{role}-{triple}", arch) for role in ROLES]


# ============================================================================
# Per-target layout
# ============================================================================


def layout_for(target: PlatformTarget, output_dir: Path) -> SidecarLayout:
    """
    Get every artifact and alias a target requires.

    Args:
        target: Platform target
        output_dir: Shared output directory

    Returns:
        SidecarLayout for the target
    """
    output_dir = Path(output_dir)
    layout = SidecarLayout(target=target, output_dir=output_dir)

    if target.os is OSFamily.MACOS:
        by_arch = macos_artifacts(output_dir)
        layout.artifacts = by_arch[Arch.ARM64] + by_arch[Arch.X86_64]
        layout.aliases = macos_aliases(output_dir)
    elif target.os is OSFamily.WINDOWS:
        layout.artifacts = windows_artifacts(output_dir)
        layout.aliases = windows_aliases(output_dir)
    elif target.os is OSFamily.LINUX:
        layout.artifacts = linux_artifacts(output_dir, target.arch)

    return layout


__all__ = [
    "ROLES",
    "BinaryArtifact",
    "RemoteSource",
    "AliasPath",
    "SidecarLayout",
    "macos_artifacts",
    "macos_aliases",
    "windows_artifacts",
    "windows_aliases",
    "linux_triple",
    "linux_artifacts",
    "layout_for",
]
