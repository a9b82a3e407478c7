"""
Platform detection for SidecarKit.

This module models the target a provisioning run serves as a closed pair of
operating-system family and processor architecture, and detects it from the
running host.

Usage:
    from sidecarkit.core.platform import detect_target

    target = detect_target()
    print(f"Provisioning for {target}")
"""

import functools
import platform
from dataclasses import dataclass
from enum import Enum

from sidecarkit.core.exceptions import UnsupportedPlatformError


class OSFamily(Enum):
    """Operating-system families with an acquisition strategy."""

    MACOS = "macos"
    WINDOWS = "windows"
    LINUX = "linux"


class Arch(Enum):
    """Processor architectures sidecars are provisioned for."""

    ARM64 = "arm64"
    X86_64 = "x86_64"

    @property
    def triple_arch(self) -> str:
        """Architecture component of a target triple (e.g. 'aarch64')."""
        return "aarch64" if self is Arch.ARM64 else "x86_64"


@dataclass(frozen=True)
class PlatformTarget:
    """
    Operating system and architecture a provisioning run serves.

    Attributes:
        os: Operating-system family
        arch: Processor architecture of the host
    """

    os: OSFamily
    arch: Arch

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x86_64', 'macos-arm64').

        Example:
            >>> PlatformTarget(OSFamily.LINUX, Arch.ARM64).platform_string()
            'linux-arm64'
        """
        return f"{self.os.value}-{self.arch.value}"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_target() -> PlatformTarget:
    """
    Detect the current host target.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformTarget for the running host

    Raises:
        UnsupportedPlatformError: If the OS is not macOS, Windows or Linux
    """
    return PlatformTarget(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> OSFamily:
    """
    Detect operating system family.

    Raises:
        UnsupportedPlatformError: If OS is not supported
    """
    system = platform.system().lower()

    if system == "darwin":
        return OSFamily.MACOS
    elif system == "windows":
        return OSFamily.WINDOWS
    elif system == "linux":
        return OSFamily.LINUX
    else:
        raise UnsupportedPlatformError(f"Unsupported operating system: {system or 'unknown'}")


def _detect_architecture() -> Arch:
    """
    Detect CPU architecture.

    Anything that is not 64-bit ARM is provisioned as x86_64.
    """
    machine = platform.machine().lower()

    if machine in ("aarch64", "arm64"):
        return Arch.ARM64
    return Arch.X86_64


def clear_target_cache():
    """
    Clear the detection cache.

    This forces the next call to detect_target() to re-detect.
    """
    detect_target.cache_clear()


__all__ = [
    "OSFamily",
    "Arch",
    "PlatformTarget",
    "detect_target",
    "clear_target_cache",
]
