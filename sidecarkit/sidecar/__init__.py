"""
Sidecar binary provisioning.

One acquisition strategy per operating-system family, dispatched by
``run()``.
"""

from .artifacts import (
    AliasPath,
    BinaryArtifact,
    RemoteSource,
    SidecarLayout,
    layout_for,
)
from .base import AcquisitionResult, AcquisitionStrategy
from .linux import LinuxStrategy
from .macos import MacOSStrategy
from .windows import WindowsStrategy
from .selector import STRATEGIES, get_strategy, run

__all__ = [
    "AliasPath",
    "BinaryArtifact",
    "RemoteSource",
    "SidecarLayout",
    "layout_for",
    "AcquisitionResult",
    "AcquisitionStrategy",
    "LinuxStrategy",
    "MacOSStrategy",
    "WindowsStrategy",
    "STRATEGIES",
    "get_strategy",
    "run",
]
