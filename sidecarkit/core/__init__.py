"""
Core functionality for SidecarKit.

This package contains the primitives the acquisition strategies depend on.
"""

from .platform import (
    OSFamily,
    Arch,
    PlatformTarget,
    detect_target,
    clear_target_cache,
)

from .locking import (
    LockManager,
    LockTimeout,
)

from .exceptions import (
    SidecarKitError,
    ConfigError,
    UnsupportedPlatformError,
    ProvisioningError,
    ChecksumError,
    ChecksumMismatchError,
    ChecksumUnavailableError,
    ArchiveLayoutError,
    DownloadError,
    FilesystemError,
    ArchiveExtractionError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
)

__all__ = [
    "OSFamily",
    "Arch",
    "PlatformTarget",
    "detect_target",
    "clear_target_cache",
    "LockManager",
    "LockTimeout",
    "SidecarKitError",
    "ConfigError",
    "UnsupportedPlatformError",
    "ProvisioningError",
    "ChecksumError",
    "ChecksumMismatchError",
    "ChecksumUnavailableError",
    "ArchiveLayoutError",
    "DownloadError",
    "FilesystemError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
]
