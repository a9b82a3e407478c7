"""
Centralized exception hierarchy for SidecarKit.

This module defines all custom exceptions used across the codebase
so that the CLI can tell fatal provisioning failures apart from
degraded, warn-and-continue conditions.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class SidecarKitError(Exception):
    """Base exception for all SidecarKit errors."""

    pass


class ConfigError(SidecarKitError):
    """Configuration parsing or validation error."""

    pass


class UnsupportedPlatformError(SidecarKitError):
    """Raised when the host OS has no acquisition strategy."""

    pass


# ============================================================================
# Provisioning Exceptions (fatal)
# ============================================================================


class ProvisioningError(SidecarKitError):
    """Base exception for fatal sidecar acquisition failures."""

    pass


class ChecksumError(ProvisioningError):
    """Base exception for integrity check failures."""

    pass


class ChecksumMismatchError(ChecksumError):
    """Raised when a file's digest differs from the expected digest."""

    def __init__(self, label: str, expected: str, actual: str):
        self.label = label
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{label} checksum mismatch. Expected {expected}, got {actual}"
        )


class ChecksumUnavailableError(ChecksumError):
    """Raised when verification is required but no digest is known."""

    def __init__(self, label: str, hint: str = ""):
        self.label = label
        msg = f"Missing SHA256 for {label}; refusing to install unverified binaries."
        if hint:
            msg += f"\n{hint}"
        super().__init__(msg)


class ArchiveLayoutError(ProvisioningError):
    """Raised when a downloaded archive lacks the expected binaries or layout."""

    pass


# ============================================================================
# Network Exceptions
# ============================================================================


class DownloadError(SidecarKitError):
    """Raised when a file cannot be downloaded."""

    pass


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(SidecarKitError):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


__all__ = [
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
