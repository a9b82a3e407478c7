"""
Cross-platform file system utilities for SidecarKit.

This module provides the primitive operations the acquisition strategies
are built from:
- Archive extraction (zip, tar.gz, tar.xz, tar.bz2) behind an injectable
  ``Extractor`` interface
- Placing binaries into the output directory and marking them executable
- Alias creation (relative symlinks, skip-if-present copies)
- Scoped temporary directories with best-effort cleanup
"""

import logging
import os
import shutil
import sys
import tarfile
import tempfile
import zipfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from sidecarkit.core.exceptions import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path

    Returns:
        Path object (resolved)
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()


def is_relative_to(path: Path, parent: Path) -> bool:
    """Check if path is relative to (under) parent directory."""
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def find_prefixed_directory(
    root: Path, prefix: str, case_sensitive: bool = True
) -> Optional[Path]:
    """
    Find the first subdirectory of root whose name starts with prefix.

    Release archives wrap their contents in a version-named directory
    (e.g. ``ffmpeg-7.1-essentials_build``), so the exact name is unknown
    ahead of time.

    Args:
        root: Directory to search (not recursive)
        prefix: Name prefix to match
        case_sensitive: Whether the prefix comparison is case-sensitive

    Returns:
        Matching directory, or None if there is none
    """
    if not root.is_dir():
        return None

    wanted = prefix if case_sensitive else prefix.lower()
    for entry in sorted(root.iterdir()):
        name = entry.name if case_sensitive else entry.name.lower()
        if name.startswith(wanted) and entry.is_dir():
            return entry

    return None


# ============================================================================
# Archive Extraction
# ============================================================================


class Extractor(ABC):
    """Interface for unpacking a downloaded archive into a directory."""

    @abstractmethod
    def extract(self, archive_path: Path, destination: Path) -> None:
        """
        Extract archive_path into destination.

        Raises:
            ArchiveExtractionError: If extraction fails
        """
        pass


class ArchiveExtractor(Extractor):
    """Extract archives with the ``zipfile`` and ``tarfile`` modules."""

    def extract(self, archive_path: Path, destination: Path) -> None:
        extract_archive(archive_path, destination)


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(archive_path: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Extract an archive to a destination directory.

    Detects the format from the file name and validates every member path
    before extracting.

    Supported formats: .zip, .tar.gz/.tgz, .tar.xz, .tar.bz2/.tbz2

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    archive_name = archive_path.name.lower()
    logger.debug(f"Extracting {archive_path.name} into {destination}")

    try:
        if archive_name.endswith(".zip"):
            _extract_zip(archive_path, destination)
        elif archive_name.endswith((".tar.gz", ".tgz")):
            _extract_tar(archive_path, destination, "r:gz")
        elif archive_name.endswith(".tar.xz"):
            _extract_tar(archive_path, destination, "r:xz")
        elif archive_name.endswith((".tar.bz2", ".tbz2")):
            _extract_tar(archive_path, destination, "r:bz2")
        else:
            raise UnsupportedArchiveFormat(
                f"Unsupported archive format: {archive_path.name}. "
                "Supported: .zip, .tar.gz, .tar.xz, .tar.bz2"
            )
    except (InsecureArchiveError, UnsupportedArchiveFormat):
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.namelist()

        for member in members:
            _validate_archive_path(member, destination)

        for member in members:
            zf.extract(member, destination)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Python 3.12+ applies the data filter; paths are validated above either way
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


# ============================================================================
# Placement and Aliases
# ============================================================================


def make_executable(path: Path) -> None:
    """Mark a file executable (0o755). No-op on Windows."""
    if IS_WINDOWS:
        return
    try:
        os.chmod(path, 0o755)
    except OSError as e:
        logger.warning(f"Could not mark {path.name} executable: {e}")


def install_file(source: Path, destination: Path, executable: bool = True) -> Path:
    """
    Copy a binary to its destination, replacing any existing file.

    The copy is written to a temporary sibling first and renamed into
    place, so the destination is never observed half-written.

    Args:
        source: File to copy
        destination: Final path in the output directory
        executable: Whether to mark the result executable

    Returns:
        Destination path
    """
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=destination.parent, prefix=f".{destination.name}.", suffix=".tmp"
    )
    os.close(temp_fd)
    temp_path = Path(temp_path_str)

    try:
        shutil.copyfile(source, temp_path)
        temp_path.replace(destination)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise

    if executable:
        make_executable(destination)

    logger.debug(f"Installed {source.name} -> {destination}")
    return destination


def ensure_symlink(target: Path, link: Path) -> bool:
    """
    (Re)create a relative symlink named link pointing at target's basename.

    An existing file or link at ``link`` is removed first. Failures are
    logged as warnings and reported through the return value.

    Returns:
        True if the link was created
    """
    try:
        if link.is_symlink() or link.exists():
            link.unlink()
        os.symlink(target.name, link)
        return True
    except OSError as e:
        logger.warning(f"Failed to create symlink {link}: {e}")
        return False


def ensure_copy(source: Path, destination: Path) -> bool:
    """
    Copy source to destination unless destination already exists.

    Failures are logged as warnings and reported through the return value.

    Returns:
        True if destination exists afterwards
    """
    if destination.exists():
        return True
    try:
        shutil.copyfile(source, destination)
        return True
    except OSError as e:
        logger.warning(f"Failed to create copy {destination}: {e}")
        return False


# ============================================================================
# Temporary Directory Management
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, target, exc):
                """Error handler for Windows read-only files."""
                if not os.access(target, os.W_OK):
                    os.chmod(target, 0o777)
                    func(target)
                else:
                    raise

            if sys.version_info >= (3, 12):
                shutil.rmtree(path, onexc=handle_remove_readonly)
            else:
                shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


@contextmanager
def temporary_directory(
    prefix: str = "fftools-", base_dir: Optional[Path] = None
) -> Iterator[Path]:
    """
    Context manager for a uniquely named temporary directory.

    The directory is removed on every exit path. A failed removal is logged
    as a warning and never replaces the outcome of the ``with`` body.

    Args:
        prefix: Prefix for temp directory name
        base_dir: Parent directory (default: system temp directory)

    Yields:
        Path to temporary directory

    Example:
        >>> with temporary_directory("fftools-") as tmp:
        ...     (tmp / 'ffmpeg.zip').write_bytes(data)
    """
    if base_dir is not None:
        Path(base_dir).mkdir(parents=True, exist_ok=True)
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=base_dir))
    logger.debug(f"Created temporary directory {temp_dir}")

    try:
        yield temp_dir
    finally:
        try:
            safe_rmtree(temp_dir)
        except (FilesystemError, ValueError) as e:
            logger.warning(f"Failed to cleanup temp dir {temp_dir}: {e}")


__all__ = [
    "IS_WINDOWS",
    "ensure_directory",
    "is_relative_to",
    "find_prefixed_directory",
    "Extractor",
    "ArchiveExtractor",
    "extract_archive",
    "make_executable",
    "install_file",
    "ensure_symlink",
    "ensure_copy",
    "safe_rmtree",
    "temporary_directory",
]
