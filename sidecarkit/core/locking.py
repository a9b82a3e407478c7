"""
Concurrent access control for SidecarKit.

Two release jobs provisioning the same output directory at once would race
on the copy/symlink steps. This module serializes them with a file lock
(``filelock``) keyed by the resolved output directory.

Usage:
    from sidecarkit.core.locking import LockManager

    lock_manager = LockManager()
    with lock_manager.output_lock(output_dir):
        strategy.acquire(output_dir, config)
"""

import hashlib
import logging
import platform
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)


def get_global_lock_dir() -> Path:
    """
    Get the per-user directory for lock files.

    Returns:
        Path to lock directory
    """
    if platform.system() == "Windows":
        base = Path.home() / "AppData" / "Local" / "sidecarkit"
    else:
        base = Path.home() / ".sidecarkit"

    return base / "lock"


class LockManager:
    """
    Manages cross-process locks for output directories.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Optional[Path] = None):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory for lock files (default: ~/.sidecarkit/lock)
        """
        self.lock_dir = Path(lock_dir) if lock_dir is not None else get_global_lock_dir()
        self.lock_dir.mkdir(parents=True, exist_ok=True)

    def lock_path_for(self, output_dir: Path) -> Path:
        """Lock file used for a given output directory."""
        key = hashlib.sha256(str(Path(output_dir).resolve()).encode("utf-8")).hexdigest()
        return self.lock_dir / f"output-{key[:16]}.lock"

    @contextmanager
    def output_lock(self, output_dir: Path, timeout: int = 600):
        """
        Acquire the lock for an output directory.

        Args:
            output_dir: Sidecar output directory
            timeout: Maximum wait time in seconds (default: 600 for long downloads)

        Yields:
            None

        Raises:
            LockTimeout: If lock can't be acquired within timeout
        """
        lock_path = self.lock_path_for(output_dir)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired output lock: {lock_path}")
                yield
                logger.debug(f"Released output lock: {lock_path}")
        except LockTimeout as e:
            raise LockTimeout(
                f"Could not acquire lock for {output_dir} after {timeout}s. "
                "Another sidecarkit process may be provisioning it."
            ) from e


__all__ = [
    "LockManager",
    "LockTimeout",
    "get_global_lock_dir",
]
