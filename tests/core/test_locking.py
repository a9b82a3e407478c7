"""
Unit tests for the locking module.

Tests cover:
- Lock acquisition and release
- Timeout behavior
- Per-output-directory lock files
"""

import pytest
from unittest.mock import patch

from sidecarkit.core.locking import LockManager, LockTimeout, get_global_lock_dir


class TestLockManager:
    """Tests for LockManager class."""

    def test_init_custom_lock_dir(self, tmp_path):
        """Test initialization with custom lock directory."""
        custom_dir = tmp_path / "custom_locks"
        manager = LockManager(lock_dir=custom_dir)

        assert manager.lock_dir == custom_dir
        assert custom_dir.exists()

    def test_init_default_lock_dir(self, tmp_path):
        """Test initialization with default lock directory."""
        with patch(
            "sidecarkit.core.locking.get_global_lock_dir", return_value=tmp_path / "lock"
        ):
            manager = LockManager()

        assert manager.lock_dir == tmp_path / "lock"
        assert manager.lock_dir.exists()

    def test_lock_path_is_stable_per_directory(self, tmp_path):
        manager = LockManager(lock_dir=tmp_path / "locks")
        dist = tmp_path / "dist"

        assert manager.lock_path_for(dist) == manager.lock_path_for(tmp_path / "x" / ".." / "dist")
        assert manager.lock_path_for(dist) != manager.lock_path_for(tmp_path / "other")
        assert manager.lock_path_for(dist).name.startswith("output-")

    def test_output_lock_acquire_and_release(self, tmp_path):
        """Test acquiring and releasing the output lock."""
        manager = LockManager(lock_dir=tmp_path / "locks")
        dist = tmp_path / "dist"

        with manager.output_lock(dist, timeout=5):
            assert manager.lock_path_for(dist).exists()

        # Can be acquired again after release
        with manager.output_lock(dist, timeout=1):
            pass

    def test_output_lock_timeout(self, tmp_path):
        """Test output lock timeout when already locked."""
        manager = LockManager(lock_dir=tmp_path / "locks")
        dist = tmp_path / "dist"

        with manager.output_lock(dist, timeout=5):
            with pytest.raises(LockTimeout) as exc_info:
                with manager.output_lock(dist, timeout=0.1):
                    pass

            assert "Could not acquire lock for" in str(exc_info.value)

    def test_lock_released_on_exception(self, tmp_path):
        """Test lock is released if the body raises."""
        manager = LockManager(lock_dir=tmp_path / "locks")
        dist = tmp_path / "dist"

        with pytest.raises(RuntimeError):
            with manager.output_lock(dist, timeout=5):
                raise RuntimeError("boom")

        with manager.output_lock(dist, timeout=1):
            pass

    def test_different_directories_do_not_block(self, tmp_path):
        manager = LockManager(lock_dir=tmp_path / "locks")

        with manager.output_lock(tmp_path / "a", timeout=5):
            with manager.output_lock(tmp_path / "b", timeout=0.1):
                pass


def test_global_lock_dir_under_home():
    assert get_global_lock_dir().name == "lock"
    assert "sidecarkit" in str(get_global_lock_dir())
