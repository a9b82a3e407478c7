"""
Pytest configuration and shared fixtures for SidecarKit tests.
"""

import pytest
import tempfile
from pathlib import Path
from typing import Generator

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.archives import mac_archives
from tests.mocks.network import MockFetcher

from sidecarkit.config.settings import ProvisionConfig
from sidecarkit.core.locking import LockManager
from sidecarkit.core.platform import Arch, OSFamily, PlatformTarget


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def output_dir(temp_dir: Path) -> Path:
    """Sidecar output directory (not created)."""
    return temp_dir / "sidecar" / "ffmpeg" / "dist"


@pytest.fixture
def temp_root(temp_dir: Path) -> Path:
    """Parent for the run's temporary directories, so tests can check cleanup."""
    root = temp_dir / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def config(temp_root: Path) -> ProvisionConfig:
    """Default configuration with temporary directories under temp_root."""
    return ProvisionConfig(temp_root=temp_root)


@pytest.fixture
def mock_fetcher() -> MockFetcher:
    """Empty in-memory fetcher."""
    return MockFetcher()


@pytest.fixture
def lock_manager(temp_dir: Path) -> LockManager:
    """Lock manager writing lock files inside the test directory."""
    return LockManager(lock_dir=temp_dir / "locks")


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = temp_dir / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every sidecar source variable from the environment."""
    from sidecarkit.config.settings import ENV_VARIABLES

    for variable in ENV_VARIABLES:
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture
def mac_arm64() -> PlatformTarget:
    return PlatformTarget(OSFamily.MACOS, Arch.ARM64)


@pytest.fixture
def mac_x64() -> PlatformTarget:
    return PlatformTarget(OSFamily.MACOS, Arch.X86_64)


@pytest.fixture
def windows_x64() -> PlatformTarget:
    return PlatformTarget(OSFamily.WINDOWS, Arch.X86_64)


@pytest.fixture
def linux_x64() -> PlatformTarget:
    return PlatformTarget(OSFamily.LINUX, Arch.X86_64)


@pytest.fixture
def linux_arm64() -> PlatformTarget:
    return PlatformTarget(OSFamily.LINUX, Arch.ARM64)


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset any module-level caches between tests."""
    from sidecarkit.core.platform import clear_target_cache

    clear_target_cache()
    yield
    clear_target_cache()
