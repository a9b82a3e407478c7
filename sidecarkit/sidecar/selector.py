"""
Platform strategy selector.

Entry point of a provisioning run: detect the host, pick the one strategy
registered for its OS family and run it against the output directory.

Usage:
    from sidecarkit.sidecar.selector import run

    result = run()  # reads the environment and the host platform
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Type

from sidecarkit.config.settings import ProvisionConfig, resolve_config
from sidecarkit.core.download import Fetcher
from sidecarkit.core.exceptions import UnsupportedPlatformError
from sidecarkit.core.filesystem import Extractor
from sidecarkit.core.locking import LockManager
from sidecarkit.core.platform import OSFamily, PlatformTarget, detect_target
from sidecarkit.sidecar.base import AcquisitionResult, AcquisitionStrategy
from sidecarkit.sidecar.linux import LinuxStrategy
from sidecarkit.sidecar.macos import MacOSStrategy
from sidecarkit.sidecar.windows import WindowsStrategy

logger = logging.getLogger(__name__)

STRATEGIES: Dict[OSFamily, Type[AcquisitionStrategy]] = {
    OSFamily.MACOS: MacOSStrategy,
    OSFamily.WINDOWS: WindowsStrategy,
    OSFamily.LINUX: LinuxStrategy,
}


def get_strategy(
    target: PlatformTarget,
    fetcher: Optional[Fetcher] = None,
    extractor: Optional[Extractor] = None,
) -> AcquisitionStrategy:
    """
    Instantiate the strategy for a target.

    Args:
        target: Platform target
        fetcher: Optional download implementation
        extractor: Optional archive extraction implementation

    Returns:
        AcquisitionStrategy for target.os

    Raises:
        UnsupportedPlatformError: If no strategy is registered for the OS
    """
    strategy_class = STRATEGIES.get(target.os)
    if strategy_class is None:
        raise UnsupportedPlatformError(f"No acquisition strategy for {target.os}")
    return strategy_class(target, fetcher=fetcher, extractor=extractor)


def run(
    project_root: Optional[Path] = None,
    *,
    config: Optional[ProvisionConfig] = None,
    target: Optional[PlatformTarget] = None,
    fetcher: Optional[Fetcher] = None,
    extractor: Optional[Extractor] = None,
    lock_manager: Optional[LockManager] = None,
) -> Optional[AcquisitionResult]:
    """
    Ensure the sidecar binaries for the host exist in the output directory.

    Args:
        project_root: Anchor for a relative output directory (default: cwd)
        config: Configuration (default: defaults + sidecarkit.yaml + environment)
        target: Target override (default: detected host)
        fetcher: Download implementation override
        extractor: Archive extraction implementation override
        lock_manager: Lock manager (default: per-user lock directory)

    Returns:
        AcquisitionResult, or None if the host platform is unsupported

    Raises:
        ProvisioningError: On fatal checksum or archive problems
        DownloadError: If a required download fails
    """
    project_root = Path(project_root or Path.cwd())
    config = config or resolve_config(project_root)
    output_dir = config.resolve_output_dir(project_root)

    if target is None:
        try:
            target = detect_target()
        except UnsupportedPlatformError as e:
            logger.warning(
                f"{e}. Unsupported platform for auto-install; "
                f"please place binaries under {output_dir}."
            )
            return None

    try:
        strategy = get_strategy(target, fetcher=fetcher, extractor=extractor)
    except UnsupportedPlatformError as e:
        logger.warning(f"{e}. Please place binaries under {output_dir}.")
        return None

    logger.debug(f"Provisioning sidecars for {target} into {output_dir}")

    lock_manager = lock_manager or LockManager()
    with lock_manager.output_lock(output_dir):
        return strategy.acquire(output_dir, config)


__all__ = [
    "STRATEGIES",
    "get_strategy",
    "run",
]
