"""
Acquisition strategy interface.

Each operating-system family has exactly one strategy. A strategy inspects
the output directory, downloads and verifies what is missing, and places
binaries and aliases under that platform's naming convention.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from sidecarkit.config.settings import ProvisionConfig
from sidecarkit.core.download import Fetcher, default_fetcher
from sidecarkit.core.filesystem import ArchiveExtractor, Extractor
from sidecarkit.core.platform import OSFamily, PlatformTarget
from sidecarkit.sidecar.artifacts import RemoteSource

logger = logging.getLogger(__name__)


@dataclass
class AcquisitionResult:
    """
    Outcome of one strategy run.

    Attributes:
        target: Target the run provisioned
        output_dir: Shared output directory
        installed: Canonical binaries placed by this run
        aliases: Alias paths created or confirmed by this run
        downloads: URLs fetched by this run
        warnings: Degraded-path messages (run still succeeded)
    """

    target: PlatformTarget
    output_dir: Path
    installed: List[Path] = field(default_factory=list)
    aliases: List[Path] = field(default_factory=list)
    downloads: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)

    def warn(self, message: str) -> None:
        """Record and log a non-fatal problem."""
        logger.warning(message)
        self.warnings.append(message)


class AcquisitionStrategy(ABC):
    """
    Abstract base class for per-OS acquisition strategies.

    Downloading and extraction go through injected ``Fetcher`` and
    ``Extractor`` objects so tests can substitute fakes.
    """

    os_family: OSFamily

    def __init__(
        self,
        target: PlatformTarget,
        fetcher: Optional[Fetcher] = None,
        extractor: Optional[Extractor] = None,
    ):
        """
        Initialize strategy.

        Args:
            target: Host target (architecture drives file names on Linux)
            fetcher: Download implementation (default: requests with curl fallback)
            extractor: Archive extraction implementation
        """
        self.target = target
        self.fetcher = fetcher or default_fetcher()
        self.extractor = extractor or ArchiveExtractor()

    @abstractmethod
    def acquire(self, output_dir: Path, config: ProvisionConfig) -> AcquisitionResult:
        """
        Ensure every binary and alias the target needs exists in output_dir.

        Args:
            output_dir: Shared output directory (created if missing)
            config: Source URLs and digests

        Returns:
            AcquisitionResult describing what was done

        Raises:
            ProvisioningError: On any fatal condition
            DownloadError: If a required download fails
        """
        pass

    def _download(
        self, source: RemoteSource, destination: Path, result: AcquisitionResult
    ) -> Path:
        """Fetch a remote source and record it on the result."""
        result.downloads.append(source.url)
        return self.fetcher.fetch(source.url, destination)

    def _new_result(self, output_dir: Path) -> AcquisitionResult:
        return AcquisitionResult(target=self.target, output_dir=output_dir)


__all__ = [
    "AcquisitionResult",
    "AcquisitionStrategy",
]
