"""
Network download primitives with a fallback between two download tools.

This module provides:
- ``RequestsFetcher``: streaming HTTP/HTTPS downloads with ``requests``
- ``CurlFetcher``: downloads through the ``curl`` executable
- ``FallbackFetcher``: tries each fetcher in order until one succeeds

There is no retry loop: a transient failure surfaces as a
``DownloadError`` and the operator re-runs the tool.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

import requests
from requests.exceptions import RequestException

from sidecarkit.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

USER_AGENT = "sidecarkit"


class Fetcher(ABC):
    """Interface for downloading a URL to a local file."""

    name = "fetcher"

    @abstractmethod
    def fetch(self, url: str, destination: Path) -> Path:
        """
        Download url to destination, replacing any existing file.

        Args:
            url: URL to download from
            destination: Local path to save file

        Returns:
            Path to downloaded file

        Raises:
            DownloadError: If the download fails
        """
        pass


class RequestsFetcher(Fetcher):
    """Download files with ``requests`` (redirects followed, TLS verified)."""

    name = "requests"

    def __init__(self, timeout: int = 30, chunk_size: int = 8192):
        """
        Initialize fetcher.

        Args:
            timeout: Connect/read timeout in seconds
            chunk_size: Bytes per streamed chunk
        """
        self.timeout = timeout
        self.chunk_size = chunk_size

    def fetch(self, url: str, destination: Path) -> Path:
        if not url:
            raise DownloadError("URL cannot be empty")

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        try:
            response = requests.get(
                url,
                stream=True,
                timeout=self.timeout,
                allow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            )
            response.raise_for_status()

            downloaded = 0
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        f.write(chunk)
                        downloaded += len(chunk)
        except (RequestException, OSError) as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"Download of {url} failed: {e}") from e

        logger.debug(f"Downloaded {downloaded} bytes to {destination}")
        return destination


class CurlFetcher(Fetcher):
    """Download files by invoking ``curl``."""

    name = "curl"

    def __init__(self, executable: str = "curl", max_time: Optional[int] = None):
        """
        Initialize fetcher.

        Args:
            executable: curl executable name or path
            max_time: Optional ``--max-time`` limit in seconds
        """
        self.executable = executable
        self.max_time = max_time

    def build_command(self, url: str, destination: Path) -> List[str]:
        """Build the curl command line for a download."""
        # --http1.1 avoids HTTP/2 protocol errors seen on some mirrors
        cmd = [self.executable, "--http1.1", "-sS", "-L", "-f"]
        if self.max_time:
            cmd.extend(["--max-time", str(self.max_time)])
        cmd.extend(["-o", str(destination), url])
        return cmd

    def fetch(self, url: str, destination: Path) -> Path:
        if not url:
            raise DownloadError("URL cannot be empty")

        if shutil.which(self.executable) is None:
            raise DownloadError(f"{self.executable} not found on PATH")

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        result = subprocess.run(
            self.build_command(url, destination), capture_output=True, text=True
        )

        if result.returncode != 0:
            destination.unlink(missing_ok=True)
            raise DownloadError(
                f"curl failed for {url} (exit {result.returncode}): {result.stderr.strip()}"
            )

        return destination


class FallbackFetcher(Fetcher):
    """Try a sequence of fetchers, moving to the next one on failure."""

    name = "fallback"

    def __init__(self, fetchers: Sequence[Fetcher]):
        if not fetchers:
            raise ValueError("At least one fetcher is required")
        self.fetchers = list(fetchers)

    def fetch(self, url: str, destination: Path) -> Path:
        logger.info(f"Downloading {url}")

        errors = []
        for fetcher in self.fetchers:
            try:
                return fetcher.fetch(url, destination)
            except DownloadError as e:
                errors.append(f"{fetcher.name}: {e}")
                logger.warning(f"Download with {fetcher.name} failed: {e}")

        raise DownloadError(
            f"All download tools failed for {url}:\n  " + "\n  ".join(errors)
        )


def default_fetcher() -> Fetcher:
    """
    Get the standard fetcher: ``requests`` first, ``curl`` as fallback.

    Returns:
        FallbackFetcher instance
    """
    return FallbackFetcher([RequestsFetcher(), CurlFetcher()])


__all__ = [
    "Fetcher",
    "RequestsFetcher",
    "CurlFetcher",
    "FallbackFetcher",
    "default_fetcher",
]
