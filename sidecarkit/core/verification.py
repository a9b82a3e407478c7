"""
Checksum verification for downloaded sidecar artifacts.

This module provides:
- SHA256 (and other hashlib) digest computation over a file's full content
- Fail-closed verification: a digest required by policy but unavailable
  aborts the run instead of installing unverified content
- Parsing of published ``.sha256`` sibling files
- Timing-attack resistant comparison
"""

import hashlib
import logging
import secrets
from enum import Enum
from pathlib import Path
from typing import Optional

from sidecarkit.core.exceptions import ChecksumMismatchError, ChecksumUnavailableError

logger = logging.getLogger(__name__)


class ChecksumPolicy(Enum):
    """What to do when no expected digest is available."""

    REQUIRED = "required"
    OPTIONAL = "optional"


def compute_file_hash(file_path: Path, algorithm: str = "sha256") -> str:
    """
    Compute cryptographic hash of file.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('sha256', 'sha512', ...)

    Returns:
        Hex string of hash

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported

    Example:
        >>> compute_file_hash(Path('ffmpeg'))
        '77d2c853f431...'
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    try:
        hasher = hashlib.new(algorithm.lower())
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest()


def verify_checksum(
    file_path: Path,
    expected: Optional[str],
    label: str,
    policy: ChecksumPolicy = ChecksumPolicy.REQUIRED,
    hint: str = "",
) -> Optional[str]:
    """
    Verify a file against an expected SHA256 digest.

    Args:
        file_path: File to verify
        expected: Expected hex digest, or None/empty if unknown
        label: Human-readable name used in log and error messages
        policy: Whether a missing digest aborts (REQUIRED) or is skipped (OPTIONAL)
        hint: Extra guidance appended to the error when a digest is missing

    Returns:
        The verified digest, or None when verification was skipped

    Raises:
        ChecksumUnavailableError: If no digest is known and policy is REQUIRED
        ChecksumMismatchError: If the digest does not match
    """
    if not expected:
        if policy is ChecksumPolicy.REQUIRED:
            raise ChecksumUnavailableError(label, hint)
        logger.info(f"Skipping checksum for {label} (no expected hash provided).")
        return None

    actual = compute_file_hash(file_path, "sha256")
    if not _constant_time_compare(actual.lower(), expected.strip().lower()):
        raise ChecksumMismatchError(label, expected, actual)

    logger.info(f"Verified {label} SHA256: {actual}")
    return actual


def parse_checksum_text(text: str) -> Optional[str]:
    """
    Extract the digest from the content of a ``.sha256`` file.

    Handles ``<hash>``, ``<hash>  filename`` and ``<hash> *filename``.

    Args:
        text: File content

    Returns:
        Lowercase hex digest, or None if the first token is not a SHA256 digest

    Example:
        >>> parse_checksum_text("ABCD...  *ffmpeg-release-essentials.zip")
        'abcd...'
    """
    tokens = text.split()
    if not tokens:
        return None

    candidate = tokens[0].strip().lower()
    if not _is_valid_hash_format(candidate, "sha256"):
        logger.debug(f"Ignoring malformed checksum token: {candidate!r}")
        return None

    return candidate


def _constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks."""
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def _is_valid_hash_format(hash_str: str, algorithm: str) -> bool:
    """
    Validate hash string format.

    Args:
        hash_str: Hash string to validate
        algorithm: Algorithm name

    Returns:
        True if format is valid
    """
    if not hash_str:
        return False

    if not all(c in "0123456789abcdef" for c in hash_str.lower()):
        return False

    expected_lengths = {"md5": 32, "sha1": 40, "sha256": 64, "sha512": 128}

    expected_len = expected_lengths.get(algorithm.lower())
    if expected_len and len(hash_str) != expected_len:
        return False

    return True


__all__ = [
    "ChecksumPolicy",
    "compute_file_hash",
    "verify_checksum",
    "parse_checksum_text",
]
