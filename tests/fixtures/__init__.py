"""Test fixtures for SidecarKit tests.

- archives: Upstream-shaped ffmpeg archives (macOS zips, Windows zip, Linux tar.xz)

Import builders in your tests using:
    from tests.fixtures.archives import windows_zip, sha256_of
"""

__all__ = [
    "archives",
]
