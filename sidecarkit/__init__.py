"""
SidecarKit - provision ffmpeg/ffprobe sidecar binaries for desktop app bundles.

Downloads, verifies and places platform-specific builds under the file
names a desktop bundler expects, for macOS, Windows and Linux.
"""

try:
    from importlib.metadata import version

    __version__ = version("sidecarkit")
except Exception:
    __version__ = "0.1.0"

__all__ = ["__version__"]
