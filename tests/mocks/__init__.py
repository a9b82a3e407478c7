"""
Mock implementations for testing SidecarKit components.

This package provides mock implementations of external dependencies to
enable isolated, deterministic testing.
"""

from .network import MockFetcher

__all__ = [
    "MockFetcher",
]
