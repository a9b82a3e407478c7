"""
Configuration for SidecarKit.

Collects source URLs, digests and locations into one immutable value.
"""

from .settings import (
    CONFIG_FILENAME,
    DEFAULT_OUTPUT_DIR,
    ENV_VARIABLES,
    ProvisionConfig,
    load_config_file,
    resolve_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_OUTPUT_DIR",
    "ENV_VARIABLES",
    "ProvisionConfig",
    "load_config_file",
    "resolve_config",
]
