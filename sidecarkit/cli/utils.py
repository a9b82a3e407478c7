"""
Shared utilities for CLI commands.

Provides the configuration and output helpers every command uses, so they
resolve the project root, configuration file and output directory the
same way.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from sidecarkit.config.settings import ProvisionConfig, resolve_config

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def resolve_project_root(path: Optional[Path] = None) -> Path:
    """
    Resolve project root to an absolute path.

    Args:
        path: Project root path (default: current directory)

    Returns:
        Absolute project root path
    """
    return Path(path or Path.cwd()).resolve()


def load_run_config(args) -> ProvisionConfig:
    """
    Build the effective configuration from parsed global options.

    Precedence: defaults, then the YAML file, then environment variables,
    then ``--output-dir``. A relative ``--output-dir`` is taken relative to
    the current directory, not the project root.

    Args:
        args: Parsed arguments with config, project_root and output_dir

    Returns:
        ProvisionConfig for this invocation

    Raises:
        ConfigError: If the configuration file is invalid
    """
    project_root = resolve_project_root(getattr(args, "project_root", None))
    config = resolve_config(project_root, getattr(args, "config", None))

    output_dir = getattr(args, "output_dir", None)
    if output_dir is not None:
        logger.debug(f"Output directory overridden on command line: {output_dir}")
        config = config.replace(output_dir=Path(output_dir).resolve())

    return config


# ============================================================================
# Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def format_presence(present: bool) -> str:
    """Presence marker used in status listings."""
    return "[OK]     " if present else "[MISSING]"


__all__ = [
    "resolve_project_root",
    "load_run_config",
    "print_error",
    "format_presence",
]
