"""Provisioning configuration for SidecarKit.

Source URLs and expected digests are collected once per process into an
immutable ``ProvisionConfig`` and passed to each strategy. Values come from,
in increasing precedence:

1. Built-in defaults (pinned macOS Apple Silicon builds, "latest" Windows
   and Linux builds)
2. An optional ``sidecarkit.yaml`` file
3. Environment variables (``FFMPEG_MAC_URL``, ``FFMPEG_WIN_ZIP_SHA256``, ...)

Example ``sidecarkit.yaml``::

    version: 1
    output_dir: sidecar/ffmpeg/dist
    sources:
      FFMPEG_WIN_ZIP_SHA256: "3a1f..."
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from sidecarkit.core.exceptions import ConfigError
from sidecarkit.core.platform import Arch

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "sidecarkit.yaml"
DEFAULT_OUTPUT_DIR = Path("sidecar") / "ffmpeg" / "dist"

LINUX_URL_TEMPLATE = (
    "https://github.com/BtbN/FFmpeg-Builds/releases/download/latest/"
    "ffmpeg-master-latest-{suffix}-gpl.tar.xz"
)

# Environment variable -> ProvisionConfig field
ENV_VARIABLES: Dict[str, str] = {
    "FFMPEG_MAC_URL": "ffmpeg_mac_url",
    "FFPROBE_MAC_URL": "ffprobe_mac_url",
    "FFMPEG_MAC_BIN_SHA256": "ffmpeg_mac_bin_sha256",
    "FFPROBE_MAC_BIN_SHA256": "ffprobe_mac_bin_sha256",
    "FFMPEG_MAC_X64_URL": "ffmpeg_mac_x64_url",
    "FFPROBE_MAC_X64_URL": "ffprobe_mac_x64_url",
    "FFMPEG_WIN_URL": "ffmpeg_win_url",
    "FFMPEG_WIN_ZIP_SHA256": "ffmpeg_win_zip_sha256",
    "FFMPEG_LINUX_URL": "ffmpeg_linux_url",
}


@dataclass(frozen=True)
class ProvisionConfig:
    """Sources, digests and locations for one provisioning run."""

    # macOS Apple Silicon, pinned 8.0 builds (digests are of the extracted binaries)
    ffmpeg_mac_url: str = "https://www.osxexperts.net/ffmpeg80arm.zip"
    ffprobe_mac_url: str = "https://www.osxexperts.net/ffprobe80arm.zip"
    ffmpeg_mac_bin_sha256: Optional[str] = (
        "77d2c853f431318d55ec02676d9b2f185ebfdddb9f7677a251fbe453affe025a"
    )
    ffprobe_mac_bin_sha256: Optional[str] = (
        "babf170e86bd6b0b2fefee5fa56f57721b0acb98ad2794b095d8030b02857dfe"
    )

    # macOS Intel, best effort
    ffmpeg_mac_x64_url: str = "https://evermeet.cx/ffmpeg/getrelease/zip"
    ffprobe_mac_x64_url: str = "https://evermeet.cx/ffmpeg/getrelease/ffprobe/zip"

    # Windows x64, version-agnostic "latest" essentials build
    ffmpeg_win_url: str = (
        "https://www.gyan.dev/ffmpeg/builds/ffmpeg-release-essentials.zip"
    )
    ffmpeg_win_zip_sha256: Optional[str] = None

    # Linux static builds; None selects the per-architecture default
    ffmpeg_linux_url: Optional[str] = None

    output_dir: Path = field(default=DEFAULT_OUTPUT_DIR)
    temp_root: Optional[Path] = None

    def linux_url(self, arch: Arch) -> str:
        """
        Get the Linux archive URL for an architecture.

        Example:
            >>> ProvisionConfig().linux_url(Arch.ARM64)
            'https://github.com/BtbN/.../ffmpeg-master-latest-linuxarm64-gpl.tar.xz'
        """
        if self.ffmpeg_linux_url:
            return self.ffmpeg_linux_url
        suffix = "linuxarm64" if arch is Arch.ARM64 else "linux64"
        return LINUX_URL_TEMPLATE.format(suffix=suffix)

    def resolve_output_dir(self, project_root: Optional[Path] = None) -> Path:
        """Absolute output directory, relative paths anchored at project_root."""
        output_dir = Path(self.output_dir)
        if not output_dir.is_absolute():
            output_dir = Path(project_root or Path.cwd()) / output_dir
        return output_dir.resolve()

    def replace(self, **changes: Any) -> "ProvisionConfig":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_environment(
        cls,
        env: Optional[Mapping[str, str]] = None,
        base: Optional["ProvisionConfig"] = None,
    ) -> "ProvisionConfig":
        """
        Build configuration with environment overrides applied.

        Empty environment values are treated as unset.

        Args:
            env: Environment mapping (default: os.environ)
            base: Configuration to override (default: built-in defaults)

        Returns:
            New ProvisionConfig
        """
        env = os.environ if env is None else env
        base = base or cls()

        overrides = {}
        for variable, field_name in ENV_VARIABLES.items():
            value = env.get(variable)
            if value:
                overrides[field_name] = value.strip()
                logger.debug(f"Using {variable} from environment")

        return base.replace(**overrides)


def load_config_file(config_path: Path) -> ProvisionConfig:
    """
    Parse a sidecarkit.yaml file on top of the built-in defaults.

    Args:
        config_path: Path to YAML file

    Returns:
        ProvisionConfig with file values applied

    Raises:
        ConfigError: If the file is missing, malformed or has unknown keys
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}")

    if data is None:
        return ProvisionConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at top level of {config_path}")

    return _parse_and_validate(data, config_path.parent)


def _parse_and_validate(data: Dict[str, Any], base_dir: Path) -> ProvisionConfig:
    """Parse and validate configuration data."""
    unknown = set(data) - {"version", "output_dir", "sources"}
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    changes: Dict[str, Any] = {}

    if data.get("output_dir"):
        output_dir = Path(str(data["output_dir"]))
        changes["output_dir"] = output_dir if output_dir.is_absolute() else base_dir / output_dir

    sources = data.get("sources") or {}
    if not isinstance(sources, dict):
        raise ConfigError("'sources' must be a mapping of variable name to value")

    for key, value in sources.items():
        variable = str(key).upper()
        field_name = ENV_VARIABLES.get(variable)
        if field_name is None:
            raise ConfigError(
                f"Unknown source '{key}'. Expected one of: {', '.join(ENV_VARIABLES)}"
            )

        if value is None:
            # An explicit null removes a pinned digest; URLs cannot be removed
            if not variable.endswith("_SHA256"):
                raise ConfigError(f"Source '{key}' must be a URL, not null")
            changes[field_name] = None
            continue

        # Unquoted all-digit digests would lose leading zeros as ints
        if not isinstance(value, str):
            raise ConfigError(
                f"Source '{key}' must be a string, got {type(value).__name__}; "
                "quote the value in YAML"
            )

        # Empty values are treated as unset, as for environment variables
        if value.strip():
            changes[field_name] = value.strip()

    return ProvisionConfig().replace(**changes)


def resolve_config(
    project_root: Optional[Path] = None,
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ProvisionConfig:
    """
    Build the effective configuration for a run.

    Uses ``config_path`` if given, else ``<project_root>/sidecarkit.yaml``
    when it exists, then applies environment overrides.

    Args:
        project_root: Project root (default: current directory)
        config_path: Explicit configuration file (must exist)
        env: Environment mapping (default: os.environ)

    Returns:
        Effective ProvisionConfig

    Raises:
        ConfigError: If an explicit config file is missing or invalid
    """
    project_root = Path(project_root or Path.cwd())

    if config_path is not None:
        base = load_config_file(Path(config_path))
    else:
        default_file = project_root / CONFIG_FILENAME
        if default_file.exists():
            logger.debug(f"Loading configuration from {default_file}")
            base = load_config_file(default_file)
        else:
            base = ProvisionConfig()

    return ProvisionConfig.from_environment(env, base=base)


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_OUTPUT_DIR",
    "ENV_VARIABLES",
    "ProvisionConfig",
    "load_config_file",
    "resolve_config",
]
