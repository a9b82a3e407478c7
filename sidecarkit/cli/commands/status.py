"""
Status command implementation.

Shows which sidecar files the host needs and which are in place, without
touching the network.
"""

import logging

from sidecarkit.cli.utils import (
    format_presence,
    load_run_config,
    print_error,
    resolve_project_root,
)
from sidecarkit.core.exceptions import UnsupportedPlatformError
from sidecarkit.core.platform import detect_target
from sidecarkit.sidecar.artifacts import layout_for

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the status command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 on unsupported host)
    """
    project_root = resolve_project_root(args.project_root)
    config = load_run_config(args)
    output_dir = config.resolve_output_dir(project_root)

    try:
        target = detect_target()
    except UnsupportedPlatformError as e:
        print_error(str(e), f"Place binaries under {output_dir} manually.")
        return 1

    layout = layout_for(target, output_dir)

    print(f"Target:     {target}")
    print(f"Output dir: {output_dir}")
    print()
    print("Binaries:")
    for artifact in layout.artifacts:
        print(f"  {format_presence(artifact.is_present())} {artifact.name}")

    if layout.aliases:
        print("Aliases:")
        for alias in layout.aliases:
            print(f"  {format_presence(alias.is_present())} {alias.name} ({alias.kind})")

    missing = layout.missing()
    print()
    if missing:
        print(f"{len(missing)} file(s) missing. Run 'sidecarkit ensure' to provision them.")
    else:
        print("All sidecar files present.")

    return 0
