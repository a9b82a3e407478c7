"""
Ensure command implementation.

Runs the acquisition strategy for the host so the output directory holds
every sidecar binary the bundler needs.
"""

import logging

from sidecarkit.cli.utils import load_run_config, resolve_project_root
from sidecarkit.sidecar import selector

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the ensure command.

    Fatal provisioning errors propagate to the CLI, which reports them and
    exits 1.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, including degraded runs)
    """
    project_root = resolve_project_root(args.project_root)
    config = load_run_config(args)

    result = selector.run(project_root, config=config)
    if result is None:
        return 0

    logger.debug(
        f"Installed {len(result.installed)} binaries, {len(result.aliases)} aliases, "
        f"{len(result.downloads)} downloads"
    )

    if result.degraded:
        logger.warning(
            f"Sidecars provisioned with {len(result.warnings)} warning(s) in {result.output_dir}"
        )
    else:
        logger.info(f"Sidecars ready in {result.output_dir}")

    return 0
