"""
Entry point for running SidecarKit as a module.

Usage: python -m sidecarkit [command] [options]
"""

from sidecarkit.cli.parser import main

if __name__ == "__main__":
    main()
