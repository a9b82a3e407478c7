"""Command implementations. Each module exposes ``run(args) -> int``."""
