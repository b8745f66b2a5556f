"""CLI commands for basectl.

This package contains all subcommand implementations.
"""

from basectl.cli.commands import cat, config, resolve

__all__ = ["cat", "config", "resolve"]
