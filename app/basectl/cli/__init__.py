"""CLI package for basectl.

This package contains the Typer application and all subcommands.
"""

from basectl.cli.main import app

__all__ = ["app"]
