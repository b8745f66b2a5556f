"""Shared types and helpers for CLI commands."""

from typing import Annotated

import typer

from basectl.core.config import BasectlConfig, load_config_or_default
from basectl.filesys.disk import OnDiskFileSystem
from basectl.git.cloner import GitExecCloner
from basectl.loader.loader import FileLoader, new_loader
from basectl.loader.restriction import LoadRestriction


def parse_restrictor(value: str | None) -> LoadRestriction | None:
    """Parse --load-restrictor, accepting kustomize flag spellings."""
    if value is None:
        return None
    try:
        return LoadRestriction.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


# Parsed by the callback, so commands receive a LoadRestriction or None
RestrictorOption = Annotated[
    str | None,
    typer.Option(
        "--load-restrictor",
        "-r",
        help="Restriction for local targets: rootOnly or none (default from config).",
        metavar="RESTRICTION",
        callback=parse_restrictor,
    ),
]


def build_cloner(config: BasectlConfig) -> GitExecCloner:
    """Create the git cloner described by the configuration."""
    return GitExecCloner(
        git_command=config.git_command,
        timeout=config.clone_timeout_seconds,
        temp_dir=config.clone_temp_dir,
    )


def open_loader(target: str, restrictor: LoadRestriction | None) -> FileLoader:
    """Resolve a target into a loader using the user configuration.

    Args:
        target: Raw target string from the command line.
        restrictor: Restriction override, or None to use the configured one.

    Returns:
        FileLoader for the target. The caller must clean it up.

    Raises:
        ConfigError: If the configuration file is invalid.
        LoaderError: If the target cannot be resolved.
    """
    config = load_config_or_default()
    restriction = restrictor or config.load_restrictor
    return new_loader(restriction, target, OnDiskFileSystem(), build_cloner(config))
