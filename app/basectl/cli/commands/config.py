"""Config command implementation.

Shows and initializes the basectl configuration file.
"""

from typing import Annotated

import typer
from rich.table import Table

from basectl.core.config import (
    BasectlConfig,
    ConfigError,
    load_config_or_default,
    save_config,
)
from basectl.core.paths import ensure_config_dir, get_config_path
from basectl.utils.formatting import (
    console,
    print_error,
    print_success,
    print_warning,
    restriction_markup,
)
from basectl.utils.shell import command_exists

app = typer.Typer(
    help="Show and initialize configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective configuration."""
    config_path = get_config_path()
    try:
        config = load_config_or_default(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    source = str(config_path) if config_path.exists() else "defaults"
    table = Table(
        title=f"Configuration ({source})",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", no_wrap=True)
    table.add_column("Value")

    git_found = "found" if command_exists(config.git_command) else "[warning]not found[/]"
    table.add_row("load_restrictor", restriction_markup(config.load_restrictor))
    table.add_row("git_command", f"{config.git_command} ({git_found})")
    table.add_row("clone_timeout_seconds", str(config.clone_timeout_seconds))
    table.add_row("clone_temp_dir", str(config.clone_temp_dir or "-"))
    console.print(table)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_warning(f"Config already exists: {config_path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        ensure_config_dir()
        saved = save_config(BasectlConfig(), config_path)
    except (ConfigError, RuntimeError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config written to {saved}")
