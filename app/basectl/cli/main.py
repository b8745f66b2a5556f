"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer

from basectl import __version__
from basectl.cli.commands import cat, config, resolve

app = typer.Typer(
    name="basectl",
    help="Resolve configuration targets into root-restricted loaders.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"basectl version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """basectl - resolve directories, files and git URLs into loaders.

    Remote targets are cloned and always restricted to their own root.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")


# Register commands
app.command(name="resolve")(resolve.resolve)
app.command(name="cat")(cat.cat)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
