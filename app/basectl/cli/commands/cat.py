"""Cat command implementation.

Prints a file read through the loader for a target, so the load
restriction applies exactly as it would for the configuration pipeline.
"""

from typing import Annotated

import typer

from basectl.cli.types import RestrictorOption, open_loader
from basectl.core.config import ConfigError
from basectl.core.errors import LoaderError, RestrictionViolationError
from basectl.utils.formatting import print_error, print_loader_error


def cat(
    target: Annotated[str, typer.Argument(help="Directory, file, or remote repository URL.")],
    path: Annotated[
        str | None,
        typer.Argument(help="File to load, relative to the target root."),
    ] = None,
    restrictor: RestrictorOption = None,
) -> None:
    """Print PATH as loaded through the loader for TARGET.

    If TARGET names a file and PATH is omitted, that file is printed.
    """
    try:
        loader = open_loader(target, restrictor)
    except LoaderError as e:
        print_loader_error(e)
        raise typer.Exit(code=1) from e
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    with loader:
        load_path = path or loader.file_name
        if load_path is None:
            print_error(f"Target {target!r} is a directory; give a PATH to load.")
            raise typer.Exit(code=2)

        try:
            data = loader.load(load_path)
        except RestrictionViolationError as e:
            print_error(f"{e} (restriction: {loader.restriction.value})")
            if loader.in_remote:
                # Remote roots stay root-only whatever the flag says
                print_error("Files outside a remote root can't be loaded.")
            raise typer.Exit(code=1) from e
        except LoaderError as e:
            print_loader_error(e)
            raise typer.Exit(code=1) from e

    typer.echo(data, nl=False)
