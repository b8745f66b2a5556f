"""Resolve command implementation.

Classifies a target and shows the root and restriction it resolves to.
"""

import json
from enum import Enum
from typing import Annotated

import typer
from rich.table import Table

from basectl.cli.types import RestrictorOption, open_loader
from basectl.core.config import ConfigError
from basectl.core.errors import LoaderError
from basectl.loader.classifier import RootKind
from basectl.loader.loader import FileLoader
from basectl.utils.formatting import console, print_error, print_loader_error, restriction_markup


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def resolve(
    target: Annotated[str, typer.Argument(help="Directory, file, or remote repository URL.")],
    restrictor: RestrictorOption = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Resolve TARGET and show its root, kind and load restriction."""
    try:
        loader = open_loader(target, restrictor)
    except LoaderError as e:
        print_loader_error(e)
        raise typer.Exit(code=1) from e
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    with loader:
        if output_format == OutputFormat.JSON:
            console.print_json(json.dumps(_to_dict(target, loader)))
        else:
            console.print(_build_table(target, loader))


def _to_dict(target: str, loader: FileLoader) -> dict[str, object]:
    repo = loader.repo
    return {
        "target": target,
        "kind": loader.kind.value,
        "root": loader.root.path,
        "file_name": loader.file_name,
        "restriction": loader.restriction.value,
        "repository": None
        if repo is None
        else {
            "url": repo.clone_url,
            "ref": repo.ref,
            "subpath": repo.subpath,
        },
    }


def _build_table(target: str, loader: FileLoader) -> Table:
    table = Table(
        title=f"Resolved {target}",
        show_header=False,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Field", style="muted")
    table.add_column("Value")

    kind_style = "kind.remote" if loader.kind is RootKind.GIT_CLONE else "kind.local"
    table.add_row("Kind", f"[{kind_style}]{loader.kind.value}[/{kind_style}]")
    table.add_row("Root", loader.root.path)
    table.add_row("File", loader.file_name or "-")
    table.add_row("Restriction", restriction_markup(loader.restriction))
    if loader.repo is not None:
        table.add_row("Repository", loader.repo.clone_url)
        table.add_row("Ref", loader.repo.ref or "HEAD")
        table.add_row("Subpath", loader.repo.subpath or "-")
    return table
