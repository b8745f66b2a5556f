"""Rich console output for basectl commands.

Loader errors are printed with a short hint that tells the user what to
check, so a failed resolve can be fixed without re-running with --verbose.
"""

import sys

from rich.console import Console

from basectl.core.errors import (
    CloneFailedError,
    CloneFailureKind,
    CycleDetectedError,
    LoaderError,
    RemoteParseAmbiguousError,
    RestrictionViolationError,
)
from basectl.core.theme import get_theme
from basectl.loader.restriction import LoadRestriction

_CLONE_HINTS: dict[CloneFailureKind, str] = {
    CloneFailureKind.NETWORK: "check the host name and your network connection",
    CloneFailureKind.AUTH: "check that the repository exists and your git credentials",
    CloneFailureKind.REVISION: "check the ref= value against the remote branches and tags",
    CloneFailureKind.SUBPATH: "check the path after '//' exists at that ref",
    CloneFailureKind.TIMEOUT: "raise timeout= on the target or clone_timeout_seconds in config",
    CloneFailureKind.CLIENT_MISSING: "install git or set git_command in config",
}


def _color_system() -> str | None:
    # Full hex colors on a terminal, Rich auto-detection otherwise
    return "truecolor" if sys.stdout.isatty() else None


console = Console(theme=get_theme(), color_system=_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_color_system())


def restriction_markup(restriction: LoadRestriction) -> str:
    """Return console markup for a restriction, colored by strictness."""
    style = "restricted" if restriction is LoadRestriction.ROOT_ONLY else "unrestricted"
    return f"[{style}]{restriction.value}[/{style}]"


def error_hint(error: LoaderError) -> str | None:
    """Return a one-line hint for a loader error, if there is one."""
    if isinstance(error, CloneFailedError):
        return _CLONE_HINTS.get(error.kind)
    if isinstance(error, RemoteParseAmbiguousError):
        return "remote targets look like https://host/org/repo//subpath?ref=v1"
    if isinstance(error, RestrictionViolationError):
        return "use --load-restrictor none to read outside a local root"
    if isinstance(error, CycleDetectedError):
        return "a base may not point back at a root that references it"
    return None


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_loader_error(error: LoaderError) -> None:
    """Print a loader error followed by its hint."""
    print_error(str(error))
    hint = error_hint(error)
    if hint:
        err_console.print(f"[muted]Hint: {hint}[/]", highlight=False)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
