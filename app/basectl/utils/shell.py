"""Subprocess helpers used to drive the git client.

Commands always run with captured, decoded output and a timeout so a
hanging remote can't block target resolution.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of a finished command.

    Attributes:
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        returncode: Process exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Whether the command exited with status 0."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command to completion and capture its output.

    Args:
        args: Executable followed by its arguments.
        check: Raise CalledProcessError on a non-zero exit status.
        timeout: Seconds to wait before the process is killed.
        cwd: Directory to run in (None = current directory).
        env: Variables set on top of the inherited environment.

    Returns:
        CommandResult for the finished process.

    Raises:
        subprocess.CalledProcessError: If check=True and the command fails.
        subprocess.TimeoutExpired: If the command outlives ``timeout``.
        FileNotFoundError: If the executable does not exist.
    """
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
        env={**os.environ, **env} if env else None,
    )
    return CommandResult(
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
    )


def command_exists(name: str) -> bool:
    """Check whether ``name`` resolves to an executable on PATH."""
    return shutil.which(name) is not None
