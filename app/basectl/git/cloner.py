"""Cloners that materialize remote repository targets locally.

A cloner is any callable taking a RepoSpec and returning a ClonedRepo.
The default implementation shells out to the git client. Tests and
pre-fetched checkouts use do_nothing_cloner instead.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from collections.abc import Callable
from pathlib import Path

from basectl.core.errors import CloneFailedError, CloneFailureKind, LoaderError
from basectl.filesys import FileSystem, OnDiskFileSystem
from basectl.git.repospec import DEFAULT_TIMEOUT_SECONDS, RepoSpec
from basectl.utils.shell import run_command

logger = logging.getLogger(__name__)

# Stderr fragments (lowercase) mapped to failure kinds, checked in order
_STDERR_PATTERNS: list[tuple[CloneFailureKind, tuple[str, ...]]] = [
    (
        CloneFailureKind.AUTH,
        (
            "authentication failed",
            "could not read username",
            "could not read password",
            "terminal prompts disabled",
            "permission denied (publickey",
            "repository not found",
            "access denied",
            "returned error: 403",
            "returned error: 401",
        ),
    ),
    (
        CloneFailureKind.REVISION,
        (
            "couldn't find remote ref",
            "not our ref",
            "unknown revision",
            "did not match any",
            "invalid refspec",
        ),
    ),
    (
        CloneFailureKind.NETWORK,
        (
            "could not resolve host",
            "connection refused",
            "connection timed out",
            "network is unreachable",
            "unable to access",
            "could not connect",
            "could not read from remote repository",
            "does not appear to be a git repository",
        ),
    ),
]


class ClonedRepo:
    """A local checkout of a remote repository.

    The checkout is shared by every loader rooted in it. Each loader holds
    one reference; the directory is removed when the last one is released.

    Example:
        >>> repo = clone_using_git_exec(spec)
        >>> repo.acquire()
        >>> ...
        >>> repo.release()  # directory removed
    """

    def __init__(self, directory: str | Path, spec: RepoSpec, *, owned: bool = True) -> None:
        """Initialize the ClonedRepo.

        Args:
            directory: Top-level checkout directory.
            spec: Repository spec the checkout was made from.
            owned: If False, cleanup never deletes the directory.
        """
        self._directory = str(directory)
        self._spec = spec
        self._owned = owned
        self._references = 0
        self._cleaned = False

    @property
    def directory(self) -> str:
        """Top-level checkout directory."""
        return self._directory

    @property
    def spec(self) -> RepoSpec:
        return self._spec

    @property
    def root(self) -> str:
        """Directory of the spec's subpath inside the checkout."""
        if not self._spec.subpath:
            return self._directory
        return os.path.normpath(os.path.join(self._directory, self._spec.subpath))

    @property
    def references(self) -> int:
        """Number of loaders currently holding this checkout."""
        return self._references

    @property
    def cleaned(self) -> bool:
        return self._cleaned

    def acquire(self) -> "ClonedRepo":
        """Take a reference to the checkout.

        Raises:
            LoaderError: If the checkout has already been cleaned up.
        """
        if self._cleaned:
            raise LoaderError(f"Checkout of {self._spec.raw!r} was already cleaned up")
        self._references += 1
        return self

    def release(self) -> None:
        """Drop a reference, cleaning up when none remain."""
        if self._references == 0:
            return
        self._references -= 1
        if self._references == 0:
            self.cleanup()

    def cleanup(self) -> None:
        """Remove the checkout directory.

        Safe to call repeatedly and after the directory was removed externally.
        """
        if self._cleaned:
            return
        self._cleaned = True
        self._references = 0
        if not self._owned:
            return
        _remove_tree(self._directory)


def _remove_tree(directory: str) -> None:
    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove clone directory %s: %s", directory, e)
    else:
        logger.debug("Removed clone directory %s", directory)


Cloner = Callable[[RepoSpec], ClonedRepo]


def classify_git_failure(stderr: str, default: CloneFailureKind) -> CloneFailureKind:
    """Map git stderr output to a clone failure kind.

    Args:
        stderr: Standard error of the failed git command.
        default: Kind returned when no known pattern matches.

    Returns:
        The matching CloneFailureKind.
    """
    lowered = stderr.lower()
    for kind, fragments in _STDERR_PATTERNS:
        if any(fragment in lowered for fragment in fragments):
            return kind
    return default


class GitExecCloner:
    """Cloner that runs the git client in a fresh temporary directory.

    Attributes:
        git_command: git executable to run.
        timeout: Per-command timeout when the spec sets none.
        temp_dir: Parent directory for checkouts (None = system default).
    """

    def __init__(
        self,
        git_command: str = "git",
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        temp_dir: str | Path | None = None,
    ) -> None:
        self.git_command = git_command
        self.timeout = timeout
        self.temp_dir = str(temp_dir) if temp_dir is not None else None

    def __call__(self, spec: RepoSpec) -> ClonedRepo:
        """Fetch ``spec`` into a new temporary directory.

        Raises:
            CloneFailedError: If any git step fails or the subpath is missing.
        """
        directory = tempfile.mkdtemp(prefix="basectl-", dir=self.temp_dir)
        logger.info("Cloning %s into %s", spec.describe(), directory)
        try:
            self._fetch(spec, directory)
            repo = ClonedRepo(directory, spec)
            if not os.path.isdir(repo.root):
                raise CloneFailedError(
                    CloneFailureKind.SUBPATH,
                    spec.raw,
                    f"path {spec.subpath!r} not found in repository",
                )
        except BaseException:
            # Interrupted or failed clones never leave a directory behind
            _remove_tree(directory)
            raise
        logger.info("Cloned %s", spec.clone_key)
        return repo

    def _fetch(self, spec: RepoSpec, directory: str) -> None:
        self._git(spec, directory, ["init", "--quiet"], CloneFailureKind.GIT)
        self._git(
            spec, directory, ["remote", "add", "origin", spec.clone_url], CloneFailureKind.GIT
        )
        self._git(
            spec,
            directory,
            ["fetch", "--depth=1", "origin", spec.ref or "HEAD"],
            CloneFailureKind.NETWORK,
        )
        self._git(spec, directory, ["checkout", "--quiet", "FETCH_HEAD"], CloneFailureKind.REVISION)
        if spec.submodules:
            self._git(
                spec,
                directory,
                ["submodule", "update", "--init", "--recursive"],
                CloneFailureKind.NETWORK,
            )

    def _git(
        self,
        spec: RepoSpec,
        directory: str,
        args: list[str],
        default_kind: CloneFailureKind,
    ) -> None:
        timeout = spec.timeout or self.timeout
        cmd = [self.git_command, *args]
        logger.debug("Running %s (timeout=%ss)", " ".join(cmd), timeout)
        try:
            result = run_command(
                cmd,
                cwd=directory,
                timeout=timeout,
                env={"GIT_TERMINAL_PROMPT": "0"},
            )
        except subprocess.TimeoutExpired as e:
            raise CloneFailedError(
                CloneFailureKind.TIMEOUT,
                spec.raw,
                f"'git {args[0]}' timed out after {timeout}s",
            ) from e
        except FileNotFoundError as e:
            raise CloneFailedError(
                CloneFailureKind.CLIENT_MISSING,
                spec.raw,
                f"git executable {self.git_command!r} not found",
            ) from e

        if not result.success:
            stderr = result.stderr.strip()
            kind = classify_git_failure(stderr, default_kind)
            raise CloneFailedError(kind, spec.raw, f"'git {args[0]}' failed: {stderr}")


def clone_using_git_exec(spec: RepoSpec) -> ClonedRepo:
    """Clone ``spec`` with the git client using default settings."""
    return GitExecCloner()(spec)


def do_nothing_cloner(directory: str | Path, fs: FileSystem | None = None) -> Cloner:
    """Return a cloner that uses an existing checkout at ``directory``.

    The checkout is never deleted by cleanup.

    Args:
        directory: Existing checkout directory.
        fs: Filesystem the checkout lives on (default: the local disk).
    """
    filesystem = fs or OnDiskFileSystem()

    def _clone(spec: RepoSpec) -> ClonedRepo:
        repo = ClonedRepo(directory, spec, owned=False)
        if not filesystem.is_dir(repo.root):
            raise CloneFailedError(
                CloneFailureKind.SUBPATH,
                spec.raw,
                f"path {spec.subpath!r} not found in {directory}",
            )
        return repo

    return _clone
