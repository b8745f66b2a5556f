"""Classification of targets into resolved roots.

A target is tried against three strategies in a fixed order:

1. remote repository (parsed, then cloned)
2. existing local directory
3. existing local file (its parent directory becomes the root)

The first strategy that applies wins. A strategy that does not apply
raises _NotApplicable and the next one is tried; any other error is a
hard failure and stops classification. A target that matches the remote
grammar never falls through to local handling.
"""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from basectl.core.errors import (
    AbsolutePathResolutionError,
    CloneFailedError,
    CloneFailureKind,
    TargetNotDirNorFileError,
)
from basectl.filesys.base import ConfirmedDir, FileSystem
from basectl.git.cloner import ClonedRepo, Cloner
from basectl.git.repospec import RepoSpec, parse_repo_spec

logger = logging.getLogger(__name__)


class RootKind(str, Enum):
    """How a loader root was obtained.

    Attributes:
        GIT_CLONE: Checkout of a remote repository.
        LOCAL_DIR: Existing local directory.
        LOCAL_FILE: Parent directory of an existing local file.
    """

    GIT_CLONE = "git-clone"
    LOCAL_DIR = "local-dir"
    LOCAL_FILE = "local-file"


@dataclass(frozen=True, slots=True)
class ResolvedRoot:
    """Result of classifying a target.

    Attributes:
        kind: How the root was obtained.
        path: Absolute, confirmed root directory.
        file_name: File named by a LOCAL_FILE target, None otherwise.
        repo: Parsed spec for GIT_CLONE roots.
        clone: Checkout owning the root for GIT_CLONE roots.
    """

    kind: RootKind
    path: ConfirmedDir
    file_name: str | None = None
    repo: RepoSpec | None = None
    clone: ClonedRepo | None = None


class _NotApplicable(Exception):
    """A strategy definitively does not apply to the target."""


def _local_path(target: str, base_dir: ConfirmedDir | None) -> str:
    if base_dir is not None and not os.path.isabs(target):
        return base_dir.join(target)
    return target


def _resolve_remote(
    target: str, fs: FileSystem, cloner: Cloner, base_dir: ConfirmedDir | None
) -> ResolvedRoot:
    spec = parse_repo_spec(target)
    if spec is None:
        raise _NotApplicable("not a remote target")

    clone = cloner(spec)
    try:
        root = fs.confirm_dir(clone.root)
    except OSError as e:
        clone.cleanup()
        raise CloneFailedError(
            CloneFailureKind.SUBPATH,
            target,
            f"checkout root {clone.root} is not a directory",
        ) from e
    return ResolvedRoot(kind=RootKind.GIT_CLONE, path=root, repo=spec, clone=clone)


def _resolve_dir(
    target: str, fs: FileSystem, cloner: Cloner, base_dir: ConfirmedDir | None
) -> ResolvedRoot:
    try:
        root = fs.confirm_dir(_local_path(target, base_dir))
    except (OSError, ValueError) as e:
        raise _NotApplicable(str(e)) from e
    return ResolvedRoot(kind=RootKind.LOCAL_DIR, path=root)


def _resolve_file(
    target: str, fs: FileSystem, cloner: Cloner, base_dir: ConfirmedDir | None
) -> ResolvedRoot:
    path = _local_path(target, base_dir)
    try:
        info = fs.stat(path)
    except (OSError, ValueError) as e:
        raise _NotApplicable(str(e)) from e
    if info.is_dir:
        raise _NotApplicable(f"{path} is a directory but could not be confirmed")

    try:
        absolute = fs.abs_path(path)
    except (OSError, ValueError) as e:
        raise AbsolutePathResolutionError(target, str(e)) from e

    try:
        root = fs.confirm_dir(os.path.dirname(absolute))
    except (OSError, ValueError) as e:
        raise TargetNotDirNorFileError(target, f"parent directory: {e}") from e
    return ResolvedRoot(kind=RootKind.LOCAL_FILE, path=root, file_name=info.name)


_Strategy = Callable[[str, FileSystem, Cloner, ConfirmedDir | None], ResolvedRoot]

_STRATEGIES: tuple[_Strategy, ...] = (_resolve_remote, _resolve_dir, _resolve_file)


def classify_target(
    target: str,
    fs: FileSystem,
    cloner: Cloner,
    base_dir: ConfirmedDir | None = None,
) -> ResolvedRoot:
    """Classify a target and establish its root.

    Args:
        target: Raw target string.
        fs: Filesystem local targets are resolved on.
        cloner: Cloner used for remote targets.
        base_dir: Directory relative local targets are resolved against.
            If None, they are resolved against the working directory.

    Returns:
        ResolvedRoot for the first strategy that applies.

    Raises:
        RemoteParseAmbiguousError: If the target is a malformed remote target.
        CloneFailedError: If a remote target cannot be cloned.
        AbsolutePathResolutionError: If a file target has no absolute path.
        TargetNotDirNorFileError: If no strategy applies.
    """
    if not target:
        raise TargetNotDirNorFileError(target, "empty target")

    last: _NotApplicable | None = None
    for strategy in _STRATEGIES:
        try:
            resolved = strategy(target, fs, cloner, base_dir)
        except _NotApplicable as e:
            logger.debug("%s does not apply to %r: %s", strategy.__name__, target, e)
            last = e
            continue
        logger.debug("Resolved %r as %s at %s", target, resolved.kind.value, resolved.path)
        return resolved

    detail = str(last) if last is not None else None
    cause = last.__cause__ if last is not None else None
    raise TargetNotDirNorFileError(target, detail) from cause
