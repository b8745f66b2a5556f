"""Root-restricted file loader.

A FileLoader reads files relative to a root directory, subject to a load
restriction, and creates child loaders for bases referenced from the files
it reads. Restrictions only tighten on the way down: once a loader is
rooted in a remote checkout, it and all of its descendants are root-only.
"""

from __future__ import annotations

import logging
import os
from types import TracebackType

from basectl.core.errors import CycleDetectedError, LoaderError, RestrictionViolationError
from basectl.filesys.base import ConfirmedDir, FileSystem
from basectl.filesys.disk import OnDiskFileSystem
from basectl.git.cloner import ClonedRepo, Cloner, clone_using_git_exec
from basectl.git.repospec import RepoSpec, parse_repo_spec
from basectl.loader.classifier import ResolvedRoot, RootKind, classify_target
from basectl.loader.restriction import LoadRestriction

logger = logging.getLogger(__name__)


class FileLoader:
    """Loader rooted at a confirmed directory.

    Loaders are created by new_loader() for a top-level target and by
    FileLoader.new() for bases. Use them as context managers, or call
    cleanup(), so remote checkouts are removed.

    Example:
        >>> with new_loader(LoadRestriction.ROOT_ONLY, "./overlays/prod") as ldr:
        ...     data = ldr.load("kustomization.yaml")
        ...     base = ldr.new("../../base")
    """

    def __init__(
        self,
        resolved: ResolvedRoot,
        restriction: LoadRestriction,
        fs: FileSystem,
        cloner: Cloner,
        *,
        referrer: FileLoader | None = None,
        clone: ClonedRepo | None = None,
        repo: RepoSpec | None = None,
    ) -> None:
        """Initialize the FileLoader.

        Args:
            resolved: Classified root of this loader.
            restriction: Restriction applied to every load.
            fs: Filesystem to read from.
            cloner: Cloner used when descending into remote bases.
            referrer: Loader this one was created from (None at top level).
            clone: Checkout this loader reads from, shared with its referrer
                for local bases inside a checkout.
            repo: Spec of the repository this loader reads from.
        """
        self._resolved = resolved
        self._restriction = restriction
        self._fs = fs
        self._cloner = cloner
        self._referrer = referrer
        self._repo = repo if repo is not None else resolved.repo
        self._clone = clone.acquire() if clone is not None else None
        self._children: list[FileLoader] = []
        self._cleaned = False

    def __repr__(self) -> str:
        return (
            f"FileLoader(kind={self.kind.value!r}, root={self.root.path!r}, "
            f"restriction={self._restriction.value!r})"
        )

    @property
    def root(self) -> ConfirmedDir:
        """Directory loads are relative to."""
        return self._resolved.path

    @property
    def kind(self) -> RootKind:
        return self._resolved.kind

    @property
    def file_name(self) -> str | None:
        """File named by the target, for targets that named a file."""
        return self._resolved.file_name

    @property
    def restriction(self) -> LoadRestriction:
        return self._restriction

    @property
    def repo(self) -> RepoSpec | None:
        """Remote repository this loader reads from, if any."""
        return self._repo

    @property
    def referrer(self) -> FileLoader | None:
        return self._referrer

    @property
    def in_remote(self) -> bool:
        """Whether this loader reads from a remote checkout."""
        return self._clone is not None

    @property
    def cleaned(self) -> bool:
        return self._cleaned

    def load(self, path: str) -> bytes:
        """Read a file through this loader.

        Relative paths are joined onto the root. The restriction is checked
        before anything is read.

        Args:
            path: Relative or absolute path of the file.

        Returns:
            File contents.

        Raises:
            RestrictionViolationError: If the restriction denies the path.
            LoaderError: If the loader was cleaned up or the file can't be read.
        """
        self._ensure_open()
        candidate = path if os.path.isabs(path) else self.root.join(path)
        allowed = self._restriction.check(self._fs, self.root, candidate)
        logger.debug("Loading %s (root=%s)", allowed, self.root)
        try:
            return self._fs.read_file(allowed)
        except (OSError, ValueError) as e:
            raise LoaderError(f"Cannot load {path!r} from root {self.root}: {e}") from e

    def new(self, target: str) -> FileLoader:
        """Create a loader for a base referenced from this loader.

        Local targets are resolved against this loader's root and inherit its
        restriction. Remote targets, and anything inside a remote checkout,
        are always root-only.

        Args:
            target: Relative local path or remote target of the base.

        Returns:
            Child loader, owned by this loader for cleanup.

        Raises:
            LoaderError: If the target is empty or absolute.
            CycleDetectedError: If the target loops back into the referrer chain.
            RestrictionViolationError: If a local base leaves the checkout.
        """
        self._ensure_open()
        if not target:
            raise LoaderError(f"Empty base referenced from {self.root}")

        spec = parse_repo_spec(target)
        if spec is None and os.path.isabs(target):
            raise LoaderError(f"New root {target!r} cannot be absolute")
        if spec is not None:
            self._check_repo_cycle(spec)

        resolved = classify_target(target, self._fs, self._cloner, base_dir=self.root)
        try:
            child = self._new_child(target, resolved)
        except BaseException:
            if resolved.clone is not None:
                resolved.clone.cleanup()
            raise
        self._children.append(child)
        return child

    def _new_child(self, target: str, resolved: ResolvedRoot) -> FileLoader:
        if resolved.kind is RootKind.GIT_CLONE:
            logger.debug("Base %r is remote, restricting to root", target)
            return FileLoader(
                resolved,
                LoadRestriction.ROOT_ONLY,
                self._fs,
                self._cloner,
                referrer=self,
                clone=resolved.clone,
            )

        self._check_local_cycle(target, resolved.path)
        restriction = self._restriction
        if self._clone is not None:
            self._check_clone_containment(target, resolved.path, self._clone)
            restriction = restriction.tighten(LoadRestriction.ROOT_ONLY)
        return FileLoader(
            resolved,
            restriction,
            self._fs,
            self._cloner,
            referrer=self,
            clone=self._clone,
            repo=self._repo,
        )

    def _check_local_cycle(self, target: str, candidate: ConfirmedDir) -> None:
        """A base may not be a visited root or contain one."""
        trail: FileLoader | None = self
        while trail is not None:
            if trail.root.has_prefix(candidate):
                raise CycleDetectedError(target, trail.root.path)
            trail = trail.referrer

    def _check_repo_cycle(self, spec: RepoSpec) -> None:
        trail: FileLoader | None = self
        while trail is not None:
            if trail.repo is not None and trail.repo.identity == spec.identity:
                raise CycleDetectedError(spec.raw, trail.repo.raw)
            trail = trail.referrer

    def _check_clone_containment(
        self, target: str, candidate: ConfirmedDir, clone: ClonedRepo
    ) -> None:
        """Local bases inside a checkout must stay inside that checkout."""
        checkout = self._fs.real_path(clone.directory)
        if not candidate.has_prefix(checkout):
            raise RestrictionViolationError(checkout, target)

    def _ensure_open(self) -> None:
        if self._cleaned:
            raise LoaderError(f"Loader for {self.root} has already been cleaned up")

    def cleanup(self) -> None:
        """Release this loader and every loader created from it.

        A remote checkout is removed once no loader holds it anymore.
        Safe to call more than once.
        """
        if self._cleaned:
            return
        self._cleaned = True
        for child in reversed(self._children):
            child.cleanup()
        self._children.clear()
        if self._clone is not None:
            self._clone.release()

    def __enter__(self) -> FileLoader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()


def new_loader(
    restriction: LoadRestriction,
    target: str,
    fs: FileSystem | None = None,
    cloner: Cloner | None = None,
) -> FileLoader:
    """Return a loader for a top-level target.

    Remote targets are always root-only, whatever ``restriction`` says.
    Local targets get ``restriction``. Transitively loaded remote bases are
    root-only as well.

    Args:
        restriction: Restriction requested for a local target.
        target: Raw target string.
        fs: Filesystem to read from (default: the local disk).
        cloner: Cloner for remote targets (default: the git client).

    Returns:
        FileLoader rooted at the target.

    Raises:
        LoaderError: Any classification failure; see classify_target().
    """
    filesystem = fs or OnDiskFileSystem()
    clone_fn = cloner or clone_using_git_exec

    resolved = classify_target(target, filesystem, clone_fn)
    if resolved.kind is RootKind.GIT_CLONE:
        if restriction is not LoadRestriction.ROOT_ONLY:
            logger.debug("Target %r is remote, ignoring restriction %s", target, restriction.value)
        restriction = LoadRestriction.ROOT_ONLY

    try:
        return FileLoader(resolved, restriction, filesystem, clone_fn, clone=resolved.clone)
    except BaseException:
        if resolved.clone is not None:
            resolved.clone.cleanup()
        raise
