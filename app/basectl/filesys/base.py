"""Abstract filesystem capability used by target resolution.

Resolution and loading depend only on the narrow set of operations
defined here, so an in-memory filesystem can stand in for the disk.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Result of a stat call.

    Attributes:
        name: Base name of the stat'ed path.
        is_dir: Whether the path is a directory.
        size: Size in bytes (0 for directories).
    """

    name: str
    is_dir: bool
    size: int


@dataclass(frozen=True, slots=True)
class ConfirmedDir:
    """An absolute directory path that was confirmed to exist.

    Only FileSystem.confirm_dir creates these.
    """

    path: str

    def __post_init__(self) -> None:
        """Validate that the path is absolute."""
        if not os.path.isabs(self.path):
            msg = f"ConfirmedDir must be absolute, got {self.path!r}"
            raise ValueError(msg)

    def __str__(self) -> str:
        return self.path

    def join(self, rel: str) -> str:
        """Join a relative path onto this directory and normalize it."""
        return os.path.normpath(os.path.join(self.path, rel))

    def has_prefix(self, other: "ConfirmedDir | str") -> bool:
        """Check whether this directory is ``other`` or lies beneath it.

        The comparison is component aware: ``/a/bc`` is not under ``/a/b``.
        """
        return is_within(self.path, str(other))


def is_within(path: str, root: str) -> bool:
    """Check whether ``path`` equals ``root`` or lies beneath it.

    Both paths must already be absolute and normalized.
    """
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


class FileSystem(ABC):
    """Abstract base class for filesystems the loader can read from.

    Example:
        >>> fs = OnDiskFileSystem()
        >>> root = fs.confirm_dir("./base")
        >>> data = fs.read_file(root.join("kustomization.yaml"))
    """

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        """Return True if ``path`` exists and is a directory."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if ``path`` exists."""

    @abstractmethod
    def stat(self, path: str) -> FileInfo:
        """Stat ``path``.

        Raises:
            FileNotFoundError: If the path does not exist.
        """

    @abstractmethod
    def abs_path(self, path: str) -> str:
        """Return the absolute, lexically normalized form of ``path``."""

    @abstractmethod
    def real_path(self, path: str) -> str:
        """Return the absolute form of ``path`` with symlinks evaluated."""

    @abstractmethod
    def read_file(self, path: str) -> bytes:
        """Read the full contents of a file.

        Raises:
            FileNotFoundError: If the file does not exist.
            IsADirectoryError: If the path is a directory.
        """

    def confirm_dir(self, path: str) -> ConfirmedDir:
        """Confirm that ``path`` is an existing directory.

        Returns:
            ConfirmedDir holding the real, absolute directory path.

        Raises:
            FileNotFoundError: If the path does not exist.
            NotADirectoryError: If the path is not a directory.
        """
        if not path:
            raise FileNotFoundError("Directory path is empty")
        absolute = self.real_path(self.abs_path(path))
        if not self.exists(absolute):
            raise FileNotFoundError(f"No such directory: {path}")
        if not self.is_dir(absolute):
            raise NotADirectoryError(f"Not a directory: {path}")
        return ConfirmedDir(absolute)
