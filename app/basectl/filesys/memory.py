"""In-memory filesystem.

Paths are POSIX style. Relative paths are resolved against a configurable
working directory. Symlinks are not modelled, so ``real_path`` is the same
as ``abs_path``.
"""

import posixpath

from basectl.filesys.base import FileInfo, FileSystem


class MemoryFileSystem(FileSystem):
    """FileSystem held entirely in memory.

    Example:
        >>> fs = MemoryFileSystem()
        >>> fs.add_file("/cfg/app/kustomization.yaml", "resources: []")
        >>> fs.is_dir("/cfg/app")
        True
    """

    def __init__(self, cwd: str = "/") -> None:
        """Initialize an empty filesystem.

        Args:
            cwd: Absolute working directory for relative paths. Created if missing.
        """
        if not posixpath.isabs(cwd):
            msg = f"Working directory must be absolute, got {cwd!r}"
            raise ValueError(msg)
        self._files: dict[str, bytes] = {}
        self._dirs: set[str] = {"/"}
        self._cwd = posixpath.normpath(cwd)
        self.mkdir(self._cwd)

    @property
    def cwd(self) -> str:
        """Working directory used to absolutize relative paths."""
        return self._cwd

    def mkdir(self, path: str) -> None:
        """Create a directory and all missing parents."""
        current = self.abs_path(path)
        if current in self._files:
            raise NotADirectoryError(f"Not a directory: {path}")
        while current not in self._dirs:
            self._dirs.add(current)
            current = posixpath.dirname(current)

    def add_file(self, path: str, content: bytes | str = b"") -> None:
        """Create or overwrite a file, creating parent directories."""
        absolute = self.abs_path(path)
        if absolute in self._dirs:
            raise IsADirectoryError(f"Is a directory: {path}")
        self.mkdir(posixpath.dirname(absolute))
        data = content.encode("utf-8") if isinstance(content, str) else content
        self._files[absolute] = data

    def remove(self, path: str) -> None:
        """Remove a file, or a directory and everything under it."""
        absolute = self.abs_path(path)
        if absolute in self._files:
            del self._files[absolute]
            return
        if absolute not in self._dirs:
            raise FileNotFoundError(f"No such file or directory: {path}")
        prefix = absolute.rstrip("/") + "/"
        self._dirs = {d for d in self._dirs if d != absolute and not d.startswith(prefix)}
        self._files = {f: b for f, b in self._files.items() if not f.startswith(prefix)}
        self._dirs.add("/")

    def is_dir(self, path: str) -> bool:
        return self.abs_path(path) in self._dirs

    def exists(self, path: str) -> bool:
        absolute = self.abs_path(path)
        return absolute in self._dirs or absolute in self._files

    def stat(self, path: str) -> FileInfo:
        absolute = self.abs_path(path)
        name = posixpath.basename(absolute) or "/"
        if absolute in self._dirs:
            return FileInfo(name=name, is_dir=True, size=0)
        if absolute in self._files:
            return FileInfo(name=name, is_dir=False, size=len(self._files[absolute]))
        raise FileNotFoundError(f"No such file or directory: {path}")

    def abs_path(self, path: str) -> str:
        return posixpath.normpath(posixpath.join(self._cwd, path))

    def real_path(self, path: str) -> str:
        return self.abs_path(path)

    def read_file(self, path: str) -> bytes:
        absolute = self.abs_path(path)
        if absolute in self._dirs:
            raise IsADirectoryError(f"Is a directory: {path}")
        try:
            return self._files[absolute]
        except KeyError:
            raise FileNotFoundError(f"No such file: {path}") from None
