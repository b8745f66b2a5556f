"""Filesystem implementation backed by the local disk."""

import os
from pathlib import Path

from basectl.filesys.base import FileInfo, FileSystem


class OnDiskFileSystem(FileSystem):
    """FileSystem that reads from the real, local filesystem."""

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def stat(self, path: str) -> FileInfo:
        st = os.stat(path)
        is_dir = os.path.isdir(path)
        name = os.path.basename(os.path.normpath(path))
        return FileInfo(name=name, is_dir=is_dir, size=0 if is_dir else st.st_size)

    def abs_path(self, path: str) -> str:
        return os.path.abspath(path)

    def real_path(self, path: str) -> str:
        return os.path.realpath(path)

    def read_file(self, path: str) -> bytes:
        return Path(path).read_bytes()
