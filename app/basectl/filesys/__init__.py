"""Filesystem capability for target resolution.

This module exports the abstract filesystem, its on-disk and in-memory
implementations, and the confirmed-directory value type.
"""

from basectl.filesys.base import ConfirmedDir, FileInfo, FileSystem, is_within
from basectl.filesys.disk import OnDiskFileSystem
from basectl.filesys.memory import MemoryFileSystem

__all__ = [
    "ConfirmedDir",
    "FileInfo",
    "FileSystem",
    "MemoryFileSystem",
    "OnDiskFileSystem",
    "is_within",
]
