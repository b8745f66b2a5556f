"""Shared test doubles and constants."""

from basectl.filesys import MemoryFileSystem
from basectl.git.cloner import ClonedRepo, do_nothing_cloner
from basectl.git.repospec import RepoSpec

CHECKOUT_DIR = "/checkout/repo"
REMOTE_TARGET = "https://example.com/org/repo//overlays/prod?ref=v2"


class RecordingCloner:
    """Cloner that serves an existing in-memory checkout and records calls."""

    def __init__(self, fs: MemoryFileSystem, directory: str = CHECKOUT_DIR) -> None:
        self._clone = do_nothing_cloner(directory, fs=fs)
        self.specs: list[RepoSpec] = []
        self.repos: list[ClonedRepo] = []

    def __call__(self, spec: RepoSpec) -> ClonedRepo:
        self.specs.append(spec)
        repo = self._clone(spec)
        self.repos.append(repo)
        return repo
