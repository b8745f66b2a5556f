"""Remote repository targets: parsing and cloning."""

from basectl.git.cloner import (
    ClonedRepo,
    Cloner,
    GitExecCloner,
    classify_git_failure,
    clone_using_git_exec,
    do_nothing_cloner,
)
from basectl.git.repospec import RepoSpec, parse_repo_spec

__all__ = [
    "ClonedRepo",
    "Cloner",
    "GitExecCloner",
    "RepoSpec",
    "classify_git_failure",
    "clone_using_git_exec",
    "do_nothing_cloner",
    "parse_repo_spec",
]
