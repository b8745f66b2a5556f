"""Load restriction policies.

A restriction decides whether a loader may read a path relative to its
root. Restrictions only ever tighten as loaders descend into bases.
"""

from enum import Enum

from basectl.core.errors import LoaderError, RestrictionViolationError
from basectl.filesys.base import ConfirmedDir, FileSystem, is_within

# Flag spellings accepted in addition to the enum values.
_ALIASES: dict[str, str] = {
    "loadrestrictionsrootonly": "rootOnly",
    "loadrestrictionsnone": "none",
    "root-only": "rootOnly",
    "rootonly": "rootOnly",
    "unrestricted": "none",
}


class LoadRestriction(str, Enum):
    """Restriction applied to every load a loader performs.

    Attributes:
        ROOT_ONLY: Loads must resolve to files under the loader root.
        NONE: Loads may read any path the process can read.
    """

    ROOT_ONLY = "rootOnly"
    NONE = "none"

    @classmethod
    def parse(cls, value: str) -> "LoadRestriction":
        """Parse a restriction name, accepting kustomize flag spellings.

        Raises:
            ValueError: If the name is not recognized.
        """
        normalized = _ALIASES.get(value.strip().lower(), value.strip())
        for member in cls:
            if member.value.lower() == normalized.lower():
                return member
        msg = f"Unknown load restriction {value!r} (expected 'rootOnly' or 'none')"
        raise ValueError(msg)

    def tighten(self, other: "LoadRestriction") -> "LoadRestriction":
        """Combine two restrictions, keeping the stricter one."""
        if LoadRestriction.ROOT_ONLY in (self, other):
            return LoadRestriction.ROOT_ONLY
        return LoadRestriction.NONE

    def check(self, fs: FileSystem, root: ConfirmedDir, path: str) -> str:
        """Check a candidate path against this restriction.

        Args:
            fs: Filesystem the path lives on.
            root: Loader root the restriction is relative to.
            path: Candidate path, already joined onto the root if relative.

        Returns:
            Absolute, normalized path that may be read.

        Raises:
            RestrictionViolationError: If the path is outside the root.
            LoaderError: If a root-only load names a directory.
        """
        candidate = fs.abs_path(path)
        if self is LoadRestriction.NONE:
            return candidate

        if not is_within(candidate, root.path):
            raise RestrictionViolationError(root.path, path)

        if fs.exists(candidate):
            # Symlinks inside the root may still point outside of it
            real = fs.real_path(candidate)
            if not is_within(real, fs.real_path(root.path)):
                raise RestrictionViolationError(root.path, path)
            if fs.is_dir(real):
                raise LoaderError(f"Load path {path!r} must be a file, not a directory")
        return candidate
