"""Exception hierarchy for target resolution and restricted loading.

Every error carries the original target string (or the root and the
attempted path) so a failure can be diagnosed without re-running.
"""

from enum import Enum


class LoaderError(Exception):
    """Base exception for target resolution and loading errors."""


class RemoteParseAmbiguousError(LoaderError):
    """Raised when a target commits to the remote grammar but is malformed."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Invalid remote target {target!r}: {reason}")


class CloneFailureKind(str, Enum):
    """Distinct, user-diagnosable reasons a clone can fail.

    Attributes:
        NETWORK: Remote host unreachable or connection refused.
        AUTH: Authentication required or denied, or repository hidden.
        REVISION: Requested ref does not exist on the remote.
        SUBPATH: Checkout succeeded but the subpath is missing.
        TIMEOUT: A git command exceeded the clone timeout.
        CLIENT_MISSING: The git executable could not be found.
        GIT: Any other git failure.
    """

    NETWORK = "network"
    AUTH = "auth"
    REVISION = "revision"
    SUBPATH = "subpath"
    TIMEOUT = "timeout"
    CLIENT_MISSING = "client_missing"
    GIT = "git"


class CloneFailedError(LoaderError):
    """Raised when a remote target cannot be materialized locally."""

    def __init__(self, kind: CloneFailureKind, target: str, detail: str) -> None:
        self.kind = kind
        self.target = target
        self.detail = detail
        super().__init__(f"Clone of {target!r} failed ({kind.value}): {detail}")


class TargetNotDirNorFileError(LoaderError):
    """Raised when a target is neither a remote, a directory, nor a file."""

    def __init__(self, target: str, detail: str | None = None) -> None:
        self.target = target
        self.detail = detail
        msg = f"Target {target!r} is neither a directory nor a file"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class RestrictionViolationError(LoaderError):
    """Raised when a load would read outside the permitted root."""

    def __init__(self, root: str, attempted: str) -> None:
        self.root = root
        self.attempted = attempted
        super().__init__(f"Access to {attempted!r} is outside permitted root {root!r}")


class AbsolutePathResolutionError(LoaderError):
    """Raised when a target's absolute path cannot be determined."""

    def __init__(self, target: str, detail: str) -> None:
        self.target = target
        super().__init__(f"Cannot resolve absolute path of {target!r}: {detail}")


class CycleDetectedError(LoaderError):
    """Raised when a child target points back into its own referrer chain."""

    def __init__(self, target: str, referrer: str) -> None:
        self.target = target
        self.referrer = referrer
        super().__init__(f"Cycle detected: {target!r} is referenced from {referrer!r}")
