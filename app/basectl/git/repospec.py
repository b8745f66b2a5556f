"""Parsing of remote repository targets.

A remote target has the form::

    <scheme>://<host>/<path>[//<subpath>][?ref=<revision>]

Anything that does not start with ``<scheme>://`` is not a remote target
and is left for local path handling. A target that does start that way is
committed to the remote grammar: if the rest is malformed, parsing fails
instead of falling through.
"""

import posixpath
import re
from dataclasses import dataclass
from urllib.parse import parse_qsl

from basectl.core.errors import RemoteParseAmbiguousError

SUPPORTED_SCHEMES: frozenset[str] = frozenset({"https", "http", "ssh", "git", "file"})

# Default per-command git timeout, in seconds
DEFAULT_TIMEOUT_SECONDS = 27

_SCHEME_RE = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*)://(?P<rest>.*)$", re.DOTALL)
_DURATION_RE = re.compile(r"^(?:(?P<h>\d+)h)?(?:(?P<m>\d+)m)?(?:(?P<s>\d+)s)?$")
_QUERY_KEYS = frozenset({"ref", "version", "timeout", "submodules"})
_GIT_SUFFIX = ".git/"


@dataclass(frozen=True, slots=True)
class RepoSpec:
    """A parsed remote repository target.

    Attributes:
        raw: The original target string.
        scheme: URL scheme (https, http, ssh, git, file).
        host: Host part, possibly with user and port. Empty for file URLs.
        repo_path: Repository path on the host, without leading slash.
        ref: Revision to check out (None = remote HEAD).
        subpath: Directory inside the repository to use as root ("" = top).
        timeout: Per-command git timeout in seconds (None = cloner default).
        submodules: Whether submodules are checked out.
    """

    raw: str
    scheme: str
    host: str
    repo_path: str
    ref: str | None = None
    subpath: str = ""
    timeout: int | None = None
    submodules: bool = True

    @property
    def clone_url(self) -> str:
        """URL handed to git."""
        return f"{self.scheme}://{self.host}/{self.repo_path}"

    @property
    def clone_key(self) -> str:
        """Identity of a checkout: the same URL at the same ref."""
        return f"{self.clone_url}@{self.ref or 'HEAD'}"

    @property
    def identity(self) -> str:
        """Identity of a root: the same checkout at the same subpath."""
        return f"{self.clone_key}//{self.subpath}"

    def describe(self) -> str:
        """Return a short human-readable description."""
        parts = [self.clone_url]
        if self.subpath:
            parts.append(f"path={self.subpath}")
        parts.append(f"ref={self.ref or 'HEAD'}")
        return " ".join(parts)


def parse_repo_spec(target: str) -> RepoSpec | None:
    """Parse a target string as a remote repository reference.

    Args:
        target: Raw target string.

    Returns:
        RepoSpec when the target is remote, None when it is not.

    Raises:
        RemoteParseAmbiguousError: If the target starts like a remote URL
            but does not follow the grammar.
    """
    match = _SCHEME_RE.match(target)
    if match is None:
        return None

    scheme = match.group("scheme").lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise RemoteParseAmbiguousError(target, f"unsupported scheme {scheme!r}")

    rest = match.group("rest")
    if "#" in rest:
        raise RemoteParseAmbiguousError(target, "URL fragments are not supported")
    body, _, query = rest.partition("?")
    options = _parse_query(target, query)

    host, _, path = body.partition("/")
    if not host and scheme != "file":
        raise RemoteParseAmbiguousError(target, "missing host")
    if any(c.isspace() for c in host):
        raise RemoteParseAmbiguousError(target, f"invalid host {host!r}")
    if path.startswith("/"):
        # An empty segment before "//" leaves no repository path
        raise RemoteParseAmbiguousError(target, "missing repository path")

    repo_path, subpath = _split_subpath(target, path)
    return RepoSpec(
        raw=target,
        scheme=scheme,
        host=host,
        repo_path=repo_path,
        subpath=subpath,
        **options,
    )


def _split_subpath(target: str, path: str) -> tuple[str, str]:
    """Split a URL path into repository path and subpath."""
    if "//" in path:
        repo_path, _, subpath = path.partition("//")
        if not subpath.strip("/"):
            raise RemoteParseAmbiguousError(target, "empty subpath after '//'")
    elif _GIT_SUFFIX in path:
        idx = path.index(_GIT_SUFFIX) + len(_GIT_SUFFIX) - 1
        repo_path, subpath = path[:idx], path[idx + 1 :]
    else:
        repo_path, subpath = path, ""

    repo_path = repo_path.strip("/")
    if not repo_path:
        raise RemoteParseAmbiguousError(target, "missing repository path")
    if ".." in repo_path.split("/"):
        raise RemoteParseAmbiguousError(target, "repository path cannot contain '..'")

    if ".." in subpath.split("/"):
        raise RemoteParseAmbiguousError(target, "subpath cannot leave the repository")
    subpath = posixpath.normpath(subpath.strip("/")) if subpath.strip("/") else ""
    if subpath == ".":
        subpath = ""
    return repo_path, subpath


def _parse_query(target: str, query: str) -> dict[str, object]:
    """Parse the query string into RepoSpec keyword arguments."""
    if not query:
        return {}
    try:
        pairs = parse_qsl(query, keep_blank_values=True, strict_parsing=True)
    except ValueError as e:
        raise RemoteParseAmbiguousError(target, f"malformed query {query!r}") from e

    seen: set[str] = set()
    options: dict[str, object] = {}
    for key, value in pairs:
        if key not in _QUERY_KEYS:
            raise RemoteParseAmbiguousError(target, f"unknown query parameter {key!r}")
        # version is an alias of ref
        canonical = "ref" if key == "version" else key
        if canonical in seen:
            raise RemoteParseAmbiguousError(target, f"query parameter {key!r} given twice")
        seen.add(canonical)

        if canonical == "ref":
            if not value:
                raise RemoteParseAmbiguousError(target, "empty ref")
            options["ref"] = value
        elif canonical == "timeout":
            options["timeout"] = _parse_timeout(target, value)
        else:
            options["submodules"] = _parse_bool(target, key, value)
    return options


def _parse_timeout(target: str, value: str) -> int:
    """Parse a timeout given as seconds or as a duration like ``1m30s``."""
    if value.isdigit():
        seconds = int(value)
    else:
        match = _DURATION_RE.match(value)
        if match is None or not any(match.groupdict().values()):
            raise RemoteParseAmbiguousError(target, f"invalid timeout {value!r}")
        seconds = (
            int(match.group("h") or 0) * 3600
            + int(match.group("m") or 0) * 60
            + int(match.group("s") or 0)
        )
    if seconds <= 0:
        raise RemoteParseAmbiguousError(target, "timeout must be positive")
    return seconds


def _parse_bool(target: str, key: str, value: str) -> bool:
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise RemoteParseAmbiguousError(target, f"{key} must be 'true' or 'false', got {value!r}")
