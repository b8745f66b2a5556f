"""Tests for FileLoader and new_loader."""

from pathlib import Path

import pytest
from basectl.core.errors import (
    CycleDetectedError,
    LoaderError,
    RestrictionViolationError,
    TargetNotDirNorFileError,
)
from basectl.filesys import MemoryFileSystem, OnDiskFileSystem
from basectl.git.cloner import ClonedRepo, Cloner
from basectl.git.repospec import RepoSpec
from basectl.loader import LoadRestriction, RootKind, new_loader

from support import CHECKOUT_DIR, REMOTE_TARGET, RecordingCloner


def _owned_cloner(checkout: Path) -> Cloner:
    """Cloner that hands out a deletable on-disk checkout."""

    def _clone(spec: RepoSpec) -> ClonedRepo:
        (checkout / spec.subpath).mkdir(parents=True, exist_ok=True)
        (checkout / "base").mkdir(exist_ok=True)
        return ClonedRepo(checkout, spec)

    return _clone


class TestNewLoader:
    """Tests for top-level loader creation."""

    def test_local_directory(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A local directory gets the requested restriction."""
        loader = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)

        assert loader.kind is RootKind.LOCAL_DIR
        assert loader.root.path == "/cfg/app"
        assert loader.restriction is LoadRestriction.NONE
        assert loader.in_remote is False
        assert loader.referrer is None

    def test_local_file(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A file target is rooted at its parent and its name is loadable."""
        loader = new_loader(
            LoadRestriction.ROOT_ONLY, "/cfg/app/kustomization.yaml", memory_fs, recording_cloner
        )

        assert loader.kind is RootKind.LOCAL_FILE
        assert loader.root.path == "/cfg/app"
        assert loader.file_name == "kustomization.yaml"
        assert loader.load(loader.file_name) == b"resources:\n- ../base\n"

    def test_remote_is_always_root_only(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A remote target is root-only whatever the caller asked for."""
        loader = new_loader(LoadRestriction.NONE, REMOTE_TARGET, memory_fs, recording_cloner)

        assert loader.kind is RootKind.GIT_CLONE
        assert loader.restriction is LoadRestriction.ROOT_ONLY
        assert loader.root.path == f"{CHECKOUT_DIR}/overlays/prod"
        assert loader.in_remote is True
        assert loader.repo is not None
        assert loader.repo.ref == "v2"
        assert len(recording_cloner.specs) == 1

    def test_unknown_target(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A target that is neither remote, dir nor file is rejected."""
        with pytest.raises(TargetNotDirNorFileError):
            new_loader(
                LoadRestriction.ROOT_ONLY,
                "not-a-path-and-not-a-url-😀",
                memory_fs,
                recording_cloner,
            )

    def test_defaults_to_disk(self, tmp_path: Path) -> None:
        """Without a filesystem, the local disk is used."""
        (tmp_path / "kustomization.yaml").write_text("resources: []\n")

        with new_loader(LoadRestriction.ROOT_ONLY, str(tmp_path)) as loader:
            assert loader.load("kustomization.yaml") == b"resources: []\n"


class TestLoad:
    """Tests for FileLoader.load."""

    def test_root_only_denies_escape(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Root-only loaders cannot read outside their root."""
        loader = new_loader(LoadRestriction.ROOT_ONLY, "/cfg/app", memory_fs, recording_cloner)

        with pytest.raises(RestrictionViolationError) as exc_info:
            loader.load("../secrets/key")

        assert exc_info.value.root == "/cfg/app"
        assert exc_info.value.attempted == "/cfg/secrets/key"

    def test_none_allows_escape(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Unrestricted loaders may read outside their root."""
        loader = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)

        assert loader.load("../secrets/key") == b"s3cr3t"

    def test_root_only_allows_inside(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Root-only loaders read files under their root."""
        loader = new_loader(LoadRestriction.ROOT_ONLY, "/cfg/app", memory_fs, recording_cloner)

        assert loader.load("kustomization.yaml") == b"resources:\n- ../base\n"

    def test_missing_file(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Unreadable files raise LoaderError."""
        loader = new_loader(LoadRestriction.ROOT_ONLY, "/cfg/app", memory_fs, recording_cloner)

        with pytest.raises(LoaderError, match="Cannot load"):
            loader.load("missing.yaml")

    def test_null_byte_path_on_disk(self, tmp_path: Path) -> None:
        """A load path the disk cannot represent raises LoaderError."""
        loader = new_loader(LoadRestriction.ROOT_ONLY, str(tmp_path), OnDiskFileSystem())

        with pytest.raises(LoaderError, match="Cannot load"):
            loader.load("x\x00y")

    def test_directory_is_not_loadable(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Root-only loads must name files."""
        memory_fs.mkdir("/cfg/app/sub")
        loader = new_loader(LoadRestriction.ROOT_ONLY, "/cfg/app", memory_fs, recording_cloner)

        with pytest.raises(LoaderError, match="must be a file"):
            loader.load("sub")

    def test_remote_cannot_escape_root(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Remote loaders cannot read elsewhere in the checkout."""
        loader = new_loader(LoadRestriction.NONE, REMOTE_TARGET, memory_fs, recording_cloner)

        with pytest.raises(RestrictionViolationError):
            loader.load("../../base/kustomization.yaml")


class TestNew:
    """Tests for FileLoader.new."""

    def test_local_children_inherit_restriction(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Local bases keep the parent's restriction all the way down."""
        app = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)

        base = app.new("../base")
        common = base.new("../common")

        assert base.root.path == "/cfg/base"
        assert common.root.path == "/cfg/common"
        assert base.restriction is LoadRestriction.NONE
        assert common.restriction is LoadRestriction.NONE
        assert common.referrer is base
        assert base.referrer is app

    def test_remote_child_is_root_only(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A remote base of an unrestricted loader is root-only."""
        app = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)

        child = app.new(REMOTE_TARGET)

        assert child.kind is RootKind.GIT_CLONE
        assert child.restriction is LoadRestriction.ROOT_ONLY
        assert child.in_remote is True

    def test_local_child_of_remote_shares_checkout(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A relative base inside a checkout reuses it and stays root-only."""
        remote = new_loader(LoadRestriction.NONE, REMOTE_TARGET, memory_fs, recording_cloner)

        child = remote.new("../../base")

        assert child.kind is RootKind.LOCAL_DIR
        assert child.root.path == f"{CHECKOUT_DIR}/base"
        assert child.restriction is LoadRestriction.ROOT_ONLY
        assert child.in_remote is True
        assert child.repo == remote.repo
        assert len(recording_cloner.specs) == 1
        assert recording_cloner.repos[0].references == 2

    def test_local_child_cannot_leave_checkout(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A relative base may not climb out of the checkout."""
        remote = new_loader(LoadRestriction.NONE, REMOTE_TARGET, memory_fs, recording_cloner)

        with pytest.raises(RestrictionViolationError) as exc_info:
            remote.new("../../../../cfg/secrets")

        assert exc_info.value.root == CHECKOUT_DIR
        assert recording_cloner.repos[0].references == 1

    def test_absolute_child_rejected(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Bases must be relative or remote."""
        app = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)

        with pytest.raises(LoaderError, match="cannot be absolute"):
            app.new("/cfg/base")

    def test_empty_child_rejected(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """An empty base is rejected."""
        app = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)

        with pytest.raises(LoaderError, match="Empty base"):
            app.new("")

    def test_missing_child(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A base that does not exist is rejected."""
        app = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)

        with pytest.raises(TargetNotDirNorFileError):
            app.new("../nowhere")

    @pytest.mark.parametrize("target", [".", "..", "../app"])
    def test_local_cycle(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner, target: str
    ) -> None:
        """A base that is or contains the current root is a cycle."""
        app = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)

        with pytest.raises(CycleDetectedError):
            app.new(target)

    def test_cycle_through_chain(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A base pointing back at an earlier root is a cycle."""
        app = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)
        base = app.new("../base")

        with pytest.raises(CycleDetectedError) as exc_info:
            base.new("../app")

        assert exc_info.value.referrer == "/cfg/app"

    def test_repo_cycle_detected_before_clone(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Referencing the same repository root again is a cycle and never clones."""
        remote = new_loader(LoadRestriction.NONE, REMOTE_TARGET, memory_fs, recording_cloner)
        child = remote.new("../../base")

        with pytest.raises(CycleDetectedError):
            child.new(REMOTE_TARGET)

        assert len(recording_cloner.specs) == 1

    def test_same_repo_other_subpath(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Another subpath of the same repository is not a cycle."""
        remote = new_loader(LoadRestriction.NONE, REMOTE_TARGET, memory_fs, recording_cloner)

        child = remote.new("https://example.com/org/repo//base?ref=v2")

        assert child.root.path == f"{CHECKOUT_DIR}/base"
        assert len(recording_cloner.specs) == 2


class TestCleanup:
    """Tests for loader cleanup and checkout lifetime."""

    def test_checkout_removed_after_last_loader(self, tmp_path: Path) -> None:
        """The checkout lives until every loader using it is cleaned up."""
        checkout = tmp_path / "checkout"
        loader = new_loader(
            LoadRestriction.ROOT_ONLY,
            "https://example.com/org/repo//overlays/prod",
            OnDiskFileSystem(),
            _owned_cloner(checkout),
        )
        child = loader.new("../../base")

        child.cleanup()
        assert checkout.exists()

        loader.cleanup()
        assert not checkout.exists()

    def test_cleanup_cascades_to_children(self, tmp_path: Path) -> None:
        """Cleaning up a loader cleans up every loader created from it."""
        checkout = tmp_path / "checkout"
        with new_loader(
            LoadRestriction.ROOT_ONLY,
            "https://example.com/org/repo//overlays/prod",
            OnDiskFileSystem(),
            _owned_cloner(checkout),
        ) as loader:
            child = loader.new("../../base")

        assert loader.cleaned is True
        assert child.cleaned is True
        assert not checkout.exists()

    def test_cleanup_is_idempotent(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """cleanup() may be called more than once."""
        loader = new_loader(LoadRestriction.NONE, REMOTE_TARGET, memory_fs, recording_cloner)

        loader.cleanup()
        loader.cleanup()

        assert recording_cloner.repos[0].cleaned is True

    def test_unowned_checkout_is_kept(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """Pre-existing checkouts are never deleted."""
        with new_loader(LoadRestriction.NONE, REMOTE_TARGET, memory_fs, recording_cloner):
            pass

        assert memory_fs.is_dir(f"{CHECKOUT_DIR}/overlays/prod")

    def test_use_after_cleanup(
        self, memory_fs: MemoryFileSystem, recording_cloner: RecordingCloner
    ) -> None:
        """A cleaned-up loader refuses further work."""
        loader = new_loader(LoadRestriction.NONE, "/cfg/app", memory_fs, recording_cloner)
        loader.cleanup()

        with pytest.raises(LoaderError, match="cleaned up"):
            loader.load("kustomization.yaml")
        with pytest.raises(LoaderError, match="cleaned up"):
            loader.new("../base")
