"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import pytest
from basectl.filesys import MemoryFileSystem
from support import CHECKOUT_DIR, RecordingCloner


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """In-memory tree with a local app, its bases, and a repository checkout."""
    fs = MemoryFileSystem(cwd="/work")
    fs.add_file("/cfg/app/kustomization.yaml", "resources:\n- ../base\n")
    fs.add_file("/cfg/base/kustomization.yaml", "resources:\n- ../common\n")
    fs.add_file("/cfg/common/kustomization.yaml", "resources: []\n")
    fs.add_file("/cfg/secrets/key", "s3cr3t")
    fs.add_file(f"{CHECKOUT_DIR}/overlays/prod/kustomization.yaml", "resources:\n- ../../base\n")
    fs.add_file(f"{CHECKOUT_DIR}/base/kustomization.yaml", "resources: []\n")
    return fs


@pytest.fixture
def recording_cloner(memory_fs: MemoryFileSystem) -> RecordingCloner:
    """Cloner backed by the in-memory checkout."""
    return RecordingCloner(memory_fs)
