"""Target resolution and root-restricted loading.

This module exports the classifier, the restriction policy and the loader.
"""

from basectl.loader.classifier import ResolvedRoot, RootKind, classify_target
from basectl.loader.loader import FileLoader, new_loader
from basectl.loader.restriction import LoadRestriction

__all__ = [
    "FileLoader",
    "LoadRestriction",
    "ResolvedRoot",
    "RootKind",
    "classify_target",
    "new_loader",
]
