"""
Discovery module -- finds repository roots under a starting directory.
"""

from .walker import DEFAULT_MARKERS, DirectoryNode, NodeKind, classify, walk

__all__ = [
    "DEFAULT_MARKERS",
    "DirectoryNode",
    "NodeKind",
    "classify",
    "walk",
]
