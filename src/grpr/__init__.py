"""
grpr - Run a version-control command in every repository under a directory.

Walks the tree below the starting directory, stops at each repository root
and re-runs the same tool invocation inside it.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
