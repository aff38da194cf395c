"""
Core module - run lifecycle utilities.
"""

from .shutdown import EXIT_INTERRUPTED, GracefulShutdown

__all__ = [
    "EXIT_INTERRUPTED",
    "GracefulShutdown",
]
