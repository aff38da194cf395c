"""
Execution module - runs the external tool in each discovered repository.
"""

from .dispatcher import CommandDispatcher, InvocationOutcome, dispatch

__all__ = [
    "CommandDispatcher",
    "InvocationOutcome",
    "dispatch",
]
