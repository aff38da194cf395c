"""
Error types shared by discovery and execution.

Only InvalidRootError stops a run. DirectoryAccessError and SpawnError are
recorded and reported, and the run continues with the next directory or
repository.
"""

from pathlib import Path


class GrprError(Exception):
    """Base class for grpr errors."""


class InvalidRootError(GrprError):
    """The starting path does not exist or is not a directory."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid root '{path}': {reason}")


class DirectoryAccessError(GrprError):
    """A directory could not be classified or listed.

    Attributes:
        path: Directory that was skipped
        cause: Underlying OSError (permission denied, I/O error...)
    """

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read directory '{path}': {cause.strerror or cause}")


class SpawnError(GrprError):
    """The external tool could not be launched in a repository.

    Attributes:
        path: Repository where the launch was attempted
        tool: Executable name that was looked up
        cause: Underlying OSError (not found, permission denied...)
    """

    def __init__(self, path: Path, tool: str, cause: OSError) -> None:
        self.path = path
        self.tool = tool
        self.cause = cause
        super().__init__(f"Failed to run '{tool}' in '{path}': {cause.strerror or cause}")
