"""
Repository discovery -- walks a directory tree looking for repository roots.

A directory is a repository root when one of the marker directories
(``.git`` by default) sits directly inside it. Repository roots are yielded
and never descended into; every other directory is listed and its
subdirectories are visited in turn.

Traversal is depth-first and pre-order, siblings sorted by name so the
output is the same on every platform. An explicit stack replaces recursion,
so deep trees cannot hit the interpreter's recursion limit. Symbolic links
to directories are not followed.
"""

import os
import stat
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog

from ..errors import DirectoryAccessError, InvalidRootError

logger = structlog.get_logger()

DEFAULT_MARKERS: tuple[str, ...] = (".git",)

SkipHandler = Callable[[DirectoryAccessError], None]


class NodeKind(str, Enum):
    """Classification of a single directory."""

    REPOSITORY_ROOT = "repository-root"
    PLAIN_DIRECTORY = "plain-directory"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class DirectoryNode:
    """A directory together with its classification.

    error is only set for UNREADABLE nodes.
    """

    path: Path
    kind: NodeKind
    error: OSError | None = None


def classify(path: Path, markers: Iterable[str] = DEFAULT_MARKERS) -> DirectoryNode:
    """Classify a directory by looking for a marker directly inside it.

    Only ``path/<marker>`` is checked; ancestors and descendants are not.
    The marker must be a directory (a symlink to one counts).

    Args:
        path: Directory to classify
        markers: Marker directory names, checked in order

    Returns:
        DirectoryNode with kind REPOSITORY_ROOT, PLAIN_DIRECTORY or UNREADABLE
    """
    for name in markers:
        try:
            st = os.stat(path / name)
        except (FileNotFoundError, NotADirectoryError):
            continue
        except OSError as e:
            return DirectoryNode(path=path, kind=NodeKind.UNREADABLE, error=e)
        if stat.S_ISDIR(st.st_mode):
            return DirectoryNode(path=path, kind=NodeKind.REPOSITORY_ROOT)
    return DirectoryNode(path=path, kind=NodeKind.PLAIN_DIRECTORY)


def walk(
    root: Path | str,
    *,
    markers: Iterable[str] = DEFAULT_MARKERS,
    on_skip: SkipHandler | None = None,
) -> Iterator[Path]:
    """Lazily yield the repository roots under ``root``.

    The root is validated immediately, before the first ``next()``, so
    InvalidRootError surfaces at call time.

    Args:
        root: Starting directory
        markers: Marker directory names identifying a repository
        on_skip: Called with a DirectoryAccessError for every directory that
            cannot be classified or listed. Defaults to logging a warning.

    Returns:
        Generator of repository root paths, parents before children,
        siblings in name order

    Raises:
        InvalidRootError: If root does not exist or is not a directory
    """
    root = Path(root)
    if not root.exists():
        raise InvalidRootError(root, "does not exist")
    if not root.is_dir():
        raise InvalidRootError(root, "not a directory")

    markers = tuple(markers)
    logger.info("walk.start", root=str(root), markers=list(markers))
    return _walk(root, markers, on_skip or _log_skip)


def _walk(root: Path, markers: tuple[str, ...], on_skip: SkipHandler) -> Iterator[Path]:
    stack: list[Path] = [root]
    found = 0

    while stack:
        current = stack.pop()
        node = classify(current, markers)

        if node.kind is NodeKind.REPOSITORY_ROOT:
            found += 1
            yield current
            continue

        if node.kind is NodeKind.UNREADABLE:
            on_skip(DirectoryAccessError(current, node.error))
            continue

        try:
            children = _list_subdirectories(current, on_skip)
        except OSError as e:
            on_skip(DirectoryAccessError(current, e))
            continue

        logger.debug("walk.descend", path=str(current), subdirectories=len(children))
        # Reversed so the smallest name is popped first
        stack.extend(reversed(children))

    logger.info("walk.complete", root=str(root), repositories=found)


def _list_subdirectories(path: Path, on_skip: SkipHandler) -> list[Path]:
    """Immediate subdirectories of ``path``, sorted by name, symlinks excluded."""
    names: list[str] = []
    with os.scandir(path) as it:
        for entry in it:
            try:
                if entry.is_dir(follow_symlinks=False):
                    names.append(entry.name)
            except OSError as e:
                on_skip(DirectoryAccessError(path / entry.name, e))
    names.sort()
    return [path / name for name in names]


def _log_skip(error: DirectoryAccessError) -> None:
    logger.warning("walk.directory_skipped", path=str(error.path), error=str(error.cause))
