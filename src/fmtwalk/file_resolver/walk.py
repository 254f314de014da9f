"""Pruning directory walk shared by directory and glob expansion."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterator
from enum import Enum
from pathlib import Path

# Characters that indicate a path is a glob pattern rather than a literal path.
GLOB_CHARS = frozenset("*?[{")


class Visit(Enum):
    """What to do with one walk entry."""

    DESCEND = "descend"
    """Keep it: yield a file, enter a directory."""

    SKIP = "skip"
    """Drop this file."""

    PRUNE = "prune"
    """Drop this directory and everything below it."""


def _raise(error: OSError) -> None:
    raise error


def walk_files(
    root: Path,
    visit: Callable[[Path, bool], Visit],
    cancel: threading.Event | None = None,
) -> Iterator[Path]:
    """
    Yield files under `root` in lexical order, asking `visit(path, is_dir)` about
    every entry below the root. The root itself is never visited.

    Symlinked directories are never entered. An `OSError` while listing a
    directory ends the walk and propagates to the caller.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        if cancel is not None and cancel.is_set():
            return
        current = Path(dirpath)
        dirnames.sort()
        dirnames[:] = [d for d in dirnames if visit(current / d, True) is Visit.DESCEND]
        for filename in sorted(filenames):
            if cancel is not None and cancel.is_set():
                return
            path = current / filename
            if visit(path, False) is Visit.DESCEND:
                yield path


def split_glob(pattern: str) -> tuple[str, str]:
    """
    Split a glob into the literal directory prefix to walk from and the remaining
    glob, e.g. `src/**/*.ts` -> (`src`, `**/*.ts`). The prefix is `.` when the first
    segment already contains glob characters.
    """
    parts = Path(pattern).parts
    for i, part in enumerate(parts):
        if any(c in part for c in GLOB_CHARS):
            root = str(Path(*parts[:i])) if i > 0 else "."
            return root, "/".join(parts[i:])
    # No glob characters at all: the last segment is matched literally.
    if len(parts) > 1:
        return str(Path(*parts[:-1])), parts[-1]
    return ".", pattern
