"""
PathExpander: main entry point for path expansion.

Resolves a mix of files, directories, glob patterns, and `!negations` into a
deduplicated list of `ExpandedPath` entries, applying the layered ignore rules
found by `discover()`.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from wcmatch import glob

from fmtwalk.file_resolver.gitignore import discover
from fmtwalk.file_resolver.matcher import IgnoreMatcher
from fmtwalk.file_resolver.patterns import split_path
from fmtwalk.file_resolver.types import (
    ExpandError,
    ExpandOptions,
    Expansion,
    ResolvedPath,
)
from fmtwalk.file_resolver.walk import Visit, split_glob, walk_files

log = logging.getLogger(__name__)

# Glob flavor for command-line patterns: `**` crosses directories, `*` matches
# dotfiles, `{a,b}` alternation.
GLOB_FLAGS = glob.GLOBSTAR | glob.DOTGLOB | glob.BRACE


class PatternKind(Enum):
    FILE = "file"
    DIR = "dir"
    GLOB = "glob"


@dataclass(frozen=True)
class Candidate:
    kind: PatternKind
    pattern: str
    path: Path


class PathExpander:
    """
    Expands command-line patterns relative to `cwd`.

    Each call to `expand()` discovers ignore files afresh, so one expander can be
    reused across runs over a changing tree.
    """

    def __init__(self, cwd: str | Path = ".", options: ExpandOptions | None = None) -> None:
        self._cwd: Path = Path(os.path.abspath(cwd))
        self._options: ExpandOptions = options if options is not None else ExpandOptions()
        # Ignore files are rules, not formatting candidates.
        self._ignore_file_names: frozenset[str] = frozenset(
            Path(p).name for p in self._options.ignore_paths
        )

    def expand(
        self, patterns: Sequence[str], cancel: threading.Event | None = None
    ) -> Expansion:
        """
        Expand `patterns` in order. Each pattern yields zero or more `ResolvedPath`s or
        a single `ExpandError`; a file reachable from several patterns is reported
        once, where it was first seen.
        """
        result = Expansion()
        candidates, negations = self._classify(patterns, result)

        ignore = discover(
            self._cwd,
            self._options.ignore_paths,
            with_node_modules=self._options.with_node_modules,
            negations=negations,
            roots=[self._walk_root(c) for c in candidates],
        )
        log.debug("Expanding %d patterns with %d ignore rules", len(candidates), len(ignore))

        seen: set[Path] = set()

        def emit(path: Path, ignore_unknown: bool) -> bool:
            if path in seen:
                return False
            seen.add(path)
            result.paths.append(ResolvedPath(path, ignore_unknown))
            return True

        for candidate in candidates:
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                return result

            if candidate.kind is PatternKind.FILE:
                if not ignore.is_path_ignored(split_path(candidate.path), False):
                    emit(candidate.path, False)
            elif candidate.kind is PatternKind.DIR:
                self._expand_directory(candidate, ignore, emit, result, cancel)
            else:
                self._expand_glob(candidate, ignore, emit, result, cancel)

        if cancel is not None and cancel.is_set():
            result.cancelled = True
        return result

    def _classify(
        self, patterns: Iterable[str], result: Expansion
    ) -> tuple[list[Candidate], list[str]]:
        """
        Sort patterns into candidates by probing the filesystem without following
        symlinks. Symlink errors go straight into `result` so they keep their place
        in the output.
        """
        candidates: list[Candidate] = []
        negations: list[str] = []
        for pattern in patterns:
            path = Path(os.path.normpath(self._cwd / pattern))
            try:
                st_mode = path.lstat().st_mode
            except OSError:
                st_mode = None

            if st_mode is None:
                if pattern.startswith("!"):
                    negations.append(pattern[1:].replace(os.sep, "/"))
                else:
                    candidates.append(Candidate(PatternKind.GLOB, pattern, path))
            elif path.is_symlink():
                if self._options.effective_ignore_symlinks:
                    log.debug('Skipping pattern "%s", as it is a symbolic link.', pattern)
                else:
                    result.paths.append(
                        ExpandError(
                            pattern,
                            f'Explicitly specified pattern "{pattern}" is a symbolic link.',
                        )
                    )
            elif path.is_dir():
                candidates.append(Candidate(PatternKind.DIR, pattern, path))
            elif path.is_file():
                candidates.append(Candidate(PatternKind.FILE, pattern, path))
            else:
                # Sockets, FIFOs, devices: nothing to format.
                log.debug('Skipping pattern "%s", as it is not a regular file.', pattern)
        return candidates, negations

    def _walk_root(self, candidate: Candidate) -> Path:
        """The directory whose ignore files govern `candidate`."""
        if candidate.kind is PatternKind.DIR:
            return candidate.path
        if candidate.kind is PatternKind.FILE:
            return candidate.path.parent
        return Path(os.path.normpath(self._cwd / split_glob(candidate.pattern)[0]))

    def _visitor(self, ignore: IgnoreMatcher) -> Callable[[Path, bool], Visit]:
        def visit(path: Path, is_dir: bool) -> Visit:
            drop = Visit.PRUNE if is_dir else Visit.SKIP
            if path.is_symlink():
                log.debug('Skipping "%s", as it is a symbolic link.', path)
                return drop
            if not is_dir and path.name in self._ignore_file_names:
                return Visit.SKIP
            if ignore.match(split_path(path), is_dir):
                return drop
            return Visit.DESCEND

        return visit

    def _expand_directory(
        self,
        candidate: Candidate,
        ignore: IgnoreMatcher,
        emit: Callable[[Path, bool], bool],
        result: Expansion,
        cancel: threading.Event | None,
    ) -> None:
        try:
            for path in walk_files(candidate.path, self._visitor(ignore), cancel):
                emit(path, True)
        except OSError as e:
            result.paths.append(
                ExpandError(
                    candidate.pattern,
                    f'Unable to expand directory: "{candidate.pattern}".\n{e}',
                )
            )

    def _expand_glob(
        self,
        candidate: Candidate,
        ignore: IgnoreMatcher,
        emit: Callable[[Path, bool], bool],
        result: Expansion,
        cancel: threading.Event | None,
    ) -> None:
        root_part, glob_part = split_glob(candidate.pattern)
        root = Path(os.path.normpath(self._cwd / root_part))
        visit = self._visitor(ignore)
        # Without `**`, matches sit at a fixed depth below the root.
        max_depth = None if "**" in glob_part else glob_part.count("/") + 1

        def visit_glob(path: Path, is_dir: bool) -> Visit:
            decision = visit(path, is_dir)
            if decision is not Visit.DESCEND:
                return decision
            rel = path.relative_to(root)
            if is_dir:
                if max_depth is not None and len(rel.parts) >= max_depth:
                    return Visit.PRUNE
            elif not glob.globmatch(rel.as_posix(), glob_part, flags=GLOB_FLAGS):
                return Visit.SKIP
            return decision

        matched = False
        if root.is_dir() and not root.is_symlink():
            try:
                for path in walk_files(root, visit_glob, cancel):
                    matched = True
                    emit(path, True)
            except OSError as e:
                result.paths.append(
                    ExpandError(
                        candidate.pattern,
                        f'Unable to expand glob pattern: "{candidate.pattern}".\n{e}',
                    )
                )
                return

        if cancel is not None and cancel.is_set():
            return
        if not matched and not self._options.no_error_on_unmatched_pattern:
            result.paths.append(
                ExpandError(
                    candidate.pattern,
                    f'No files matching the pattern were found: "{candidate.pattern}".',
                )
            )


def expand_patterns(
    patterns: Sequence[str],
    cwd: str | Path = ".",
    options: ExpandOptions | None = None,
    cancel: threading.Event | None = None,
) -> Expansion:
    """Convenience wrapper: `PathExpander(cwd, options).expand(patterns, cancel)`."""
    return PathExpander(cwd, options).expand(patterns, cancel)
