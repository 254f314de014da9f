"""
Discovery of ignore sources, in ascending priority:

1. built-in names (version control directories, `node_modules`)
2. explicitly named ignore files such as `.prettierignore`
3. the `.gitignore` hierarchy: repository `info/exclude`, then every `.gitignore`
   from the repository root down (outside a repository: ancestors of the start
   directory, then the files below it)
4. negations taken from `!pattern` command-line arguments

Reading is best-effort: missing, unreadable, or undecodable files are skipped.
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from fmtwalk.file_resolver.defaults import (
    DEPENDENCY_DIR,
    GITIGNORE,
    INFO_EXCLUDE,
    REPO_ROOT_MARKER,
    VCS_DIRS,
)
from fmtwalk.file_resolver.matcher import IgnoreMatcher
from fmtwalk.file_resolver.patterns import Pattern, parse_pattern, split_path

log = logging.getLogger(__name__)


def _read_ignore_file(path: Path, domain: Sequence[str] | None = None) -> list[Pattern] | None:
    """
    Read an ignore file into patterns scoped to `domain` (by default, the file's own
    directory). Returns `None` if the file is missing, unreadable, or not UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    if domain is None:
        domain = split_path(path.parent)
    patterns = [
        parse_pattern(line, domain)
        for line in text.splitlines()
        if line.strip() and not line.startswith("#")
    ]
    log.debug("Read %d ignore patterns from %s", len(patterns), path)
    return patterns


def builtin_patterns(with_node_modules: bool = False) -> list[Pattern]:
    """Version control and dependency directory names, matched at any depth anywhere."""
    names = list(VCS_DIRS)
    if not with_node_modules:
        names.append(DEPENDENCY_DIR)
    return [parse_pattern(name) for name in names]


def _escape_glob(segment: str) -> str:
    return re.sub(r"([\\*?\[\]])", r"\\\1", segment)


def negation_pattern(body: str, base_dir: Path) -> Pattern:
    """
    Turn a `!pattern` command-line argument (given without the `!`) into a global
    re-include rule. A body without a `/` matches at any depth; one with a `/` is
    anchored at `base_dir` by prefixing the directory's own path.
    """
    dir_only = body.endswith("/")
    if "/" in body.rstrip("/"):
        prefix = [_escape_glob(s) for s in split_path(base_dir)]
        joined = posixpath.normpath("/".join([*prefix, body.lstrip("/")]))
        body = "/" + joined + ("/" if dir_only else "")
    return parse_pattern("!" + body)


def find_repo_root(start_dir: Path, marker: str = REPO_ROOT_MARKER) -> Path | None:
    """Walk up from `start_dir` to the first directory containing `marker`."""
    current = Path(os.path.abspath(start_dir))
    while True:
        if (current / marker).exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def ignore_file_dirs(base_dir: Path, marker: str = REPO_ROOT_MARKER) -> list[Path]:
    """
    Directories whose `.gitignore` applies to `base_dir` from above, outermost first:
    from the repository root (the nearest ancestor holding `marker`) down to
    `base_dir` itself, or from the filesystem root when there is no repository.

    Only looks at the filesystem to find the marker; no ignore file is read.
    """
    base = Path(os.path.abspath(base_dir))
    top = find_repo_root(base, marker)
    chain = [base]
    current = base
    while current != top and current.parent != current:
        current = current.parent
        chain.append(current)
    chain.reverse()
    return chain


def _nested_ignore_layers(
    top: Path, rules: IgnoreMatcher, seen: set[Path], walked: set[Path]
) -> list[tuple[Path, list[Pattern]]]:
    """
    Read `.gitignore` files from `top` down, parents before children. Git never
    reads ignore files inside ignored directories, so those subtrees are pruned
    using `rules` plus everything read so far. Files in `seen` and directories in
    `walked` were handled by an earlier walk and are skipped.
    """
    layers: list[tuple[Path, list[Pattern]]] = []
    for dirpath, dirnames, _filenames in os.walk(top):
        current = Path(dirpath)
        if current in walked:
            dirnames[:] = []
            continue
        walked.add(current)
        path = current / GITIGNORE
        if path not in seen:
            seen.add(path)
            found = _read_ignore_file(path)
            if found:
                layers.append((current, found))
                rules = rules + IgnoreMatcher(found)
        dirnames.sort()
        dirnames[:] = [
            d
            for d in dirnames
            if not os.path.islink(current / d) and not rules.match(split_path(current / d), True)
        ]
    return layers


def gitignore_patterns(
    base_dir: Path, rules: IgnoreMatcher | None = None, roots: Iterable[Path] = ()
) -> list[Pattern]:
    """
    All `.gitignore` patterns relevant to paths under `base_dir` and any extra
    `roots`, in ascending priority.

    For each start directory: the repository's `info/exclude`, the `.gitignore` of
    every directory from the repository root (or the filesystem root, outside a
    repository) down to the start, the files below the start, and finally every
    other `.gitignore` in the repository. A file always comes before the files of
    its subdirectories, and each is read once.
    """
    rules = rules if rules is not None else IgnoreMatcher()
    seen: set[Path] = set()
    walked: set[Path] = set()
    layers: list[tuple[Path, list[Pattern]]] = []

    def read_layer(directory: Path, path: Path) -> None:
        if path in seen:
            return
        seen.add(path)
        found = _read_ignore_file(path, split_path(directory))
        if found:
            layers.append((directory, found))

    def known() -> IgnoreMatcher:
        return rules + IgnoreMatcher(p for _, found in layers for p in found)

    for start in (Path(os.path.abspath(p)) for p in (base_dir, *roots)):
        repo_root = find_repo_root(start)
        if repo_root is not None:
            read_layer(repo_root, repo_root / INFO_EXCLUDE)
        for directory in ignore_file_dirs(start):
            read_layer(directory, directory / GITIGNORE)

        layers.extend(_nested_ignore_layers(start, known(), seen, walked))
        if repo_root is not None:
            layers.extend(_nested_ignore_layers(repo_root, known(), seen, walked))

    # Stable by depth: ancestors before descendants, `info/exclude` before the
    # repository root's own `.gitignore`.
    layers.sort(key=lambda layer: len(layer[0].parts))
    return [p for _, found in layers for p in found]


def discover(
    base_dir: Path,
    ignore_paths: Sequence[str],
    with_node_modules: bool = False,
    negations: Iterable[str] = (),
    roots: Iterable[Path] = (),
) -> IgnoreMatcher:
    """
    Build the combined ignore matcher for an expansion rooted at `base_dir`.

    `ignore_paths` are resolved against `base_dir`. The exact value `.gitignore`
    selects discovery of the whole `.gitignore` hierarchy, for `base_dir` and for
    every directory in `roots` (the places the expansion will walk); any other entry
    is read as one file scoped to its own directory. Built-in names and
    `negations` (pattern bodies without the leading `!`) are global, so they hold
    wherever the expansion goes; negations come last.
    """
    base = Path(os.path.abspath(base_dir))
    builtins = IgnoreMatcher(builtin_patterns(with_node_modules))

    explicit: list[Pattern] = []
    for name in ignore_paths:
        if name == GITIGNORE:
            continue
        path = Path(os.path.normpath(base / name))
        explicit.extend(_read_ignore_file(path) or [])
    explicit_rules = IgnoreMatcher(explicit)

    hierarchy = IgnoreMatcher()
    if GITIGNORE in ignore_paths:
        hierarchy = IgnoreMatcher(gitignore_patterns(base, builtins + explicit_rules, roots))

    overrides = IgnoreMatcher(negation_pattern(body, base) for body in negations)

    return IgnoreMatcher.combine(builtins, explicit_rules, hierarchy, overrides)
