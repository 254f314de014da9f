"""
Self-contained path expansion with layered, gitignore-compatible ignore rules.

No imports from `fmtwalk` outside this package.

Usage::

    from fmtwalk.file_resolver import ExpandOptions, PathExpander, ResolvedPath

    expansion = PathExpander(".", ExpandOptions(with_node_modules=True)).expand(["src", "*.md"])
    for entry in expansion:
        if isinstance(entry, ResolvedPath):
            print(entry.path)
        else:
            print(entry.message)
"""

from fmtwalk.file_resolver.defaults import DEFAULT_IGNORE_PATHS, GITIGNORE
from fmtwalk.file_resolver.gitignore import discover, ignore_file_dirs
from fmtwalk.file_resolver.matcher import IgnoreMatcher
from fmtwalk.file_resolver.patterns import Pattern, parse_pattern, split_path
from fmtwalk.file_resolver.resolver import PathExpander, expand_patterns
from fmtwalk.file_resolver.types import (
    ExpandedPath,
    ExpandError,
    ExpandOptions,
    Expansion,
    ResolvedPath,
)

__all__ = [
    "DEFAULT_IGNORE_PATHS",
    "GITIGNORE",
    "ExpandError",
    "ExpandOptions",
    "ExpandedPath",
    "Expansion",
    "IgnoreMatcher",
    "PathExpander",
    "Pattern",
    "ResolvedPath",
    "discover",
    "expand_patterns",
    "ignore_file_dirs",
    "parse_pattern",
    "split_path",
]
