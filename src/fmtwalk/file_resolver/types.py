"""Options and result types for path expansion."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from fmtwalk.file_resolver.defaults import DEFAULT_IGNORE_PATHS


@dataclass
class ExpandOptions:
    """
    Options for expanding command-line patterns.

    `ignore_paths` are resolved against the base directory; the exact entry
    `.gitignore` turns on discovery of the whole `.gitignore` hierarchy.
    `ignore_symlinks=None` means symlinks named explicitly are skipped quietly
    exactly when `no_error_on_unmatched_pattern` is set.
    """

    ignore_paths: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATHS))
    with_node_modules: bool = False
    no_error_on_unmatched_pattern: bool = False
    ignore_symlinks: bool | None = None

    @property
    def effective_ignore_symlinks(self) -> bool:
        if self.ignore_symlinks is None:
            return self.no_error_on_unmatched_pattern
        return self.ignore_symlinks


@dataclass(frozen=True)
class ResolvedPath:
    """
    A file to format. `ignore_unknown` is set for files found by expanding a
    directory or glob rather than named explicitly, so a missing parser for them is
    not worth a warning.
    """

    path: Path
    ignore_unknown: bool = False


@dataclass(frozen=True)
class ExpandError:
    """A pattern that could not be expanded. Reported, but never fatal to other patterns."""

    pattern: str
    message: str

    def __str__(self) -> str:
        return self.message


ExpandedPath = Union[ResolvedPath, ExpandError]


@dataclass
class Expansion:
    """
    Everything one expansion produced, in order. `cancelled` is set when the run was
    stopped early; the entries collected up to that point are still complete.
    """

    paths: list[ExpandedPath] = field(default_factory=list)
    cancelled: bool = False

    def __iter__(self) -> Iterator[ExpandedPath]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    @property
    def resolved(self) -> list[ResolvedPath]:
        return [p for p in self.paths if isinstance(p, ResolvedPath)]

    @property
    def errors(self) -> list[ExpandError]:
        return [p for p in self.paths if isinstance(p, ExpandError)]
