"""
Parsing of single gitignore-style rules into `Pattern` objects.

Negation and directory-only markers are handled here; the remaining glob body is
compiled with `pathspec`, which provides the gitignore flavor of `*`, `**`, `?`,
character classes, and anchoring (a body with a leading or internal `/` only
matches relative to its domain root).
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pathspec


@dataclass(frozen=True)
class Pattern:
    """
    One ignore rule, scoped to `domain`: the path segments of the directory whose
    ignore file defined it. The rule is only ever tested against descendants of its
    domain, with the domain prefix stripped.
    """

    domain: tuple[str, ...]
    negated: bool = False
    dir_only: bool = False
    source: str = ""
    spec: pathspec.PathSpec | None = field(default=None, compare=False, repr=False)

    @property
    def is_noop(self) -> bool:
        return self.spec is None

    def applies_to(self, segments: Sequence[str]) -> bool:
        """True if `segments` is a strict descendant of this pattern's domain."""
        depth = len(self.domain)
        return len(segments) > depth and tuple(segments[:depth]) == self.domain

    def matches(self, segments: Sequence[str], is_dir: bool) -> bool:
        """
        Test a path, given as absolute segments, against this rule. Negation is not
        applied here; callers decide what a match means.
        """
        if self.spec is None:
            return False
        if self.dir_only and not is_dir:
            return False
        if not self.applies_to(segments):
            return False
        remainder = "/".join(segments[len(self.domain) :])
        return self.spec.match_file(remainder)


def _strip_trailing_space(line: str) -> str:
    """Strip trailing whitespace unless it is escaped with a backslash."""
    stripped = line.rstrip()
    if stripped.endswith("\\") and len(stripped) < len(line):
        # Keep the escaped space itself.
        return stripped + line[len(stripped)]
    return stripped


def parse_pattern(line: str, domain: Sequence[str] = ()) -> Pattern:
    """
    Parse one ignore line. Blank and comment lines are expected to be filtered by
    the caller; a line with no usable body (e.g. a lone `!`) parses to a no-op
    pattern that never matches.
    """
    domain = tuple(domain)
    body = _strip_trailing_space(line)

    negated = body.startswith("!")
    if negated:
        body = body[1:]

    dir_only = False
    if body.endswith("/") and not body.endswith("\\/"):
        dir_only = True
        body = body.rstrip("/")

    if not body.strip():
        return Pattern(domain=domain, negated=negated, dir_only=dir_only, source=line)

    spec = pathspec.PathSpec.from_lines("gitignore", [body])
    if not spec.patterns or all(p.include is None for p in spec.patterns):
        # Body was something pathspec treats as inert, like an unescaped `#...`.
        spec = None
    return Pattern(domain=domain, negated=negated, dir_only=dir_only, source=line, spec=spec)


def split_path(path: str | os.PathLike[str]) -> tuple[str, ...]:
    """
    Split a path into absolute segments without the filesystem anchor, e.g.
    `/home/me/a.ts` -> `("home", "me", "a.ts")`. Relative paths are made absolute
    against the process working directory.
    """
    parts = Path(os.path.abspath(path)).parts
    return parts[1:] if parts else ()
