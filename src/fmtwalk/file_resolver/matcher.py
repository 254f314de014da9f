"""Ordered, immutable sets of ignore patterns with last-match-wins semantics."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from fmtwalk.file_resolver.patterns import Pattern


class IgnoreMatcher:
    """
    An ordered sequence of `Pattern`s in ascending priority. Among all patterns that
    match a path, the last one decides: the path is ignored unless that pattern is
    a negation.

    Matchers are immutable once built. Combining matchers concatenates their
    patterns, so the result is the same as one matcher built from all sources in
    priority order.
    """

    __slots__ = ("_patterns",)

    def __init__(self, patterns: Iterable[Pattern] = ()) -> None:
        self._patterns: tuple[Pattern, ...] = tuple(p for p in patterns if not p.is_noop)

    @classmethod
    def combine(cls, *matchers: IgnoreMatcher) -> IgnoreMatcher:
        return cls(p for m in matchers for p in m.patterns)

    def __add__(self, other: IgnoreMatcher) -> IgnoreMatcher:
        return IgnoreMatcher.combine(self, other)

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return self._patterns

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"IgnoreMatcher({len(self._patterns)} patterns)"

    def last_match(self, segments: Sequence[str], is_dir: bool) -> Pattern | None:
        """Return the highest-priority pattern matching the path, if any."""
        last: Pattern | None = None
        for pattern in self._patterns:
            if pattern.matches(segments, is_dir):
                last = pattern
        return last

    def match(self, segments: Sequence[str], is_dir: bool) -> bool:
        """
        True if the path (absolute segments, see `split_path`) is ignored by itself,
        without looking at its parent directories.
        """
        last = self.last_match(segments, is_dir)
        return last is not None and not last.negated

    def is_path_ignored(self, segments: Sequence[str], is_dir: bool) -> bool:
        """
        True if the path or any of its ancestor directories is ignored. A file can't
        be re-included when a parent directory is excluded, as in git.
        """
        segments = tuple(segments)
        for depth in range(1, len(segments)):
            if self.match(segments[:depth], True):
                return True
        return self.match(segments, is_dir)
