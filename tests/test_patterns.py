"""Tests for parsing single ignore rules."""

from __future__ import annotations

from pathlib import Path

from fmtwalk.file_resolver.patterns import parse_pattern, split_path

ROOT = ("repo",)


def test_parse_plain_pattern():
    p = parse_pattern("*.log", ROOT)
    assert p.domain == ROOT
    assert not p.negated
    assert not p.dir_only
    assert not p.is_noop


def test_parse_negated_pattern():
    p = parse_pattern("!keep.log", ROOT)
    assert p.negated
    assert p.matches(("repo", "keep.log"), False)


def test_parse_dir_only_pattern():
    p = parse_pattern("build/", ROOT)
    assert p.dir_only
    assert p.matches(("repo", "build"), True)
    assert not p.matches(("repo", "build"), False)


def test_dir_only_never_matches_files():
    for line in ["build/", "**/out/", "/dist/", "a/b/", "*/"]:
        p = parse_pattern(line, ROOT)
        for segments in [("repo", "build"), ("repo", "x", "out"), ("repo", "dist", "f.ts")]:
            assert not p.matches(segments, False), (line, segments)


def test_negated_dir_only():
    p = parse_pattern("!cache/", ROOT)
    assert p.negated
    assert p.dir_only


def test_lone_bang_is_noop():
    p = parse_pattern("!", ROOT)
    assert p.is_noop
    assert not p.matches(("repo", "anything"), False)


def test_whitespace_line_is_noop():
    assert parse_pattern("   ", ROOT).is_noop


def test_trailing_whitespace_stripped():
    p = parse_pattern("notes.txt   ", ROOT)
    assert p.matches(("repo", "notes.txt"), False)


def test_unanchored_matches_any_depth():
    p = parse_pattern("node_modules", ROOT)
    assert p.matches(("repo", "node_modules"), True)
    assert p.matches(("repo", "a", "node_modules"), True)
    assert p.matches(("repo", "a", "b", "node_modules"), True)


def test_leading_slash_anchors_to_domain():
    p = parse_pattern("/build", ROOT)
    assert p.matches(("repo", "build"), True)
    assert not p.matches(("repo", "a", "build"), True)


def test_internal_slash_anchors_to_domain():
    p = parse_pattern("docs/*.md", ROOT)
    assert p.matches(("repo", "docs", "a.md"), False)
    assert not p.matches(("repo", "x", "docs", "a.md"), False)
    assert not p.matches(("repo", "docs", "sub", "a.md"), False)


def test_double_star_crosses_directories():
    p = parse_pattern("src/**/gen.ts", ROOT)
    assert p.matches(("repo", "src", "gen.ts"), False)
    assert p.matches(("repo", "src", "a", "b", "gen.ts"), False)
    assert not p.matches(("repo", "lib", "gen.ts"), False)


def test_question_mark_and_classes():
    q = parse_pattern("?.ts", ROOT)
    assert q.matches(("repo", "a.ts"), False)
    assert not q.matches(("repo", "ab.ts"), False)

    c = parse_pattern("[ab].ts", ROOT)
    assert c.matches(("repo", "a.ts"), False)
    assert not c.matches(("repo", "c.ts"), False)


def test_pattern_only_applies_below_domain():
    p = parse_pattern("*.log", ("repo", "sub"))
    assert p.matches(("repo", "sub", "x.log"), False)
    assert not p.matches(("repo", "x.log"), False)
    assert not p.matches(("repo", "other", "x.log"), False)
    # The domain directory itself is never matched.
    assert not parse_pattern("sub", ("repo", "sub")).matches(("repo", "sub"), True)


def test_split_path_is_absolute_without_anchor(tmp_path: Path):
    segments = split_path(tmp_path / "a" / "b.ts")
    assert segments[-2:] == ("a", "b.ts")
    assert segments == (tmp_path / "a" / "b.ts").parts[1:]
