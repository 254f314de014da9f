"""Tests for running a formatter over expanded paths."""

from __future__ import annotations

import logging
import stat
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from fmtwalk.file_resolver import ExpandError, ResolvedPath
from fmtwalk.runner import NoParserError, run_formatter


def upper(text: str, options: Mapping[str, Any]) -> str:
    if not str(options["filepath"]).endswith(".txt"):
        raise NoParserError(options["filepath"])
    return text.upper()


def test_write_rewrites_changed_files(tmp_path: Path):
    f = tmp_path / "a.txt"
    f.write_text("hello\n")
    f.chmod(0o640)

    report = run_formatter([ResolvedPath(f)], upper, write=True)
    assert report.ok
    assert f.read_text() == "HELLO\n"
    assert stat.S_IMODE(f.stat().st_mode) == 0o640
    assert report.formatted == [f]


def test_check_reports_unformatted(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    bad = tmp_path / "bad.txt"
    bad.write_text("hello\n")
    good = tmp_path / "good.txt"
    good.write_text("FINE\n")

    report = run_formatter([ResolvedPath(bad), ResolvedPath(good)], upper, check=True)
    assert not report.ok
    assert report.unformatted == [bad]
    assert bad.read_text() == "hello\n"
    out = capsys.readouterr().out
    assert "Checking formatting..." in out


def test_check_all_formatted(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    good = tmp_path / "good.txt"
    good.write_text("FINE\n")

    report = run_formatter([ResolvedPath(good)], upper, check=True)
    assert report.ok
    assert "All matched files use the expected code style!" in capsys.readouterr().out


def test_default_prints_formatted_text(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    f = tmp_path / "a.txt"
    f.write_text("hello\n")

    report = run_formatter([ResolvedPath(f)], upper)
    assert report.ok
    assert capsys.readouterr().out == "HELLO\n"
    assert f.read_text() == "hello\n"


def test_formatter_receives_filepath(tmp_path: Path):
    f = tmp_path / "a.txt"
    f.write_text("x")
    seen: list[Mapping[str, Any]] = []

    def record(text: str, options: Mapping[str, Any]) -> str:
        seen.append(options)
        return text

    run_formatter([ResolvedPath(f)], record, options={"tabWidth": 4}, check=True)
    assert seen == [{"tabWidth": 4, "filepath": str(f)}]


def test_no_parser_warns_for_explicit_files(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.WARNING, logger="fmtwalk")
    f = tmp_path / "a.bin"
    f.write_text("x")

    report = run_formatter([ResolvedPath(f, ignore_unknown=False)], upper, check=True)
    assert report.ok
    assert report.no_parser == [f]
    assert "No parser could be inferred" in caplog.text


def test_no_parser_quiet_for_expanded_files(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.WARNING, logger="fmtwalk")
    f = tmp_path / "a.bin"
    f.write_text("x")

    run_formatter([ResolvedPath(f, ignore_unknown=True)], upper, check=True)
    run_formatter([ResolvedPath(f)], upper, check=True, ignore_unknown=True)
    assert "No parser could be inferred" not in caplog.text


def test_expand_errors_are_failures(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.ERROR, logger="fmtwalk")
    error = ExpandError("*.nope", 'No files matching the pattern were found: "*.nope".')

    report = run_formatter([error], upper)
    assert not report.ok
    assert report.failures == [error.message]
    assert "*.nope" in caplog.text


def test_formatter_exception_is_failure(tmp_path: Path):
    f = tmp_path / "a.txt"
    f.write_text("x")

    def broken(text: str, options: Mapping[str, Any]) -> str:
        raise ValueError("syntax error")

    report = run_formatter([ResolvedPath(f)], broken)
    assert len(report.failures) == 1
    assert "syntax error" in report.failures[0]


def test_missing_file_is_failure(tmp_path: Path):
    report = run_formatter([ResolvedPath(tmp_path / "gone.txt")], upper)
    assert len(report.failures) == 1
    assert "Unable to read file" in report.failures[0]


def test_many_files_in_parallel(tmp_path: Path):
    files = []
    for i in range(20):
        f = tmp_path / f"f{i}.txt"
        f.write_text(f"file {i}\n")
        files.append(f)

    report = run_formatter([ResolvedPath(f) for f in files], upper, write=True, max_workers=4)
    assert report.ok
    assert sorted(report.formatted) == sorted(files)
    assert all(f.read_text() == f.read_text().upper() for f in files)
