"""
Runs a formatter over expanded paths.

The formatter is any callable taking file text and an options mapping and returning
the formatted text. It raises `NoParserError` when it has no parser for a file.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from strif import atomic_output_file

from fmtwalk.file_resolver import ExpandedPath, ExpandError, ResolvedPath

log = logging.getLogger(__name__)


class NoParserError(Exception):
    """The formatter has no parser for this file."""


class Formatter(Protocol):
    def __call__(self, text: str, options: Mapping[str, Any]) -> str: ...


@dataclass
class RunReport:
    """Outcome of one run. `failures` holds one message per failed entry."""

    formatted: list[Path] = field(default_factory=list)
    unformatted: list[Path] = field(default_factory=list)
    no_parser: list[Path] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.unformatted


class _Run:
    def __init__(
        self,
        formatter: Formatter,
        options: Mapping[str, Any],
        check: bool,
        write: bool,
        ignore_unknown: bool,
    ) -> None:
        self.formatter = formatter
        self.options = options
        self.check = check
        self.write = write
        self.ignore_unknown = ignore_unknown
        self.report = RunReport()
        self._lock = threading.Lock()

    def fail(self, message: str) -> None:
        log.error(message)
        with self._lock:
            self.report.failures.append(message)

    def handle(self, entry: ExpandedPath) -> None:
        if isinstance(entry, ExpandError):
            self.fail(entry.message)
            return
        self.format_file(entry)

    def format_file(self, entry: ResolvedPath) -> None:
        path = entry.path
        try:
            mode = path.stat().st_mode
            original = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.fail(f'Unable to read file "{path}":\n{e}')
            return

        try:
            result = self.formatter(original, {**self.options, "filepath": str(path)})
        except NoParserError:
            if not self.ignore_unknown and not entry.ignore_unknown:
                log.warning('No parser could be inferred for file "%s".', path)
            with self._lock:
                self.report.no_parser.append(path)
            return
        except Exception as e:
            self.fail(f'Failed to format "{path}": {e}')
            return

        if self.write:
            if result != original:
                try:
                    with atomic_output_file(path) as temp_path:
                        Path(temp_path).write_text(result, encoding="utf-8")
                        os.chmod(temp_path, mode)
                except OSError as e:
                    self.fail(f'Unable to write file "{path}":\n{e}')
                    return
        elif not self.check:
            with self._lock:
                sys.stdout.write(result)

        with self._lock:
            if self.check and result != original:
                log.warning("%s", path)
                self.report.unformatted.append(path)
            else:
                self.report.formatted.append(path)


def run_formatter(
    paths: Iterable[ExpandedPath],
    formatter: Formatter,
    *,
    options: Mapping[str, Any] | None = None,
    check: bool = False,
    write: bool = False,
    ignore_unknown: bool = False,
    max_workers: int | None = None,
) -> RunReport:
    """
    Format every resolved path, fanning out over a thread pool.

    - `write`: rewrite changed files in place, atomically, keeping their mode.
    - `check`: compare only; unformatted files are logged and reported.
    - otherwise the formatted text goes to stdout.

    `ExpandError` entries count as failures. A missing parser is only warned about
    for files named explicitly, and never when `ignore_unknown` is set.
    """
    run = _Run(formatter, dict(options or {}), check, write, ignore_unknown)
    entries = list(paths)
    if check:
        print("Checking formatting...")

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fmtwalk") as executor:
        for future in [executor.submit(run.handle, entry) for entry in entries]:
            future.result()

    if check:
        if run.report.unformatted:
            log.warning(
                "Code style issues found in %d files. Run with --write to fix.",
                len(run.report.unformatted),
            )
        else:
            print("All matched files use the expected code style!")
    return run.report
