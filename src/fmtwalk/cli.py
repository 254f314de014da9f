#!/usr/bin/env python3
"""
fmtwalk: Resolve files, directories, and globs into formatter inputs, honoring .gitignore

Common usage:
  fmtwalk .
  fmtwalk src "docs/**/*.md" '!docs/generated.md'
  fmtwalk --formatter mypkg.fmt:format --check .
  fmtwalk --formatter mypkg.fmt:format --write src/

Without --formatter, the resolved files are listed one per line.
Ignore rules come from .gitignore files (nested and in parent directories up to the
repository root), .prettierignore, and any --ignore-path files.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import pkgutil
import sys
from dataclasses import dataclass
from pathlib import Path

from fmtwalk.config import find_config_file, load_config, merge_cli_with_config
from fmtwalk.file_resolver import DEFAULT_IGNORE_PATHS, ExpandOptions, expand_patterns
from fmtwalk.logs import LOG_LEVELS, configure_logging
from fmtwalk.runner import Formatter, run_formatter

log = logging.getLogger("fmtwalk.cli")


@dataclass
class Options:
    """Command-line options for the fmtwalk tool."""

    patterns: list[str]
    check: bool
    write: bool
    list_files: bool
    formatter: str | None
    # File discovery options
    ignore_path: list[str] | None
    with_node_modules: bool
    no_error_on_unmatched_pattern: bool
    ignore_unknown: bool
    # Output options
    log_level: str
    no_color: bool
    version: bool


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which flags the user explicitly passed (for config merge precedence).
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="fmtwalk",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        type=str,
        default=[],
        help="Files, directories, or globs to process; prefix with '!' to exclude",
    )
    parser.add_argument(
        "-c",
        "--check",
        action="store_true",
        help="Check if the given files are formatted and list the ones that are not",
    )
    parser.add_argument("-w", "--write", action="store_true", help="Edit files in place")
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print resolved file paths without formatting (default without --formatter)",
    )
    parser.add_argument(
        "--formatter",
        type=str,
        default=None,
        metavar="MODULE:ATTR",
        help="Formatter callable taking (text, options) and returning formatted text",
    )
    # File discovery options
    parser.add_argument(
        "--ignore-path",
        action="append",
        default=None,
        dest="ignore_path",
        metavar="PATH",
        help="File with patterns describing files to ignore. Can be repeated "
        f"(default: {', '.join(DEFAULT_IGNORE_PATHS)})",
    )
    parser.add_argument(
        "--with-node-modules",
        action="store_true",
        dest="with_node_modules",
        help="Process files inside 'node_modules' directories",
    )
    parser.add_argument(
        "--no-error-on-unmatched-pattern",
        action="store_true",
        dest="no_error_on_unmatched_pattern",
        help="Do not report patterns that match no files, and skip symbolic links quietly",
    )
    parser.add_argument(
        "-u",
        "--ignore-unknown",
        action="store_true",
        dest="ignore_unknown",
        help="Do not warn about files the formatter has no parser for",
    )
    # Output options
    parser.add_argument(
        "--log-level",
        type=str,
        choices=list(LOG_LEVELS),
        default="log",
        dest="log_level",
        help="What level of logs to report (default: %(default)s)",
    )
    parser.add_argument(
        "--no-color", action="store_true", dest="no_color", help="Do not colorize log messages"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    # Re-parse with sentinel defaults to detect which flags were actually supplied.
    # Append actions use None as sentinel (argparse creates a list when the flag is used).
    _SENTINEL = object()
    sentinel_parser = argparse.ArgumentParser(add_help=False)
    sentinel_parser.add_argument("--formatter", default=_SENTINEL)
    sentinel_parser.add_argument("--ignore-path", dest="ignore_path", action="append", default=None)
    sentinel_parser.add_argument(
        "--with-node-modules", dest="with_node_modules", action="store_true", default=_SENTINEL
    )
    sentinel_parser.add_argument(
        "--no-error-on-unmatched-pattern",
        dest="no_error_on_unmatched_pattern",
        action="store_true",
        default=_SENTINEL,
    )
    sentinel_parser.add_argument(
        "-u", "--ignore-unknown", dest="ignore_unknown", action="store_true", default=_SENTINEL
    )
    sentinel_parser.add_argument("--log-level", dest="log_level", default=_SENTINEL)
    sentinel_opts, _ = sentinel_parser.parse_known_args(args if args is not None else sys.argv[1:])

    explicit_flags: set[str] = set()
    for name in (
        "formatter",
        "with_node_modules",
        "no_error_on_unmatched_pattern",
        "ignore_unknown",
        "log_level",
    ):
        if getattr(sentinel_opts, name) is not _SENTINEL:
            explicit_flags.add(name)
    if sentinel_opts.ignore_path is not None:
        explicit_flags.add("ignore_path")

    return (
        Options(
            patterns=opts.patterns,
            check=opts.check,
            write=opts.write,
            list_files=opts.list_files,
            formatter=opts.formatter,
            ignore_path=opts.ignore_path,
            with_node_modules=opts.with_node_modules,
            no_error_on_unmatched_pattern=opts.no_error_on_unmatched_pattern,
            ignore_unknown=opts.ignore_unknown,
            log_level=opts.log_level,
            no_color=opts.no_color,
            version=opts.version,
        ),
        explicit_flags,
    )


def _load_formatter(name: str) -> Formatter:
    formatter = pkgutil.resolve_name(name)
    if not callable(formatter):
        raise TypeError(f"{name} is not callable")
    return formatter


def _display_path(path: Path, cwd: Path) -> Path:
    """Paths under the working directory are shown relative to it."""
    try:
        return path.relative_to(cwd)
    except ValueError:
        return path


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the fmtwalk CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for reported errors, 2 for bad configuration)
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("fmtwalk")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    cwd = Path.cwd()
    try:
        config_path = find_config_file(cwd)
        if config_path:
            merge_cli_with_config(options, load_config(config_path), explicit_flags)
        configure_logging(options.log_level, options.no_color)
    except ValueError as e:  # ConfigError or a bad log level
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if not options.patterns:
        print(
            "Error: No input specified. Provide files, directories, or globs"
            " (use '.' for current directory). Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    formatter: Formatter | None = None
    if options.formatter and not options.list_files:
        try:
            formatter = _load_formatter(options.formatter)
        except (ImportError, AttributeError, ValueError, TypeError) as e:
            print(f"Error: Unable to load formatter {options.formatter}: {e}", file=sys.stderr)
            return 2
    elif options.check or options.write:
        print("Error: --check and --write need a --formatter", file=sys.stderr)
        return 2

    expand_options = ExpandOptions(
        with_node_modules=options.with_node_modules,
        no_error_on_unmatched_pattern=options.no_error_on_unmatched_pattern,
    )
    if options.ignore_path is not None:
        expand_options.ignore_paths = list(options.ignore_path)
    expansion = expand_patterns(options.patterns, cwd, expand_options)

    if formatter is None:
        for error in expansion.errors:
            log.error(error.message)
        for resolved in expansion.resolved:
            print(_display_path(resolved.path, cwd))
        return 1 if expansion.errors else 0

    report = run_formatter(
        expansion,
        formatter,
        check=options.check,
        write=options.write,
        ignore_unknown=options.ignore_unknown,
    )
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
