"""
TOML-based config file loading for fmtwalk.

Searches for `.fmtwalk.toml`, `fmtwalk.toml`, or `pyproject.toml [tool.fmtwalk]`
walking up from the current directory. Config values are merged with CLI flags
using three-way precedence: explicit CLI flags > config file > built-in defaults.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


class ConfigError(ValueError):
    """A config file exists but can't be used."""


@dataclass
class FmtwalkConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    # File discovery
    ignore_path: list[str] | None = None
    with_node_modules: bool | None = None
    no_error_on_unmatched_pattern: bool | None = None
    # Formatting
    ignore_unknown: bool | None = None
    formatter: str | None = None
    # Output
    log_level: str | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".fmtwalk.toml", "fmtwalk.toml", "pyproject.toml"]

_LIST_FIELDS = {"ignore_path"}
_BOOL_FIELDS = {"with_node_modules", "no_error_on_unmatched_pattern", "ignore_unknown"}
_STR_FIELDS = {"formatter", "log_level"}

_VALID_FIELDS = {f.name for f in fields(FmtwalkConfig)}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.fmtwalk.toml` >
    `fmtwalk.toml` > `pyproject.toml` (only if it has `[tool.fmtwalk]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    if _pyproject_has_fmtwalk_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_fmtwalk_section(path: Path) -> bool:
    """Check if a pyproject.toml has a [tool.fmtwalk] section."""
    try:
        data = tomllib.loads(path.read_text())
        return "fmtwalk" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> FmtwalkConfig:
    """
    Load a `FmtwalkConfig` from a TOML file. Supports both standalone
    `fmtwalk.toml` / `.fmtwalk.toml` and `pyproject.toml` (extracts
    `[tool.fmtwalk]`). TOML kebab-case keys are mapped to Python snake_case.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("fmtwalk", {})

    return _parse_config_data(data, config_path)


def _parse_config_data(data: dict[str, Any], config_path: Path | None = None) -> FmtwalkConfig:
    """Parse a flat or sectioned TOML dict into FmtwalkConfig."""
    # Flatten sections: [file-discovery] and [formatting] merge into top level
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in cast(dict[str, Any], value).items():
                flat[sub_key] = sub_value
        else:
            flat[key] = value

    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = key.replace("-", "_")
        if snake_key not in _VALID_FIELDS:
            continue
        if snake_key in _LIST_FIELDS:
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{config_path}: `{key}` must be a string or list of strings")
        elif snake_key in _BOOL_FIELDS and not isinstance(value, bool):
            raise ConfigError(f"{config_path}: `{key}` must be true or false")
        elif snake_key in _STR_FIELDS and not isinstance(value, str):
            raise ConfigError(f"{config_path}: `{key}` must be a string")
        mapped[snake_key] = value

    return FmtwalkConfig(**mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: FmtwalkConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(FmtwalkConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in config

        if cfg_field.name in explicit_flags:
            continue

        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
