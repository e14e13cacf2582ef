from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError

CONFIG_ENV_VAR = "CLEANPATH_CONFIG"

SHELLS = ("bash", "csh", "none")

# Built-in list used by -C.
COMMON_PATHS = (
    "PATH",
    "MANPATH",
    "LD_LIBRARY_PATH",
    "PERL5LIB",
    "PYTHONPATH",
    "RUBYLIB",
    "DLN_LIBRARY_PATH",
    "RUBYLIB_PREFIX",
    "CLASSPATH",
)


@dataclass(frozen=True)
class FilterConfig:
    delimiter: str = ":"
    discard_empty: bool = True
    remove_dupes: bool = True
    check_exists: bool = True
    only_executable_dirs: bool = True
    dirs_only: bool = False
    exclude_patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if len(self.delimiter) != 1:
            raise ConfigError(f"delimiter must be exactly one character, got {self.delimiter!r}")

    @property
    def needs_stat(self) -> bool:
        return self.check_exists or self.only_executable_dirs


@dataclass(frozen=True)
class OutputOptions:
    shell: str = "bash"
    output_unchanged: bool = False
    verbosity: int = 0
    debug: bool = False
    include_verbose: bool = False


@dataclass(frozen=True)
class UnsetPredicates:
    name_matches: tuple[str, ...] = ()
    name_starts: tuple[str, ...] = ()
    name_ends: tuple[str, ...] = ()
    value_matches: tuple[str, ...] = ()
    value_starts: tuple[str, ...] = ()
    value_ends: tuple[str, ...] = ()

    @property
    def checks_name(self) -> bool:
        return bool(self.name_matches or self.name_starts or self.name_ends)

    @property
    def checks_value(self) -> bool:
        return bool(self.value_matches or self.value_starts or self.value_ends)


UNSET_KEYS = ("name_matches", "name_starts", "name_ends", "value_matches", "value_starts", "value_ends")

_BOOL_KEYS = ("discard_empty", "remove_dupes", "check_exists", "only_executable_dirs", "dirs_only", "output_unchanged")


@dataclass(frozen=True)
class FileSettings:
    """Settings read from a YAML config file. Only keys present in the file are set."""

    values: dict[str, Any] = field(default_factory=dict)
    exclude: tuple[str, ...] = ()
    unset: dict[str, tuple[str, ...]] = field(default_factory=dict)
    source: str | None = None


def _ensure_str_list(value: Any, *, source: str, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(x, str) for x in value):
        raise ConfigError(f"{source}: '{field_name}' must be a list of strings")
    return tuple(value)


def parse_config_obj(data: Any, *, source: str) -> FileSettings:
    if data is None:
        return FileSettings(source=source)
    if not isinstance(data, Mapping):
        raise ConfigError(f"{source}: expected a mapping")

    values: dict[str, Any] = {}
    for key in _BOOL_KEYS:
        if key in data:
            if not isinstance(data[key], bool):
                raise ConfigError(f"{source}: '{key}' must be true or false")
            values[key] = data[key]

    if "delimiter" in data:
        delim = data["delimiter"]
        if not isinstance(delim, str) or len(delim) != 1:
            raise ConfigError(f"{source}: 'delimiter' must be a single character")
        values["delimiter"] = delim

    if "shell" in data:
        if data["shell"] not in SHELLS:
            raise ConfigError(f"{source}: 'shell' must be one of: {', '.join(SHELLS)}")
        values["shell"] = data["shell"]

    if "verbosity" in data:
        # bool is an int subclass; reject it explicitly
        if not isinstance(data["verbosity"], int) or isinstance(data["verbosity"], bool):
            raise ConfigError(f"{source}: 'verbosity' must be an integer")
        values["verbosity"] = data["verbosity"]

    exclude = _ensure_str_list(data.get("exclude"), source=source, field_name="exclude")

    unset_raw = data.get("unset")
    unset: dict[str, tuple[str, ...]] = {}
    if unset_raw is not None:
        if not isinstance(unset_raw, Mapping):
            raise ConfigError(f"{source}: 'unset' must be a mapping")
        unknown = sorted(set(unset_raw) - set(UNSET_KEYS))
        if unknown:
            raise ConfigError(f"{source}: unknown key(s) under 'unset': {', '.join(map(str, unknown))}")
        for key in UNSET_KEYS:
            unset[key] = _ensure_str_list(unset_raw.get(key), source=source, field_name=f"unset.{key}")

    return FileSettings(values=values, exclude=exclude, unset=unset, source=source)


def load_config(path: Path) -> FileSettings:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except Exception as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e
    return parse_config_obj(obj, source=str(path))


def resolve_config(explicit: str | None, environ: Mapping[str, str] | None = None) -> FileSettings:
    """Load the config named by ``--config`` or ``$CLEANPATH_CONFIG``; empty settings if neither is set."""
    environ = os.environ if environ is None else environ
    path = explicit or environ.get(CONFIG_ENV_VAR)
    if not path:
        return FileSettings()
    return load_config(Path(path).expanduser())
