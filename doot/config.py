"""User configuration read from doot/config.toml."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from doot import log
from doot.paths import AbsolutePath, RelativePath

DEFAULT_EXCLUDE_FILES = ("**/.*", "LICENSE", "README.md")
DEFAULT_DIFF_COMMAND = "diff --unified --color=always"

_ENV_REFERENCE = re.compile(
    r"\$(?:\{([^}]*)\}|(\{)|([*#$@!?\-0-9])|([A-Za-z0-9_]+))"
)


@dataclass
class Config:
    """Settings that control how dotfiles are installed."""

    target_dir: str = ""
    exclude_files: list[str] = field(default_factory=list)
    include_files: list[str] = field(default_factory=list)
    explore_excluded_dirs: bool = False
    implicit_dot: bool = False
    implicit_dot_ignore: list[str] = field(default_factory=list)
    diff_command: str = ""
    use_hardlinks: bool = False
    hosts: dict[str, str] = field(default_factory=dict)


def _is_str_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_str_map(value: object) -> bool:
    return isinstance(value, dict) and all(
        isinstance(key, str) and isinstance(item, str) for key, item in value.items()
    )


def _is_bool(value: object) -> bool:
    return isinstance(value, bool)


def _is_str(value: object) -> bool:
    return isinstance(value, str)


_FIELD_CHECKS: dict[str, Callable[[object], bool]] = {
    "target_dir": _is_str,
    "exclude_files": _is_str_list,
    "include_files": _is_str_list,
    "explore_excluded_dirs": _is_bool,
    "implicit_dot": _is_bool,
    "implicit_dot_ignore": _is_str_list,
    "diff_command": _is_str,
    "use_hardlinks": _is_bool,
    "hosts": _is_str_map,
}


def _home_dir() -> str:
    try:
        return str(Path.home())
    except RuntimeError as exc:
        log.fatal("Error retrieving home directory: %s", exc)


def default_config() -> Config:
    """The configuration used when no config file overrides it."""
    return Config(
        target_dir=_home_dir(),
        exclude_files=list(DEFAULT_EXCLUDE_FILES),
        include_files=[],
        explore_excluded_dirs=False,
        implicit_dot=True,
        implicit_dot_ignore=[],
        diff_command=DEFAULT_DIFF_COMMAND,
        use_hardlinks=False,
        hosts={},
    )


def expand_env(text: str) -> str:
    """Replace $NAME and ${NAME} with environment values; unset names become empty."""

    def substitute(match: re.Match[str]) -> str:
        braced, unclosed, special, plain = match.groups()
        if unclosed is not None:
            return ""
        name = braced if braced is not None else special or plain
        if not name:
            return ""
        return os.environ.get(name, "")

    return _ENV_REFERENCE.sub(substitute, text)


def _clean_path(path: str) -> str:
    if not path:
        return "."
    cleaned = os.path.normpath(path)
    if os.sep == "/" and cleaned.startswith("//") and not cleaned.startswith("///"):
        cleaned = cleaned[1:]
    return cleaned


def _apply(config: Config, data: dict) -> None:
    known = {key: value for key, value in data.items() if key in _FIELD_CHECKS}
    for key, value in known.items():
        if not _FIELD_CHECKS[key](value):
            raise TypeError(f"invalid value for '{key}': {value!r}")
    for key, value in known.items():
        if isinstance(value, list):
            value = list(value)
        elif isinstance(value, dict):
            value = dict(value)
        setattr(config, key, value)


def _verify(config: Config) -> None:
    config.target_dir = _clean_path(expand_env(config.target_dir))
    if not os.path.isabs(config.target_dir):
        log.fatal("Invalid config: 'target_dir = %s', must be an absolute path", config.target_dir)
    for ignored in config.implicit_dot_ignore:
        if os.sep in ignored:
            top_level = RelativePath(ignored).top_level_dir()
            log.fatal(
                "Invalid config. 'implicit_dot_ignore -> %s' must be a top-level file or directory. "
                "Consider adding '%s' instead",
                ignored,
                top_level,
            )
    config.diff_command = expand_env(config.diff_command).strip()


def from_file(path: str) -> Config:
    """Read a config file on top of the defaults; a missing file gives the defaults."""
    config = default_config()
    try:
        raw = Path(path).read_bytes()
    except OSError:
        log.info("Config file not found or unaccessible, using default config")
        return config
    try:
        data = tomllib.loads(raw.decode("utf-8"))
        _apply(config, data)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError, TypeError) as exc:
        log.error("Error parsing config file: %s", exc)
    _verify(config)
    return config


def from_dotfiles_dir(dotfiles_dir: AbsolutePath) -> Config:
    """Read doot/config.toml inside the dotfiles directory."""
    return from_file(AbsolutePath(str(dotfiles_dir)).joinpath("doot").joinpath("config.toml"))