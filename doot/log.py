"""Console logging with verbose and quiet modes."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import NoReturn, TextIO

_RESET = "\033[0m"
_YELLOW = "\033[33m"
_RED = "\033[31m"


class FatalError(Exception):
    """Raised when an unrecoverable error stops the current operation."""


@dataclass
class _Settings:
    verbose: bool = False
    quiet: bool = False


_settings = _Settings()


def init(verbose: bool, quiet: bool) -> None:
    """Configure how much output is produced."""
    _settings.verbose = verbose
    _settings.quiet = quiet


def _format(message: str, args: tuple) -> str:
    return message % args if args else message


def _use_color(stream: TextIO) -> bool:
    if "NO_COLOR" in os.environ:
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _emit(stream: TextIO, prefix: str, text: str) -> None:
    if not text.endswith("\n"):
        text += "\n"
    stream.write(prefix + text)
    stream.flush()


def _colored_prefix(prefix: str, color: str, stream: TextIO) -> str:
    if _use_color(stream):
        return f"{color}{prefix}{_RESET}"
    return prefix


def info(message: str, *args) -> None:
    """Print an informational message, only in verbose mode."""
    if _settings.verbose:
        _emit(sys.stdout, "INFO: ", _format(message, args))


def printlnf(message: str, *args) -> None:
    """Print a line to standard output unless quiet."""
    if not _settings.quiet:
        sys.stdout.write(_format(message, args) + "\n")
        sys.stdout.flush()


def warning(message: str, *args) -> None:
    """Print a warning to standard error unless quiet."""
    if not _settings.quiet:
        stream = sys.stderr
        _emit(stream, _colored_prefix("WARNING: ", _YELLOW, stream), _format(message, args))


def error(message: str, *args) -> None:
    """Print an error to standard error unless quiet."""
    if not _settings.quiet:
        stream = sys.stderr
        _emit(stream, _colored_prefix("ERROR: ", _RED, stream), _format(message, args))


def fatal(message: str, *args) -> NoReturn:
    """Report an error and raise FatalError."""
    text = _format(message, args)
    error("%s", text)
    raise FatalError(text)


def is_quiet() -> bool:
    return _settings.quiet


def is_verbose() -> bool:
    return _settings.verbose